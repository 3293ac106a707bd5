import pytest

from physcurate.schemas.user import UserConfig

pytestmark = pytest.mark.unit


def test_uppercase_keys_are_handled():
    raw = {
        "SORT_CODE": "depth",
        "MAX_GAP_HOURS": 12,
        "YEAR_MIN": 1950,
        "LOG_LEVEL": "warning",
    }

    user = UserConfig.model_validate(raw)

    assert user.sort_code == "DEPTH"
    assert isinstance(user.max_gap_hours, float) and user.max_gap_hours == 12.0
    assert user.year_min == 1950
    assert user.log_level == "WARNING"


def test_parameter_test_keys_are_normalized():
    raw = {"validation": {"parameter_tests": {"IMPORT": 12, " Export ": "345"}}}

    user = UserConfig.model_validate(raw)

    assert user.validation.parameter_tests == {"import": "12", "export": "345"}


def test_overrides_only_contain_given_values():
    user = UserConfig.model_validate({"MAX_GAP_HOURS": 6})

    assert user.to_internal_overrides() == {"augment": {"max_gap_hours": 6.0}}


def test_unknown_keys_are_ignored():
    raw = {"SORT_CODE": "PRES", "UNKNOWN_LEGACY": 12345}
    user = UserConfig.model_validate(raw)

    assert user.sort_code == "PRES"
    # Unknown key should not become an attribute nor raise
    assert not hasattr(user, "UNKNOWN_LEGACY")
