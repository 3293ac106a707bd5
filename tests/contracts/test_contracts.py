"""Tests for engine contracts.

These tests verify that contracts are enforced at engine boundaries.
They test contract violations directly, without defensive logic downstream.
"""

import numpy as np
import pytest

pytestmark = pytest.mark.unit

from physcurate.contracts import (
    ContractViolation,
    require,
    assert_merged_readings,
    assert_single_sample_fragment,
)
from physcurate.model import Parameter, Reading


def test_require_passes_and_fails():
    require(True, "never raised")
    with pytest.raises(ContractViolation, match="broken"):
        require(False, "broken")


class TestFragmentContract:
    """Test augmentation input contract."""

    def test_single_sample_fragment_passes(self, make_fragment):
        fragment = make_fragment(("2024-03-01T12:10:00Z", 30.0, 6.9))
        # Should not raise
        assert_single_sample_fragment(fragment)

    def test_fails_with_two_operations(self, make_mission):
        fragment = make_mission(samples=(("2024-03-01T12:10:00Z", 30.0, 6.9),), operations=2)
        with pytest.raises(ContractViolation, match="2 operations"):
            assert_single_sample_fragment(fragment)

    def test_fails_with_two_instruments(self, make_fragment):
        fragment = make_fragment(("2024-03-01T12:10:00Z", 30.0, 6.9))
        operation = fragment.operations[0]
        operation.instruments.append(operation.instruments[0].model_copy(deep=True))
        with pytest.raises(ContractViolation, match="2 instruments"):
            assert_single_sample_fragment(fragment)

    def test_fails_with_two_readings(self, make_mission):
        fragment = make_mission()
        with pytest.raises(ContractViolation, match="2 readings"):
            assert_single_sample_fragment(fragment)

    def test_fails_with_vector_reading(self, make_fragment):
        fragment = make_fragment(("2024-03-01T12:10:00Z", 30.0, 6.9))
        fragment.operations[0].instruments[0].parameters[1].readings[0]["value"] = np.array([1.0, 2.0])
        with pytest.raises(ContractViolation, match="holds a vector"):
            assert_single_sample_fragment(fragment)


class TestMergeContract:
    """Test reading merge output contract."""

    def test_equal_length_vectors_pass(self):
        parameter = Parameter(
            fields={"parameterCode": "TEMP"},
            readings=[Reading(fields={"value": np.array([1.0, 2.0]), "quality": np.array(["0", "0"])})],
        )
        # Should not raise
        assert_merged_readings(parameter)

    def test_empty_parameter_passes(self):
        assert_merged_readings(Parameter())

    def test_unequal_lengths_fail(self):
        parameter = Parameter(
            fields={"parameterCode": "TEMP"},
            readings=[Reading(fields={"value": np.array([1.0, 2.0]), "quality": np.array(["0"])})],
        )
        with pytest.raises(ContractViolation, match="unequal vector lengths"):
            assert_merged_readings(parameter)

    def test_scalar_field_fails(self):
        parameter = Parameter(
            fields={"parameterCode": "TEMP"},
            readings=[Reading(fields={"value": np.array([1.0]), "quality": "0"})],
        )
        with pytest.raises(ContractViolation, match="not a vector"):
            assert_merged_readings(parameter)

    def test_several_records_fail(self):
        parameter = Parameter(readings=[Reading(fields={"value": 1.0}), Reading(fields={"value": 2.0})])
        with pytest.raises(ContractViolation, match="2 reading records"):
            assert_merged_readings(parameter)
