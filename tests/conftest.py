"""Root-level pytest fixtures for the physcurate test suite.

Provides shared configuration fixtures, a table-backed reference resolver
and factories for small valid missions. Tests build configs through these
fixtures instead of creating raw dicts.
"""

import pandas as pd
import pytest

from physcurate.model import Level, Mission, StaticSchemaProvider
from physcurate.reference import PropertyTypeTable, TableReferenceResolver
from physcurate.schemas import ParamConfig, UserConfig, resolve_config


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides)."""
    return resolve_config(param_config, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Examples
    --------
    >>> def test_gap(make_config):
    ...     config = make_config(MAX_GAP_HOURS=2)
    ...     assert config.augment.max_gap_hours == 2.0
    """
    def _make(**user_overrides):
        if user_overrides:
            return resolve_config(param_config, UserConfig(**user_overrides))
        return resolve_config(param_config, None)

    return _make


@pytest.fixture
def schema():
    """Schema provider over the built-in field catalog."""
    return StaticSchemaProvider()


# =============================================================================
# Reference Fixtures
# =============================================================================

@pytest.fixture
def reference_tables():
    """Minimal reference tables covering the codes used by `make_mission`."""
    return {
        "missionType": pd.DataFrame({"code": ["4", "22"], "name": ["Ship mission", "Glider mission"]}),
        "operationType": pd.DataFrame({"code": ["1"], "name": ["CTD station"]}),
        "featureType": pd.DataFrame({"code": ["4", "7"], "name": ["profile", "timeSeries"]}),
        "instrumentType": pd.DataFrame({"code": ["CTD", "TSG"], "name": ["CTD", "Thermosalinograph"]}),
        "parameterDefinition": pd.DataFrame({
            "code": ["DATETIME", "PRES", "TEMP", "PSAL"],
            "name": ["Date and time", "Sea pressure", "Sea temperature", "Practical salinity"],
        }),
        "processingLevel": pd.DataFrame({"code": ["L0", "L1"], "name": ["Raw data", "Processed data"]}),
        "method": pd.DataFrame({"code": ["1"], "name": ["Sensor"]}),
        "suppliedParameter": pd.DataFrame({
            "code": ["temperature", "salinity"],
            "parameterCode": ["TEMP", "PSAL"],
        }),
        "suppliedUnits": pd.DataFrame({"code": ["Celsius"], "units": ["degC"]}),
    }


@pytest.fixture
def platforms():
    """Platform registry with a renamed ship."""
    return pd.DataFrame({
        "platform": ["4174", "4174", "4174", "1234", "1234"],
        "attribute": ["Ship name", "Ship name", "ITU Call Sign", "Ship name", "ITU Call Sign"],
        "value": ["Old Name", "Kristine Bonnevie", "LDGJ", "Johan Hjort", "LDGK"],
        "valid_from": [pd.NaT, pd.Timestamp("2010-01-01"), pd.NaT, pd.NaT, pd.NaT],
        "valid_to": [pd.Timestamp("2009-12-31"), pd.NaT, pd.NaT, pd.NaT, pd.NaT],
    })


@pytest.fixture
def property_types():
    return {
        Level.MISSION: PropertyTypeTable({"comment": "STR"}),
        Level.OPERATION: PropertyTypeTable({"castFrom": "STR", "thrusters": "STR", "winchSpeed": "DEC"}),
        Level.INSTRUMENT: PropertyTypeTable({"profileDirection": "STR"}),
        Level.PARAMETER: PropertyTypeTable({"calibrationOffset": "DEC", "comment": "STR"}),
    }


@pytest.fixture
def resolver(reference_tables, platforms, property_types):
    """In-memory reference resolver."""
    return TableReferenceResolver(reference_tables, platforms, property_types)


# =============================================================================
# Mission Factories
# =============================================================================

DEFAULT_SAMPLES = (
    ("2024-03-01T12:00:00Z", 10.0, 7.5),
    ("2024-03-01T12:05:00Z", 20.0, 7.1),
)


def _parameter(number, code, units, values, ordinal=1):
    return {
        "parameterNumber": number,
        "parameterCode": code,
        "ordinal": ordinal,
        "units": units,
        "processingLevel": "L0",
        "acquirementMethod": "1",
        "parameterProperty": [],
        "reading": [
            {"sampleNumber": index, "value": value, "quality": "0"}
            for index, value in enumerate(values, start=1)
        ],
    }


def mission_dict(samples=DEFAULT_SAMPLES, start_year=2024, mission_number=7, platform="4174",
                 with_time=True, operations=1):
    """Nested mapping of a valid single-instrument mission.

    Each sample is (time, pressure, temperature). Every operation gets the
    same samples and operation numbers 1..`operations`.
    """
    times = [sample[0] for sample in samples]
    parameters = []
    if with_time:
        parameters.append(_parameter(1, "DATETIME", "UTC", times))
    parameters.append(_parameter(len(parameters) + 1, "PRES", "dbar", [s[1] for s in samples]))
    parameters.append(_parameter(len(parameters) + 1, "TEMP", "degC", [s[2] for s in samples]))

    def _operation(number):
        return {
            "operationType": "1",
            "operationNumber": number,
            "localCdiId": f"cdi-{number}",
            "operationPlatform": platform,
            "timeStart": times[0],
            "timeStartQuality": "0",
            "timeEnd": times[-1],
            "timeEndQuality": "0",
            "longitudeStart": 5.3,
            "latitudeStart": 60.4,
            "positionStartQuality": "0",
            "featureType": "4",
            "operationProperty": [],
            "instrument": [{
                "instrumentType": "CTD",
                "instrumentNumber": 1,
                "instrumentProperty": [],
                "parameter": [dict(p, reading=[dict(r) for r in p["reading"]]) for p in parameters],
            }],
        }

    return {
        "missionType": "4",
        "startYear": start_year,
        "platform": platform,
        "missionNumber": mission_number,
        "missionStartDate": times[0][:10],
        "missionStopDate": times[-1][:10],
        "missionProperty": [],
        "operation": [_operation(number) for number in range(1, operations + 1)],
    }


@pytest.fixture
def make_mission_dict():
    """Factory for the nested mapping form of a valid mission."""
    return mission_dict


@pytest.fixture
def make_mission():
    """Factory for a valid Mission record."""
    def _make(**kwargs):
        return Mission.from_dict(mission_dict(**kwargs))

    return _make


@pytest.fixture
def make_fragment():
    """Factory for a single-sample fragment: (time, pressure, temperature)."""
    def _make(sample, **kwargs):
        return Mission.from_dict(mission_dict(samples=(sample,), **kwargs))

    return _make
