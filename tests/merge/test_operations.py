"""Test gridding profile operations into a Dataset."""

import numpy as np
import pytest

from physcurate.merge import operations_to_dataset
from physcurate.model import structural_equal

pytestmark = pytest.mark.unit


@pytest.fixture
def profiles(make_mission):
    mission = make_mission(operations=2)
    second = mission.operations[1]
    second["operationNumber"] = 5
    pres, temp = second.instruments[0].parameters[1:]
    pres.readings[1]["value"] = 25.0
    temp.readings[1]["quality"] = "4"
    return mission


def test_variables_and_shape(profiles, internal_config):
    ds = operations_to_dataset(profiles, internal_config)

    assert dict(ds.sizes) == {"sample": 2, "operation": 2}
    assert ds["operation"].values.tolist() == [1, 5]
    assert {"CTD_DATETIME", "CTD_PRES", "CTD_TEMP", "CTD_TEMP_QC"} <= set(ds.data_vars)
    assert ds["CTD_PRES"].dims == ("sample", "operation")
    assert ds["CTD_PRES"].values[:, 1].tolist() == [10.0, 25.0]
    assert ds["CTD_TEMP_QC"].values[:, 1].tolist() == ["0", "4"]


def test_time_parameter_is_datetime(profiles, internal_config):
    ds = operations_to_dataset(profiles, internal_config)

    assert ds["CTD_DATETIME"].dtype.kind == "M"
    assert ds["CTD_DATETIME"].values[0, 0] == np.datetime64("2024-03-01T12:00:00")


def test_metadata_columns(profiles, internal_config):
    ds = operations_to_dataset(profiles, internal_config)

    assert ds["LATITUDESTART"].dims == ("operation",)
    assert ds["LATITUDESTART"].values.tolist() == [60.4, 60.4]
    assert ds["TIMESTART"].dtype.kind == "M"
    assert ds["CTD_TEMP_UNITS"].values.tolist() == ["degC", "degC"]
    assert "FEATURETYPE" not in ds.data_vars
    assert ds.attrs["platform"] == "4174"
    assert ds.attrs["missionNumber"] == "7"


def test_rows_follow_sample_numbers(make_mission, internal_config):
    mission = make_mission(samples=(("2024-03-01T12:00:00Z", 10.0, 7.5),
                                    ("2024-03-01T12:05:00Z", 20.0, 7.1),
                                    ("2024-03-01T12:10:00Z", 30.0, 6.9)))
    pres = mission.operations[0].instruments[0].parameters[1]
    del pres.readings[1]

    ds = operations_to_dataset(mission, internal_config)

    values = ds["CTD_PRES"].values[:, 0]
    assert values[0] == 10.0
    assert np.isnan(values[1])
    assert values[2] == 30.0
    assert ds["CTD_PRES_QC"].values[1, 0] == ""


def test_non_profile_operations_are_skipped(profiles, internal_config):
    profiles.operations[1]["featureType"] = "7"

    ds = operations_to_dataset(profiles, internal_config)

    assert ds.sizes["operation"] == 1


def test_secondary_sensor_gets_ordinal_suffix(profiles, internal_config):
    for operation in profiles.operations:
        operation.instruments[0].parameters[2]["ordinal"] = 2

    ds = operations_to_dataset(profiles, internal_config)

    assert "CTD_TEMP2" in ds.data_vars
    assert "CTD_TEMP" not in ds.data_vars


def test_mission_is_not_modified(profiles, internal_config):
    before = profiles.model_copy(deep=True)

    operations_to_dataset(profiles, internal_config)

    assert structural_equal(profiles, before)
