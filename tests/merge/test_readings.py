"""Test the reading merge engine."""

import numpy as np
import pytest

from physcurate.merge import (
    append_sample,
    assign_sample_numbers,
    expand_readings,
    is_merged,
    last_sample,
    merge_parameter_readings,
    merge_readings,
    next_sample_number,
    sample_count,
)
from physcurate.model import Instrument, Mission, Parameter, Reading, structural_equal

pytestmark = pytest.mark.unit


def make_parameter(*readings, code="TEMP"):
    return Parameter(fields={"parameterCode": code}, readings=[Reading(fields=dict(r)) for r in readings])


class TestMergeParameter:

    def test_samples_sorted_by_sample_number(self):
        parameter = make_parameter(
            {"sampleNumber": 2, "value": 3.1, "quality": "0"},
            {"sampleNumber": 1, "value": 2.9, "quality": "1"},
        )

        merge_parameter_readings(parameter)

        reading = parameter.readings[0]
        assert len(parameter.readings) == 1
        assert reading["sampleNumber"].dtype == np.int64
        assert reading["sampleNumber"].tolist() == [1, 2]
        assert reading["value"].tolist() == [2.9, 3.1]
        assert reading["quality"].tolist() == ["1", "0"]

    def test_text_is_fixed_width(self):
        parameter = make_parameter(
            {"sampleNumber": 1, "value": 1.0, "comment": "a"},
            {"sampleNumber": 2, "value": 2.0, "comment": "longer"},
        )

        merge_parameter_readings(parameter)

        assert parameter.readings[0]["comment"].dtype == np.dtype("<U6")

    def test_missing_fields_are_filled(self):
        parameter = make_parameter(
            {"sampleNumber": 1, "value": 1.0, "uncertainty": 0.1, "comment": "x"},
            {"sampleNumber": 2, "value": 2.0},
        )

        merge_parameter_readings(parameter)

        reading = parameter.readings[0]
        assert np.isnan(reading["uncertainty"][1])
        assert reading["uncertainty"][0] == 0.1
        assert reading["comment"].tolist() == ["x", ""]

    def test_integers_with_gaps_become_float(self):
        parameter = make_parameter({"sampleNumber": 1, "count": 4}, {"sampleNumber": 2})

        merge_parameter_readings(parameter)

        assert parameter.readings[0]["count"].dtype == float

    def test_mixed_values_are_kept_as_text(self):
        parameter = make_parameter({"sampleNumber": 1, "value": "a"}, {"sampleNumber": 2, "value": 1})

        merge_parameter_readings(parameter)

        assert parameter.readings[0]["value"].tolist() == ["a", "1"]

    def test_all_empty_text_stays_text(self):
        parameter = make_parameter({"sampleNumber": 1, "quality": ""}, {"sampleNumber": 2, "quality": ""})

        merge_parameter_readings(parameter)

        quality = parameter.readings[0]["quality"]
        assert quality.dtype.kind == "U"
        assert quality.tolist() == ["", ""]

    def test_nan_values_stay_numeric(self):
        parameter = make_parameter({"sampleNumber": 1, "value": float("nan")}, {"sampleNumber": 2, "value": 2.0})

        merge_parameter_readings(parameter)

        value = parameter.readings[0]["value"]
        assert value.dtype == float
        assert np.isnan(value[0])

    def test_single_reading_is_unchanged(self):
        parameter = make_parameter({"sampleNumber": 1, "value": 1.0})

        merge_parameter_readings(parameter)

        assert parameter.readings[0]["value"] == 1.0
        assert not is_merged(parameter)

    def test_merge_is_stable_without_sample_numbers(self):
        parameter = make_parameter({"value": 3.0}, {"value": 1.0}, {"value": 2.0})

        merge_parameter_readings(parameter)

        assert parameter.readings[0]["value"].tolist() == [3.0, 1.0, 2.0]


class TestMergeMission:

    def test_all_parameters_merged(self, make_mission):
        mission = merge_readings(make_mission())

        for parameter in mission.operations[0].instruments[0].parameters:
            assert is_merged(parameter)
            assert sample_count(parameter) == 2

    def test_time_values_stay_text(self, make_mission):
        mission = merge_readings(make_mission())

        times = mission.operations[0].instruments[0].parameters[0].readings[0]["value"]
        assert times.tolist() == ["2024-03-01T12:00:00Z", "2024-03-01T12:05:00Z"]

    def test_anchor_sort_without_sample_numbers(self):
        mission = Mission.from_dict({"operation": [{"instrument": [{"parameter": [
            {"parameterCode": "TEMP", "reading": [{"value": 3.0}, {"value": 1.0}, {"value": 2.0}]},
            {"parameterCode": "PRES", "reading": [{"value": 30.0}, {"value": 10.0}, {"value": 20.0}]},
        ]}]}]})

        merge_readings(mission)

        temp, pres = mission.operations[0].instruments[0].parameters
        assert pres.readings[0]["value"].tolist() == [10.0, 20.0, 30.0]
        assert temp.readings[0]["value"].tolist() == [1.0, 2.0, 3.0]

    def test_anchor_code_is_configurable(self):
        mission = Mission.from_dict({"operation": [{"instrument": [{"parameter": [
            {"parameterCode": "DEPTH", "reading": [{"value": 5.0}, {"value": 1.0}]},
            {"parameterCode": "PRES", "reading": [{"value": 1.0}, {"value": 2.0}]},
        ]}]}]})

        merge_readings(mission, sort_code="DEPTH")

        depth, pres = mission.operations[0].instruments[0].parameters
        assert depth.readings[0]["value"].tolist() == [1.0, 5.0]
        assert pres.readings[0]["value"].tolist() == [2.0, 1.0]

    def test_sample_numbers_take_precedence_over_anchor(self, make_mission):
        mission = make_mission(samples=(("2024-03-01T12:00:00Z", 20.0, 7.5),
                                        ("2024-03-01T12:05:00Z", 10.0, 7.1)))

        merge_readings(mission)

        pres = mission.operations[0].instruments[0].parameters[1]
        assert pres.readings[0]["value"].tolist() == [20.0, 10.0]


class TestExpand:

    def test_expand_restores_one_reading_per_sample(self):
        readings = [
            {"sampleNumber": 1, "value": 2.9, "quality": "1"},
            {"sampleNumber": 2, "value": 3.1, "quality": "0"},
        ]
        parameter = merge_parameter_readings(make_parameter(*reversed(readings)))

        expand_readings(parameter)

        assert structural_equal(parameter, make_parameter(*readings))
        assert type(parameter.readings[0]["sampleNumber"]) is int
        assert type(parameter.readings[0]["quality"]) is str

    def test_padding_is_stripped(self):
        parameter = merge_parameter_readings(make_parameter(
            {"sampleNumber": 1, "comment": "ab"},
            {"sampleNumber": 2, "comment": "abcdef"},
        ))

        expand_readings(parameter)

        assert [r["comment"] for r in parameter.readings] == ["ab", "abcdef"]

    def test_unmerged_parameter_is_unchanged(self):
        parameter = make_parameter({"value": 1.0})

        assert expand_readings(parameter) is parameter
        assert parameter.readings[0]["value"] == 1.0


class TestSampleNumbers:

    def test_assign_to_unmerged(self):
        instrument = Instrument(parameters=[make_parameter({"value": 1.0}, {"value": 2.0})])

        assign_sample_numbers(instrument)

        assert [r["sampleNumber"] for r in instrument.parameters[0].readings] == [1, 2]

    def test_assign_to_merged(self):
        parameter = merge_parameter_readings(make_parameter({"value": 1.0}, {"value": 2.0}, {"value": 3.0}))
        instrument = Instrument(parameters=[parameter])

        assign_sample_numbers(instrument)

        assert parameter.readings[0]["sampleNumber"].tolist() == [1, 2, 3]

    def test_next_number_after_highest(self):
        instrument = Instrument(parameters=[
            make_parameter({"sampleNumber": 5, "value": 1.0}, {"sampleNumber": 9, "value": 2.0}),
            make_parameter({"sampleNumber": 5, "value": 3.0}, {"sampleNumber": 9, "value": 4.0}, code="PRES"),
        ])

        assert next_sample_number(instrument) == 10

    def test_next_number_of_merged_parameter(self):
        parameter = merge_parameter_readings(make_parameter(
            {"sampleNumber": 9, "value": 1.0}, {"sampleNumber": float("nan"), "value": 2.0},
        ))

        assert next_sample_number(Instrument(parameters=[parameter])) == 10

    def test_next_number_without_sample_numbers(self):
        instrument = Instrument(parameters=[make_parameter({"value": 1.0}, {"value": 2.0})])

        assert next_sample_number(instrument) == 3


class TestAppend:

    def test_last_sample_of_merged_parameter(self):
        parameter = merge_parameter_readings(make_parameter(
            {"sampleNumber": 1, "value": 2.9, "quality": "0"},
            {"sampleNumber": 2, "value": 3.1, "quality": "1"},
        ))

        sample = last_sample(parameter)

        assert sample == {"sampleNumber": 2, "value": 3.1, "quality": "1"}
        assert type(sample["sampleNumber"]) is int

    def test_last_sample_of_empty_parameter(self):
        assert last_sample(Parameter()) == {}

    def test_append_to_merged_parameter(self):
        parameter = merge_parameter_readings(make_parameter(
            {"sampleNumber": 1, "value": 2.9, "quality": "0"},
            {"sampleNumber": 2, "value": 3.1, "quality": "0"},
        ))

        append_sample(parameter, {"sampleNumber": 1, "value": 4.0, "quality": "1", "uncertainty": 0.2}, 3)

        reading = parameter.readings[0]
        assert reading["sampleNumber"].tolist() == [1, 2, 3]
        assert reading["value"].tolist() == [2.9, 3.1, 4.0]
        assert reading["quality"].tolist() == ["0", "0", "1"]
        assert np.isnan(reading["uncertainty"][:2]).all()
        assert reading["uncertainty"][2] == 0.2

    def test_append_sample_without_quality(self):
        parameter = merge_parameter_readings(make_parameter(
            {"sampleNumber": 1, "value": 2.9, "quality": "0"},
            {"sampleNumber": 2, "value": 3.1, "quality": "0"},
        ))

        append_sample(parameter, {"value": 4.0}, 3)

        assert parameter.readings[0]["quality"].tolist() == ["0", "0", ""]

    def test_appended_text_joins_numeric_vector(self):
        parameter = merge_parameter_readings(make_parameter(
            {"sampleNumber": 1, "value": 2.9},
            {"sampleNumber": 2, "value": 3.1},
        ))

        append_sample(parameter, {"value": "4.0"}, 3)

        value = parameter.readings[0]["value"]
        assert value.dtype == float
        assert value.tolist() == [2.9, 3.1, 4.0]

    def test_unparseable_text_joins_numeric_vector_as_nan(self):
        parameter = merge_parameter_readings(make_parameter(
            {"sampleNumber": 1, "value": 2.9},
            {"sampleNumber": 2, "value": 3.1},
        ))

        append_sample(parameter, {"value": "n/a"}, 3)

        value = parameter.readings[0]["value"]
        assert value.dtype == float
        assert np.isnan(value[2])

    def test_appended_number_joins_text_vector(self):
        parameter = merge_parameter_readings(make_parameter(
            {"sampleNumber": 1, "quality": "0"},
            {"sampleNumber": 2, "quality": "1"},
        ))

        append_sample(parameter, {"quality": 4}, 3)

        assert parameter.readings[0]["quality"].tolist() == ["0", "1", "4"]

    def test_append_to_unmerged_parameter(self):
        parameter = make_parameter({"sampleNumber": 1, "value": 2.9})

        append_sample(parameter, {"value": 3.1}, 2)

        assert len(parameter.readings) == 2
        assert parameter.readings[1].fields == {"value": 3.1, "sampleNumber": 2}
