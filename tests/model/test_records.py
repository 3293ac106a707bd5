"""Test mission record construction, conversion and traversal."""

import pytest

from physcurate.model import Instrument, Level, Mission, Operation, Parameter, PropertyEntry, Reading

pytestmark = pytest.mark.unit


def test_from_dict_builds_typed_tree(make_mission_dict):
    mission = Mission.from_dict(make_mission_dict())

    assert isinstance(mission.operations[0], Operation)
    assert isinstance(mission.operations[0].instruments[0], Instrument)
    parameter = mission.operations[0].instruments[0].parameters[1]
    assert isinstance(parameter, Parameter)
    assert isinstance(parameter.readings[0], Reading)
    assert parameter["parameterCode"] == "PRES"
    assert "operation" not in mission.fields
    assert "missionProperty" not in mission.fields


def test_to_dict_round_trip(make_mission_dict):
    data = make_mission_dict()

    assert Mission.from_dict(data).to_dict() == data


def test_properties_are_parsed():
    mission = Mission.from_dict({"missionType": "4", "missionProperty": [{"code": "comment", "value": "x"}]})

    assert mission.properties == [PropertyEntry(code="comment", value="x")]


def test_single_child_mapping_is_wrapped_in_list():
    mission = Mission.from_dict({"operation": {"operationType": "1"}})

    assert len(mission.operations) == 1


def test_item_access():
    reading = Reading(fields={"value": 1.5})
    reading["quality"] = "0"

    assert reading["value"] == 1.5
    assert "quality" in reading
    assert reading.get("sampleNumber") is None
    assert not reading.has_properties
    assert reading.children == []


def test_levels_and_child_keys():
    assert Mission.level is Level.MISSION
    assert Mission.child_key() == "operation"
    assert Parameter.child_key() == "reading"
    assert Reading.child_key() is None
    assert Level.PARAMETER.property_key == "parameterProperty"


def test_walk_yields_paths_in_preorder(make_mission):
    mission = make_mission(operations=2)
    paths = [path for path, _ in mission.walk()]

    assert paths[0] == "mission"
    assert paths[1] == "mission.operation[0]"
    assert paths[2] == "mission.operation[0].instrument[0]"
    assert paths[3] == "mission.operation[0].instrument[0].parameter[0]"
    assert paths[4] == "mission.operation[0].instrument[0].parameter[0].reading[0]"
    assert "mission.operation[1].instrument[0].parameter[2].reading[1]" in paths
    # 1 mission + 2 * (1 operation + 1 instrument + 3 parameters + 6 readings)
    assert len(paths) == 23
