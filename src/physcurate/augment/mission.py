"""Mission augmentation engine.

Combines an existing mission with a fragment holding one new sample (one
operation, one instrument, one reading per parameter). Each call has
exactly one outcome:

IDENTICAL      fragment equals the mission; nothing changes
NEW_MISSION    new start year, or mission-level fields differ; the
               fragment becomes the mission
NEW_OPERATION  operation, instrument or parameter metadata differ, or the
               sample is more than `max_gap_hours` after the last one; the
               fragment's operation is appended
NEW_READING    only the sample is new; it is appended to every parameter
               of the last operation's first instrument

After any outcome but IDENTICAL, the last operation's timeEnd and the
mission's missionStopDate are derived from the last sample of the time
parameter, or blanked when the instrument has none.

Only the first instrument of the last operation is compared for new
readings; missions with several instruments per operation are not fully
supported.
"""

import logging
from enum import Enum
from typing import NamedTuple, Optional

import numpy as np
import pandas as pd

from physcurate.contracts import assert_single_sample_fragment, require
from physcurate.merge.readings import append_sample, last_sample, next_sample_number
from physcurate.model.compare import structural_equal, values_equal
from physcurate.model.records import Instrument, Mission, Operation
from physcurate.schemas.internal import InternalConfig
from physcurate.valuetype import DATE_FORMAT, DATETIME_FORMAT, as_text, to_timestamp

logger = logging.getLogger(__name__)

MISSION_IGNORE = ("operation", "missionStartDate", "missionStopDate", "missionNumber")
OPERATION_IGNORE = ("operationNumber", "instrument", "timeStart", "timeEnd")
INSTRUMENT_IGNORE = ("instrumentNumber", "parameter")
PARAMETER_IGNORE = ("parameterNumber", "reading")


class Outcome(str, Enum):
    IDENTICAL = "identical"
    NEW_MISSION = "new_mission"
    NEW_OPERATION = "new_operation"
    NEW_READING = "new_reading"


class ChangeFlags(NamedTuple):
    new_mission: bool = False
    new_operation: bool = False
    new_reading: bool = False

    def any(self) -> bool:
        return self.new_mission or self.new_operation or self.new_reading


class AugmentResult(NamedTuple):
    """Resulting mission, its outcome and the matching change flags."""
    mission: Mission
    outcome: Outcome
    change: ChangeFlags


def _number(value) -> float:
    return float(pd.to_numeric(as_text(value) or np.nan, errors="coerce"))


def _time_index(instrument: Instrument, time_code: str) -> Optional[int]:
    for index, parameter in enumerate(instrument.parameters):
        if time_code in as_text(parameter.get("parameterCode")):
            return index
    return None


def _codes(instrument: Instrument, name: str) -> list:
    return [parameter.get(name) for parameter in instrument.parameters]


def _operation_differs(last: Operation, fragment: Operation) -> Optional[str]:
    """Name of the level whose metadata makes the fragment a new operation."""
    if not structural_equal(last, fragment, OPERATION_IGNORE):
        return "operation"
    if len(last.instruments) != len(fragment.instruments):
        return "instrument"
    for old, new in zip(last.instruments, fragment.instruments):
        if not structural_equal(old, new, INSTRUMENT_IGNORE):
            return "instrument"
        if len(old.parameters) != len(new.parameters):
            return "parameter"
        if not values_equal(_codes(old, "parameterCode"), _codes(new, "parameterCode")):
            return "parameter"
        if not values_equal(_codes(old, "parameterNumber"), _codes(new, "parameterNumber")):
            return "parameter"
        for old_parameter, new_parameter in zip(old.parameters, new.parameters):
            if not structural_equal(old_parameter, new_parameter, PARAMETER_IGNORE):
                return "parameter"
    return None


def _any_value_changed(last: Operation, fragment: Operation) -> bool:
    for old, new in zip(last.instruments, fragment.instruments):
        for old_parameter, new_parameter in zip(old.parameters, new.parameters):
            if not values_equal(last_sample(old_parameter).get("value"),
                                last_sample(new_parameter).get("value")):
                return True
    return False


def _classify(old: Mission, new: Mission, time_code: str, max_gap_hours: float) -> Outcome:
    """Outcome of adding the fragment `new` to `old`."""
    if structural_equal(old, new):
        logger.info("Missions are identical; no change in mission.")
        return Outcome.IDENTICAL

    if _number(new.get("startYear")) > _number(old.get("startYear")):
        logger.info("Additional data is from a new year; output is the new mission only.")
        return Outcome.NEW_MISSION
    if not structural_equal(new, old, MISSION_IGNORE):
        logger.info("Mission level fields differ; output is the new mission only.")
        return Outcome.NEW_MISSION

    last = old.operations[-1]
    fragment = new.operations[0]
    level = _operation_differs(last, fragment)
    if level is not None:
        logger.info("%s level fields differ; adding new operation to old mission.", level.capitalize())
        return Outcome.NEW_OPERATION

    time_index = _time_index(fragment.instruments[0], time_code)
    if time_index is None:
        new_reading = _any_value_changed(last, fragment)
    else:
        # the time parameter alone decides whether the sample is new
        previous = last_sample(last.instruments[0].parameters[time_index]).get("value")
        current = last_sample(fragment.instruments[0].parameters[time_index]).get("value")
        new_reading = not values_equal(as_text(previous), as_text(current))
        if new_reading:
            before, after = to_timestamp(previous), to_timestamp(current)
            if before is not None and after is not None \
                    and after - before > pd.Timedelta(hours=max_gap_hours):
                logger.info("Time gap to new data; adding new operation to old mission.")
                return Outcome.NEW_OPERATION

    if new_reading:
        logger.info("There are new readings; adding new readings to old mission.")
        return Outcome.NEW_READING
    logger.info("There are no new readings; no change to old mission.")
    return Outcome.IDENTICAL


def _update_time_bounds(mission: Mission, time_code: str) -> None:
    """Derive timeEnd and missionStopDate from the last time sample."""
    operation = mission.operations[-1]
    instrument = operation.instruments[0] if operation.instruments else Instrument()
    time_index = _time_index(instrument, time_code)
    stamp = None
    if time_index is not None:
        stamp = to_timestamp(last_sample(instrument.parameters[time_index]).get("value"))
    if stamp is None:
        operation["timeEnd"] = ""
        mission["missionStopDate"] = ""
    else:
        operation["timeEnd"] = stamp.strftime(DATETIME_FORMAT)
        mission["missionStopDate"] = stamp.strftime(DATE_FORMAT)


def augment_mission(old, new, config: InternalConfig) -> AugmentResult:
    """Add the single sample in `new` to the mission `old`.

    Neither input is modified.

    Parameters
    ----------
    old : Mission or dict
        Existing mission with at least one operation.
    new : Mission or dict
        Fragment with one operation, one instrument and one single-sample
        reading per parameter.
    config : InternalConfig
        Time parameter code and maximum gap from `config.augment`, sample
        index field from `config.merge`.

    Returns
    -------
    AugmentResult

    Raises
    ------
    ContractViolation
        If `new` is not a single-sample fragment or `old` has no operation.
    """
    old = Mission.from_dict(old) if isinstance(old, dict) else old.model_copy(deep=True)
    new = Mission.from_dict(new) if isinstance(new, dict) else new.model_copy(deep=True)
    assert_single_sample_fragment(new)
    require(len(old.operations) > 0, "Augmentation contract violated: existing mission has no operation")

    time_code = config.augment.time_parameter_code
    outcome = _classify(old, new, time_code, config.augment.max_gap_hours)

    if outcome is Outcome.IDENTICAL:
        return AugmentResult(old, outcome, ChangeFlags())

    if outcome is Outcome.NEW_MISSION:
        mission = new
        if as_text(new.get("startYear")) == as_text(old.get("startYear")):
            number = _number(old.get("missionNumber"))
            if not np.isnan(number):
                mission["missionNumber"] = int(number) + 1
        change = ChangeFlags(new_mission=True)

    elif outcome is Outcome.NEW_OPERATION:
        mission = old
        operation = new.operations[0]
        number = _number(mission.operations[-1].get("operationNumber"))
        operation["operationNumber"] = int(number) + 1 if not np.isnan(number) else len(mission.operations) + 1
        mission.operations.append(operation)
        change = ChangeFlags(new_operation=True)

    else:
        mission = old
        sample_field = config.merge.sample_field
        instrument = mission.operations[-1].instruments[0]
        fragment = new.operations[0].instruments[0]
        number = next_sample_number(instrument, sample_field)
        for parameter, addition in zip(instrument.parameters, fragment.parameters):
            append_sample(parameter, last_sample(addition), number, sample_field)
        change = ChangeFlags(new_reading=True)

    _update_time_bounds(mission, time_code)
    return AugmentResult(mission, outcome, change)
