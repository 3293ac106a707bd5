"""Reading merge engine.

A parameter as built or fetched holds one Reading record per sample. For
analysis and output it is more convenient to hold a single Reading whose
fields are parallel vectors, one element per sample:

    [Reading(value=3.1, quality='0', sampleNumber=2),      Reading(
     Reading(value=2.9, quality='0', sampleNumber=1)]  ->     value=[2.9, 3.1],
                                                             quality=['0', '0'],
                                                             sampleNumber=[1, 2])

Text fields become fixed-width numpy unicode vectors sized to the longest
entry; everything else becomes a numeric vector. Fields missing from some
records are filled with NaN (numeric) or '' (text) so that every field
has the sample count as its length.
"""

import logging
from typing import Optional

import numpy as np
import pandas as pd

from physcurate.contracts import assert_merged_readings
from physcurate.model.records import Instrument, Mission, Parameter, Reading
from physcurate.valuetype import as_text, is_empty

logger = logging.getLogger(__name__)

SAMPLE_FIELD = "sampleNumber"
DEFAULT_SORT_CODE = "PRES"


def is_merged(parameter: Parameter) -> bool:
    """True when the parameter holds one reading of vectors."""
    if len(parameter.readings) != 1:
        return False
    return any(isinstance(value, np.ndarray) for value in parameter.readings[0].fields.values())


def sample_count(parameter: Parameter) -> int:
    """Number of samples, merged or not."""
    if is_merged(parameter):
        lengths = [value.shape[0] for value in parameter.readings[0].fields.values()
                   if isinstance(value, np.ndarray)]
        return max(lengths)
    return len(parameter.readings)


def _is_number(value) -> bool:
    return isinstance(value, (int, float, np.integer, np.floating)) and not isinstance(value, (bool, np.bool_))


def _stack(values: list) -> np.ndarray:
    """One field across samples as a vector; None marks a missing entry."""
    present = [value for value in values if value is not None and not is_empty(value)]
    if not present and any(isinstance(value, str) for value in values):
        return np.array([""] * len(values), dtype="<U1")
    if present and all(isinstance(value, str) for value in present):
        texts = ["" if value is None else str(value) for value in values]
        width = max(1, max(len(text) for text in texts))
        return np.array(texts, dtype=f"<U{width}")

    if all(_is_number(value) for value in present):
        if present and len(present) == len(values) and all(isinstance(v, (int, np.integer)) for v in present):
            return np.array(values, dtype=np.int64)
        return np.array([float(v) if _is_number(v) else np.nan for v in values], dtype=float)

    # mixed content is kept as text
    texts = [as_text(value) for value in values]
    width = max(1, max(len(text) for text in texts))
    return np.array(texts, dtype=f"<U{width}")


def merge_parameter_readings(parameter: Parameter, sample_field: str = SAMPLE_FIELD) -> Parameter:
    """Merge the readings of one parameter into a single vector reading.

    Parameters
    ----------
    parameter : Parameter
        Parameter to merge in place. Parameters with zero or one reading
        are returned unchanged.
    sample_field : str
        Sample index field. When present, samples are sorted by it.

    Returns
    -------
    Parameter
        The same parameter, holding one merged Reading.

    Raises
    ------
    ContractViolation
        If the merged fields do not share one length.
    """
    readings = parameter.readings
    if len(readings) <= 1:
        return parameter

    names = []
    for reading in readings:
        names.extend(name for name in reading.fields if name not in names)

    order = np.arange(len(readings))
    if sample_field in names:
        keys = pd.to_numeric(pd.Series([reading.get(sample_field) for reading in readings], dtype=object),
                             errors="coerce")
        order = np.argsort(keys.to_numpy(dtype=float), kind="stable")

    merged = {}
    for name in names:
        merged[name] = _stack([readings[index].get(name) for index in order])

    parameter.readings = [Reading(fields=merged)]
    assert_merged_readings(parameter)

    logger.debug("Merged %d readings of %s into %d fields",
                 len(order), parameter.get("parameterCode", "parameter"), len(names))
    return parameter


def _has_sample_field(instrument: Instrument, sample_field: str) -> bool:
    return any(sample_field in reading for parameter in instrument.parameters for reading in parameter.readings)


def _anchor_sort(instrument: Instrument, sort_code: str) -> bool:
    """Permute every merged parameter by the ascending values of the anchor parameter."""
    anchor = next(
        (p for p in instrument.parameters if as_text(p.get("parameterCode")) == sort_code and is_merged(p)),
        None
    )
    if anchor is None:
        return False
    values = anchor.readings[0].get("value")
    if not isinstance(values, np.ndarray):
        return False

    keys = pd.to_numeric(pd.Series(values, dtype=object), errors="coerce").to_numpy(dtype=float)
    order = np.argsort(keys, kind="stable")
    for parameter in instrument.parameters:
        if not is_merged(parameter) or sample_count(parameter) != len(order):
            continue
        reading = parameter.readings[0]
        for name, value in reading.fields.items():
            if isinstance(value, np.ndarray) and value.shape[0] == len(order):
                reading[name] = value[order]
    return True


def merge_readings(mission: Mission, sort_code: Optional[str] = None,
                   sample_field: str = SAMPLE_FIELD) -> Mission:
    """Merge the readings of every parameter in a mission.

    When no reading of an instrument carries `sample_field`, the
    instrument's parameters are sorted jointly by the values of the
    parameter whose code is `sort_code`, keeping rows aligned across
    parameters.

    Parameters
    ----------
    mission : Mission
        Mission to merge in place.
    sort_code : str, optional
        Anchor parameterCode, 'PRES' by default.
    sample_field : str
        Sample index field.

    Returns
    -------
    Mission
    """
    sort_code = sort_code or DEFAULT_SORT_CODE
    for o, operation in enumerate(mission.operations):
        for i, instrument in enumerate(operation.instruments):
            for parameter in instrument.parameters:
                merge_parameter_readings(parameter, sample_field)
            if not _has_sample_field(instrument, sample_field):
                if _anchor_sort(instrument, sort_code):
                    logger.debug("operation[%d].instrument[%d] sorted by %s", o, i, sort_code)
    return mission


def assign_sample_numbers(instrument: Instrument, sample_field: str = SAMPLE_FIELD) -> Instrument:
    """Number the samples of every parameter 1..N in their current order."""
    for parameter in instrument.parameters:
        if is_merged(parameter):
            parameter.readings[0][sample_field] = np.arange(1, sample_count(parameter) + 1, dtype=np.int64)
        else:
            for number, reading in enumerate(parameter.readings, start=1):
                reading[sample_field] = number
    return instrument


def _scalar(value):
    if isinstance(value, np.str_):
        return str(value).rstrip()
    if isinstance(value, np.generic):
        return value.item()
    return value


def expand_readings(parameter: Parameter) -> Parameter:
    """Split a merged reading back into one Reading per sample.

    Text padding is stripped and numpy scalars become Python scalars.
    Unmerged parameters are returned unchanged.
    """
    if not is_merged(parameter):
        return parameter
    fields = parameter.readings[0].fields
    count = sample_count(parameter)
    readings = []
    for index in range(count):
        record = {}
        for name, value in fields.items():
            if isinstance(value, np.ndarray):
                record[name] = _scalar(value[index])
            else:
                record[name] = value
        readings.append(Reading(fields=record))
    parameter.readings = readings
    return parameter


def last_sample(parameter: Parameter) -> dict:
    """Fields of the last sample as Python scalars; {} without readings."""
    if not parameter.readings:
        return {}
    if not is_merged(parameter):
        return dict(parameter.readings[-1].fields)
    sample = {}
    for name, value in parameter.readings[0].fields.items():
        if isinstance(value, np.ndarray):
            sample[name] = _scalar(value[-1]) if value.size else None
        else:
            sample[name] = value
    return sample


def next_sample_number(instrument: Instrument, sample_field: str = SAMPLE_FIELD) -> int:
    """Number for a sample appended to every parameter of `instrument`.

    One above the largest finite sample number found in the instrument's
    readings, merged or not. Without any numbered sample, one above the
    largest sample count.
    """
    numbers = []
    for parameter in instrument.parameters:
        for reading in parameter.readings:
            value = reading.get(sample_field)
            if value is None:
                continue
            values = value.ravel().tolist() if isinstance(value, np.ndarray) else [value]
            numbers.extend(pd.to_numeric(pd.Series(values, dtype=object), errors="coerce").tolist())
    finite = [number for number in numbers if np.isfinite(number)]
    if finite:
        return int(max(finite)) + 1
    return max((sample_count(parameter) for parameter in instrument.parameters), default=0) + 1


def _like(vector: np.ndarray, value):
    """`value` converted to the kind of an existing vector."""
    if value is None or is_empty(value):
        return None
    if vector.dtype.kind in "iuf" and not _is_number(value):
        number = pd.to_numeric(value, errors="coerce")
        if pd.isna(number):
            logger.warning("Value %r is not numeric; appended as NaN", value)
            return np.nan
        return number
    if vector.dtype.kind == "U" and not isinstance(value, str):
        return as_text(value)
    return value


def append_sample(parameter: Parameter, sample: dict, number: int, sample_field: str = SAMPLE_FIELD) -> Parameter:
    """Append one sample to a parameter, numbering it `number`.

    Merged parameters grow every vector by one element, with NaN or '' for
    fields the sample lacks. The new element takes the kind of the vector
    it joins, so a numeric vector stays numeric. Unmerged parameters get
    one more Reading.

    Raises
    ------
    ContractViolation
        If the grown vectors do not share one length.
    """
    sample = dict(sample)
    sample[sample_field] = number
    if not is_merged(parameter):
        parameter.readings.append(Reading(fields=sample))
        return parameter

    reading = parameter.readings[0]
    count = sample_count(parameter)
    names = list(reading.fields) + [name for name in sample if name not in reading.fields]
    for name in names:
        current = reading.get(name)
        if isinstance(current, np.ndarray):
            previous = current.tolist()
            value = _like(current, sample.get(name))
        else:
            previous = [None] * count
            value = sample.get(name)
        reading[name] = _stack(previous + [value])
    assert_merged_readings(parameter)
    return parameter
