"""Canonical value types and coercion of raw field values.

Every field in a mission record is declared as one of the PhysChem value
types. `coerce()` turns a raw scalar or vector into the canonical Python
form for its declared type and, for the time types, also returns a
`pandas.Timestamp` usable for comparisons. Coercion never raises: a value
that cannot be represented returns None and the caller decides severity.

Canonical forms
---------------
STR       str
INT       int (NaN allowed as "no data")
DEC, FLT  float
DATE      'YYYY-MM-DD'
DATETIME  'YYYY-MM-DDThh:mm:ssZ'

Vectors (lists, tuples, numpy arrays) coerce element by element into a
numpy array. Empty input (None, blank text, empty container) coerces
successfully to the empty string for every type.
"""

import logging
import re
from datetime import date, datetime
from enum import Enum
from typing import Any, NamedTuple, Optional

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

_DATE_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})(?:[T ].*)?$")
_DATETIME_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})[T ](\d{2}:\d{2}:\d{2})(\.\d+)?Z?$")
_INT_RE = re.compile(r"^[+-]?\d+$")


class ValueType(str, Enum):
    """Declared value type of a field or property."""
    STR = "STR"
    INT = "INT"
    DEC = "DEC"
    FLT = "FLT"
    DATE = "DATE"
    DATETIME = "DATETIME"


NUMERIC_TYPES = frozenset({ValueType.INT, ValueType.DEC, ValueType.FLT})
TIME_TYPES = frozenset({ValueType.DATE, ValueType.DATETIME})


class Coerced(NamedTuple):
    """Result of a successful coercion."""
    value: Any
    stamp: Any = None


def parse_value_type(declared) -> Optional[ValueType]:
    """Map a declared type (enum or text such as 'dec') to ValueType."""
    if isinstance(declared, ValueType):
        return declared
    if not isinstance(declared, str):
        return None
    try:
        return ValueType(declared.strip().upper())
    except ValueError:
        return None


def is_empty(value) -> bool:
    """True for None, blank text and empty containers.

    NaN is a value ("no data"), not an empty field.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, np.ndarray):
        return value.size == 0
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return value is pd.NaT


def is_missing(value) -> bool:
    """True for empty fields and for NaN scalars or all-NaN vectors."""
    if is_empty(value):
        return True
    if isinstance(value, (float, np.floating)):
        return bool(np.isnan(value))
    if isinstance(value, np.ndarray) and value.dtype.kind == "f":
        return bool(np.all(np.isnan(value)))
    return False


def _is_bool(raw) -> bool:
    return isinstance(raw, (bool, np.bool_))


def _to_stamp(raw) -> Optional[pd.Timestamp]:
    """Timestamp for datetime-like objects, normalized to naive UTC."""
    stamp = pd.Timestamp(raw)
    if stamp is pd.NaT:
        return None
    if stamp.tzinfo is not None:
        stamp = stamp.tz_convert("UTC").tz_localize(None)
    return stamp


def _coerce_str(raw) -> Optional[Coerced]:
    if isinstance(raw, str):
        return Coerced(raw)
    if _is_bool(raw):
        return Coerced(str(bool(raw)).lower())
    if isinstance(raw, (int, np.integer)):
        return Coerced(str(int(raw)))
    if isinstance(raw, (float, np.floating)):
        if np.isnan(raw):
            return Coerced("")
        return Coerced(np.format_float_positional(float(raw), trim="-"))
    if isinstance(raw, (datetime, np.datetime64, pd.Timestamp)):
        stamp = _to_stamp(raw)
        return Coerced(stamp.strftime(DATETIME_FORMAT) if stamp is not None else "")
    if isinstance(raw, date):
        return Coerced(raw.strftime(DATE_FORMAT))
    return None


def _coerce_int(raw) -> Optional[Coerced]:
    if _is_bool(raw):
        return None
    if isinstance(raw, (int, np.integer)):
        return Coerced(int(raw))
    if isinstance(raw, (float, np.floating)):
        if np.isnan(raw):
            return Coerced(float("nan"))
        if not np.isfinite(raw) or float(raw) != int(raw):
            return None
        return Coerced(int(raw))
    if isinstance(raw, str):
        text = raw.strip()
        if _INT_RE.match(text):
            return Coerced(int(text))
        try:
            number = float(text)
        except ValueError:
            return None
        return _coerce_int(number)
    return None


def _coerce_dec(raw) -> Optional[Coerced]:
    if _is_bool(raw):
        return None
    if isinstance(raw, (int, np.integer, float, np.floating)):
        number = float(raw)
    elif isinstance(raw, str):
        try:
            number = float(raw.strip())
        except ValueError:
            return None
    else:
        return None
    if np.isinf(number):
        return None
    return Coerced(number)


def _coerce_time(raw, value_type: ValueType) -> Optional[Coerced]:
    if isinstance(raw, (datetime, date, np.datetime64, pd.Timestamp)):
        stamp = _to_stamp(raw)
        if stamp is None:
            return Coerced("")
    elif isinstance(raw, str):
        text = raw.strip()
        if value_type is ValueType.DATETIME:
            match = _DATETIME_RE.match(text)
            if not match:
                return None
            day, clock, fraction = match.groups()
            text = f"{day}T{clock}{fraction or ''}"
        else:
            match = _DATE_RE.match(text)
            if not match:
                return None
            text = match.group(1)
        try:
            stamp = pd.Timestamp(text)
        except ValueError:
            return None
    else:
        return None

    if value_type is ValueType.DATE:
        stamp = stamp.normalize()
        return Coerced(stamp.strftime(DATE_FORMAT), stamp)
    return Coerced(stamp.strftime(DATETIME_FORMAT), stamp)


def _coerce_scalar(raw, value_type: ValueType) -> Optional[Coerced]:
    if value_type is ValueType.STR:
        return _coerce_str(raw)
    if value_type is ValueType.INT:
        return _coerce_int(raw)
    if value_type in NUMERIC_TYPES:
        return _coerce_dec(raw)
    return _coerce_time(raw, value_type)


def _coerce_vector(raw, value_type: ValueType) -> Optional[Coerced]:
    if isinstance(raw, np.ndarray):
        if raw.dtype.kind == "M":
            items = list(pd.DatetimeIndex(raw.ravel()))
        else:
            items = raw.ravel().tolist()
    else:
        items = list(raw)
    values = []
    stamps = []
    for item in items:
        if is_empty(item):
            result = Coerced("")
        else:
            result = _coerce_scalar(item, value_type)
        if result is None:
            return None
        values.append(result.value)
        stamps.append(result.stamp)

    if value_type is ValueType.INT:
        if any(v == "" or (isinstance(v, float) and np.isnan(v)) for v in values):
            return Coerced(np.array([np.nan if v == "" else v for v in values], dtype=float))
        return Coerced(np.array(values, dtype=np.int64))
    if value_type in NUMERIC_TYPES:
        return Coerced(np.array([np.nan if v == "" else v for v in values], dtype=float))
    if value_type in TIME_TYPES:
        return Coerced(np.array(values, dtype=str), pd.DatetimeIndex(stamps))
    return Coerced(np.array(values, dtype=str))


def coerce(raw, declared) -> Optional[Coerced]:
    """Coerce a raw value to the canonical form of its declared type.

    Parameters
    ----------
    raw : object
        Scalar or vector field value.
    declared : ValueType or str
        Declared type ('STR', 'INT', 'DEC', 'FLT', 'DATE' or 'DATETIME').

    Returns
    -------
    Coerced or None
        Canonical value (and timestamp for time types), or None when the
        value cannot be represented as the declared type.

    Examples
    --------
    >>> coerce("12", "INT")
    Coerced(value=12, stamp=None)
    >>> coerce("2024-03-01T12:00:00", "DATETIME").value
    '2024-03-01T12:00:00Z'
    >>> coerce("abc", "DEC") is None
    True
    """
    value_type = parse_value_type(declared)
    if value_type is None:
        logger.debug("Unknown value type %r", declared)
        return None
    if is_empty(raw):
        return Coerced("")
    if isinstance(raw, (list, tuple, np.ndarray)):
        return _coerce_vector(raw, value_type)
    return _coerce_scalar(raw, value_type)


def infer_type(value) -> ValueType:
    """Best-fitting declared type for a value whose type is not known.

    Vectors are typed by their first non-empty element.
    """
    if isinstance(value, np.ndarray):
        kind = value.dtype.kind
        if kind in "iu":
            return ValueType.INT
        if kind == "f":
            return ValueType.DEC
        if kind == "M":
            return ValueType.DATETIME
        value = value.ravel().tolist()
    if isinstance(value, (list, tuple)):
        for item in value:
            if not is_empty(item):
                return infer_type(item)
        return ValueType.STR

    if _is_bool(value) or isinstance(value, (int, np.integer)):
        return ValueType.INT
    if isinstance(value, (float, np.floating)):
        return ValueType.DEC
    if isinstance(value, (datetime, np.datetime64, pd.Timestamp)):
        return ValueType.DATETIME
    if isinstance(value, date):
        return ValueType.DATE
    if isinstance(value, str):
        text = value.strip()
        if _DATETIME_RE.match(text):
            return ValueType.DATETIME
        if re.match(r"^\d{4}-\d{2}-\d{2}$", text):
            return ValueType.DATE
        if _INT_RE.match(text):
            return ValueType.INT
        try:
            float(text)
        except ValueError:
            return ValueType.STR
        return ValueType.DEC
    return ValueType.STR


def as_text(value) -> str:
    """Scalar as stripped text; missing values give ''."""
    if is_missing(value):
        return ""
    result = _coerce_str(value)
    if result is None:
        return str(value).strip()
    return result.value.strip()


def to_timestamp(value) -> Optional[pd.Timestamp]:
    """Timestamp of a DATETIME or DATE value, or None if it is neither."""
    for value_type in (ValueType.DATETIME, ValueType.DATE):
        result = coerce(value, value_type)
        if result is not None and result.stamp is not None:
            return result.stamp
    return None
