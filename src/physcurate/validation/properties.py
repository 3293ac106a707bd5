"""Validation and editing of property lists.

Property lists are open-ended (code, value) extensions at the mission,
operation, instrument and parameter levels. A code must exist in the
level's property-type table, which also gives the value type.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from physcurate.contracts import require
from physcurate.model.records import PropertyEntry, Record
from physcurate.reference.resolver import PropertyTypeTable
from physcurate.validation.diagnostics import DiagnosticLog, Severity
from physcurate.valuetype import coerce, is_empty

logger = logging.getLogger(__name__)


def _value_types(codes: list, table: PropertyTypeTable, max_workers: int) -> list:
    """Value type per code, in the order of `codes`."""
    if max_workers > 1 and len(codes) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(table.value_type_for, codes))
    return [table.value_type_for(code) for code in codes]


def validate_properties(entries: list, table: PropertyTypeTable, domains: Optional[dict] = None,
                        path: str = "", max_workers: int = 1, muted: bool = False):
    """Check a property list against its property-type table.

    Parameters
    ----------
    entries : list of PropertyEntry
        Property list in its original order.
    table : PropertyTypeTable
        Valid codes and value types for the level.
    domains : dict of str to list of str, optional
        Codes whose non-empty values are restricted to an enumerated set.
    path : str
        Location of the list, used in messages.
    max_workers : int
        Threads used to look up value types. Results are applied in entry
        order regardless.
    muted : bool
        Mark the produced diagnostics as muted.

    Returns
    -------
    entries : list of PropertyEntry
        Entries with valid codes, values coerced or blanked.
    diagnostics : list of Diagnostic
        One CORRECTED diagnostic per dropped entry or blanked value.
    """
    domains = domains or {}
    log = DiagnosticLog()
    value_types = _value_types([entry.code for entry in entries], table, max_workers)

    kept = []
    for entry, value_type in zip(entries, value_types):
        where = f"{path}[{entry.code}]"
        if value_type is None:
            log.emit(f"Property code '{entry.code}' is not valid! REMOVED.",
                     Severity.CORRECTED, where, muted)
            continue

        result = coerce(entry.value, value_type)
        if result is None:
            log.emit(f"Value '{entry.value}' is not of type {value_type}! Value removed.",
                     Severity.CORRECTED, where, muted)
            kept.append(PropertyEntry(code=entry.code, value=""))
            continue

        value = result.value
        allowed = domains.get(entry.code)
        if allowed is not None and not is_empty(value) and str(value) not in allowed:
            log.emit(f"Value '{value}' is not one of {allowed}! Value removed.",
                     Severity.CORRECTED, where, muted)
            value = ""
        kept.append(PropertyEntry(code=entry.code, value=value))

    return kept, log.entries


def set_property(record: Record, code: str, value, table: PropertyTypeTable) -> bool:
    """Set the value of property `code` on `record`, adding the entry if needed.

    The value is coerced to the type the property-type table declares for
    `code`. Invalid codes and values are refused with a warning and leave
    the record untouched.

    Returns
    -------
    bool
        True if the property was set.
    """
    require(record.has_properties, f"{record.level.value} records have no property list")

    value_type = table.value_type_for(code)
    if value_type is None:
        logger.warning("Code '%s' for %s is invalid! No property or value has been set.",
                       code, record.level.property_key)
        return False

    result = coerce(value, value_type)
    if result is None:
        logger.warning("Value %r is not of type %s! Property '%s' not set.", value, value_type, code)
        return False

    for entry in record.properties:
        if entry.code == code:
            entry.value = result.value
            return True
    record.properties.append(PropertyEntry(code=code, value=result.value))
    return True
