"""Removal of empty optional content before submission."""

import logging

from physcurate.model.fields import SchemaProvider
from physcurate.model.levels import Context, Level
from physcurate.model.records import Mission, Record
from physcurate.valuetype import is_empty

logger = logging.getLogger(__name__)

# Mandatory fields generated by importers, removable in hard mode when empty
HARD_REMOVABLE = {
    Level.MISSION: ("missionTypeName", "platformName"),
    Level.OPERATION: ("operationNumber", "operationPlatform", "timeStartQuality", "positionStartQuality"),
    Level.INSTRUMENT: ("instrumentNumber",),
    Level.PARAMETER: ("parameterCode", "ordinal", "units", "processingLevel"),
    Level.READING: ("sampleNumber", "quality"),
}


def strip_mission(mission: Mission, schema: SchemaProvider, hard: bool = False,
                  context: Context = Context.EXPORT) -> Mission:
    """Copy of `mission` without empty optional fields and empty properties.

    Optional and additional fields whose value is empty are removed at every
    level, and property entries with an empty value are dropped. With
    `hard`, empty importer-generated mandatory fields are removed too.
    Mandatory fields are otherwise kept even when empty.
    """
    stripped = mission.model_copy(deep=True)
    removed = 0
    for _, record in stripped.walk():
        removed += _strip_record(record, schema, hard, context)
    logger.debug("Stripped %d empty fields and properties", removed)
    return stripped


def _strip_record(record: Record, schema: SchemaProvider, hard: bool, context: Context) -> int:
    fields = schema.fields_for(record.level, context)
    removable = set(fields.optional) | set(fields.additional)
    if hard:
        removable.update(HARD_REMOVABLE[record.level])

    names = [name for name in record.fields if name in removable and is_empty(record.fields[name])]
    for name in names:
        del record.fields[name]

    dropped = 0
    if record.has_properties:
        kept = [entry for entry in record.properties if not is_empty(entry.value)]
        dropped = len(record.properties) - len(kept)
        record.properties = kept
    return len(names) + dropped
