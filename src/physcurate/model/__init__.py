"""Mission record model.

Exports
-------
Mission, Operation, Instrument, Parameter, Reading : class
    Level records
PropertyEntry : class
    (code, value) extension entry
Level, Context : enum
    Hierarchy level and validation context
SchemaProvider, StaticSchemaProvider, LevelFields : class
    Field legality and value types per level and context
structural_equal : function
    NaN-aware deep equality with ignore sets
strip_mission : function
    Remove empty optional content
"""

from physcurate.model.levels import Level, Context
from physcurate.model.records import (
    Mission,
    Operation,
    Instrument,
    Parameter,
    Reading,
    PropertyEntry,
)
from physcurate.model.fields import LevelFields, SchemaProvider, StaticSchemaProvider
from physcurate.model.compare import structural_equal, values_equal
from physcurate.model.strip import strip_mission

__all__ = [
    "Level",
    "Context",
    "Mission",
    "Operation",
    "Instrument",
    "Parameter",
    "Reading",
    "PropertyEntry",
    "LevelFields",
    "SchemaProvider",
    "StaticSchemaProvider",
    "structural_equal",
    "values_equal",
    "strip_mission",
]
