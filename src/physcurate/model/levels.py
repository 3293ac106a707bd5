"""Hierarchy levels and validation contexts."""

from enum import Enum


class Level(str, Enum):
    """The five nested levels of a mission record."""
    MISSION = "mission"
    OPERATION = "operation"
    INSTRUMENT = "instrument"
    PARAMETER = "parameter"
    READING = "reading"

    @property
    def property_key(self) -> str:
        """Key of this level's property list in the nested mapping form."""
        return f"{self.value}Property"


class Context(str, Enum):
    """Where the data is going (IMPORT) or coming from (EXPORT).

    IMPORT is data on its way into the database, where identifiers the
    database assigns are not yet present. EXPORT is data already held by
    the database.
    """
    IMPORT = "import"
    EXPORT = "export"
