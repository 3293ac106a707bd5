"""Reference resolvers: code tables, platform registry and property types.

The validator talks to reference data only through `ReferenceResolver`.
Network-backed implementations map transport failures to
`LookupStatus.CONNECTIVITY_ERROR` instead of raising; the validator treats
that as a severe but ordinary diagnostic.

`TableReferenceResolver` serves the same interface from in-memory pandas
tables, e.g. a snapshot of the PhysChem reference API.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import pandas as pd

from physcurate.model.levels import Level
from physcurate.reference.status import LookupResult, LookupStatus
from physcurate.valuetype import is_empty, parse_value_type

logger = logging.getLogger(__name__)


class PropertyTypeTable:
    """Valid property codes of one level and the value type of each."""

    def __init__(self, types: Optional[dict] = None):
        self._types = {}
        for code, value_type in (types or {}).items():
            self._types[str(code).strip()] = value_type

    @classmethod
    def from_frame(cls, frame: pd.DataFrame, code_column: str = "code",
                   type_column: str = "valueType") -> "PropertyTypeTable":
        """Build from a reference table, ignoring '-' in codes."""
        codes = frame[code_column].astype(str).str.strip().str.replace("-", "", regex=False)
        types = frame[type_column].astype(str).str.strip()
        return cls(dict(zip(codes, types)))

    def value_type_for(self, code: str) -> Optional[str]:
        """Declared value type of `code`, or None if the code is not valid."""
        value_type = self._types.get(str(code).strip())
        if value_type is None or parse_value_type(value_type) is None:
            return None
        return value_type

    @property
    def codes(self) -> list:
        return list(self._types)

    def __contains__(self, code) -> bool:
        return self.value_type_for(code) is not None

    def __len__(self) -> int:
        return len(self._types)


class ReferenceResolver(ABC):
    """Interface to code tables and the platform registry."""

    @abstractmethod
    def lookup(self, table: str, code, column: Optional[str] = None) -> LookupResult:
        """Resolve `code` in `table`, returning the value of `column`."""

    @abstractmethod
    def lookup_platform_attribute(self, platform, attribute: str,
                                  as_of: Optional[pd.Timestamp] = None) -> LookupResult:
        """Value of a platform attribute valid at `as_of`."""

    @abstractmethod
    def property_types(self, level: Level) -> PropertyTypeTable:
        """Property-type table of `level`."""


class TableReferenceResolver(ReferenceResolver):
    """Resolver over in-memory tables.

    Parameters
    ----------
    tables : dict of str to DataFrame
        Reference tables keyed by name. Codes are matched against the
        'code' column, or the first column when there is none.
    platforms : DataFrame, optional
        Platform registry with columns platform, attribute, value,
        valid_from and valid_to (open-ended periods as NaT).
    property_types : dict of Level to PropertyTypeTable, optional
        Property-type tables. Levels not given fall back to the
        '<level>PropertyType' table in `tables`, or an empty table.
    """

    def __init__(self, tables: Optional[dict] = None, platforms: Optional[pd.DataFrame] = None,
                 property_types: Optional[dict] = None):
        self.tables = dict(tables or {})
        self.platforms = platforms
        self._property_types = {Level(k): v for k, v in (property_types or {}).items()}

    def lookup(self, table: str, code, column: Optional[str] = None) -> LookupResult:
        column = column or "name"
        if table not in self.tables:
            return LookupResult("", f"unknown reference table '{table}'", LookupStatus.INVALID_CALL)
        if is_empty(code):
            return LookupResult("", f"empty code for table '{table}'", LookupStatus.INVALID_CALL)

        frame = self.tables[table]
        if column not in frame.columns:
            return LookupResult("", f"table '{table}' has no column '{column}'", LookupStatus.INVALID_CALL)

        key = "code" if "code" in frame.columns else frame.columns[0]
        matches = frame[frame[key].astype(str).str.strip() == str(code).strip()]
        if matches.empty:
            return LookupResult("", f"code '{code}' not found in '{table}'", LookupStatus.NO_MATCH)

        value = matches.iloc[0][column]
        if pd.isna(value):
            value = ""
        logger.debug("Resolved %s:%s -> %r", table, code, value)
        return LookupResult(str(value), "", LookupStatus.SUCCESS)

    def lookup_platform_attribute(self, platform, attribute: str,
                                  as_of: Optional[pd.Timestamp] = None) -> LookupResult:
        if self.platforms is None:
            return LookupResult("", "no platform registry", LookupStatus.INVALID_CALL)
        if is_empty(platform):
            return LookupResult("", "empty platform code", LookupStatus.INVALID_CALL)

        frame = self.platforms
        rows = frame[(frame["platform"].astype(str).str.strip() == str(platform).strip())
                     & (frame["attribute"] == attribute)]
        if as_of is not None and not rows.empty:
            valid_from = pd.to_datetime(rows["valid_from"])
            valid_to = pd.to_datetime(rows["valid_to"])
            rows = rows[(valid_from.isna() | (valid_from <= as_of))
                        & (valid_to.isna() | (valid_to >= as_of))]
        if rows.empty:
            return LookupResult(
                "", f"no '{attribute}' for platform '{platform}'", LookupStatus.NO_MATCH
            )

        rows = rows.assign(_from=pd.to_datetime(rows["valid_from"])).sort_values(
            "_from", na_position="first"
        )
        return LookupResult(str(rows.iloc[-1]["value"]), "", LookupStatus.SUCCESS)

    def property_types(self, level: Level) -> PropertyTypeTable:
        level = Level(level)
        if level not in self._property_types:
            name = level.property_key + "Type"
            if name in self.tables:
                self._property_types[level] = PropertyTypeTable.from_frame(self.tables[name])
            else:
                self._property_types[level] = PropertyTypeTable()
        return self._property_types[level]
