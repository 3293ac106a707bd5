"""Typed records for the mission hierarchy.

A mission is Mission -> Operation -> Instrument -> Parameter -> Reading.
Each record keeps its scalar fields in an insertion-ordered mapping, an
ordered list of property entries (all levels but Reading) and an ordered
list of children. Sibling order is significant: later operations are the
more recent ones.

Records convert to and from the nested mapping used by the PhysChem API,
where children sit under the singular level name ('operation',
'instrument', 'parameter', 'reading') and properties under
'<level>Property'.
"""

from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field

from physcurate.model.levels import Level


class PropertyEntry(BaseModel):
    """One (code, value) extension field."""

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    code: str
    value: Any = ""


class Record(BaseModel):
    """Common behaviour of the five level records."""

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    level: ClassVar[Level]
    child_attr: ClassVar[Optional[str]] = None
    child_type: ClassVar[Optional[type]] = None

    fields: dict[str, Any] = Field(default_factory=dict)

    def __getitem__(self, name: str) -> Any:
        return self.fields[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self.fields[name] = value

    def __contains__(self, name: str) -> bool:
        return name in self.fields

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    @property
    def children(self) -> list:
        if self.child_attr is None:
            return []
        return getattr(self, self.child_attr)

    @property
    def has_properties(self) -> bool:
        return self.level is not Level.READING

    @classmethod
    def child_key(cls) -> Optional[str]:
        if cls.child_type is None:
            return None
        return cls.child_type.level.value

    @classmethod
    def from_dict(cls, data: dict) -> "Record":
        """Build a record tree from its nested mapping form."""
        fields = {}
        kwargs = {}
        property_key = cls.level.property_key
        child_key = cls.child_key()
        for key, value in data.items():
            if key == property_key and cls.level is not Level.READING:
                kwargs["properties"] = [
                    entry if isinstance(entry, PropertyEntry) else PropertyEntry(**entry)
                    for entry in _as_list(value)
                ]
            elif child_key is not None and key == child_key:
                kwargs[cls.child_attr] = [
                    child if isinstance(child, cls.child_type) else cls.child_type.from_dict(child)
                    for child in _as_list(value)
                ]
            else:
                fields[key] = value
        return cls(fields=fields, **kwargs)

    def to_dict(self) -> dict:
        """Nested mapping form, fields first, then properties, then children."""
        data = dict(self.fields)
        if self.has_properties:
            data[self.level.property_key] = [
                {"code": entry.code, "value": entry.value} for entry in self.properties
            ]
        if self.child_attr is not None:
            data[self.child_key()] = [child.to_dict() for child in self.children]
        return data


def _as_list(value) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


class Reading(Record):
    """One sample, or after merging all samples as parallel vectors."""

    level: ClassVar[Level] = Level.READING


class Parameter(Record):
    level: ClassVar[Level] = Level.PARAMETER
    child_attr: ClassVar[Optional[str]] = "readings"
    child_type: ClassVar[Optional[type]] = Reading

    properties: list[PropertyEntry] = Field(default_factory=list)
    readings: list[Reading] = Field(default_factory=list)


class Instrument(Record):
    level: ClassVar[Level] = Level.INSTRUMENT
    child_attr: ClassVar[Optional[str]] = "parameters"
    child_type: ClassVar[Optional[type]] = Parameter

    properties: list[PropertyEntry] = Field(default_factory=list)
    parameters: list[Parameter] = Field(default_factory=list)


class Operation(Record):
    level: ClassVar[Level] = Level.OPERATION
    child_attr: ClassVar[Optional[str]] = "instruments"
    child_type: ClassVar[Optional[type]] = Instrument

    properties: list[PropertyEntry] = Field(default_factory=list)
    instruments: list[Instrument] = Field(default_factory=list)


class Mission(Record):
    """Top-level aggregate for one cruise or deployment."""

    level: ClassVar[Level] = Level.MISSION
    child_attr: ClassVar[Optional[str]] = "operations"
    child_type: ClassVar[Optional[type]] = Operation

    properties: list[PropertyEntry] = Field(default_factory=list)
    operations: list[Operation] = Field(default_factory=list)

    def walk(self):
        """Yield (path, record) for every record below and including the mission.

        Paths are like 'mission.operation[0].instrument[1]'.
        """
        stack = [("mission", self)]
        while stack:
            path, record = stack.pop()
            yield path, record
            key = record.child_key()
            for index in reversed(range(len(record.children))):
                stack.append((f"{path}.{key}[{index}]", record.children[index]))
