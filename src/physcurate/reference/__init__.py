"""Reference data access.

Exports
-------
ReferenceResolver : class
    Interface the validator resolves codes through
TableReferenceResolver : class
    In-memory implementation over pandas tables
PropertyTypeTable : class
    Valid property codes and their value types
LookupStatus, LookupResult : class
    Lookup outcome
"""

from physcurate.reference.status import LookupStatus, LookupResult
from physcurate.reference.resolver import (
    ReferenceResolver,
    TableReferenceResolver,
    PropertyTypeTable,
)

__all__ = [
    "LookupStatus",
    "LookupResult",
    "ReferenceResolver",
    "TableReferenceResolver",
    "PropertyTypeTable",
]
