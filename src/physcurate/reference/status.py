"""Reference lookup outcomes."""

from enum import IntEnum
from typing import Any, NamedTuple


class LookupStatus(IntEnum):
    """Outcome of a reference lookup, ordered by severity."""
    SUCCESS = 1
    NO_MATCH = 2
    CONNECTIVITY_ERROR = 3
    INVALID_CALL = 4


class LookupResult(NamedTuple):
    value: Any
    message: str
    status: LookupStatus

    @property
    def ok(self) -> bool:
        return self.status is LookupStatus.SUCCESS
