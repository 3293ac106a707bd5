"""Graded diagnostics emitted while checking a mission.

Every defect found by the validator becomes a `Diagnostic` with a severity
on the PhysChem scale. Diagnostics are collected, never raised, and every
one is mirrored to the module logger. Callers decide what to display with
`DiagnosticLog.visible()`.
"""

import logging
from enum import IntEnum
from typing import NamedTuple

import pandas as pd

logger = logging.getLogger(__name__)


class Severity(IntEnum):
    INFO = 1           # success and trivial messages
    CORRECTED = 2      # something was changed to fix the record
    UNVERIFIABLE = 3   # unable to check
    FATAL = 4          # error in the record


_LOG_LEVELS = {
    Severity.INFO: logging.DEBUG,
    Severity.CORRECTED: logging.INFO,
    Severity.UNVERIFIABLE: logging.WARNING,
    Severity.FATAL: logging.WARNING,
}


class Diagnostic(NamedTuple):
    """One message about one place in the record.

    `muted` entries belong to operations outside the displayed sample and
    are shown only when they are at least UNVERIFIABLE.
    """
    text: str
    severity: int
    path: str = ""
    muted: bool = False

    def __str__(self) -> str:
        if self.path:
            return f"{self.path}: {self.text}"
        return self.text


class DiagnosticLog:
    """Ordered collection of diagnostics for one call."""

    def __init__(self):
        self.entries = []

    def emit(self, text: str, severity: int, path: str = "", muted: bool = False) -> Diagnostic:
        entry = Diagnostic(text, int(severity), path, muted)
        self.entries.append(entry)
        level = logging.DEBUG if muted and severity < Severity.UNVERIFIABLE else _LOG_LEVELS[Severity(severity)]
        logger.log(level, "%s", entry)
        return entry

    def extend(self, entries) -> None:
        """Append diagnostics already emitted elsewhere, keeping their order."""
        self.entries.extend(entries)

    @property
    def has_fatal(self) -> bool:
        return any(entry.severity >= Severity.FATAL for entry in self.entries)

    def visible(self, min_severity: int = Severity.INFO) -> list:
        """Diagnostics at or above `min_severity` that are not muted away."""
        return [
            entry for entry in self.entries
            if entry.severity >= min_severity
            and (not entry.muted or entry.severity >= Severity.UNVERIFIABLE)
        ]

    def to_frame(self) -> pd.DataFrame:
        """Diagnostics as a table with columns text, severity, path, muted."""
        return pd.DataFrame(self.entries, columns=list(Diagnostic._fields))

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)
