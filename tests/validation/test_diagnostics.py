"""Test the diagnostic stream."""

import logging

import pytest

from physcurate.validation import Diagnostic, DiagnosticLog, Severity

pytestmark = pytest.mark.unit


def test_emit_records_and_logs(caplog):
    log = DiagnosticLog()

    with caplog.at_level(logging.DEBUG, logger="physcurate.validation.diagnostics"):
        entry = log.emit("Field name 'x' is not valid! REMOVED.", Severity.CORRECTED, "mission")

    assert entry == Diagnostic("Field name 'x' is not valid! REMOVED.", 2, "mission", False)
    assert list(log) == [entry]
    assert "mission: Field name 'x' is not valid! REMOVED." in caplog.text
    assert caplog.records[0].levelno == logging.INFO


def test_fatal_logs_as_warning(caplog):
    with caplog.at_level(logging.DEBUG, logger="physcurate.validation.diagnostics"):
        DiagnosticLog().emit("bad", Severity.FATAL)

    assert caplog.records[0].levelno == logging.WARNING


def test_has_fatal():
    log = DiagnosticLog()
    log.emit("fine", Severity.INFO)
    assert not log.has_fatal

    log.emit("broken", Severity.FATAL)
    assert log.has_fatal


def test_visible_filters_by_severity_and_mute():
    log = DiagnosticLog()
    log.emit("info", Severity.INFO)
    log.emit("corrected", Severity.CORRECTED)
    log.emit("muted corrected", Severity.CORRECTED, muted=True)
    log.emit("muted fatal", Severity.FATAL, muted=True)

    assert [d.text for d in log.visible()] == ["info", "corrected", "muted fatal"]
    assert [d.text for d in log.visible(Severity.CORRECTED)] == ["corrected", "muted fatal"]
    assert len(log) == 4


def test_extend_keeps_order():
    log = DiagnosticLog()
    log.emit("first", Severity.INFO)
    log.extend([Diagnostic("second", 2), Diagnostic("third", 3)])

    assert [d.text for d in log] == ["first", "second", "third"]


def test_to_frame():
    log = DiagnosticLog()
    log.emit("a", Severity.INFO, "mission")
    log.emit("b", Severity.FATAL, "mission.operation[0]")

    frame = log.to_frame()

    assert list(frame.columns) == ["text", "severity", "path", "muted"]
    assert frame["severity"].tolist() == [1, 4]


def test_diagnostic_str_without_path():
    assert str(Diagnostic("plain", 1)) == "plain"
