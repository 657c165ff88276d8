"""Tests for the diagnostic sink."""

import logging

from metasci.core.diagnostics import (
    Diagnostic,
    DiagnosticCode,
    DiagnosticLog,
    write_diagnostics,
)


def test_add_and_count():
    log = DiagnosticLog()
    log.add(DiagnosticCode.SHAPE_MISMATCH, "bad volume", "title: T")
    log.add(DiagnosticCode.SHAPE_MISMATCH, "bad issue", "title: T")
    log.add(DiagnosticCode.MALFORMED_LIST_ELEMENT, "bad date", "title: T")
    assert len(log) == 3
    assert log.counts() == {302: 2, 401: 1}
    assert [d.message for d in log.by_code(401)] == ["bad date"]


def test_entries_are_mirrored_to_logging(caplog):
    log = DiagnosticLog()
    with caplog.at_level(logging.WARNING, logger="metasci.core.diagnostics"):
        log.add(DiagnosticCode.SHAPE_MISMATCH, "bad volume", "title: T")
        log.add(DiagnosticCode.MISSING_ITEMS, "no items", "items missing")
    levels = [r.levelno for r in caplog.records]
    assert levels == [logging.WARNING, logging.ERROR]


def test_format_line():
    d = Diagnostic(code=302, message="type must be string", context="title: T")
    assert d.format_line() == "type must be string|title: T"


def test_write_log_file(tmp_path):
    log = DiagnosticLog()
    log.add(DiagnosticCode.SHAPE_MISMATCH, "m1", "title: A")
    log.add(DiagnosticCode.REJECTED_RECORD, "m2", "title: ")
    path = log.write(tmp_path / "logs" / "json_parser.log")
    assert path.read_text().splitlines() == ["m1|title: A", "m2|title: "]


def test_write_empty(tmp_path):
    path = write_diagnostics([], tmp_path / "empty.log")
    assert path.read_text() == ""


def test_format_line_escapes_separators():
    d = Diagnostic(code=302, message="a|b\nc", context="title: x\\y|z\r")
    assert d.format_line() == "a\\|b\\nc|title: x\\\\y\\|z\\r"


def test_multiline_entries_stay_one_line_each(tmp_path):
    log = DiagnosticLog()
    log.add(DiagnosticCode.SHAPE_MISMATCH, "line one\nline two", "title: A|B")
    path = log.write(tmp_path / "json_parser.log")
    assert path.read_text().splitlines() == ["line one\\nline two|title: A\\|B"]
