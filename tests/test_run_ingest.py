"""Tests for the run_ingest.py runner script (exit codes and log file)."""

import importlib.util
import json
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
FIXTURE = ROOT / "tests" / "fixtures" / "crossref_sample.json"


@pytest.fixture(scope="module")
def run_ingest():
    spec = importlib.util.spec_from_file_location("run_ingest", ROOT / "scripts" / "run_ingest.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module.run_ingest


# ── Success ──────────────────────────────────────────────────────────


def test_success_writes_log(run_ingest, tmp_path):
    log_path = tmp_path / "out" / "json_parser.log"
    assert run_ingest(str(FIXTURE), log_file=str(log_path)) == 0
    lines = log_path.read_text().splitlines()
    assert len(lines) == 4
    assert all("|title: " in line for line in lines)


# ── Failures ─────────────────────────────────────────────────────────


def test_missing_input_file(run_ingest, tmp_path):
    assert run_ingest(str(tmp_path / "nope.json"), log_file=str(tmp_path / "x.log")) == 1


def test_invalid_json(run_ingest, tmp_path):
    src = tmp_path / "broken.json"
    src.write_text("{not json")
    assert run_ingest(str(src), log_file=str(tmp_path / "x.log")) == 1


def test_missing_items_writes_structural_diagnostic(run_ingest, tmp_path):
    src = tmp_path / "empty.json"
    src.write_text(json.dumps({"status": "ok"}))
    log_path = tmp_path / "x.log"
    assert run_ingest(str(src), log_file=str(log_path)) == 1
    assert log_path.read_text().splitlines() == [
        "[json.exception.out_of_range.403] key 'items' not found|items missing"
    ]


def test_unwritable_log_path_fails_before_ingest(run_ingest, tmp_path):
    log_dir = tmp_path / "a_directory"
    log_dir.mkdir()
    assert run_ingest(str(FIXTURE), log_file=str(log_dir)) == 1
