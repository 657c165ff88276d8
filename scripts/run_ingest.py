#!/usr/bin/env python3
"""Ingest a Crossref JSON export and report what was built."""

import argparse
import json
import logging
import sys
import time
from pathlib import Path

# Ensure project root is on sys.path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from metasci.core.config import load_ingest_config
from metasci.core.diagnostics import StructuralFailure, write_diagnostics
from metasci.ingest.assembler import ingest_document
from metasci.sources.crossref_file import load_document

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("ingest")


# ── Run ──────────────────────────────────────────────────────────────


def run_ingest(input_path: str, config_path: str | None = None, log_file: str | None = None) -> int:
    """Load, ingest, write diagnostics. Returns a process exit code."""
    t_start = time.time()

    config = load_ingest_config(config_path)
    logger.info("Config hash: %s", config.config_hash()[:12])
    log_path = Path(log_file or config.log_file)
    if not _prepare_log(log_path):
        return 1

    try:
        document = load_document(input_path)
    except OSError as exc:
        logger.error("Couldn't open Crossref JSON file %s: %s", input_path, exc)
        return 1
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.error("Invalid JSON in %s: %s", input_path, exc)
        return 1
    t_loaded = time.time()
    logger.info("Loaded in %.2fs", t_loaded - t_start)

    try:
        result = ingest_document(document, config)
    except StructuralFailure as exc:
        logger.error("Aborting: %s", exc)
        _write_log(exc.diagnostics.entries, log_path)
        return 1

    t_ingested = time.time()
    logger.info("Ingested in %.2fs", t_ingested - t_loaded)

    result.stats["elapsed"] = round(t_ingested - t_start, 3)
    logger.info("Ingest stats: %s", json.dumps(result.stats, indent=2))
    return 0 if _write_log(result.diagnostics, log_path) else 1


# ── Diagnostics File ─────────────────────────────────────────────────


def _prepare_log(path: Path) -> bool:
    """Create (truncate) the diagnostics file up front so an unwritable path fails fast."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8"):
            pass
    except OSError as exc:
        logger.error("Couldn't open/create diagnostics file %s: %s", path, exc)
        return False
    return True


def _write_log(diagnostics, path: Path) -> bool:
    try:
        write_diagnostics(diagnostics, path)
    except OSError as exc:
        logger.error("Couldn't write diagnostics file %s: %s", path, exc)
        return False
    return True


# ── CLI ──────────────────────────────────────────────────────────────


def main():
    parser = argparse.ArgumentParser(description="Ingest a Crossref works export")
    parser.add_argument("input", help="Path to Crossref JSON file")
    parser.add_argument("--config", default=None, help="Path to ingest config YAML")
    parser.add_argument(
        "--log-file",
        default=None,
        help="Where to write diagnostics (default: config log_file)",
    )
    args = parser.parse_args()

    sys.exit(run_ingest(args.input, args.config, args.log_file))


if __name__ == "__main__":
    main()
