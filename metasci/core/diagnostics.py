"""Structured diagnostics collected while ingesting a batch."""

import logging
from enum import IntEnum
from pathlib import Path

from pydantic import BaseModel

logger = logging.getLogger(__name__)


# ── Codes ────────────────────────────────────────────────────────────


class DiagnosticCode(IntEnum):
    """Numeric diagnostic codes. 3xx/4xx follow JSON type/range error ids."""

    SHAPE_MISMATCH = 302
    MALFORMED_LIST_ELEMENT = 401
    MISSING_ITEMS = 403
    REJECTED_RECORD = 900


class Diagnostic(BaseModel):
    """A single diagnostic entry."""

    code: int
    message: str
    context: str = ""

    def format_line(self) -> str:
        """`message|context`, with `\\`, `|` and line breaks escaped so each entry stays one line."""
        return f"{_escape(self.message)}|{_escape(self.context)}"


# ── Errors ───────────────────────────────────────────────────────────


class StructuralFailure(ValueError):
    """The input document cannot be processed at all (e.g. no `items`)."""

    def __init__(self, message: str, diagnostics: "DiagnosticLog"):
        super().__init__(message)
        self.diagnostics = diagnostics


# ── Sink ─────────────────────────────────────────────────────────────


class DiagnosticLog:
    """Append-only diagnostic sink, mirrored to the `logging` module."""

    def __init__(self) -> None:
        self._entries: list[Diagnostic] = []

    def add(self, code: int, message: str, context: str = "") -> Diagnostic:
        entry = Diagnostic(code=int(code), message=message, context=context)
        self._entries.append(entry)
        if code == DiagnosticCode.MISSING_ITEMS:
            logger.error("[%d] %s (%s)", entry.code, message, context)
        else:
            logger.warning("[%d] %s (%s)", entry.code, message, context)
        return entry

    @property
    def entries(self) -> list[Diagnostic]:
        return list(self._entries)

    def by_code(self, code: int) -> list[Diagnostic]:
        return [e for e in self._entries if e.code == code]

    def counts(self) -> dict[int, int]:
        """Number of entries per code."""
        out: dict[int, int] = {}
        for e in self._entries:
            out[e.code] = out.get(e.code, 0) + 1
        return out

    def write(self, path: str | Path) -> Path:
        return write_diagnostics(self._entries, path)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)


# ── Writer ───────────────────────────────────────────────────────────


def write_diagnostics(entries: list[Diagnostic], path: str | Path) -> Path:
    """Write one `message|context` line per entry."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        for e in entries:
            f.write(e.format_line() + "\n")
    logger.info("Wrote %d diagnostics to %s", len(entries), path)
    return path


def _escape(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace("|", "\\|")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
