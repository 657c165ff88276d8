"""Absent-tolerant field extraction from decoded JSON records."""

import math
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel

from metasci.core.diagnostics import DiagnosticCode, DiagnosticLog
from metasci.ingest.models import Date


# ── Shapes & Outcomes ────────────────────────────────────────────────


class Shape(str, Enum):
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


class Extraction(BaseModel):
    """Outcome of reading one field: present, mismatch or absent."""

    status: Literal["present", "mismatch", "absent"]
    value: Any = None
    code: Optional[int] = None
    message: Optional[str] = None

    @classmethod
    def present(cls, value: Any) -> "Extraction":
        return cls(status="present", value=value)

    @classmethod
    def mismatch(cls, code: int, message: str) -> "Extraction":
        return cls(status="mismatch", code=code, message=message)

    @classmethod
    def absent(cls) -> "Extraction":
        return cls(status="absent")

    @property
    def ok(self) -> bool:
        return self.status == "present"


# ── Public API ───────────────────────────────────────────────────────


def extract(record: Any, path: str | tuple, shape: Shape) -> Extraction:
    """Walk `path` through `record` and coerce the leaf to `shape`.

    Never raises for data problems. A missing key, an out-of-range index
    or a JSON null anywhere along the path is reported as absent.
    """
    node = record
    for segment in _split_path(path):
        if isinstance(node, dict):
            if segment not in node:
                return Extraction.absent()
            node = node[segment]
        elif isinstance(node, list):
            index = _as_index(segment)
            if index is None:
                return _type_error(f"cannot use key '{segment}' with array")
            if not -len(node) <= index < len(node):
                return Extraction.absent()
            node = node[index]
        elif node is None:
            return Extraction.absent()
        else:
            return _type_error(
                f"cannot use operator[] with {_json_type(node)} at '{segment}'"
            )

    if node is None:
        return Extraction.absent()
    return coerce(node, shape)


def coerce(value: Any, shape: Shape) -> Extraction:
    """Check one decoded JSON value against `shape`."""
    if shape is Shape.STRING and isinstance(value, str):
        return Extraction.present(value)
    if shape is Shape.BOOLEAN and isinstance(value, bool):
        return Extraction.present(value)
    if shape is Shape.ARRAY and isinstance(value, list):
        return Extraction.present(value)
    if shape is Shape.OBJECT and isinstance(value, dict):
        return Extraction.present(value)
    if not isinstance(value, bool):
        if shape is Shape.NUMBER and isinstance(value, (int, float)):
            try:
                number = float(value)
            except OverflowError:
                return _type_error(f"number {safe_repr(value)} does not fit a double")
            if not math.isfinite(number):
                return _type_error(f"number {safe_repr(value)} is not finite")
            return Extraction.present(number)
        if shape is Shape.INTEGER:
            if isinstance(value, int):
                return Extraction.present(value)
            if isinstance(value, float) and value.is_integer():
                return Extraction.present(int(value))
    return _type_error(f"type must be {shape.value}, but is {_json_type(value)}")


def extract_dates(
    date_parts: list,
    context: str,
    log: DiagnosticLog,
) -> list[Date]:
    """Convert a Crossref `date-parts` array into Date triples.

    Elements that are not [year, month, day] integer arrays within range
    are logged and skipped; the rest of the list is kept.
    """
    dates: list[Date] = []
    for i, parts in enumerate(date_parts):
        date = _to_date(parts)
        if date is None:
            log.add(
                DiagnosticCode.MALFORMED_LIST_ELEMENT,
                f"malformed date-parts element {i}: {safe_repr(parts)}",
                context,
            )
            continue
        dates.append(date)
    return dates


# ── Helpers ──────────────────────────────────────────────────────────


def _split_path(path: str | tuple) -> tuple:
    if isinstance(path, tuple):
        return path
    return tuple(path.split("."))


def _as_index(segment: Any) -> Optional[int]:
    if isinstance(segment, int) and not isinstance(segment, bool):
        return segment
    if isinstance(segment, str) and segment.lstrip("-").isdigit():
        return int(segment)
    return None


def _to_date(parts: Any) -> Optional[Date]:
    if not isinstance(parts, list) or len(parts) < 3:
        return None
    values = []
    for p in parts[:3]:
        e = coerce(p, Shape.INTEGER)
        if not e.ok:
            return None
        values.append(e.value)
    year, month, day = values
    if not (0 <= year <= 0xFFFF and 0 <= month <= 0xFF and 0 <= day <= 0xFF):
        return None
    return Date(year=year, month=month, day=day)


def _type_error(detail: str) -> Extraction:
    return Extraction.mismatch(
        DiagnosticCode.SHAPE_MISMATCH,
        f"[json.exception.type_error.302] {detail}",
    )


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def safe_repr(value: Any) -> str:
    """repr() for diagnostics; huge ints cannot always be rendered (int_max_str_digits)."""
    if isinstance(value, int) and value.bit_length() > 64:
        return f"<{value.bit_length()}-bit integer>"
    try:
        return repr(value)
    except ValueError:
        return f"<unprintable {_json_type(value)}>"
