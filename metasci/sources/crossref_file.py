"""Record source for Crossref JSON exports read from disk."""

import json
import logging
from pathlib import Path
from typing import Any, Iterator, Optional

from metasci.core.config import IngestConfig

logger = logging.getLogger(__name__)


def load_document(path: str | Path) -> Any:
    """Read and decode one JSON document. Decode errors propagate."""
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        document = json.load(f)
    logger.info("Loaded %s (%d bytes)", path, path.stat().st_size)
    return document


def locate_items(document: Any, config: IngestConfig | None = None) -> Optional[list]:
    """Return the top-level record array, or None if it cannot be found.

    A Crossref API envelope ({"status": ..., "message": {"items": [...]}})
    is unwrapped when the config allows it.
    """
    config = config or IngestConfig()
    key = config.items_key
    if not isinstance(document, dict):
        return None

    items = document.get(key)
    if items is None and config.unwrap_message:
        message = document.get("message")
        if isinstance(message, dict):
            items = message.get(key)

    if not isinstance(items, list):
        return None
    return items


def iter_records(items: list) -> Iterator[Any]:
    """Yield records one at a time, in document order."""
    for record in items:
        yield record
