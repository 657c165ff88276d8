"""Fixed table of Crossref work types."""

from typing import Optional

from metasci.ingest.models import PublicationType

# Crossref `type` values; code is the position in this tuple.
PUBLICATION_TYPE_NAMES = (
    "book-section",
    "monograph",
    "report",
    "peer-review",
    "book-track",
    "journal-article",
    "book-part",
    "other",
    "book",
    "journal-volume",
    "book-set",
    "reference-entry",
    "proceedings-article",
    "journal",
    "component",
    "book-chapter",
    "proceedings-series",
    "report-series",
    "proceedings",
    "standard",
    "reference-book",
    "posted-content",
    "journal-issue",
    "dissertation",
    "grant",
    "dataset",
    "book-series",
    "edited-book",
    "standard-series",
)


class PublicationTypeTable:
    """Read-only name → type lookup over a closed set of work types."""

    def __init__(self, names: tuple[str, ...] = PUBLICATION_TYPE_NAMES):
        if len(set(names)) != len(names):
            raise ValueError("Publication type names must be unique")
        self._types = tuple(
            PublicationType(code=i, name=name) for i, name in enumerate(names)
        )
        self._by_name = {t.name: t for t in self._types}

    def lookup(self, name: str) -> Optional[PublicationType]:
        """Exact-name lookup; None for names outside the table."""
        return self._by_name.get(name)

    def code_for(self, name: str) -> Optional[int]:
        t = self.lookup(name)
        return t.code if t else None

    def by_code(self, code: int) -> PublicationType:
        return self._types[code]

    def __len__(self) -> int:
        return len(self._types)

    def __iter__(self):
        return iter(self._types)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name
