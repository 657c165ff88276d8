"""Assemble articles from Crossref records, interning shared entities."""

import logging
from typing import Any, Optional

from pydantic import BaseModel, Field

from metasci.core.config import IngestConfig
from metasci.core.diagnostics import (
    Diagnostic,
    DiagnosticCode,
    DiagnosticLog,
    StructuralFailure,
)
from metasci.ingest.extractor import (
    Shape,
    coerce,
    extract,
    extract_dates,
    safe_repr,
)
from metasci.ingest.models import (
    Article,
    ArticleDraft,
    Author,
    Journal,
    Publisher,
    Subject,
)
from metasci.ingest.pools import IdCounter, InternPool
from metasci.ingest.publication_types import PublicationTypeTable
from metasci.sources.crossref_file import iter_records, locate_items

logger = logging.getLogger(__name__)

_PROGRESS_EVERY = 1000


# ── Result Model ─────────────────────────────────────────────────────


class IngestResult(BaseModel):
    """Everything one ingest run produced.

    Journals, subjects and publishers are listed in id order, so an id
    stored on an article is also its index here.
    """

    articles: list[Article]
    journals: list[Journal]
    subjects: list[Subject]
    publishers: list[Publisher]
    diagnostics: list[Diagnostic]
    quarantined: list[Any] = Field(default_factory=list)
    stats: dict

    def journals_for(self, article: Article) -> list[Journal]:
        return [self.journals[i] for i in article.journal_ids]

    def subjects_for(self, article: Article) -> list[Subject]:
        return [self.subjects[i] for i in article.subject_ids]


# ── Session State ────────────────────────────────────────────────────


class IngestSession:
    """Batch-scoped pools, counters and diagnostics. One per run."""

    def __init__(
        self,
        config: IngestConfig | None = None,
        publication_types: PublicationTypeTable | None = None,
    ):
        self.config = config or IngestConfig()
        self.publication_types = publication_types or PublicationTypeTable()
        self.journals: InternPool[Journal] = InternPool("journal")
        self.subjects: InternPool[Subject] = InternPool("subject")
        self.publishers: InternPool[Publisher] = InternPool("publisher")
        self.article_ids = IdCounter()
        self.author_ids = IdCounter()
        self.log = DiagnosticLog()
        self.articles: list[Article] = []
        self.quarantined: list[Any] = []
        self.records_seen = 0

    def ingest_record(self, record: Any) -> Optional[Article]:
        """Assemble one record; returns None if it was quarantined."""
        self.records_seen += 1
        article = RecordAssembler(self, record).assemble()
        if article is None:
            self.quarantined.append(record)
        else:
            self.articles.append(article)
        return article

    def result(self) -> IngestResult:
        stats = {
            "records": self.records_seen,
            "articles": len(self.articles),
            "rejected": len(self.quarantined),
            "journals": len(self.journals),
            "subjects": len(self.subjects),
            "publishers": len(self.publishers),
            "authors": self.author_ids.issued,
            "diagnostics": len(self.log),
        }
        return IngestResult(
            articles=list(self.articles),
            journals=self.journals.entries,
            subjects=self.subjects.entries,
            publishers=self.publishers.entries,
            diagnostics=self.log.entries,
            quarantined=list(self.quarantined),
            stats=stats,
        )


# ── Per-Record Assembly ──────────────────────────────────────────────


class RecordAssembler:
    """Pulls each known field out of one record into an ArticleDraft."""

    def __init__(self, session: IngestSession, record: Any):
        self.session = session
        self.record = record
        self.title = ""

    @property
    def context(self) -> str:
        return f"title: {self.title}"

    def assemble(self) -> Optional[Article]:
        title = self._read("title.0", Shape.STRING)
        if title:
            self.title = title
        doi = self._read("DOI", Shape.STRING)

        if not title or not doi:
            if self.session.config.missing_required == "reject":
                missing = [n for n, v in (("title", title), ("DOI", doi)) if not v]
                self.session.log.add(
                    DiagnosticCode.REJECTED_RECORD,
                    f"record rejected: missing {', '.join(missing)}",
                    self.context,
                )
                return None
            title, doi = title or "", doi or ""

        draft = ArticleDraft(title=title, doi=doi)

        publisher = self._read("publisher", Shape.STRING)
        if publisher:
            self.session.publishers.intern(
                publisher, lambda i: Publisher(id=i, title=publisher)
            )

        self._add_journals(draft, publisher or "")
        self._add_authors(draft)

        type_name = self._read("type", Shape.STRING)
        if type_name is not None:
            draft.type_code = self.session.publication_types.code_for(type_name)
            if draft.type_code is None:
                logger.debug("Unknown publication type %r (%s)", type_name, self.context)

        referenced_by = self._read("is-referenced-by-count", Shape.INTEGER)
        if referenced_by is not None:
            draft.referenced_by_count = referenced_by
        ref_count = self._read("references-count", Shape.INTEGER)
        if ref_count is not None:
            draft.reference_count = ref_count
        draft.volume = self._read("volume", Shape.STRING) or ""
        draft.issue = self._read("issue", Shape.STRING) or ""
        score = self._read("score", Shape.NUMBER)
        if score is not None:
            draft.score = score

        self._add_dates(draft)
        self._add_subjects(draft)
        self._add_trial_numbers(draft)
        self._add_references(draft)

        return draft.build(self.session.article_ids.next())

    # ── Fields ───────────────────────────────────────────────

    def _add_journals(self, draft: ArticleDraft, publisher: str) -> None:
        for title in self._read_strings("container-title"):
            journal, created = self.session.journals.intern(
                title,
                lambda i: Journal(id=i, title=title, publisher_title=publisher),
            )
            if created:
                logger.debug("New journal %d: %s", journal.id, title)
            draft.journal_ids.append(journal.id)

    def _add_authors(self, draft: ArticleDraft) -> None:
        authors = self._read("author", Shape.ARRAY) or []
        for i, raw in enumerate(authors):
            where = f"author.{i}"
            if not isinstance(raw, dict):
                self._malformed(where, raw)
                continue

            given = self._read("given", Shape.STRING, node=raw, label=where) or ""
            family = self._read("family", Shape.STRING, node=raw, label=where) or ""
            orcid = self._read("ORCID", Shape.STRING, node=raw, label=where)
            if orcid is not None:
                orcid = strip_orcid(orcid, self.session.config.orcid_prefixes)
            authenticated = self._read(
                "authenticated-orcid", Shape.BOOLEAN, node=raw, label=where
            )

            affiliations = []
            for j, aff in enumerate(
                self._read("affiliation", Shape.ARRAY, node=raw, label=where) or []
            ):
                name = _affiliation_name(aff)
                if name is None:
                    self._malformed(f"{where}.affiliation.{j}", aff)
                else:
                    affiliations.append(name)

            draft.authors.append(
                Author(
                    id=self.session.author_ids.next(),
                    given=given,
                    family=family,
                    orcid=orcid,
                    orcid_authenticated=bool(authenticated),
                    affiliations=affiliations,
                )
            )

    def _add_dates(self, draft: ArticleDraft) -> None:
        log = self.session.log
        issued = self._read("issued.date-parts", Shape.ARRAY)
        if issued is not None:
            draft.issued = extract_dates(issued, self.context, log)

        # Online publication wins over print when both are present.
        published = self._read("published-online.date-parts", Shape.ARRAY)
        if published is None:
            published = self._read("published-print.date-parts", Shape.ARRAY)
        if published is not None:
            draft.published = extract_dates(published, self.context, log)

    def _add_subjects(self, draft: ArticleDraft) -> None:
        for title in self._read_strings("subject"):
            subject, created = self.session.subjects.intern(
                title, lambda i: Subject(id=i, title=title)
            )
            if created:
                logger.debug("New subject %d: %s", subject.id, title)
            draft.subject_ids.append(subject.id)

    def _add_trial_numbers(self, draft: ArticleDraft) -> None:
        numbers = self._read("clinical-trial-number", Shape.ARRAY) or []
        for i, raw in enumerate(numbers):
            if isinstance(raw, str):
                draft.clinical_trial_numbers.append(raw)
                continue
            number = extract(raw, "clinical-trial-number", Shape.STRING)
            if number.ok:
                draft.clinical_trial_numbers.append(number.value)
            else:
                self._malformed(f"clinical-trial-number.{i}", raw)

    def _add_references(self, draft: ArticleDraft) -> None:
        references = self._read("reference", Shape.ARRAY) or []
        for i, raw in enumerate(references):
            if isinstance(raw, str):
                draft.references.append(raw)
                continue
            if not isinstance(raw, dict):
                self._malformed(f"reference.{i}", raw)
                continue
            # Most cited works carry no DOI; only a wrongly-typed one is logged.
            doi = self._read("DOI", Shape.STRING, node=raw, label=f"reference.{i}")
            if doi is not None:
                draft.references.append(doi)

    # ── Extraction Helpers ───────────────────────────────────

    def _read(
        self,
        path: str,
        shape: Shape,
        node: Any = None,
        label: str | None = None,
    ) -> Any:
        """Extract a field; log shape mismatches, stay silent on absence."""
        source = self.record if node is None else node
        result = extract(source, path, shape)
        if result.status == "mismatch":
            where = f"{label}.{path}" if label else path
            self.session.log.add(result.code, f"{where}: {result.message}", self.context)
        return result.value if result.ok else None

    def _read_strings(self, path: str) -> list[str]:
        """Read an array of strings, skipping and logging non-string elements."""
        values: list[str] = []
        for i, raw in enumerate(self._read(path, Shape.ARRAY) or []):
            element = coerce(raw, Shape.STRING)
            if element.ok:
                values.append(element.value)
            else:
                self._malformed(f"{path}.{i}", raw)
        return values

    def _malformed(self, where: str, value: Any) -> None:
        self.session.log.add(
            DiagnosticCode.MALFORMED_LIST_ELEMENT,
            f"{where}: malformed element {safe_repr(value)}",
            self.context,
        )


# ── Public API ───────────────────────────────────────────────────────


def ingest_document(
    document: Any,
    config: IngestConfig | None = None,
    publication_types: PublicationTypeTable | None = None,
) -> IngestResult:
    """Run one sequential ingest pass over a decoded Crossref document.

    Raises StructuralFailure (with the diagnostic log attached) when the
    record array cannot be located; no articles are produced in that case.
    """
    session = IngestSession(config, publication_types)
    items = locate_items(document, session.config)
    if items is None:
        key = session.config.items_key
        session.log.add(
            DiagnosticCode.MISSING_ITEMS,
            f"[json.exception.out_of_range.403] key '{key}' not found",
            f"{key} missing",
        )
        raise StructuralFailure(f"Top-level '{key}' array not found", session.log)

    total = len(items)
    logger.info("Ingesting %d records", total)
    for record in iter_records(items):
        session.ingest_record(record)
        if session.records_seen % _PROGRESS_EVERY == 0:
            logger.info("Processed %d/%d records", session.records_seen, total)

    result = session.result()
    logger.info(
        "Ingest: %d records → %d articles (%d rejected), %d journals, %d subjects, "
        "%d diagnostics",
        result.stats["records"],
        result.stats["articles"],
        result.stats["rejected"],
        result.stats["journals"],
        result.stats["subjects"],
        result.stats["diagnostics"],
    )
    return result


# ── Helpers ──────────────────────────────────────────────────────────


def strip_orcid(value: str, prefixes: list[str]) -> str:
    """Remove exactly one leading ORCID URL prefix, if any matches."""
    for prefix in prefixes:
        if value.startswith(prefix):
            return value[len(prefix):]
    return value


def _affiliation_name(value: Any) -> Optional[str]:
    # Crossref affiliations are {"name": ...} objects; plain strings also occur.
    if isinstance(value, str):
        return value
    name = extract(value, "name", Shape.STRING)
    return name.value if name.ok else None
