"""Tests for domain models and publication types."""

import pytest
from pydantic import ValidationError

from metasci.ingest.models import Article, ArticleDraft, Author, Date
from metasci.ingest.publication_types import PUBLICATION_TYPE_NAMES, PublicationTypeTable


# ── Date ─────────────────────────────────────────────────────────────


def test_date_bounds():
    Date(year=65535, month=255, day=255)
    with pytest.raises(ValidationError):
        Date(year=65536, month=1, day=1)
    with pytest.raises(ValidationError):
        Date(year=2020, month=256, day=1)
    with pytest.raises(ValidationError):
        Date(year=2020, month=1, day=-1)


# ── Article / Draft ──────────────────────────────────────────────────


def test_draft_defaults():
    article = ArticleDraft(title="T", doi="10.1/x").build(0)
    assert article.title == "T"
    assert article.doi == "10.1/x"
    assert article.type_code is None
    assert article.score == 0.0
    assert article.reference_count == 0
    assert article.referenced_by_count == 0
    assert article.volume == ""
    assert article.published == []
    assert article.journal_ids == []


def test_draft_builds_once():
    draft = ArticleDraft(title="T", doi="10.1/x")
    draft.build(0)
    with pytest.raises(ValueError):
        draft.build(1)


def test_article_is_frozen():
    article = ArticleDraft(title="T", doi="10.1/x").build(0)
    with pytest.raises(ValidationError):
        article.title = "Other"


def test_article_whole_value_replacement():
    article = ArticleDraft(title="T", doi="10.1/x").build(0)
    replaced = article.model_copy(update={"volume": "9"})
    assert replaced.volume == "9"
    assert article.volume == ""


def test_draft_carries_authors_and_dates():
    draft = ArticleDraft(title="T", doi="10.1/x")
    draft.authors.append(Author(id=0, given="A", family="B", affiliations=["X"]))
    draft.issued.append(Date(year=2020, month=1, day=1))
    article = draft.build(3)
    assert isinstance(article, Article)
    assert article.id == 3
    assert article.authors[0].affiliations == ["X"]
    assert article.issued[0].year == 2020


def test_equal_authors_stay_independent():
    a = Author(id=0, given="Ada", family="Lovelace")
    b = Author(id=1, given="Ada", family="Lovelace")
    assert a != b


# ── Publication Types ────────────────────────────────────────────────


def test_table_has_29_types():
    table = PublicationTypeTable()
    assert len(table) == 29
    assert len(PUBLICATION_TYPE_NAMES) == 29


def test_lookup_known_type():
    table = PublicationTypeTable()
    t = table.lookup("journal-article")
    assert t.name == "journal-article"
    assert table.by_code(t.code) == t
    assert table.code_for("book-chapter") == PUBLICATION_TYPE_NAMES.index("book-chapter")


def test_unknown_type_is_unresolved():
    table = PublicationTypeTable()
    assert table.lookup("journal_article") is None
    assert table.code_for("podcast") is None
    assert "podcast" not in table


def test_duplicate_type_names_rejected():
    with pytest.raises(ValueError):
        PublicationTypeTable(("a", "b", "a"))
