"""Domain models for ingested Crossref metadata."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr


# ── Shared Reference Entities ────────────────────────────────────────


class Publisher(BaseModel):
    """A publisher, interned by exact title."""

    id: int = Field(ge=0)
    title: str


class Journal(BaseModel):
    """A journal (Crossref container), interned by exact title."""

    id: int = Field(ge=0)
    title: str
    publisher_title: str = ""


class Subject(BaseModel):
    """A topical tag discovered while ingesting records."""

    id: int = Field(ge=0)
    title: str


class PublicationType(BaseModel):
    """One entry of the fixed Crossref work-type table."""

    model_config = ConfigDict(frozen=True)

    code: int = Field(ge=0)
    name: str


# ── Value Types ──────────────────────────────────────────────────────


class Date(BaseModel):
    """Crossref date-parts triple, not a calendar date."""

    model_config = ConfigDict(frozen=True)

    year: int = Field(ge=0, le=0xFFFF)
    month: int = Field(ge=0, le=0xFF)
    day: int = Field(ge=0, le=0xFF)


class Author(BaseModel):
    """An article author. Never deduplicated: equal names are not equal people."""

    id: int = Field(ge=0)
    given: str = ""
    family: str = ""
    orcid: Optional[str] = None
    orcid_authenticated: bool = False
    affiliations: list[str] = Field(default_factory=list)


# ── Article ──────────────────────────────────────────────────────────


class Article(BaseModel):
    """Assembled article. Journals and subjects are held as pool ids."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(ge=0)
    title: str
    doi: str
    type_code: Optional[int] = None
    published: list[Date] = Field(default_factory=list)
    issued: list[Date] = Field(default_factory=list)
    score: float = 0.0
    volume: str = ""
    issue: str = ""
    clinical_trial_numbers: list[str] = Field(default_factory=list)
    reference_count: int = 0
    referenced_by_count: int = 0
    references: list[str] = Field(default_factory=list)
    subject_ids: list[int] = Field(default_factory=list)
    authors: list[Author] = Field(default_factory=list)
    journal_ids: list[int] = Field(default_factory=list)


class ArticleDraft(BaseModel):
    """Mutable staging area filled field by field, consumed once by build()."""

    title: str
    doi: str
    type_code: Optional[int] = None
    published: list[Date] = Field(default_factory=list)
    issued: list[Date] = Field(default_factory=list)
    score: float = 0.0
    volume: str = ""
    issue: str = ""
    clinical_trial_numbers: list[str] = Field(default_factory=list)
    reference_count: int = 0
    referenced_by_count: int = 0
    references: list[str] = Field(default_factory=list)
    subject_ids: list[int] = Field(default_factory=list)
    authors: list[Author] = Field(default_factory=list)
    journal_ids: list[int] = Field(default_factory=list)

    _built: bool = PrivateAttr(default=False)

    def build(self, article_id: int) -> Article:
        """Freeze the draft into an Article. A draft can only be built once."""
        if self._built:
            raise ValueError(f"Draft for {self.doi!r} was already built")
        self._built = True
        return Article(id=article_id, **self.model_dump())
