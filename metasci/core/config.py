"""Ingest configuration: YAML loader, Pydantic model, and config hashing."""

import hashlib
import json
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_ORCID_PREFIXES = ["http://orcid.org/", "https://orcid.org/"]


# ── Ingest Config ────────────────────────────────────────────────────


class IngestConfig(BaseModel):
    """Tunable policy for one ingest run."""

    missing_required: Literal["reject", "keep"] = Field(
        default="reject",
        description="Drop records lacking title/DOI, or keep them with empty values",
    )
    items_key: str = Field(default="items", min_length=1)
    unwrap_message: bool = Field(
        default=True,
        description="Accept Crossref API envelopes of the form {'message': {'items': [...]}}",
    )
    orcid_prefixes: list[str] = Field(default_factory=lambda: list(DEFAULT_ORCID_PREFIXES))
    log_file: str = "json_parser.log"

    @field_validator("orcid_prefixes")
    @classmethod
    def at_least_one_prefix(cls, v: list[str]) -> list[str]:
        if not v or any(not p for p in v):
            raise ValueError("orcid_prefixes must contain at least one non-empty prefix")
        return v

    def config_hash(self) -> str:
        """SHA-256 of the config (canonical JSON), for run provenance."""
        blob = json.dumps(self.model_dump(), sort_keys=True, default=str).encode()
        return hashlib.sha256(blob).hexdigest()


# ── Loader ───────────────────────────────────────────────────────────


def load_ingest_config(path: str | Path | None = None) -> IngestConfig:
    """Load a YAML ingest config from disk; defaults when `path` is None."""
    if path is None:
        return IngestConfig()
    path = Path(path)
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    return IngestConfig.model_validate(raw)
