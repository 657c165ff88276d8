"""Tests for the ingest config loader and hashing."""

from pathlib import Path

import pytest
import yaml

from metasci.core.config import IngestConfig, load_ingest_config

CONFIG_PATH = Path(__file__).resolve().parent.parent / "ingest_configs" / "crossref_default.yaml"


# ── Loading & Validation ─────────────────────────────────────────────


def test_load_default_config():
    config = load_ingest_config(CONFIG_PATH)
    assert isinstance(config, IngestConfig)
    assert config.missing_required == "reject"
    assert config.items_key == "items"
    assert "https://orcid.org/" in config.orcid_prefixes


def test_none_path_gives_defaults():
    assert load_ingest_config(None) == IngestConfig()


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_ingest_config(path) == IngestConfig()


def test_keep_policy(tmp_path):
    path = tmp_path / "keep.yaml"
    path.write_text(yaml.safe_dump({"missing_required": "keep"}))
    assert load_ingest_config(path).missing_required == "keep"


def test_invalid_policy_rejected(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text(yaml.safe_dump({"missing_required": "drop"}))
    with pytest.raises(Exception):
        load_ingest_config(path)


def test_empty_orcid_prefixes_rejected():
    with pytest.raises(ValueError):
        IngestConfig(orcid_prefixes=[])


# ── Hashing ──────────────────────────────────────────────────────────


def test_hash_deterministic():
    assert load_ingest_config(CONFIG_PATH).config_hash() == load_ingest_config(CONFIG_PATH).config_hash()


def test_hash_changes_on_modification():
    base = IngestConfig()
    assert base.config_hash() != IngestConfig(missing_required="keep").config_hash()
