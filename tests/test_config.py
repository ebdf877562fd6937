"""Tests for TOML configuration loading."""

import tomllib
from pathlib import Path

import pytest

from pkmindex.config import CONFIG_DIR, default_config_path, load_config


def write_config(tmp_path, text):
    path = tmp_path / "config.toml"
    path.write_text(text)
    return path


def test_missing_file_gives_defaults(tmp_path):
    config = load_config(tmp_path / "absent.toml")

    assert config.db_path == CONFIG_DIR / "vectors.db"
    assert config.embeddings.provider == "sentence-transformers"
    assert config.embeddings.dimensions == 384
    assert config.indexing.reindex is False
    assert config.indexing.delay == 0.0
    assert config.indexing.max_content_length == 0


def test_full_config(tmp_path):
    path = write_config(tmp_path, """
[vector_db]
db_path = "~/data/pkm.db"

[embeddings]
provider = "ollama"
model = "nomic-embed-text"
api_url = "http://gpu-box:11434"
dimensions = 768

[indexing]
delay = 0.5
max_content_length = 8000
""")
    config = load_config(path)

    assert config.db_path == Path.home() / "data" / "pkm.db"
    assert config.embeddings.provider == "ollama"
    assert config.embeddings.model == "nomic-embed-text"
    assert config.embeddings.api_url == "http://gpu-box:11434"
    assert config.embeddings.dimensions == 768
    assert config.indexing.delay == 0.5
    assert config.indexing.max_content_length == 8000


def test_partial_sections_keep_defaults(tmp_path):
    config = load_config(write_config(tmp_path, '[embeddings]\nmodel = "other-model"\n'))

    assert config.embeddings.model == "other-model"
    assert config.embeddings.provider == "sentence-transformers"
    assert config.embeddings.dimensions == 384


def test_unknown_provider_rejected(tmp_path):
    with pytest.raises(ValueError, match="Unknown embedding provider"):
        load_config(write_config(tmp_path, '[embeddings]\nprovider = "cohere"\n'))


def test_non_positive_dimensions_rejected(tmp_path):
    with pytest.raises(ValueError, match="dimensions"):
        load_config(write_config(tmp_path, "[embeddings]\ndimensions = 0\n"))


def test_invalid_toml(tmp_path):
    with pytest.raises(tomllib.TOMLDecodeError):
        load_config(write_config(tmp_path, "[embeddings\n"))


def test_env_var_overrides_default_path(tmp_path, monkeypatch):
    path = write_config(tmp_path, "[embeddings]\ndimensions = 16\n")
    monkeypatch.setenv("PKMINDEX_CONFIG", str(path))

    assert default_config_path() == path
    assert load_config().embeddings.dimensions == 16


def test_default_path_without_env(monkeypatch):
    monkeypatch.delenv("PKMINDEX_CONFIG", raising=False)
    assert default_config_path() == CONFIG_DIR / "config.toml"


def test_api_key_from_file(tmp_path, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    config = load_config(write_config(tmp_path, """
[embeddings]
provider = "openai"
model = "text-embedding-3-small"
api_key = "sk-file"
dimensions = 1536
"""))

    assert config.embeddings.provider == "openai"
    assert config.embeddings.api_key == "sk-file"
    assert config.embeddings.api_url == ""


def test_api_key_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    config = load_config(write_config(tmp_path, '[embeddings]\nprovider = "openai"\n'))

    assert config.embeddings.api_key == "sk-env"
