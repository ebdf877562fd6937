"""
Configuration loading for pkmindex.

Settings live in a TOML file (``~/.config/pkmindex/config.toml`` unless
``PKMINDEX_CONFIG`` or an explicit path says otherwise). A missing file
means all defaults.
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

CONFIG_DIR = Path.home() / ".config" / "pkmindex"
CONFIG_FILENAME = "config.toml"
CONFIG_ENV_VAR = "PKMINDEX_CONFIG"

SUPPORTED_PROVIDERS = ("sentence-transformers", "ollama", "openai")

API_KEY_ENV_VAR = "OPENAI_API_KEY"


@dataclass
class EmbeddingsConfig:
    """Embedding provider settings."""
    provider: str = "sentence-transformers"
    model: str = "all-MiniLM-L6-v2"
    api_url: str = ""  # empty = the provider's default endpoint
    api_key: str = ""
    dimensions: int = 384


@dataclass
class IndexOptions:
    """Per-run indexing options."""
    reindex: bool = False
    delay: float = 0.0  # seconds between embedding calls
    max_content_length: int = 0  # 0 = no limit


@dataclass
class Config:
    """Complete pkmindex configuration."""
    db_path: Path = field(default_factory=lambda: CONFIG_DIR / "vectors.db")
    embeddings: EmbeddingsConfig = field(default_factory=EmbeddingsConfig)
    indexing: IndexOptions = field(default_factory=IndexOptions)


def default_config_path() -> Path:
    """Resolve the config file path, respecting PKMINDEX_CONFIG."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return CONFIG_DIR / CONFIG_FILENAME


def _parse(data: dict[str, Any]) -> Config:
    config = Config()

    vector_db = data.get("vector_db", {})
    if vector_db.get("db_path"):
        config.db_path = Path(vector_db["db_path"]).expanduser()

    emb = data.get("embeddings", {})
    config.embeddings = EmbeddingsConfig(
        provider=emb.get("provider", config.embeddings.provider),
        model=emb.get("model", config.embeddings.model),
        api_url=emb.get("api_url", config.embeddings.api_url),
        api_key=emb.get("api_key") or os.environ.get(API_KEY_ENV_VAR, ""),
        dimensions=int(emb.get("dimensions", config.embeddings.dimensions)),
    )

    idx = data.get("indexing", {})
    config.indexing = IndexOptions(
        reindex=bool(idx.get("reindex", False)),
        delay=float(idx.get("delay", 0.0)),
        max_content_length=int(idx.get("max_content_length", 0)),
    )

    if config.embeddings.provider not in SUPPORTED_PROVIDERS:
        raise ValueError(
            f"Unknown embedding provider: {config.embeddings.provider!r}. "
            f"Available: {list(SUPPORTED_PROVIDERS)}"
        )
    if config.embeddings.dimensions <= 0:
        raise ValueError(
            f"embeddings.dimensions must be positive, got {config.embeddings.dimensions}"
        )
    return config


def load_config(path: Optional[Path] = None) -> Config:
    """
    Load configuration from a TOML file.

    Args:
        path: Explicit config file; defaults to default_config_path()

    Returns:
        Parsed Config (defaults if the file does not exist)

    Raises:
        ValueError: If the config names an unknown provider or bad dimensions
        tomllib.TOMLDecodeError: If the file is not valid TOML
    """
    config_path = Path(path) if path else default_config_path()

    if not config_path.exists():
        return _parse({})

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    return _parse(data)
