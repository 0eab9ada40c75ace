"""semindex configuration loader.

Priority (high → low):
  1. CLI flags           (handled at call site, not in this module)
  2. Environment variables  (SEMINDEX_EMBEDDING_BASE_URL, SEMINDEX_EMBEDDING_MODEL,
     SEMINDEX_DB_PATH)
  3. Per-project semindex.yaml
  4. Global ~/.semindex/config.yaml  (model defaults only; no API keys)
  5. Hardcoded defaults

The loaded SemindexConfig is handed to each component at construction;
nothing below the CLI reads the environment.
All YAML reads use yaml.safe_load(), never yaml.load().
"""

from __future__ import annotations

import os
import re
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".semindex"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
PROJECT_CONFIG_NAME: str = "semindex.yaml"

# Matches api_key, api-key, api_secret, *_token, token, *_secret, secret,
# password, passwd, credential(s). Does NOT match max_chunk_size, top_k, ...
_API_KEY_RE: re.Pattern[str] = re.compile(
    r"api[_\-]?(?:key|secret)"
    r"|_token$"
    r"|^token$"
    r"|_secret$"
    r"|^secret$"
    r"|passw(?:ord|d)"
    r"|credential",
    re.IGNORECASE,
)

_KNOWN_SECTIONS: frozenset[str] = frozenset(
    ["embedding", "store", "retrieval", "chunking", "ingest"]
)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a config file contains an invalid or forbidden value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class EmbeddingCfg:
    """Embedding provider configuration (semindex.yaml: embedding:)."""

    model: str = "ollama/nomic-embed-text"
    base_url: str = "http://localhost:11434"
    timeout: float = 30.0
    num_retries: int = 0


@dataclass
class StoreCfg:
    """Vector store location (semindex.yaml: store:)."""

    path: str = "embeddings.sqlite"


@dataclass
class RetrievalCfg:
    """Retrieval defaults (semindex.yaml: retrieval:)."""

    top_k: int = 3
    threshold: float = 0.5


@dataclass
class ChunkingCfg:
    """Chunker settings (semindex.yaml: chunking:)."""

    max_chunk_size: int = 2000


@dataclass
class IngestCfg:
    """Watch-folder layout for ingestion (semindex.yaml: ingest:).

    Attributes:
        inbox: Directory scanned for new documents.
        processed: Destination for documents indexed successfully.
        failed: Destination for documents that could not be embedded.
        patterns: Glob patterns selecting files in the inbox.
    """

    inbox: str = "documents/new"
    processed: str = "documents/processed"
    failed: str = "documents/failed"
    patterns: list[str] = field(default_factory=lambda: ["*.md"])


@dataclass
class SemindexConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    embedding: EmbeddingCfg = field(default_factory=EmbeddingCfg)
    store: StoreCfg = field(default_factory=StoreCfg)
    retrieval: RetrievalCfg = field(default_factory=RetrievalCfg)
    chunking: ChunkingCfg = field(default_factory=ChunkingCfg)
    ingest: IngestCfg = field(default_factory=IngestCfg)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _check_no_api_keys(data: dict[str, Any], source: Path) -> None:
    """Raise ConfigError if *data* contains any API-key-like key names."""

    def _scan(obj: Any, path: str) -> None:
        if isinstance(obj, dict):
            for k, v in obj.items():
                full = f"{path}.{k}" if path else k
                if _API_KEY_RE.search(str(k)):
                    raise ConfigError(
                        f"Global config '{source}' contains a forbidden key '{full}'.\n"
                        f"  API keys must be set via environment variables, not config files.\n"
                        f"  Remove '{full}' from {source.name} and use:\n"
                        f"    export {str(k).upper().replace('-', '_')}=<value>"
                    )
                _scan(v, full)

    _scan(data, "")


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}' — ignored.",
                UserWarning,
                stacklevel=4,
            )


def validate(cfg: SemindexConfig) -> None:
    """Raise ConfigError unless the externally supplied locations are non-empty."""
    if not cfg.embedding.base_url.strip():
        raise ConfigError("embedding.base_url must not be empty.")
    if not cfg.store.path.strip():
        raise ConfigError("store.path must not be empty.")
    if cfg.chunking.max_chunk_size < 1:
        raise ConfigError(
            f"chunking.max_chunk_size must be >= 1, got {cfg.chunking.max_chunk_size}"
        )


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _cfg_from_dict(data: dict[str, Any]) -> SemindexConfig:
    """Build a *SemindexConfig* from a merged raw YAML dict."""
    cfg = SemindexConfig()

    if "embedding" in data:
        e = data["embedding"] or {}
        cfg.embedding = EmbeddingCfg(
            model=str(e.get("model", cfg.embedding.model)),
            base_url=str(e.get("base_url", cfg.embedding.base_url)),
            timeout=float(e.get("timeout", cfg.embedding.timeout)),
            num_retries=int(e.get("num_retries", cfg.embedding.num_retries)),
        )

    if "store" in data:
        s = data["store"] or {}
        cfg.store = StoreCfg(path=str(s.get("path", cfg.store.path)))

    if "retrieval" in data:
        r = data["retrieval"] or {}
        cfg.retrieval = RetrievalCfg(
            top_k=int(r.get("top_k", cfg.retrieval.top_k)),
            threshold=float(r.get("threshold", cfg.retrieval.threshold)),
        )

    if "chunking" in data:
        c = data["chunking"] or {}
        cfg.chunking = ChunkingCfg(
            max_chunk_size=int(c.get("max_chunk_size", cfg.chunking.max_chunk_size)),
        )

    if "ingest" in data:
        i = data["ingest"] or {}
        cfg.ingest = IngestCfg(
            inbox=str(i.get("inbox", cfg.ingest.inbox)),
            processed=str(i.get("processed", cfg.ingest.processed)),
            failed=str(i.get("failed", cfg.ingest.failed)),
            patterns=[str(p) for p in i.get("patterns", cfg.ingest.patterns)],
        )

    return cfg


def _apply_env_overrides(cfg: SemindexConfig) -> SemindexConfig:
    """Apply SEMINDEX_* environment variable overrides (layer 2)."""
    if base_url := os.environ.get("SEMINDEX_EMBEDDING_BASE_URL"):
        cfg.embedding.base_url = base_url
    if model := os.environ.get("SEMINDEX_EMBEDDING_MODEL"):
        cfg.embedding.model = model
    if db_path := os.environ.get("SEMINDEX_DB_PATH"):
        cfg.store.path = db_path
    return cfg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> SemindexConfig:
    """Load and return a merged, validated *SemindexConfig*.

    Applies layers in order: global → per-project → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *semindex.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Raises:
        ConfigError: If the global config contains API-key-like fields, or
            if the embedding base URL or store path ends up empty.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    if global_path.exists():
        raw_global = yaml.safe_load(global_path.read_text(encoding="utf-8")) or {}
        _check_no_api_keys(raw_global, global_path)
        _warn_unknown_keys(raw_global, global_path)
        merged = _deep_merge(merged, raw_global)

    project_cfg_path = search_dir / PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        raw_project = yaml.safe_load(project_cfg_path.read_text(encoding="utf-8")) or {}
        _warn_unknown_keys(raw_project, project_cfg_path)
        merged = _deep_merge(merged, raw_project)

    cfg = _apply_env_overrides(_cfg_from_dict(merged))
    validate(cfg)
    return cfg


def write_project_config(project_dir: Path, cfg: SemindexConfig | None = None) -> Path:
    """Write *cfg* (defaults if omitted) to ``<project_dir>/semindex.yaml``.

    An existing file is left untouched.

    Returns:
        Path to the project config file.
    """
    cfg = cfg or SemindexConfig()
    target = project_dir / PROJECT_CONFIG_NAME
    if target.exists():
        return target

    data = {
        "embedding": {
            "model": cfg.embedding.model,
            "base_url": cfg.embedding.base_url,
            "timeout": cfg.embedding.timeout,
        },
        "store": {"path": cfg.store.path},
        "retrieval": {"top_k": cfg.retrieval.top_k, "threshold": cfg.retrieval.threshold},
        "chunking": {"max_chunk_size": cfg.chunking.max_chunk_size},
        "ingest": {
            "inbox": cfg.ingest.inbox,
            "processed": cfg.ingest.processed,
            "failed": cfg.ingest.failed,
            "patterns": list(cfg.ingest.patterns),
        },
    }
    target.write_text(
        "# semindex project configuration\n"
        + yaml.safe_dump(data, sort_keys=False),
        encoding="utf-8",
    )
    return target
