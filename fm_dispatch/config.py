"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``FM_DISPATCH_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The dispatch engine, the snapshot providers and the CLI all receive an
``AppConfig`` instance — never raw dicts or ad-hoc env lookups.

Scoring weights and decision thresholds are not configurable here; they are
constants in ``fm_dispatch.dispatch.scorer`` and ``fm_dispatch.dispatch.ranker``.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class DatabaseConfig(BaseModel):
    """SQLite database connection settings."""

    model_config = ConfigDict(frozen=True)

    db_path: str = "data/db/fm_dispatch.db"
    wal_mode: bool = True
    busy_timeout_ms: int = 5000


class DispatchConfig(BaseModel):
    """Recommendation engine parameters."""

    model_config = ConfigDict(frozen=True)

    top_n: int = 5                    # candidates returned per pool
    feedback_window_days: int = 90    # trailing window for past performance
    lookup_concurrency: int = 10      # parallel per-technician history lookups
    output_dir: str = "data/outputs/dispatch"

    @field_validator("top_n", "feedback_window_days", "lookup_concurrency")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"value must be >= 1, got {v}.")
        return v


class CacheConfig(BaseModel):
    """Time-boxed recommendation response cache.

    Read by ``CachedDispatchEngine.from_config()`` for callers that embed the
    engine in a long-lived process.  The CLI runs one recommendation per
    process and does not use it.
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    ttl_seconds: int = 3600

    @field_validator("ttl_seconds")
    @classmethod
    def validate_ttl(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"ttl_seconds must be >= 0, got {v}.")
        return v


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/fm_dispatch.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth.

    Constructed by ``load_config()`` which merges TOML + .env.
    """

    model_config = ConfigDict(frozen=True)

    database: DatabaseConfig = DatabaseConfig()
    dispatch: DispatchConfig = DispatchConfig()
    cache: CacheConfig = CacheConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config explicitly."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    # Also merge local.toml if present (gitignored local overrides)
    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    # 3. Apply FM_DISPATCH_* environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply FM_DISPATCH_* env vars to the raw config dict.

    Supported overrides:
      FM_DISPATCH_DB_PATH    → raw["database"]["db_path"]
      FM_DISPATCH_LOG_LEVEL  → raw["logging"]["level"]
      FM_DISPATCH_CACHE_TTL  → raw["cache"]["ttl_seconds"]
      FM_DISPATCH_DEBUG      → raw["debug"]
    """
    if db_path := os.environ.get("FM_DISPATCH_DB_PATH"):
        raw.setdefault("database", {})["db_path"] = db_path

    if log_level := os.environ.get("FM_DISPATCH_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if cache_ttl := os.environ.get("FM_DISPATCH_CACHE_TTL"):
        raw.setdefault("cache", {})["ttl_seconds"] = int(cache_ttl)

    if debug := os.environ.get("FM_DISPATCH_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    # Flatten top-level keys that may be nested under [project]
    project = raw.pop("project", {})

    return AppConfig(
        database=DatabaseConfig(**raw.get("database", {})),
        dispatch=DispatchConfig(**raw.get("dispatch", {})),
        cache=CacheConfig(**raw.get("cache", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
