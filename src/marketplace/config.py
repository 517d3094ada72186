"""Centralized, typed configuration using pydantic-settings.

Provides a single ``Settings`` class backed by ``.env`` file and environment
variables, a cached ``get_settings()`` accessor, and a ``validate_settings()``
startup gate that is strict in production mode.

This module has no imports from the rest of the ``marketplace`` package so it
can be loaded first by anything.
"""

from __future__ import annotations

import sys
from functools import lru_cache
from pathlib import Path
from typing import Literal

import structlog
from pydantic import Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger()


class Settings(BaseSettings):
    """Application settings loaded from environment variables and ``.env`` file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- General ---------------------------------------------------------------
    production: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # -- Storage ---------------------------------------------------------------
    database_path: Path = Path("data/marketplace.db")
    audit_db_path: Path = Path("data/audit.db")
    reconcile_on_startup: bool = False
    max_write_attempts: int = Field(default=3, ge=1)

    # -- Observability (secrets) -----------------------------------------------
    sentry_dsn: SecretStr = SecretStr("")

    # -- Lifecycle -------------------------------------------------------------
    publish_on_create: bool = True
    enforce_max_influencers: bool = True

    # -- Matching --------------------------------------------------------------
    campaign_page_size: int = Field(default=50, ge=1)
    influencer_match_limit: int = Field(default=20, ge=1)
    scoring_weights_path: Path = Path("config/scoring_weights.yaml")
    scoring_strategy: Literal["weighted", "reputation"] = "weighted"


@lru_cache
def get_settings() -> Settings:
    """Return a cached ``Settings`` instance.

    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    try:
        return Settings()
    except ValidationError as exc:
        # Only the structured errors list; the exception text may carry secrets.
        logger.error("settings_validation_failed", errors=exc.errors())
        sys.exit(1)


def _directory_problem(path: Path, label: str) -> str | None:
    if str(path) == ":memory:":
        return None
    parent = path.expanduser().parent
    if parent.exists() and not parent.is_dir():
        return f"{label} parent is not a directory: {parent}"
    return None


def validate_settings(settings: Settings) -> None:
    """Check the loaded settings at startup.

    In **production** mode (``settings.production is True``), the application
    exits with a clear error block if any problem is found.  In
    **development** mode each problem is logged as a warning and startup
    continues.

    Args:
        settings: The loaded application settings.
    """
    errors: list[str] = []

    for path, label in (
        (settings.database_path, "DATABASE_PATH"),
        (settings.audit_db_path, "AUDIT_DB_PATH"),
    ):
        problem = _directory_problem(path, label)
        if problem:
            errors.append(problem)

    if not settings.sentry_dsn.get_secret_value():
        errors.append("SENTRY_DSN is empty or not set")

    if not settings.scoring_weights_path.exists():
        logger.info("scoring_weights_default", path=str(settings.scoring_weights_path))

    if not errors:
        logger.info("settings_validation_passed")
        return

    if settings.production:
        for err in errors:
            logger.error("setting_invalid", detail=err)
        print("\n=== STARTUP FAILED ===", file=sys.stderr)
        print("Invalid settings for production mode:", file=sys.stderr)
        for err in errors:
            print(f"  - {err}", file=sys.stderr)
        print("======================\n", file=sys.stderr)
        sys.exit(1)
    else:
        for err in errors:
            logger.warning("setting_invalid_dev", detail=err)
