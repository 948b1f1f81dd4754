"""
Application Configuration.

Pydantic Settings model for the Contract Monthly Claims core.
All configuration is loaded from environment variables and .env files.
Inject an AppConfig instance via dependency injection where needed.
"""

from __future__ import annotations

import logging
import threading
from decimal import Decimal
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import Field, model_validator


class AppConfig(BaseSettings):
    """Central configuration loaded from environment variables and defaults."""

    # --- Document intake ---
    MAX_DOCUMENT_BYTES: int = 5 * 1024 * 1024  # 5 MiB
    ALLOWED_DOCUMENT_EXTENSIONS: frozenset[str] = Field(
        default_factory=lambda: frozenset({"pdf", "docx", "xlsx"})
    )

    # --- Hours entry bounds ---
    MIN_HOURS_PER_ENTRY: Decimal = Decimal("0.1")
    MAX_HOURS_PER_ENTRY: Decimal = Decimal("24.0")

    # --- Startup ---
    SEED_DEMO_DATA: bool = True

    # --- Notifications ---
    NOTIFIER_QUEUE_SIZE: int = Field(default=100, ge=1)

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "claims.log"
    LOG_MAX_BYTES: int = 5_242_880  # 5 MB
    LOG_BACKUP_COUNT: int = 3

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "CLAIMS_",
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def _check_bounds(self) -> "AppConfig":
        """Reject inverted hour bounds and normalise extension spelling.

        Extensions are stored lower-case without the leading dot so that
        ``".PDF"`` in the environment still matches ``report.pdf``.
        """
        _log = logging.getLogger("contract_claims.config")

        if not Path(".env").exists():
            _log.debug(
                "No .env file found; configuration loaded from "
                "environment variables or defaults."
            )

        if self.MIN_HOURS_PER_ENTRY <= 0:
            raise ValueError("MIN_HOURS_PER_ENTRY must be greater than zero")
        if self.MAX_HOURS_PER_ENTRY < self.MIN_HOURS_PER_ENTRY:
            raise ValueError(
                "MAX_HOURS_PER_ENTRY must not be lower than MIN_HOURS_PER_ENTRY"
            )

        self.ALLOWED_DOCUMENT_EXTENSIONS = frozenset(
            ext.strip().lower().lstrip(".")
            for ext in self.ALLOWED_DOCUMENT_EXTENSIONS
            if ext.strip()
        )
        return self


# ---------------------------------------------------------------------------
# Module-level singleton factory
# ---------------------------------------------------------------------------

_config_instance: Optional[AppConfig] = None
_config_lock: threading.Lock = threading.Lock()


def get_config() -> AppConfig:
    """Return a cached ``AppConfig`` singleton.

    On first call, creates an ``AppConfig`` instance (reading from ``.env``).
    Subsequent calls return the same instance.  Uses a check-lock-check
    pattern so the lock is only taken during first initialisation.

    Prefer direct constructor injection of ``AppConfig``; this factory
    exists for the logger and the entry point.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = AppConfig()
    return _config_instance


def reset_config() -> None:
    """Drop the cached singleton so the next ``get_config()`` re-reads settings."""
    global _config_instance
    with _config_lock:
        _config_instance = None
