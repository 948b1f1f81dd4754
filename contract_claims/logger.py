"""
Structured JSON Logging Module.

Every component of the claim core receives a ``StructuredLogger`` through
its constructor.  Output is one JSON object per line (stdout plus an
optional rotating file), which keeps the ``AUDIT:`` lines emitted by
``contract_claims.utils.audit`` machine-readable.

Level, file name and rotation limits default to ``AppConfig``
(``CLAIMS_LOG_LEVEL``, ``CLAIMS_LOG_FILE``, ``CLAIMS_LOG_MAX_BYTES``,
``CLAIMS_LOG_BACKUP_COUNT``); any of them can be overridden per logger.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, TextIO

from contract_claims.config import get_config

_RESERVED_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


class JSONFormatter(logging.Formatter):
    """Render a record as ``{"timestamp", "level", "logger_name", "message"}``.

    Values passed through ``extra=`` are stringified under ``"extra"``;
    a traceback, when present, is added under ``"exception"``.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger_name": record.name,
            "message": record.getMessage(),
        }

        context = {
            key: str(value)
            for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS
        }
        if context:
            payload["extra"] = context

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            payload["exception"] = record.exc_text

        return json.dumps(payload, ensure_ascii=False)


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


class StructuredLogger:
    """Injectable wrapper around a named ``logging.Logger``.

    Usage::

        log = StructuredLogger(name="claims")
        log.info("Claim %s submitted", 7, extra={"lecturer_id": 1})

    Handlers are attached only the first time a name is used, so building
    several ``StructuredLogger`` objects for the same name never
    duplicates output.  ``log_file=""`` keeps the logger console-only.
    """

    def __init__(
        self,
        name: str = "claims",
        level: Optional[int] = None,
        stream: Optional[TextIO] = None,
        log_file: Optional[str] = None,
        max_bytes: Optional[int] = None,
        backup_count: Optional[int] = None,
    ) -> None:
        cfg = get_config()
        effective_level = level if level is not None else _level_from_name(cfg.LOG_LEVEL)

        self._logger: logging.Logger = logging.getLogger(name)
        self._logger.setLevel(effective_level)
        if self._logger.handlers:
            return

        formatter = JSONFormatter()
        console = logging.StreamHandler(stream or sys.stdout)
        console.setLevel(effective_level)
        console.setFormatter(formatter)
        self._logger.addHandler(console)

        target = cfg.LOG_FILE if log_file is None else log_file
        if not target:
            return
        try:
            path = Path(target)
            path.parent.mkdir(parents=True, exist_ok=True)
            rotating = RotatingFileHandler(
                filename=str(path),
                maxBytes=cfg.LOG_MAX_BYTES if max_bytes is None else max_bytes,
                backupCount=cfg.LOG_BACKUP_COUNT if backup_count is None else backup_count,
                encoding="utf-8",
            )
        except OSError as exc:
            self._logger.warning(
                "Log file '%s' unavailable (%s); logging to console only.", target, exc
            )
            return
        rotating.setLevel(effective_level)
        rotating.setFormatter(formatter)
        self._logger.addHandler(rotating)

    @property
    def logger(self) -> logging.Logger:
        """The underlying ``logging.Logger``."""
        return self._logger

    def debug(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.error(msg, *args, **kwargs)

    def critical(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.critical(msg, *args, **kwargs)


def get_logger(name: str = "claims") -> StructuredLogger:
    """``StructuredLogger`` for *name* with every setting taken from config."""
    return StructuredLogger(name=name)
