"""
Base Service Class.

Every claim-core service and role desk takes its ``StructuredLogger``
through the constructor; this base class stores it as ``self._logger``.
Collaborators (repositories, other services, config) are added by the
subclass ``__init__``.
"""

from __future__ import annotations

from contract_claims.logger import StructuredLogger


class BaseService:
    """Holds the injected logger for a claim-core service."""

    def __init__(self, logger: StructuredLogger) -> None:
        self._logger: StructuredLogger = logger
