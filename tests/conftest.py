"""
Pytest fixtures for the claim core test suite.

Provides:
- An ``AppConfig`` with file logging disabled
- A per-test ``StructuredLogger`` writing JSON lines to an in-memory stream
- A fully wired service container (seeded with the demo data unless a
  test asks for an empty one)
- Shortcuts to the individual services and desks

Async service methods are driven with ``asyncio.run(...)`` inside the
tests themselves.
"""

import json
import logging
import os
from io import StringIO
from typing import Callable, Iterator
from uuid import uuid4

import pytest

# Keep test runs from creating claims.log in the working directory.
os.environ.setdefault("CLAIMS_LOG_FILE", "")

from contract_claims.config import AppConfig, reset_config  # noqa: E402
from contract_claims.logger import StructuredLogger  # noqa: E402
from contract_claims.services import ServiceContainer, create_services  # noqa: E402

reset_config()


# =============================================================================
# Configuration and logging
# =============================================================================


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(LOG_FILE="", SEED_DEMO_DATA=True)


class CapturedLog:
    """A StructuredLogger plus the JSON records it has written."""

    def __init__(self) -> None:
        self.stream = StringIO()
        self.logger = StructuredLogger(
            name=f"tests.{uuid4().hex}",
            level=logging.DEBUG,
            stream=self.stream,
            log_file="",
        )

    def records(self) -> list[dict]:
        lines = self.stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    def messages(self) -> list[str]:
        return [record["message"] for record in self.records()]

    def audit_events(self, action: str = "") -> list[dict]:
        events = [
            json.loads(message[len("AUDIT: "):])
            for message in self.messages()
            if message.startswith("AUDIT: ")
        ]
        return [e for e in events if not action or e["action"] == action]


@pytest.fixture
def captured_log() -> CapturedLog:
    """
    Capture structured logs as parsed JSON dicts.

    Usage::

        def test_something(captured_log, lifecycle):
            ...
            assert captured_log.audit_events("SUBMIT")
    """
    return CapturedLog()


# =============================================================================
# Service container
# =============================================================================


@pytest.fixture
def services(config: AppConfig, captured_log: CapturedLog) -> Iterator[ServiceContainer]:
    container = create_services(config=config, logger=captured_log.logger)
    yield container
    container["claim_notifier"].close()


@pytest.fixture
def empty_services(captured_log: CapturedLog) -> Iterator[ServiceContainer]:
    """Container with only the status catalog; no lecturers or claims."""
    container = create_services(
        config=AppConfig(LOG_FILE="", SEED_DEMO_DATA=False),
        logger=captured_log.logger,
    )
    yield container
    container["claim_notifier"].close()


@pytest.fixture
def store(services):
    return services["store"]


@pytest.fixture
def lifecycle(services):
    return services["claim_lifecycle_service"]


@pytest.fixture
def notifier(services):
    return services["claim_notifier"]


@pytest.fixture
def query(services):
    return services["claim_query_service"]


@pytest.fixture
def catalog(services):
    return services["status_catalog"]


@pytest.fixture
def guards(services):
    return services["document_guards_service"]


# =============================================================================
# Test data helpers
# =============================================================================


@pytest.fixture
def make_hours() -> Callable[..., list[dict]]:
    """Build hours entries: ``make_hours(10, 5)`` -> two valid lines."""

    def _make(*amounts: object) -> list[dict]:
        return [
            {
                "date_worked": f"2025-11-{index:02d}",
                "hours": str(amount),
                "description": f"Session {index}",
            }
            for index, amount in enumerate(amounts, start=1)
        ]

    return _make


@pytest.fixture
def store_snapshot(store) -> Callable[[], dict[str, int]]:
    """Record counts per collection, for "nothing was written" checks."""

    def _snapshot() -> dict[str, int]:
        return {
            name: store.count(name)
            for name in ("claims", "hours_worked", "supporting_documents")
        }

    return _snapshot
