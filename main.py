"""
Contract Monthly Claims Console Entry Point.

Bootstraps the dependency graph via constructor injection, seeds the demo
data, and walks one claim through the whole workflow from the console:
a lecturer submits, the coordinator approves, HR pays, and the manager
prints the status summary.  Every subsystem is wired here; there are no
module-level globals.

Usage::

    python main.py
"""

from __future__ import annotations

import asyncio
import sys
import traceback
from datetime import date

from contract_claims.config import get_config
from contract_claims.logger import StructuredLogger, get_logger
from contract_claims.models.claim import Claim
from contract_claims.services import create_services


async def run_walkthrough(logger: StructuredLogger) -> int:
    """Run the demo workflow; returns a process exit code."""

    # ------------------------------------------------------------------
    # 1. Configuration (from .env / environment variables)
    # ------------------------------------------------------------------
    config = get_config()

    # ------------------------------------------------------------------
    # 2. Service Container (store + repositories + services + desks)
    # ------------------------------------------------------------------
    services = create_services(config=config)
    lecturer_desk = services["lecturer_desk"]
    coordinator_desk = services["coordinator_desk"]
    manager_desk = services["manager_desk"]
    hr_desk = services["hr_desk"]

    # ------------------------------------------------------------------
    # 3. Observers (coordinator queue + a console listener)
    # ------------------------------------------------------------------
    opened = await coordinator_desk.open()
    logger.info("Coordinator queue on open: %d claim(s).", len(opened.data or []))

    def _announce(claim: Claim) -> None:
        logger.info(
            "New claim %s from %s for %s: %s",
            claim.id,
            claim.lecturer_name,
            claim.month_year_display,
            claim.total_amount,
        )

    notifier = services["claim_notifier"]
    listener = notifier.subscribe(_announce)

    try:
        # --------------------------------------------------------------
        # 4. Lecturer submits
        # --------------------------------------------------------------
        hours = [
            {"date_worked": date(2025, 11, 3), "hours": "6", "description": "Lecture - Databases"},
            {"date_worked": date(2025, 11, 5), "hours": "2.5", "description": "Marking - Assignments"},
        ]
        preview = await lecturer_desk.preview_total(1, hours)
        logger.info("Preview total: %s", (preview.data or {}).get("total_amount"))

        submitted = await lecturer_desk.submit(
            lecturer_id=1,
            month=11,
            year=2025,
            hours=hours,
            documents=[
                {"file_name": "Timesheet_Nov.pdf", "file_path": "uploads/1", "size_bytes": 48_000},
            ],
        )
        if not submitted.success:
            logger.error("Submission failed: %s", submitted.error)
            return 1
        claim_id = submitted.data["claim_id"]
        await notifier.drain()
        logger.info(
            "Coordinator queue after submit: %s",
            [c["id"] for c in await coordinator_desk.pending_queue()],
        )

        # --------------------------------------------------------------
        # 5. Coordinator approves, manager verifies, HR pays
        # --------------------------------------------------------------
        for step, result in (
            ("approve", await coordinator_desk.approve(claim_id)),
            ("verify", await manager_desk.verify(claim_id, True, "Timesheet checked.")),
            ("pay", await hr_desk.process_payment(claim_id)),
        ):
            if not result.success:
                logger.error("Step '%s' failed (%s): %s", step, result.status_code, result.error)
                return 1
            logger.info("Step '%s' done.", step)

        # --------------------------------------------------------------
        # 6. Manager summary
        # --------------------------------------------------------------
        summary = await manager_desk.summary()
        for status_name, bucket in (summary.data or {}).items():
            logger.info(
                "%-15s %2s claim(s)  total %s",
                status_name,
                bucket["count"],
                bucket["total_amount"],
            )
        return 0
    finally:
        listener.unsubscribe()
        coordinator_desk.close()
        notifier.close()


def main() -> None:
    """Application entry point."""
    logger: StructuredLogger = get_logger("main")
    logger.info("Starting Contract Monthly Claims walkthrough...")
    exit_code = asyncio.run(run_walkthrough(logger))
    logger.info("Walkthrough finished.")
    if exit_code:
        sys.exit(exit_code)


def _show_fatal_error(exc: BaseException) -> None:
    """Print the traceback to stderr so a failed run is never silent."""
    detail = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    sys.stderr.write(f"FATAL: {type(exc).__name__}: {exc}\n{detail}")


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
    except Exception as exc:
        _show_fatal_error(exc)
        sys.exit(1)
