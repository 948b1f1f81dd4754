"""
Claim Query Service.

Derived read views used by every role desk:

- ``filter_claims``: status + free-text filter over a materialised list.
  Status filter first (skipped when unset or ``0``), then a
  case-insensitive substring match of the search text against the claim
  id, month, and year.  Both optional, AND-combined, input order kept.
- ``ClaimQueryService``: the same filter over the live claim set, plus
  per-status lookups and a status summary for dashboards.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional, Union

from contract_claims.logger import StructuredLogger
from contract_claims.models.claim import Claim
from contract_claims.models.service_models import ClaimFilter
from contract_claims.services.base_service import BaseService
from contract_claims.services.claim_lifecycle import ClaimLifecycleService
from contract_claims.services.status_catalog import StatusCatalog


def _matches_text(claim: Claim, needle: str) -> bool:
    return any(
        needle in str(value).casefold()
        for value in (claim.id, claim.month, claim.year)
    )


def filter_claims(
    claims: Iterable[Claim],
    claim_filter: Optional[ClaimFilter] = None,
) -> list[Claim]:
    """Apply *claim_filter* to *claims* without re-sorting."""
    result = list(claims)
    if claim_filter is None:
        return result

    if claim_filter.status_id:
        result = [c for c in result if c.status_id == claim_filter.status_id]

    if claim_filter.search_text and claim_filter.search_text.strip():
        needle = claim_filter.search_text.strip().casefold()
        result = [c for c in result if _matches_text(c, needle)]

    return result


class ClaimQueryService(BaseService):
    """Read-only views built on the lifecycle service."""

    def __init__(
        self,
        lifecycle: ClaimLifecycleService,
        status_catalog: StatusCatalog,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._lifecycle = lifecycle
        self._catalog = status_catalog

    async def search(self, claim_filter: Optional[ClaimFilter] = None) -> list[Claim]:
        """Filter every claim (totals freshly derived)."""
        claims = await self._lifecycle.list_all_claims()
        matched = filter_claims(claims, claim_filter)
        self._logger.debug("Claim search matched %d of %d.", len(matched), len(claims))
        return matched

    async def claims_by_status(self, status: Union[int, str]) -> list[Claim]:
        """All claims currently in *status* (catalog id or name).

        Raises:
            InvalidArgumentError: If *status* is not in the catalog, or is
                neither an ``int`` nor a ``str``.
        """
        status_id = self._lifecycle.resolve_status(status)
        return await self.search(ClaimFilter(status_id=status_id))

    async def status_summary(self) -> dict[str, dict[str, Union[int, Decimal]]]:
        """Count and summed total per catalog status, in catalog id order.

        Every status appears, including those with no claims.
        """
        summary: dict[str, dict[str, Union[int, Decimal]]] = {
            status.name: {"count": 0, "total_amount": Decimal("0")}
            for status in self._catalog.all()
        }
        for claim in await self._lifecycle.list_all_claims():
            bucket = summary.get(claim.status_name or "")
            if bucket is None:
                continue
            bucket["count"] += 1
            bucket["total_amount"] += claim.total_amount
        return summary
