"""Borrower profile sources: in-memory lookup and HTTP borrower API client"""

from typing import Any, Dict, Mapping

import httpx

from financing_gateway.config import settings
from financing_gateway.domain.exceptions import BorrowerNotFoundError, CatalogUnavailableError
from financing_gateway.domain.models import BorrowerProfile


def parse_borrower(raw: Dict[str, Any]) -> BorrowerProfile:
    return BorrowerProfile(
        borrower_id=str(raw["borrower_id"]),
        monthly_gross_income=float(raw["monthly_gross_income"]),
        monthly_debt_payments=float(raw["monthly_debt_payments"]),
        credit_score=int(raw["credit_score"]),
        down_payment=float(raw.get("down_payment", 0.0)),
    )


class InMemoryBorrowerProfiles:
    """Read-only profile lookup over a mapping supplied at construction"""

    def __init__(self, profiles: Mapping[str, BorrowerProfile] | None = None):
        self._profiles = dict(profiles or {})

    async def get_profile(self, borrower_id: str) -> BorrowerProfile:
        try:
            return self._profiles[borrower_id]
        except KeyError:
            raise BorrowerNotFoundError(f"Borrower {borrower_id} not found") from None


class BorrowerProfileClient:
    """Client for an external borrower profile API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.borrower_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def get_profile(self, borrower_id: str) -> BorrowerProfile:
        """
        Fetch credit, income and debt figures for a borrower.

        Raises:
            BorrowerNotFoundError: API answered 404
            CatalogUnavailableError: On timeout, other HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(f"{self.base_url}/borrowers/{borrower_id}")
                if response.status_code == 404:
                    raise BorrowerNotFoundError(f"Borrower {borrower_id} not found")
                response.raise_for_status()
                return parse_borrower(response.json())

            except httpx.TimeoutException as e:
                raise CatalogUnavailableError(f"Borrower API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise CatalogUnavailableError(f"Borrower API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise CatalogUnavailableError(f"Borrower API unreachable: {e}") from e
            except (KeyError, ValueError, TypeError) as e:
                raise CatalogUnavailableError(f"Invalid borrower data: {e}") from e
