"""Lender catalog providers: packaged snapshot and HTTP catalog API client"""

import json
from pathlib import Path
from typing import Any, Dict, List

import httpx

from financing_gateway.config import settings
from financing_gateway.domain.exceptions import CatalogUnavailableError
from financing_gateway.domain.models import FeeType, LenderFee, LenderProfile, LoanProduct, RateType

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parents[2] / "data" / "lender_catalog.json"


def _parse_product(raw: Dict[str, Any]) -> LoanProduct:
    return LoanProduct(
        id=raw["id"],
        name=raw["name"],
        rate_type=RateType(raw["rate_type"]),
        min_term=int(raw["min_term"]),
        max_term=int(raw["max_term"]),
        min_down_payment_pct=float(raw["min_down_payment_pct"]),
        max_down_payment_pct=float(raw["max_down_payment_pct"]),
        eligibility_notes=tuple(raw.get("eligibility_notes", [])),
        benefits=tuple(raw.get("benefits", [])),
    )


def _parse_fee(raw: Dict[str, Any]) -> LenderFee:
    return LenderFee(
        id=raw["id"],
        name=raw["name"],
        fee_type=FeeType(raw["fee_type"]),
        amount=float(raw["amount"]),
        is_required=bool(raw.get("is_required", True)),
    )


def parse_catalog(payload: Dict[str, Any]) -> List[LenderProfile]:
    """
    Build lender profiles from a catalog document.

    Raises:
        KeyError, ValueError, TypeError: document is missing fields or has bad values
    """
    return [
        LenderProfile(
            id=raw["id"],
            name=raw["name"],
            min_loan_amount=float(raw["min_loan_amount"]),
            max_loan_amount=float(raw["max_loan_amount"]),
            min_credit_score=int(raw["min_credit_score"]),
            max_ltv_pct=float(raw["max_ltv_pct"]),
            rating=float(raw["rating"]),
            processing_time=str(raw["processing_time"]),
            fee_schedule=tuple(_parse_fee(fee) for fee in raw.get("fee_schedule", [])),
            products=tuple(_parse_product(p) for p in raw.get("products", [])),
            locations=tuple(raw.get("locations", [])),
            features=tuple(raw.get("features", [])),
        )
        for raw in payload.get("lenders", [])
    ]


class StaticLenderCatalog:
    """Catalog snapshot loaded once from a JSON document on disk"""

    def __init__(self, path: Path | None = None):
        self.path = path or DEFAULT_CATALOG_PATH
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            self._lenders = tuple(parse_catalog(payload))
        except (OSError, KeyError, ValueError, TypeError) as e:
            raise CatalogUnavailableError(f"Cannot load lender catalog from {self.path}: {e}") from e

    async def get_lenders(self) -> List[LenderProfile]:
        return list(self._lenders)


class LenderCatalogClient:
    """Client for an external lender catalog API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.catalog_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def get_lenders(self) -> List[LenderProfile]:
        """
        Fetch the current lender catalog snapshot.

        Raises:
            CatalogUnavailableError: On timeout, HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(f"{self.base_url}/catalog/lenders")
                response.raise_for_status()
                return parse_catalog(response.json())

            except httpx.TimeoutException as e:
                raise CatalogUnavailableError(f"Catalog API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise CatalogUnavailableError(f"Catalog API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise CatalogUnavailableError(f"Catalog API unreachable: {e}") from e
            except (KeyError, ValueError, TypeError) as e:
                raise CatalogUnavailableError(f"Invalid lender data from catalog: {e}") from e
