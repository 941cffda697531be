"""Pytest fixtures for testing"""

import pytest
from fastapi.testclient import TestClient
from financing_gateway.api.main import create_app
from financing_gateway.api.dependencies import get_borrower_source, get_catalog
from financing_gateway.domain.models import (
    BorrowerProfile,
    FeeType,
    LenderFee,
    LenderProfile,
    LoanProduct,
    RateType,
)
from financing_gateway.infrastructure.clients.borrowers import InMemoryBorrowerProfiles
from financing_gateway.infrastructure.clients.catalog import StaticLenderCatalog


@pytest.fixture
def make_product():
    """Factory for loan products with permissive defaults"""

    def _make(
        product_id: str = "fixed-30",
        rate_type: RateType = RateType.FIXED,
        term: int = 30,
        min_down_pct: float = 0.0,
        max_down_pct: float = 100.0,
    ) -> LoanProduct:
        return LoanProduct(
            id=product_id,
            name=product_id.replace("-", " ").title(),
            rate_type=rate_type,
            min_term=term,
            max_term=term,
            min_down_payment_pct=min_down_pct,
            max_down_payment_pct=max_down_pct,
        )

    return _make


@pytest.fixture
def make_lender(make_product):
    """Factory for lenders; one permissive 30-year fixed product unless given"""

    def _make(
        lender_id: str = "lender",
        min_credit_score: int = 300,
        max_ltv_pct: float = 100.0,
        rating: float = 4.5,
        processing_time: str = "14-21 days",
        products=None,
        fee_schedule=(),
        locations=(),
        min_loan_amount: float = 10000,
        max_loan_amount: float = 5000000,
    ) -> LenderProfile:
        return LenderProfile(
            id=lender_id,
            name=lender_id.title(),
            min_loan_amount=min_loan_amount,
            max_loan_amount=max_loan_amount,
            min_credit_score=min_credit_score,
            max_ltv_pct=max_ltv_pct,
            rating=rating,
            processing_time=processing_time,
            fee_schedule=tuple(fee_schedule),
            products=tuple(products) if products is not None else (make_product(),),
            locations=tuple(locations),
        )

    return _make


@pytest.fixture
def origination_fee() -> LenderFee:
    return LenderFee(id="origination", name="Origination Fee", fee_type=FeeType.PERCENTAGE, amount=1.0)


@pytest.fixture
def borrower_profiles() -> dict[str, BorrowerProfile]:
    """Stored borrowers used by the credit assessment endpoint"""
    return {
        "prime": BorrowerProfile(
            borrower_id="prime",
            monthly_gross_income=12000,
            monthly_debt_payments=900,
            credit_score=780,
            down_payment=80000,
        ),
        "subprime": BorrowerProfile(
            borrower_id="subprime",
            monthly_gross_income=3500,
            monthly_debt_payments=1800,
            credit_score=590,
            down_payment=5000,
        ),
    }


@pytest.fixture
def client(borrower_profiles: dict[str, BorrowerProfile]) -> TestClient:
    """Create FastAPI test client backed by the packaged catalog and in-memory borrowers"""
    app = create_app()
    catalog = StaticLenderCatalog()
    borrowers = InMemoryBorrowerProfiles(borrower_profiles)

    app.dependency_overrides[get_catalog] = lambda: catalog
    app.dependency_overrides[get_borrower_source] = lambda: borrowers
    return TestClient(app)
