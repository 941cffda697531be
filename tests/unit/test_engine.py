"""Unit tests for the financing engine facade"""

import asyncio
import threading

import pytest
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from financing_gateway.domain.engine import FinancingEngine
from financing_gateway.domain.exceptions import BorrowerNotFoundError
from financing_gateway.domain.models import (
    AmortizationRequest,
    BorrowerProfile,
    FinancingRequest,
    LoanRequest,
    PreQualificationRequest,
    QualificationStatus,
)


class StubCatalog:
    """Catalog returning a fixed snapshot and counting fetches"""

    def __init__(self, lenders):
        self.lenders = list(lenders)
        self.calls = 0

    async def get_lenders(self):
        self.calls += 1
        return list(self.lenders)


class StubBorrowers:
    def __init__(self, profiles):
        self.profiles = profiles

    async def get_profile(self, borrower_id):
        if borrower_id not in self.profiles:
            raise BorrowerNotFoundError(borrower_id)
        return self.profiles[borrower_id]


@pytest.fixture
def engine(make_lender, borrower_profiles) -> FinancingEngine:
    catalog = StubCatalog(
        [
            make_lender("alpha", rating=4.9, locations=["Texas"]),
            make_lender("beta", rating=4.2, locations=["Oregon"]),
            make_lender("gamma", min_credit_score=760),
        ]
    )
    return FinancingEngine(catalog=catalog, borrowers=StubBorrowers(borrower_profiles))


def financing_request(**overrides) -> FinancingRequest:
    loan = LoanRequest(
        loan_amount=300000,
        property_value=375000,
        term_years=overrides.pop("term_years", 30),
        annual_interest_rate=overrides.pop("annual_interest_rate", None),
    )
    return FinancingRequest(loan=loan, down_payment=60000, credit_score=720, **overrides)


def test_compute_amortization(engine: FinancingEngine):
    breakdown = engine.compute_amortization(
        AmortizationRequest(
            loan_amount=300000,
            annual_interest_rate=6.0,
            term_years=30,
            annual_property_tax=2400,
            start_date=date(2024, 1, 1),
        )
    )

    assert breakdown.principal_and_interest == pytest.approx(1798.65, abs=0.01)
    assert breakdown.property_tax == 200
    assert breakdown.schedule[0].payment_date == date(2024, 1, 1)


def test_rank_financing_options_uses_catalog(engine: FinancingEngine):
    options = asyncio.run(engine.rank_financing_options(financing_request()))

    assert [o.lender_id for o in options] == ["alpha", "beta"]
    assert engine.catalog.calls == 1


def test_rank_financing_options_restricted_to_lender_ids(engine: FinancingEngine):
    options = asyncio.run(engine.rank_financing_options(financing_request(lender_ids=("beta",))))

    assert [o.lender_id for o in options] == ["beta"]


def test_rank_financing_options_request_rate_overrides_rules(engine: FinancingEngine):
    options = asyncio.run(engine.rank_financing_options(financing_request(annual_interest_rate=7.0)))

    assert all(o.interest_rate == 7.0 for o in options)


def test_rank_financing_options_sees_catalog_changes(engine: FinancingEngine, make_lender):
    """Test nothing is cached between calls"""
    asyncio.run(engine.rank_financing_options(financing_request()))
    engine.catalog.lenders.append(make_lender("delta", rating=4.6))

    options = asyncio.run(engine.rank_financing_options(financing_request()))

    assert [o.lender_id for o in options] == ["alpha", "delta", "beta"]


def test_rank_financing_options_with_executor(make_lender, borrower_profiles):
    catalog = StubCatalog([make_lender(f"lender-{i}") for i in range(5)])
    with ThreadPoolExecutor(max_workers=2) as executor:
        engine = FinancingEngine(catalog, StubBorrowers(borrower_profiles), executor=executor)
        options = asyncio.run(engine.rank_financing_options(financing_request()))

    assert [o.lender_id for o in options] == [f"lender-{i}" for i in range(5)]


class RecordingExecutor(ThreadPoolExecutor):
    """Thread pool remembering which thread submitted work to it"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.caller_threads = []

    def map(self, fn, *iterables, **kwargs):
        self.caller_threads.append(threading.get_ident())
        return super().map(fn, *iterables, **kwargs)


def test_rank_financing_options_runs_off_event_loop(make_lender, borrower_profiles):
    """Test executor fan-out is driven from a worker thread, not the loop thread"""
    catalog = StubCatalog([make_lender(f"lender-{i}") for i in range(3)])
    loop_thread = threading.get_ident()
    with RecordingExecutor(max_workers=2) as executor:
        engine = FinancingEngine(catalog, StubBorrowers(borrower_profiles), executor=executor)
        asyncio.run(engine.rank_financing_options(financing_request()))
        asyncio.run(engine.compare_financing(financing_request()))

    assert len(executor.caller_threads) == 2
    assert loop_thread not in executor.caller_threads


def test_rank_financing_options_applies_requested_term(make_lender, make_product, borrower_profiles):
    lender = make_lender("acme", products=[make_product("fixed-30", term=30), make_product("fixed-15", term=15)])
    engine = FinancingEngine(StubCatalog([lender]), StubBorrowers(borrower_profiles))

    fifteen = asyncio.run(engine.rank_financing_options(financing_request(term_years=15)))
    any_term = asyncio.run(engine.rank_financing_options(financing_request(term_years=None)))

    assert [(o.product_id, o.term_years) for o in fifteen] == [("fixed-15", 15)]
    assert [o.product_id for o in any_term] == ["fixed-30", "fixed-15"]


def test_compare_financing(engine: FinancingEngine):
    comparison = asyncio.run(engine.compare_financing(financing_request()))

    assert comparison.best_option_id == "alpha-fixed-30"
    assert comparison.credit_score == 720
    assert len(comparison.options) == 2


def test_search_lenders(engine: FinancingEngine):
    lenders = asyncio.run(engine.search_lenders(locations=["oregon"]))
    assert [lender.id for lender in lenders] == ["beta"]


def test_evaluate_pre_qualification(engine: FinancingEngine):
    result = engine.evaluate_pre_qualification(
        PreQualificationRequest(
            borrower=BorrowerProfile(monthly_gross_income=8000, monthly_debt_payments=500, credit_score=750),
            down_payment=100000,
        )
    )

    assert result.status == QualificationStatus.QUALIFIED
    assert result.down_payment == 100000


def test_evaluate_credit_risk(engine: FinancingEngine):
    assessment = asyncio.run(engine.evaluate_credit_risk("prime"))

    assert assessment.borrower_id == "prime"
    assert assessment.credit_score == 780


def test_evaluate_credit_risk_unknown_borrower(engine: FinancingEngine):
    with pytest.raises(BorrowerNotFoundError):
        asyncio.run(engine.evaluate_credit_risk("nobody"))
