"""Financing engine facade - the operations exposed to dashboards and other collaborators"""

import asyncio
from concurrent.futures import Executor
from typing import List, Optional, Protocol, Sequence, Tuple

from financing_gateway.domain import amortization, matching, prequalification
from financing_gateway.domain.models import (
    AmortizationRequest,
    BorrowerProfile,
    CreditAssessment,
    FinancingComparison,
    FinancingOption,
    FinancingRequest,
    LenderProfile,
    MortgageBreakdown,
    PreQualificationRequest,
    PreQualificationResult,
)


class LenderCatalogProvider(Protocol):
    """Supplies an immutable snapshot of lenders and their products"""

    async def get_lenders(self) -> List[LenderProfile]: ...


class BorrowerProfileSource(Protocol):
    """Supplies credit, income and debt figures for a borrower"""

    async def get_profile(self, borrower_id: str) -> BorrowerProfile: ...


class FinancingEngine:
    """
    Stateless entry point over the calculation, matching and qualification modules.

    Collaborators are injected; nothing is cached between calls, so every
    ranking sees the catalog snapshot the provider returns at call time.
    """

    def __init__(
        self,
        catalog: LenderCatalogProvider,
        borrowers: BorrowerProfileSource,
        executor: Optional[Executor] = None,
    ):
        self.catalog = catalog
        self.borrowers = borrowers
        self.executor = executor

    def compute_amortization(self, request: AmortizationRequest) -> MortgageBreakdown:
        return amortization.complete_mortgage(
            loan_amount=request.loan_amount,
            annual_rate_pct=request.annual_interest_rate,
            term_years=request.term_years,
            down_payment=request.down_payment,
            annual_property_tax=request.annual_property_tax,
            annual_insurance=request.annual_insurance,
            annual_pmi=request.annual_pmi,
            annual_hoa=request.annual_hoa,
            start_date=request.start_date,
        )

    async def _lenders(self, lender_ids: Sequence[str] = ()) -> List[LenderProfile]:
        lenders = await self.catalog.get_lenders()
        if lender_ids:
            lenders = matching.filter_lenders(lenders, lender_ids=lender_ids)
        return lenders

    async def rank_financing_options(self, request: FinancingRequest) -> List[FinancingOption]:
        """
        Ranked options; an explicit request rate overrides the rule-table rate.

        Ranking runs in a worker thread, off the event loop, including any
        fan-out over the injected executor.
        """
        lenders = await self._lenders(request.lender_ids)
        return await asyncio.to_thread(
            matching.rank_options,
            loan_amount=request.loan.loan_amount,
            down_payment=request.down_payment,
            credit_score=request.credit_score,
            property_value=request.loan.property_value,
            lenders=lenders,
            executor=self.executor,
            rate_override=request.loan.annual_interest_rate,
            term_years=request.loan.term_years,
        )

    async def compare_financing(self, request: FinancingRequest) -> FinancingComparison:
        lenders = await self._lenders(request.lender_ids)
        return await asyncio.to_thread(
            matching.compare_financing,
            loan_amount=request.loan.loan_amount,
            down_payment=request.down_payment,
            credit_score=request.credit_score,
            property_value=request.loan.property_value,
            lenders=lenders,
            executor=self.executor,
            rate_override=request.loan.annual_interest_rate,
            term_years=request.loan.term_years,
        )

    async def search_lenders(
        self,
        loan_amount_range: Optional[Tuple[float, float]] = None,
        lender_ids: Optional[Sequence[str]] = None,
        locations: Optional[Sequence[str]] = None,
    ) -> List[LenderProfile]:
        lenders = await self.catalog.get_lenders()
        return matching.filter_lenders(lenders, loan_amount_range, lender_ids, locations)

    def evaluate_pre_qualification(self, request: PreQualificationRequest) -> PreQualificationResult:
        return prequalification.evaluate(request.borrower, request.down_payment)

    async def evaluate_credit_risk(self, borrower_id: str) -> CreditAssessment:
        """
        Assess a stored borrower.

        Raises:
            BorrowerNotFoundError: the source has no profile for ``borrower_id``
        """
        borrower = await self.borrowers.get_profile(borrower_id)
        return prequalification.credit_assessment(borrower)
