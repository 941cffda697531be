"""Financing option matcher - eligibility rules, pricing and ranking of lender products"""

import logging
from concurrent.futures import Executor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from financing_gateway.domain import amortization
from financing_gateway.domain.exceptions import InvalidInputError
from financing_gateway.domain.models import (
    FinancingComparison,
    FinancingOption,
    LenderProfile,
    LoanProduct,
)
from financing_gateway.domain.risk import BASE_RATE_PCT, quote_rate, validate_credit_score

logger = logging.getLogger(__name__)

ELIGIBILITY_RULES_VERSION = "2024.1"

# APR-equivalent spread over the note rate to account for lender fees
APR_SPREAD = 0.1

CLOSING_COST_RATE = 0.02

MAX_SCORE = 100.0
RATE_PENALTY_PER_POINT = 20.0
RATING_BASELINE = 4.5
RATING_PENALTY_PER_STAR = 10.0
SLOW_PROCESSING_DAYS = 30
SLOW_PROCESSING_PENALTY = 5.0


@dataclass(frozen=True)
class LenderContext:
    credit_score: int
    ltv_pct: float


@dataclass(frozen=True)
class ProductContext:
    loan_amount: float
    down_payment: float
    term_years: Optional[int] = None

    @property
    def down_payment_pct(self) -> float:
        return self.down_payment / self.loan_amount * 100


@dataclass(frozen=True)
class EligibilityRule:
    code: str
    description: str
    passes: Callable


LENDER_RULES: Tuple[EligibilityRule, ...] = (
    EligibilityRule(
        code="MIN_CREDIT_SCORE",
        description="Credit score meets lender minimum",
        passes=lambda lender, ctx: ctx.credit_score >= lender.min_credit_score,
    ),
    EligibilityRule(
        code="MAX_LTV",
        description="Loan-to-value within lender maximum",
        passes=lambda lender, ctx: ctx.ltv_pct <= lender.max_ltv_pct,
    ),
)

PRODUCT_RULES: Tuple[EligibilityRule, ...] = (
    EligibilityRule(
        code="DOWN_PAYMENT_WINDOW",
        description="Down payment within the product's percentage window",
        passes=lambda product, ctx: (
            product.min_down_payment_pct <= ctx.down_payment_pct <= product.max_down_payment_pct
        ),
    ),
    EligibilityRule(
        code="TERM_RANGE",
        description="Requested term within the product's term range",
        passes=lambda product, ctx: (
            ctx.term_years is None or product.min_term <= ctx.term_years <= product.max_term
        ),
    ),
)


def lender_eligibility(lender: LenderProfile, credit_score: int, ltv_pct: float) -> List[str]:
    """Codes of lender rules the borrower fails; empty when eligible"""
    ctx = LenderContext(credit_score=credit_score, ltv_pct=ltv_pct)
    return [rule.code for rule in LENDER_RULES if not rule.passes(lender, ctx)]


def product_eligibility(
    product: LoanProduct,
    loan_amount: float,
    down_payment: float,
    term_years: Optional[int] = None,
) -> List[str]:
    """Codes of product rules the request fails; empty when eligible"""
    ctx = ProductContext(loan_amount=loan_amount, down_payment=down_payment, term_years=term_years)
    return [rule.code for rule in PRODUCT_RULES if not rule.passes(product, ctx)]


def comparison_score(rate: float, lender: LenderProfile) -> float:
    """
    Heuristic 0-100+ ranking score.

    Deductions:
    - 20 per point of rate above the 4.5% baseline
    - 10 per star of lender rating below 4.5
    - flat 5 when 30 days is one of the quoted processing day counts
    """
    score = MAX_SCORE
    if rate > BASE_RATE_PCT:
        score -= (rate - BASE_RATE_PCT) * RATE_PENALTY_PER_POINT
    if lender.rating < RATING_BASELINE:
        score -= (RATING_BASELINE - lender.rating) * RATING_PENALTY_PER_STAR
    if SLOW_PROCESSING_DAYS in lender.processing_time_days:
        score -= SLOW_PROCESSING_PENALTY
    return score


def price_option(
    lender: LenderProfile,
    product: LoanProduct,
    loan_amount: float,
    down_payment: float,
    credit_score: int,
    ltv_pct: float,
    rate_override: Optional[float] = None,
    term_years: Optional[int] = None,
) -> FinancingOption:
    """
    Price one eligible lender/product pair at the requested term, or at the
    product's shortest term when none was requested.

    An explicit ``rate_override`` replaces the rule-table rate and the option
    carries no rate quote.
    """
    term = product.min_term if term_years is None else term_years
    quote = quote_rate(credit_score, ltv_pct, product.rate_type, term)
    rate = quote.rate if rate_override is None else rate_override

    payment = amortization.monthly_payment(loan_amount, rate, term)
    fees_total = sum(fee.applied_to(loan_amount) for fee in lender.fee_schedule)

    return FinancingOption(
        id=f"{lender.id}-{product.id}",
        lender_id=lender.id,
        product_id=product.id,
        product_name=product.name,
        loan_amount=loan_amount,
        interest_rate=rate,
        apr=rate + APR_SPREAD,
        term_years=term,
        monthly_payment=payment,
        total_cost=payment * term * 12 + down_payment,
        down_payment=down_payment,
        closing_costs=loan_amount * CLOSING_COST_RATE,
        lender_fees_total=fees_total,
        comparison_score=comparison_score(rate, lender),
        rate_quote=quote if rate_override is None else None,
    )


def _options_for_lender(
    lender: LenderProfile,
    loan_amount: float,
    down_payment: float,
    credit_score: int,
    ltv_pct: float,
    rate_override: Optional[float],
    term_years: Optional[int],
) -> List[FinancingOption]:
    failed = lender_eligibility(lender, credit_score, ltv_pct)
    if failed:
        logger.debug("Lender %s ineligible", lender.id, extra={"lender_id": lender.id, "failed_rules": failed})
        return []

    options = []
    for product in lender.products:
        failed = product_eligibility(product, loan_amount, down_payment, term_years)
        if failed:
            logger.debug(
                "Product %s ineligible",
                product.id,
                extra={"lender_id": lender.id, "product_id": product.id, "failed_rules": failed},
            )
            continue
        options.append(
            price_option(
                lender, product, loan_amount, down_payment, credit_score, ltv_pct, rate_override, term_years
            )
        )
    return options


def rank_options(
    loan_amount: float,
    down_payment: float,
    credit_score: int,
    property_value: float,
    lenders: Sequence[LenderProfile],
    executor: Optional[Executor] = None,
    rate_override: Optional[float] = None,
    term_years: Optional[int] = None,
) -> List[FinancingOption]:
    """
    Match a borrower request against the lender catalog.

    Flow:
    1. Compute LTV for the request
    2. Keep lenders whose credit and LTV limits the borrower meets
    3. Keep products whose down payment window (as % of the loan) fits and
       whose term range covers ``term_years``, when one is requested
    4. Price each pair from the rate rule table and score it
    5. Sort by comparison score, highest first; ties keep catalog order

    Per-lender work is independent and is mapped over ``executor`` when one
    is given. An empty list means nothing matched and is not an error.
    """
    if down_payment is None or down_payment < 0:
        raise InvalidInputError(f"down_payment must be zero or positive, got {down_payment!r}")
    if rate_override is not None and rate_override < 0:
        raise InvalidInputError(f"annual_interest_rate must be zero or positive, got {rate_override!r}")
    if term_years is not None and term_years <= 0:
        raise InvalidInputError(f"term_years must be positive, got {term_years!r}")
    validate_credit_score(credit_score)
    if loan_amount is None or loan_amount <= 0:
        raise InvalidInputError(f"loan_amount must be a positive number, got {loan_amount!r}")
    ltv = amortization.loan_to_value(loan_amount, property_value)

    def evaluate(lender: LenderProfile) -> List[FinancingOption]:
        return _options_for_lender(
            lender, loan_amount, down_payment, credit_score, ltv, rate_override, term_years
        )

    if executor is not None:
        per_lender: Iterable[List[FinancingOption]] = executor.map(evaluate, lenders)
    else:
        per_lender = map(evaluate, lenders)

    options = [option for batch in per_lender for option in batch]

    # sorted() is stable, including with reverse=True
    return sorted(options, key=lambda o: o.comparison_score, reverse=True)


def filter_lenders(
    lenders: Sequence[LenderProfile],
    loan_amount_range: Optional[Tuple[float, float]] = None,
    lender_ids: Optional[Sequence[str]] = None,
    locations: Optional[Sequence[str]] = None,
) -> List[LenderProfile]:
    """Narrow the catalog by loan-amount overlap, lender id and served location"""
    result = list(lenders)

    if loan_amount_range is not None:
        low, high = loan_amount_range
        result = [lender for lender in result if lender.min_loan_amount <= high and lender.max_loan_amount >= low]

    if lender_ids:
        result = [lender for lender in result if lender.id in lender_ids]

    if locations:
        wanted = [loc.lower() for loc in locations]
        result = [
            lender for lender in result
            if any(w in served.lower() for w in wanted for served in lender.locations)
        ]

    return result


def compare_financing(
    loan_amount: float,
    down_payment: float,
    credit_score: int,
    property_value: float,
    lenders: Sequence[LenderProfile],
    executor: Optional[Executor] = None,
    rate_override: Optional[float] = None,
    compared_at: Optional[datetime] = None,
    term_years: Optional[int] = None,
) -> FinancingComparison:
    """Ranked options wrapped with the request they were ranked for"""
    options = rank_options(
        loan_amount, down_payment, credit_score, property_value, lenders, executor, rate_override, term_years
    )
    return FinancingComparison(
        loan_amount=loan_amount,
        down_payment=down_payment,
        credit_score=credit_score,
        property_value=property_value,
        options=tuple(options),
        compared_at=compared_at or datetime.now(timezone.utc),
        best_option_id=options[0].id if options else None,
    )
