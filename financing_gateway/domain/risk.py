"""Credit risk scoring - versioned rate rule table and qualitative risk tiers"""

from dataclasses import dataclass
from typing import Callable, Sequence, Tuple

from financing_gateway.domain.exceptions import InvalidInputError
from financing_gateway.domain.models import RateAdjustment, RateQuote, RateType, RiskTier

MIN_CREDIT_SCORE = 300
MAX_CREDIT_SCORE = 850

BASE_RATE_PCT = 4.5

RATE_RULES_VERSION = "2024.1"


@dataclass(frozen=True)
class RateContext:
    """Inputs the rate rules are evaluated against"""

    credit_score: int
    ltv_pct: float
    rate_type: RateType
    term_years: int


@dataclass(frozen=True)
class RateRule:
    code: str
    description: str
    applies: Callable[[RateContext], bool]
    adjustment: float
    credit_based: bool = False


# Evaluated in order; every rule that applies contributes its adjustment.
DEFAULT_RATE_RULES: Tuple[RateRule, ...] = (
    RateRule(
        code="CREDIT_BELOW_680",
        description="Credit score below 680",
        applies=lambda ctx: ctx.credit_score < 680,
        adjustment=0.5,
        credit_based=True,
    ),
    RateRule(
        code="CREDIT_BELOW_640",
        description="Credit score below 640",
        applies=lambda ctx: ctx.credit_score < 640,
        adjustment=0.5,
        credit_based=True,
    ),
    RateRule(
        code="LTV_ABOVE_80",
        description="Loan-to-value above 80%",
        applies=lambda ctx: ctx.ltv_pct > 80,
        adjustment=0.25,
    ),
    RateRule(
        code="FIXED_15_YEAR",
        description="15-year fixed-rate term",
        applies=lambda ctx: ctx.rate_type == RateType.FIXED and ctx.term_years == 15,
        adjustment=-0.5,
    ),
)

# (minimum score, tier, estimated rate), checked top-down
TIER_RATE_TABLE: Tuple[Tuple[int, RiskTier, float], ...] = (
    (740, RiskTier.LOW, 4.0),
    (680, RiskTier.MEDIUM, 4.5),
    (620, RiskTier.HIGH, 5.0),
    (MIN_CREDIT_SCORE, RiskTier.HIGH, 5.5),
)


def validate_credit_score(credit_score: int) -> None:
    if credit_score is None or not MIN_CREDIT_SCORE <= credit_score <= MAX_CREDIT_SCORE:
        raise InvalidInputError(
            f"credit_score must be between {MIN_CREDIT_SCORE} and {MAX_CREDIT_SCORE}, got {credit_score!r}"
        )


def quote_rate(
    credit_score: int,
    ltv_pct: float,
    rate_type: RateType,
    term_years: int,
    rules: Sequence[RateRule] = DEFAULT_RATE_RULES,
    base_rate: float = BASE_RATE_PCT,
) -> RateQuote:
    """
    Price a loan from the ordered rule table.

    Rules are cumulative, not mutually exclusive: a 600 score fires both
    credit rules for +1.0 total.
    """
    validate_credit_score(credit_score)
    ctx = RateContext(
        credit_score=credit_score,
        ltv_pct=ltv_pct,
        rate_type=RateType(rate_type),
        term_years=term_years,
    )
    fired = tuple(
        RateAdjustment(code=rule.code, description=rule.description, adjustment=rule.adjustment)
        for rule in rules
        if rule.applies(ctx)
    )
    return RateQuote(base_rate=base_rate, adjustments=fired, rules_version=RATE_RULES_VERSION)


def credit_adjustment(credit_score: int, rules: Sequence[RateRule] = DEFAULT_RATE_RULES) -> float:
    """Sum of the credit-score rules alone, in percentage points"""
    validate_credit_score(credit_score)
    ctx = RateContext(credit_score=credit_score, ltv_pct=0.0, rate_type=RateType.HYBRID, term_years=0)
    return sum(rule.adjustment for rule in rules if rule.credit_based and rule.applies(ctx))


def _tier_row(credit_score: int) -> Tuple[int, RiskTier, float]:
    validate_credit_score(credit_score)
    for row in TIER_RATE_TABLE:
        if credit_score >= row[0]:
            return row
    return TIER_RATE_TABLE[-1]


def risk_tier(credit_score: int) -> RiskTier:
    """Low (740+), Medium (680+) or High"""
    return _tier_row(credit_score)[1]


def estimated_rate(credit_score: int) -> float:
    """Indicative rate for the borrower's tier, independent of the rule table"""
    return _tier_row(credit_score)[2]
