"""Domain models - immutable dataclasses representing financing value objects"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple


class RateType(str, Enum):
    FIXED = "fixed"
    HYBRID = "hybrid"


class FeeType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class RiskTier(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class QualificationStatus(str, Enum):
    QUALIFIED = "qualified"
    CONDITIONAL = "conditional"
    NOT_QUALIFIED = "not_qualified"


class FactorImpact(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


@dataclass(frozen=True)
class BorrowerProfile:
    """Income, debt and credit figures for a single evaluation"""

    monthly_gross_income: float
    monthly_debt_payments: float
    credit_score: int
    down_payment: float = 0.0
    borrower_id: Optional[str] = None


@dataclass(frozen=True)
class LoanRequest:
    """Loan being priced; an omitted rate comes from the rule table, an omitted term from each product"""
    """Loan being priced; rate is derived by the engine when omitted, any product term is accepted when term is omitted"""

    loan_amount: float
    property_value: float
    term_years: Optional[int] = None
    annual_interest_rate: Optional[float] = None


@dataclass(frozen=True)
class LoanProduct:
    id: str
    name: str
    rate_type: RateType
    min_term: int
    max_term: int
    min_down_payment_pct: float
    max_down_payment_pct: float
    eligibility_notes: Tuple[str, ...] = ()
    benefits: Tuple[str, ...] = ()


@dataclass(frozen=True)
class LenderFee:
    id: str
    name: str
    fee_type: FeeType
    amount: float
    is_required: bool = True

    def applied_to(self, loan_amount: float) -> float:
        """Dollar amount of this fee for a given loan"""
        if self.fee_type == FeeType.PERCENTAGE:
            return loan_amount * self.amount / 100
        return self.amount


@dataclass(frozen=True)
class LenderProfile:
    """Lender snapshot from the catalog, with its loan products"""

    id: str
    name: str
    min_loan_amount: float
    max_loan_amount: float
    min_credit_score: int
    max_ltv_pct: float
    rating: float
    processing_time: str  # e.g. "21-30 days"
    fee_schedule: Tuple[LenderFee, ...] = ()
    products: Tuple[LoanProduct, ...] = ()
    locations: Tuple[str, ...] = ()
    features: Tuple[str, ...] = ()

    @property
    def processing_time_days(self) -> Tuple[int, ...]:
        """Day counts quoted in the processing time description"""
        return tuple(int(n) for n in re.findall(r"\d+", self.processing_time))


@dataclass(frozen=True)
class AmortizationEntry:
    """Single scheduled payment"""

    payment_number: int
    payment_date: date
    principal_portion: float
    interest_portion: float
    total_payment: float
    remaining_balance: float
    cumulative_interest: float
    cumulative_principal: float


@dataclass(frozen=True)
class MortgageBreakdown:
    """Principal and interest plus monthly escrow items, with the full schedule"""

    loan_amount: float
    interest_rate: float
    term_years: int
    down_payment: float
    principal_and_interest: float
    property_tax: float
    insurance: float
    pmi: float
    hoa: float
    total_monthly_payment: float
    total_interest: float
    total_cost: float
    schedule: Tuple[AmortizationEntry, ...]


@dataclass(frozen=True)
class AffordabilityResult:
    max_loan_amount: float
    max_property_value: float
    max_monthly_payment: float
    recommended_loan_amount: float
    recommended_property_value: float


@dataclass(frozen=True)
class RefinanceAnalysis:
    current_monthly_payment: float
    new_monthly_payment: float
    monthly_savings: float
    total_savings: float
    break_even_months: float
    is_beneficial: bool


@dataclass(frozen=True)
class BiWeeklyAnalysis:
    monthly_payment: float
    bi_weekly_payment: float
    payment_count: int
    total_paid: float
    total_interest: float
    total_interest_saved: float
    time_saved_months: float


@dataclass(frozen=True)
class ArmPeriod:
    monthly_payment: float
    interest_rate: float
    term_years: int
    starting_balance: float


@dataclass(frozen=True)
class ArmAnalysis:
    initial_period: ArmPeriod
    adjusted_period: ArmPeriod
    total_savings: float


@dataclass(frozen=True)
class RateAdjustment:
    """One fired rule from the rate table"""

    code: str
    description: str
    adjustment: float


@dataclass(frozen=True)
class RateQuote:
    base_rate: float
    adjustments: Tuple[RateAdjustment, ...]
    rules_version: str

    @property
    def rate(self) -> float:
        return self.base_rate + sum(a.adjustment for a in self.adjustments)


@dataclass(frozen=True)
class FinancingOption:
    """A priced lender/product combination for a borrower request"""

    id: str
    lender_id: str
    product_id: str
    product_name: str
    loan_amount: float
    interest_rate: float
    apr: float
    term_years: int
    monthly_payment: float
    total_cost: float
    down_payment: float
    closing_costs: float
    lender_fees_total: float
    comparison_score: float
    rate_quote: Optional[RateQuote] = None

    @property
    def is_recommended(self) -> bool:
        return self.comparison_score > 80


@dataclass(frozen=True)
class FinancingComparison:
    loan_amount: float
    down_payment: float
    credit_score: int
    property_value: float
    options: Tuple[FinancingOption, ...]
    compared_at: datetime
    best_option_id: Optional[str] = None


@dataclass(frozen=True)
class PreQualificationResult:
    status: QualificationStatus
    estimated_max_loan_amount: float
    estimated_rate: float
    estimated_monthly_payment: float
    debt_to_income_ratio: float
    loan_to_value_ratio: float
    credit_score: int
    down_payment: float
    issued_at: datetime
    valid_until: datetime
    conditions: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CreditFactor:
    name: str
    impact: FactorImpact
    description: str
    weight: int


@dataclass(frozen=True)
class CreditAssessment:
    credit_score: int
    risk_tier: RiskTier
    estimated_rate: float
    pre_qualification_amount: float
    assessed_at: datetime
    factors: Tuple[CreditFactor, ...] = ()
    recommendations: Tuple[str, ...] = ()
    borrower_id: Optional[str] = None


@dataclass(frozen=True)
class AmortizationRequest:
    """Input to the amortization facade; escrow items are annual figures"""

    loan_amount: float
    annual_interest_rate: float
    term_years: int
    down_payment: float = 0.0
    annual_property_tax: float = 0.0
    annual_insurance: float = 0.0
    annual_pmi: float = 0.0
    annual_hoa: float = 0.0
    start_date: Optional[date] = None


@dataclass(frozen=True)
class FinancingRequest:
    loan: LoanRequest
    down_payment: float
    credit_score: int
    lender_ids: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class PreQualificationRequest:
    borrower: BorrowerProfile
    down_payment: Optional[float] = None
