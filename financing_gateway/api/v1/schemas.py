"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from financing_gateway.domain.models import (
    AmortizationRequest as AmortizationInput,
    BorrowerProfile,
    FactorImpact,
    FeeType,
    FinancingRequest as FinancingInput,
    LoanRequest,
    QualificationStatus,
    RateType,
    RiskTier,
)


class ResponseModel(BaseModel):
    """Response schemas are read straight off the domain value objects"""

    model_config = ConfigDict(from_attributes=True)


# Requests


class AmortizationRequest(BaseModel):
    """Request body for POST /v1/amortization"""

    loan_amount: float = Field(..., gt=0, description="Amount borrowed")
    annual_interest_rate: float = Field(..., ge=0, le=100, description="Nominal annual rate in percent")
    term_years: int = Field(..., gt=0, le=50)
    down_payment: float = Field(0.0, ge=0)
    annual_property_tax: float = Field(0.0, ge=0)
    annual_insurance: float = Field(0.0, ge=0)
    annual_pmi: float = Field(0.0, ge=0)
    annual_hoa: float = Field(0.0, ge=0)
    start_date: Optional[date] = None

    def to_domain(self) -> AmortizationInput:
        return AmortizationInput(**self.model_dump())


class AffordabilityRequest(BaseModel):
    """Request body for POST /v1/amortization/affordability"""

    monthly_gross_income: float = Field(..., gt=0)
    monthly_debt_payments: float = Field(0.0, ge=0)
    down_payment: float = Field(0.0, ge=0)
    max_dti_pct: float = Field(28.0, gt=0, le=100)
    annual_interest_rate: float = Field(4.5, ge=0, le=100)
    term_years: int = Field(30, gt=0, le=50)
    monthly_property_tax: float = Field(0.0, ge=0)
    monthly_insurance: float = Field(0.0, ge=0)
    monthly_pmi: float = Field(0.0, ge=0)
    monthly_hoa: float = Field(0.0, ge=0)


class RefinanceRequest(BaseModel):
    """Request body for POST /v1/amortization/refinance"""

    current_loan_amount: float = Field(..., gt=0)
    current_interest_rate: float = Field(..., ge=0, le=100)
    current_term_years: int = Field(..., gt=0, le=50)
    new_interest_rate: float = Field(..., ge=0, le=100)
    new_term_years: int = Field(..., gt=0, le=50)
    refinancing_cost: float = Field(0.0, ge=0)


class BiWeeklyRequest(BaseModel):
    """Request body for POST /v1/amortization/bi-weekly"""

    loan_amount: float = Field(..., gt=0)
    annual_interest_rate: float = Field(..., ge=0, le=100)
    term_years: int = Field(..., gt=0, le=50)


class ArmRequest(BaseModel):
    """Request body for POST /v1/amortization/arm"""

    loan_amount: float = Field(..., gt=0)
    initial_rate: float = Field(..., ge=0, le=100)
    initial_term_years: int = Field(..., gt=0, le=50)
    periodic_cap: float = Field(..., ge=0)
    lifetime_cap: float = Field(..., ge=0)
    index_rate: float = Field(..., ge=0)
    margin: float = Field(..., ge=0)
    total_term_years: int = Field(..., gt=0, le=50)


class FinancingRequest(BaseModel):
    """Request body for POST /v1/financing/options and /v1/financing/comparison"""

    loan_amount: float = Field(..., gt=0)
    property_value: float = Field(..., gt=0)
    down_payment: float = Field(..., ge=0)
    credit_score: int = Field(..., ge=300, le=850)
    term_years: Optional[int] = Field(
        None, gt=0, le=50, description="Omit to quote every product at its own term"
    )
    annual_interest_rate: Optional[float] = Field(
        None, ge=0, le=100, description="Omit to price from the credit-risk rule table"
    )
    lender_ids: List[str] = Field(default_factory=list)

    def to_domain(self) -> FinancingInput:
        return FinancingInput(
            loan=LoanRequest(
                loan_amount=self.loan_amount,
                property_value=self.property_value,
                term_years=self.term_years,
                annual_interest_rate=self.annual_interest_rate,
            ),
            down_payment=self.down_payment,
            credit_score=self.credit_score,
            lender_ids=tuple(self.lender_ids),
        )


class PreQualificationRequest(BaseModel):
    """Request body for POST /v1/prequalification"""

    borrower_id: Optional[str] = None
    monthly_gross_income: float = Field(..., gt=0)
    monthly_debt_payments: float = Field(0.0, ge=0)
    credit_score: int = Field(..., ge=300, le=850)
    down_payment: float = Field(0.0, ge=0)

    def to_borrower(self) -> BorrowerProfile:
        return BorrowerProfile(
            borrower_id=self.borrower_id,
            monthly_gross_income=self.monthly_gross_income,
            monthly_debt_payments=self.monthly_debt_payments,
            credit_score=self.credit_score,
            down_payment=self.down_payment,
        )


# Responses


class AmortizationEntrySchema(ResponseModel):
    payment_number: int
    payment_date: date
    principal_portion: float
    interest_portion: float
    total_payment: float
    remaining_balance: float
    cumulative_interest: float
    cumulative_principal: float


class AmortizationResponse(ResponseModel):
    """Response for POST /v1/amortization"""

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
    schedule: List[AmortizationEntrySchema]


class AffordabilityResponse(ResponseModel):
    max_loan_amount: float
    max_property_value: float
    max_monthly_payment: float
    recommended_loan_amount: float
    recommended_property_value: float


class RefinanceResponse(ResponseModel):
    current_monthly_payment: float
    new_monthly_payment: float
    monthly_savings: float
    total_savings: float
    break_even_months: float
    is_beneficial: bool


class BiWeeklyResponse(ResponseModel):
    monthly_payment: float
    bi_weekly_payment: float
    payment_count: int
    total_paid: float
    total_interest: float
    total_interest_saved: float
    time_saved_months: float


class ArmPeriodSchema(ResponseModel):
    monthly_payment: float
    interest_rate: float
    term_years: int
    starting_balance: float


class ArmResponse(ResponseModel):
    initial_period: ArmPeriodSchema
    adjusted_period: ArmPeriodSchema
    total_savings: float


class RateAdjustmentSchema(ResponseModel):
    code: str
    description: str
    adjustment: float


class RateQuoteSchema(ResponseModel):
    base_rate: float
    rate: float
    rules_version: str
    adjustments: List[RateAdjustmentSchema]


class FinancingOptionSchema(ResponseModel):
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
    is_recommended: bool
    rate_quote: Optional[RateQuoteSchema] = None


class FinancingOptionsResponse(BaseModel):
    """Response for POST /v1/financing/options"""

    options: List[FinancingOptionSchema]


class FinancingComparisonResponse(ResponseModel):
    """Response for POST /v1/financing/comparison"""

    loan_amount: float
    down_payment: float
    credit_score: int
    property_value: float
    options: List[FinancingOptionSchema]
    best_option_id: Optional[str] = None
    compared_at: datetime


class LenderFeeSchema(ResponseModel):
    id: str
    name: str
    fee_type: FeeType
    amount: float
    is_required: bool


class LoanProductSchema(ResponseModel):
    id: str
    name: str
    rate_type: RateType
    min_term: int
    max_term: int
    min_down_payment_pct: float
    max_down_payment_pct: float
    eligibility_notes: List[str]
    benefits: List[str]


class LenderSchema(ResponseModel):
    id: str
    name: str
    min_loan_amount: float
    max_loan_amount: float
    min_credit_score: int
    max_ltv_pct: float
    rating: float
    processing_time: str
    fee_schedule: List[LenderFeeSchema]
    products: List[LoanProductSchema]
    locations: List[str]
    features: List[str]


class LendersResponse(BaseModel):
    """Response for GET /v1/lenders"""

    lenders: List[LenderSchema]


class PreQualificationResponse(ResponseModel):
    """Response for POST /v1/prequalification"""

    status: QualificationStatus
    estimated_max_loan_amount: float
    estimated_rate: float
    estimated_monthly_payment: float
    debt_to_income_ratio: float
    loan_to_value_ratio: float
    credit_score: int
    down_payment: float
    conditions: List[str]
    issued_at: datetime
    valid_until: datetime


class CreditFactorSchema(ResponseModel):
    name: str
    impact: FactorImpact
    description: str
    weight: int


class CreditAssessmentResponse(ResponseModel):
    """Response for GET /v1/credit/{borrower_id}"""

    borrower_id: Optional[str] = None
    credit_score: int
    risk_tier: RiskTier
    estimated_rate: float
    pre_qualification_amount: float
    factors: List[CreditFactorSchema]
    recommendations: List[str]
    assessed_at: datetime
