"""Pre-qualification evaluator - indicative qualification decision and credit assessment"""

from datetime import datetime, timezone
from typing import List, Optional, Tuple

from financing_gateway.domain import amortization
from financing_gateway.domain.exceptions import InvalidInputError
from financing_gateway.domain.models import (
    BorrowerProfile,
    CreditAssessment,
    CreditFactor,
    FactorImpact,
    PreQualificationResult,
    QualificationStatus,
)
from financing_gateway.domain.risk import estimated_rate, risk_tier, validate_credit_score
from financing_gateway.utils.date_utils import expiry_after

# Qualification policy
MAX_DTI_PCT = 28.0
BASELINE_RATE_PCT = 4.5
QUALIFYING_TERM_YEARS = 30
MAX_LTV_PCT = 95.0
NOT_QUALIFIED_BELOW_SCORE = 620
CONDITIONAL_BELOW_SCORE = 680
VALIDITY_DAYS = 90

DTI_CONDITION = "Debt-to-income ratio exceeds 28%"
CREDIT_CONDITION = "Credit score below 680"
LTV_CONDITION = "Loan-to-value ratio exceeds 95%"

# Factor weights out of 100
PAYMENT_HISTORY_WEIGHT = 35
UTILIZATION_WEIGHT = 30
HISTORY_LENGTH_WEIGHT = 15
CREDIT_MIX_WEIGHT = 10
NEW_CREDIT_WEIGHT = 10

DEFAULT_RECOMMENDATIONS = (
    "Maintain current payment history",
    "Keep credit utilization below 30%",
    "Avoid new credit applications",
)


def _validate_borrower(borrower: BorrowerProfile) -> None:
    validate_credit_score(borrower.credit_score)
    if borrower.monthly_gross_income is None or borrower.monthly_gross_income <= 0:
        raise InvalidInputError("monthly_gross_income must be a positive number")
    if borrower.monthly_debt_payments is None or borrower.monthly_debt_payments < 0:
        raise InvalidInputError("monthly_debt_payments must be zero or positive")


def qualifying_max_loan(borrower: BorrowerProfile) -> float:
    """Max loan under the qualification policy: 28% DTI, 4.5% over 30 years, no escrow"""
    return amortization.max_loan_amount(
        borrower.monthly_gross_income,
        MAX_DTI_PCT,
        borrower.monthly_debt_payments,
        0.0,
        0.0,
        0.0,
        0.0,
        BASELINE_RATE_PCT,
        QUALIFYING_TERM_YEARS,
    )


def evaluate(
    borrower: BorrowerProfile,
    down_payment: Optional[float] = None,
    issued_at: Optional[datetime] = None,
) -> PreQualificationResult:
    """
    Produce an indicative pre-qualification decision.

    Status rules, in order:
    - start Qualified
    - DTI above 28% -> Conditional, with a DTI condition
    - score below 620 -> Not Qualified, overriding any Conditional
    - otherwise score below 680 -> Conditional, with a credit condition
    - LTV above 95% -> Conditional unless already Not Qualified, with an LTV condition

    The result is valid for 90 days from issuance.
    """
    _validate_borrower(borrower)
    if down_payment is None:
        down_payment = borrower.down_payment
    if down_payment is None or down_payment < 0:
        raise InvalidInputError(f"down_payment must be zero or positive, got {down_payment!r}")

    dti = amortization.debt_to_income(borrower.monthly_debt_payments, borrower.monthly_gross_income)
    max_loan = qualifying_max_loan(borrower)
    rate = estimated_rate(borrower.credit_score)

    if max_loan > 0:
        payment = amortization.monthly_payment(max_loan, rate, QUALIFYING_TERM_YEARS)
    else:
        payment = 0.0

    financed = max_loan + down_payment
    ltv = max_loan / financed * 100 if financed > 0 else 0.0

    status, conditions = _qualification_status(dti, borrower.credit_score, ltv)

    issued_at = issued_at or datetime.now(timezone.utc)
    return PreQualificationResult(
        status=status,
        estimated_max_loan_amount=max_loan,
        estimated_rate=rate,
        estimated_monthly_payment=payment,
        debt_to_income_ratio=dti,
        loan_to_value_ratio=ltv,
        credit_score=borrower.credit_score,
        down_payment=down_payment,
        issued_at=issued_at,
        valid_until=expiry_after(issued_at, VALIDITY_DAYS),
        conditions=tuple(conditions),
    )


def _qualification_status(dti: float, credit_score: int, ltv: float) -> Tuple[QualificationStatus, List[str]]:
    status = QualificationStatus.QUALIFIED
    conditions: List[str] = []

    if dti > MAX_DTI_PCT:
        status = QualificationStatus.CONDITIONAL
        conditions.append(DTI_CONDITION)

    if credit_score < NOT_QUALIFIED_BELOW_SCORE:
        status = QualificationStatus.NOT_QUALIFIED
    elif credit_score < CONDITIONAL_BELOW_SCORE:
        status = QualificationStatus.CONDITIONAL
        conditions.append(CREDIT_CONDITION)

    if ltv > MAX_LTV_PCT:
        if status != QualificationStatus.NOT_QUALIFIED:
            status = QualificationStatus.CONDITIONAL
        conditions.append(LTV_CONDITION)

    return status, conditions


def credit_assessment(borrower: BorrowerProfile, assessed_at: Optional[datetime] = None) -> CreditAssessment:
    """
    Weighted credit-factor breakdown for a borrower.

    Weights are fixed (35/30/15/10/10). Impact is read off the profile:
    payment history and new credit follow the score band, utilization
    follows DTI, and history length and mix stay neutral without bureau data.
    """
    _validate_borrower(borrower)
    score = borrower.credit_score
    dti = amortization.debt_to_income(borrower.monthly_debt_payments, borrower.monthly_gross_income)

    if score >= 740:
        history = (FactorImpact.POSITIVE, "Score consistent with no recent late payments")
    elif score >= NOT_QUALIFIED_BELOW_SCORE:
        history = (FactorImpact.NEUTRAL, "Score consistent with occasional late payments")
    else:
        history = (FactorImpact.NEGATIVE, "Score indicates missed or late payments")

    if dti < 30:
        utilization = (FactorImpact.POSITIVE, "Monthly debt below 30% of income")
    elif dti <= 43:
        utilization = (FactorImpact.NEUTRAL, "Monthly debt between 30% and 43% of income")
    else:
        utilization = (FactorImpact.NEGATIVE, "Monthly debt above 43% of income")

    if score >= CONDITIONAL_BELOW_SCORE:
        new_credit = (FactorImpact.NEUTRAL, "No indication of heavy recent credit seeking")
    else:
        new_credit = (FactorImpact.NEGATIVE, "Lower score may reflect recent credit inquiries")

    factors = (
        CreditFactor("Payment History", history[0], history[1], PAYMENT_HISTORY_WEIGHT),
        CreditFactor("Credit Utilization", utilization[0], utilization[1], UTILIZATION_WEIGHT),
        CreditFactor(
            "Credit History Length",
            FactorImpact.NEUTRAL,
            "Account age not reported",
            HISTORY_LENGTH_WEIGHT,
        ),
        CreditFactor("Credit Mix", FactorImpact.NEUTRAL, "Account mix not reported", CREDIT_MIX_WEIGHT),
        CreditFactor("New Credit", new_credit[0], new_credit[1], NEW_CREDIT_WEIGHT),
    )

    recommendations = list(DEFAULT_RECOMMENDATIONS)
    if utilization[0] == FactorImpact.NEGATIVE:
        recommendations.append("Pay down high-balance accounts to lower debt-to-income")
    if history[0] == FactorImpact.NEGATIVE:
        recommendations.append("Bring all accounts current and keep them current for 12 months")

    return CreditAssessment(
        borrower_id=borrower.borrower_id,
        credit_score=score,
        risk_tier=risk_tier(score),
        estimated_rate=estimated_rate(score),
        pre_qualification_amount=qualifying_max_loan(borrower),
        assessed_at=assessed_at or datetime.now(timezone.utc),
        factors=factors,
        recommendations=tuple(recommendations),
    )
