"""Amortization engine - payment formulas, schedules and loan analyses"""

import math
from datetime import date
from typing import List, Optional

from financing_gateway.domain.exceptions import ArithmeticOverflowError, InvalidInputError
from financing_gateway.domain.models import (
    AffordabilityResult,
    AmortizationEntry,
    ArmAnalysis,
    ArmPeriod,
    BiWeeklyAnalysis,
    MortgageBreakdown,
    RefinanceAnalysis,
)
from financing_gateway.utils.date_utils import monthly_dates

# Share of the maximum loan suggested as a comfortable target
RECOMMENDED_LOAN_FACTOR = 0.8

# Returned as break-even when refinancing never recovers its cost
NO_BREAK_EVEN = -1.0

# Bi-weekly simulation stops once the balance is within a cent
BALANCE_EPSILON = 0.01

PERIODS_PER_YEAR = 12
BI_WEEKLY_PERIODS_PER_YEAR = 26


def _require_positive(name: str, value: float) -> None:
    if value is None or not math.isfinite(value) or value <= 0:
        raise InvalidInputError(f"{name} must be a positive number, got {value!r}")


def _require_non_negative(name: str, value: float) -> None:
    if value is None or not math.isfinite(value) or value < 0:
        raise InvalidInputError(f"{name} must be zero or positive, got {value!r}")


def monthly_payment(loan_amount: float, annual_rate_pct: float, term_years: float) -> float:
    """
    Fully amortizing monthly payment.

    Uses the annuity formula P·r(1+r)^n / ((1+r)^n − 1) with r the monthly
    rate and n the number of monthly payments. A zero rate returns exactly
    ``loan_amount / n``.

    Raises:
        InvalidInputError: loan amount or term not positive, or rate negative
    """
    _require_positive("loan_amount", loan_amount)
    _require_positive("term_years", term_years)
    _require_non_negative("annual_rate_pct", annual_rate_pct)

    n = term_years * PERIODS_PER_YEAR
    if annual_rate_pct == 0:
        return loan_amount / n

    r = annual_rate_pct / 100 / PERIODS_PER_YEAR
    growth = (1 + r) ** n
    return loan_amount * r * growth / (growth - 1)


def total_interest(loan_amount: float, monthly_payment: float, term_years: float) -> float:
    """Interest paid over the life of the loan at a fixed monthly payment"""
    return monthly_payment * term_years * PERIODS_PER_YEAR - loan_amount


def amortization_schedule(
    loan_amount: float,
    annual_rate_pct: float,
    term_years: int,
    start_date: Optional[date] = None,
) -> List[AmortizationEntry]:
    """
    Generate the month-by-month repayment schedule.

    Requirements:
    - Interest each period is charged on the remaining balance
    - Principal never exceeds the remaining balance
    - Final scheduled period absorbs floating-point drift so the balance closes at 0
    - Stops as soon as the balance is exhausted, even before n periods

    Args:
        loan_amount: Amount borrowed
        annual_rate_pct: Nominal annual rate, e.g. 6.5 for 6.5%
        term_years: Amortization period in years
        start_date: First payment date (default: today)
    """
    payment = monthly_payment(loan_amount, annual_rate_pct, term_years)
    monthly_rate = annual_rate_pct / 100 / PERIODS_PER_YEAR
    number_of_payments = int(term_years * PERIODS_PER_YEAR)

    if start_date is None:
        start_date = date.today()

    schedule = []
    remaining_balance = loan_amount
    cumulative_interest = 0.0
    cumulative_principal = 0.0

    for i, payment_date in enumerate(monthly_dates(start_date, number_of_payments), start=1):
        interest = remaining_balance * monthly_rate
        principal = min(payment - interest, remaining_balance)

        # Last payment retires whatever is left
        if i == number_of_payments:
            principal = remaining_balance

        remaining_balance -= principal
        cumulative_interest += interest
        cumulative_principal += principal

        schedule.append(
            AmortizationEntry(
                payment_number=i,
                payment_date=payment_date,
                principal_portion=principal,
                interest_portion=interest,
                total_payment=principal + interest,
                remaining_balance=max(0.0, remaining_balance),
                cumulative_interest=cumulative_interest,
                cumulative_principal=cumulative_principal,
            )
        )

        if remaining_balance <= 0:
            break

    return schedule


def complete_mortgage(
    loan_amount: float,
    annual_rate_pct: float,
    term_years: int,
    down_payment: float = 0.0,
    annual_property_tax: float = 0.0,
    annual_insurance: float = 0.0,
    annual_pmi: float = 0.0,
    annual_hoa: float = 0.0,
    start_date: Optional[date] = None,
) -> MortgageBreakdown:
    """Bundle principal and interest with monthly escrow items (supplied as annual figures)"""
    for name, value in (
        ("down_payment", down_payment),
        ("annual_property_tax", annual_property_tax),
        ("annual_insurance", annual_insurance),
        ("annual_pmi", annual_pmi),
        ("annual_hoa", annual_hoa),
    ):
        _require_non_negative(name, value)

    principal_and_interest = monthly_payment(loan_amount, annual_rate_pct, term_years)
    interest = total_interest(loan_amount, principal_and_interest, term_years)

    property_tax = annual_property_tax / PERIODS_PER_YEAR
    insurance = annual_insurance / PERIODS_PER_YEAR
    pmi = annual_pmi / PERIODS_PER_YEAR
    hoa = annual_hoa / PERIODS_PER_YEAR

    return MortgageBreakdown(
        loan_amount=loan_amount,
        interest_rate=annual_rate_pct,
        term_years=term_years,
        down_payment=down_payment,
        principal_and_interest=principal_and_interest,
        property_tax=property_tax,
        insurance=insurance,
        pmi=pmi,
        hoa=hoa,
        total_monthly_payment=principal_and_interest + property_tax + insurance + pmi + hoa,
        total_interest=interest,
        total_cost=loan_amount + interest + down_payment,
        schedule=tuple(amortization_schedule(loan_amount, annual_rate_pct, term_years, start_date)),
    )


def loan_to_value(loan_amount: float, property_value: float) -> float:
    """Loan-to-value as a percentage"""
    _require_positive("property_value", property_value)
    _require_non_negative("loan_amount", loan_amount)
    return loan_amount / property_value * 100


def debt_to_income(monthly_debt_payments: float, monthly_gross_income: float) -> float:
    """Debt-to-income as a percentage"""
    _require_positive("monthly_gross_income", monthly_gross_income)
    _require_non_negative("monthly_debt_payments", monthly_debt_payments)
    return monthly_debt_payments / monthly_gross_income * 100


def max_loan_amount(
    monthly_gross_income: float,
    max_dti_pct: float,
    monthly_debt_payments: float,
    monthly_property_tax: float = 0.0,
    monthly_insurance: float = 0.0,
    monthly_pmi: float = 0.0,
    monthly_hoa: float = 0.0,
    annual_rate_pct: float = 4.5,
    term_years: int = 30,
) -> float:
    """
    Largest principal whose payment fits the DTI budget.

    The affordable mortgage payment is ``income·maxDTI − existing debt − escrow``;
    the annuity formula is inverted to find the matching principal. Returns 0
    when that budget is not positive.
    """
    budget = _mortgage_budget(
        monthly_gross_income,
        max_dti_pct,
        monthly_debt_payments,
        monthly_property_tax + monthly_insurance + monthly_pmi + monthly_hoa,
    )
    _require_positive("term_years", term_years)
    _require_non_negative("annual_rate_pct", annual_rate_pct)
    if budget <= 0:
        return 0.0

    n = term_years * PERIODS_PER_YEAR
    if annual_rate_pct == 0:
        return budget * n

    r = annual_rate_pct / 100 / PERIODS_PER_YEAR
    growth = (1 + r) ** n
    return budget * (growth - 1) / (r * growth)


def _mortgage_budget(
    monthly_gross_income: float,
    max_dti_pct: float,
    monthly_debt_payments: float,
    monthly_escrow: float,
) -> float:
    _require_positive("monthly_gross_income", monthly_gross_income)
    _require_positive("max_dti_pct", max_dti_pct)
    _require_non_negative("monthly_debt_payments", monthly_debt_payments)
    _require_non_negative("monthly_escrow", monthly_escrow)
    if max_dti_pct > 100:
        raise InvalidInputError(f"max_dti_pct must not exceed 100, got {max_dti_pct!r}")
    return monthly_gross_income * max_dti_pct / 100 - monthly_debt_payments - monthly_escrow


def affordability(
    monthly_gross_income: float,
    monthly_debt_payments: float,
    down_payment: float,
    max_dti_pct: float = 28.0,
    annual_rate_pct: float = 4.5,
    term_years: int = 30,
    monthly_property_tax: float = 0.0,
    monthly_insurance: float = 0.0,
    monthly_pmi: float = 0.0,
    monthly_hoa: float = 0.0,
) -> AffordabilityResult:
    """Maximum and recommended (80% of max) loan and property value for a borrower"""
    _require_non_negative("down_payment", down_payment)
    max_loan = max_loan_amount(
        monthly_gross_income,
        max_dti_pct,
        monthly_debt_payments,
        monthly_property_tax,
        monthly_insurance,
        monthly_pmi,
        monthly_hoa,
        annual_rate_pct,
        term_years,
    )
    budget = _mortgage_budget(
        monthly_gross_income,
        max_dti_pct,
        monthly_debt_payments,
        monthly_property_tax + monthly_insurance + monthly_pmi + monthly_hoa,
    )
    recommended = max_loan * RECOMMENDED_LOAN_FACTOR

    return AffordabilityResult(
        max_loan_amount=max_loan,
        max_property_value=max_loan + down_payment,
        max_monthly_payment=max(0.0, budget),
        recommended_loan_amount=recommended,
        recommended_property_value=recommended + down_payment,
    )


def refinancing_savings(
    current_loan: float,
    current_rate_pct: float,
    current_term_years: int,
    new_rate_pct: float,
    new_term_years: int,
    refinancing_cost: float,
) -> RefinanceAnalysis:
    """
    Compare the current payment with a refinanced one.

    ``break_even_months`` is ``refinancing_cost / monthly_savings``. When the
    new payment saves nothing, break-even never arrives: the NO_BREAK_EVEN
    sentinel is returned and the refinance is never beneficial.
    """
    _require_non_negative("refinancing_cost", refinancing_cost)
    current_payment = monthly_payment(current_loan, current_rate_pct, current_term_years)
    new_payment = monthly_payment(current_loan, new_rate_pct, new_term_years)

    monthly_savings = current_payment - new_payment
    total_savings = monthly_savings * new_term_years * PERIODS_PER_YEAR - refinancing_cost

    if monthly_savings <= 0:
        break_even = NO_BREAK_EVEN
        is_beneficial = False
    else:
        break_even = refinancing_cost / monthly_savings
        is_beneficial = total_savings > 0

    return RefinanceAnalysis(
        current_monthly_payment=current_payment,
        new_monthly_payment=new_payment,
        monthly_savings=monthly_savings,
        total_savings=total_savings,
        break_even_months=break_even,
        is_beneficial=is_beneficial,
    )


def bi_weekly_iteration_limit(term_years: int) -> int:
    """Maximum half-payments simulated before giving up"""
    return int(term_years * BI_WEEKLY_PERIODS_PER_YEAR) + 52


def bi_weekly_savings(loan_amount: float, annual_rate_pct: float, term_years: int) -> BiWeeklyAnalysis:
    """
    Simulate paying half the monthly payment every two weeks.

    26 half-payments a year amount to 13 monthly payments, so the loan
    retires early. The simulation is bounded by ``bi_weekly_iteration_limit``.

    Raises:
        ArithmeticOverflowError: balance not exhausted within the iteration bound
    """
    payment = monthly_payment(loan_amount, annual_rate_pct, term_years)
    half_payment = payment / 2
    period_rate = annual_rate_pct / 100 / BI_WEEKLY_PERIODS_PER_YEAR
    limit = bi_weekly_iteration_limit(term_years)

    balance = loan_amount
    total_paid = 0.0
    interest_paid = 0.0
    payments = 0

    while balance > BALANCE_EPSILON:
        if payments >= limit:
            raise ArithmeticOverflowError(
                f"Bi-weekly simulation did not converge within {limit} payments"
            )
        interest = balance * period_rate
        principal = min(half_payment - interest, balance)
        balance -= principal
        total_paid += principal + interest
        interest_paid += interest
        payments += 1

        if not math.isfinite(balance):
            raise ArithmeticOverflowError("Bi-weekly simulation produced a non-finite balance")

    original_interest = total_interest(loan_amount, payment, term_years)
    time_saved = term_years * PERIODS_PER_YEAR - total_paid / payment

    return BiWeeklyAnalysis(
        monthly_payment=payment,
        bi_weekly_payment=half_payment,
        payment_count=payments,
        total_paid=total_paid,
        total_interest=interest_paid,
        total_interest_saved=original_interest - interest_paid,
        time_saved_months=max(0.0, time_saved),
    )


def adjusted_arm_rate(
    initial_rate_pct: float,
    periodic_cap_pct: float,
    lifetime_cap_pct: float,
    index_rate_pct: float,
    margin_pct: float,
) -> float:
    """Fully indexed rate floored by the periodic cap, then capped by the lifetime cap"""
    return min(
        max(index_rate_pct + margin_pct, initial_rate_pct - periodic_cap_pct),
        initial_rate_pct + lifetime_cap_pct,
    )


def arm_payments(
    loan_amount: float,
    initial_rate_pct: float,
    initial_term_years: int,
    periodic_cap_pct: float,
    lifetime_cap_pct: float,
    index_rate_pct: float,
    margin_pct: float,
    total_term_years: int,
) -> ArmAnalysis:
    """
    Payments before and after the first ARM adjustment.

    The initial payment amortizes over the full term. The balance left after
    the fixed period is found by simulating it month by month, then
    re-amortized over the remaining years at the adjusted rate.

    ``total_savings`` compares what is paid during the fixed period with what
    is paid after the adjustment.

    Raises:
        InvalidInputError: caps negative or fixed period not shorter than the term
        ArithmeticOverflowError: simulation produced a non-finite balance
    """
    _require_positive("initial_term_years", initial_term_years)
    _require_non_negative("periodic_cap_pct", periodic_cap_pct)
    _require_non_negative("lifetime_cap_pct", lifetime_cap_pct)
    _require_non_negative("index_rate_pct", index_rate_pct)
    _require_non_negative("margin_pct", margin_pct)
    if initial_term_years >= total_term_years:
        raise InvalidInputError(
            f"initial_term_years ({initial_term_years}) must be shorter than "
            f"total_term_years ({total_term_years})"
        )

    initial_payment = monthly_payment(loan_amount, initial_rate_pct, total_term_years)
    monthly_rate = initial_rate_pct / 100 / PERIODS_PER_YEAR
    fixed_months = int(initial_term_years * PERIODS_PER_YEAR)

    remaining_balance = loan_amount
    for _ in range(fixed_months):
        interest = remaining_balance * monthly_rate
        remaining_balance -= min(initial_payment - interest, remaining_balance)
    if not math.isfinite(remaining_balance):
        raise ArithmeticOverflowError("ARM simulation produced a non-finite balance")

    new_rate = adjusted_arm_rate(
        initial_rate_pct, periodic_cap_pct, lifetime_cap_pct, index_rate_pct, margin_pct
    )
    remaining_years = total_term_years - initial_term_years
    adjusted_payment = (
        monthly_payment(remaining_balance, max(new_rate, 0.0), remaining_years)
        if remaining_balance > BALANCE_EPSILON
        else 0.0
    )

    total_savings = initial_payment * fixed_months - adjusted_payment * remaining_years * PERIODS_PER_YEAR

    return ArmAnalysis(
        initial_period=ArmPeriod(
            monthly_payment=initial_payment,
            interest_rate=initial_rate_pct,
            term_years=initial_term_years,
            starting_balance=loan_amount,
        ),
        adjusted_period=ArmPeriod(
            monthly_payment=adjusted_payment,
            interest_rate=new_rate,
            term_years=remaining_years,
            starting_balance=max(0.0, remaining_balance),
        ),
        total_savings=total_savings,
    )
