"""POST /v1/amortization - payment, schedule and affordability calculators"""

import logging

from fastapi import APIRouter, Depends, Request

from financing_gateway.api.dependencies import get_engine, get_request_id
from financing_gateway.api.errors import to_http_error
from financing_gateway.api.v1.schemas import (
    AffordabilityRequest,
    AffordabilityResponse,
    AmortizationRequest,
    AmortizationResponse,
    ArmRequest,
    ArmResponse,
    BiWeeklyRequest,
    BiWeeklyResponse,
    RefinanceRequest,
    RefinanceResponse,
)
from financing_gateway.domain import amortization
from financing_gateway.domain.engine import FinancingEngine
from financing_gateway.domain.exceptions import DomainException

router = APIRouter()


@router.post("/amortization", response_model=AmortizationResponse)
def compute_amortization(
    request_body: AmortizationRequest,
    request: Request,
    engine: FinancingEngine = Depends(get_engine),
):
    """
    Full monthly cost breakdown and amortization schedule.

    Flow:
    1. Compute principal & interest payment
    2. Build the schedule, one entry per month
    3. Add monthly escrow items (tax, insurance, PMI, HOA)
    """
    request_id = get_request_id(request)

    try:
        breakdown = engine.compute_amortization(request_body.to_domain())
    except DomainException as e:
        raise to_http_error(e, request_id)

    logging.info(
        "Amortization computed",
        extra={
            "request_id": request_id,
            "loan_amount": request_body.loan_amount,
            "payments": len(breakdown.schedule),
        },
    )
    return AmortizationResponse.model_validate(breakdown)


@router.post("/amortization/affordability", response_model=AffordabilityResponse)
def compute_affordability(request_body: AffordabilityRequest, request: Request):
    """Maximum and recommended loan for a borrower's income and debts"""
    try:
        result = amortization.affordability(
            monthly_gross_income=request_body.monthly_gross_income,
            monthly_debt_payments=request_body.monthly_debt_payments,
            down_payment=request_body.down_payment,
            max_dti_pct=request_body.max_dti_pct,
            annual_rate_pct=request_body.annual_interest_rate,
            term_years=request_body.term_years,
            monthly_property_tax=request_body.monthly_property_tax,
            monthly_insurance=request_body.monthly_insurance,
            monthly_pmi=request_body.monthly_pmi,
            monthly_hoa=request_body.monthly_hoa,
        )
    except DomainException as e:
        raise to_http_error(e, get_request_id(request))

    return AffordabilityResponse.model_validate(result)


@router.post("/amortization/refinance", response_model=RefinanceResponse)
def compute_refinance(request_body: RefinanceRequest, request: Request):
    try:
        result = amortization.refinancing_savings(
            current_loan=request_body.current_loan_amount,
            current_rate_pct=request_body.current_interest_rate,
            current_term_years=request_body.current_term_years,
            new_rate_pct=request_body.new_interest_rate,
            new_term_years=request_body.new_term_years,
            refinancing_cost=request_body.refinancing_cost,
        )
    except DomainException as e:
        raise to_http_error(e, get_request_id(request))

    return RefinanceResponse.model_validate(result)


@router.post("/amortization/bi-weekly", response_model=BiWeeklyResponse)
def compute_bi_weekly(request_body: BiWeeklyRequest, request: Request):
    try:
        result = amortization.bi_weekly_savings(
            loan_amount=request_body.loan_amount,
            annual_rate_pct=request_body.annual_interest_rate,
            term_years=request_body.term_years,
        )
    except DomainException as e:
        raise to_http_error(e, get_request_id(request))

    return BiWeeklyResponse.model_validate(result)


@router.post("/amortization/arm", response_model=ArmResponse)
def compute_arm(request_body: ArmRequest, request: Request):
    """Payments before and after the first adjustment of an adjustable-rate mortgage"""
    try:
        result = amortization.arm_payments(
            loan_amount=request_body.loan_amount,
            initial_rate_pct=request_body.initial_rate,
            initial_term_years=request_body.initial_term_years,
            periodic_cap_pct=request_body.periodic_cap,
            lifetime_cap_pct=request_body.lifetime_cap,
            index_rate_pct=request_body.index_rate,
            margin_pct=request_body.margin,
            total_term_years=request_body.total_term_years,
        )
    except DomainException as e:
        raise to_http_error(e, get_request_id(request))

    return ArmResponse.model_validate(result)
