"""POST /v1/prequalification - indicative borrower qualification and credit assessment"""

import time

from fastapi import APIRouter, Depends, Request

from financing_gateway.api.dependencies import get_engine, get_request_id
from financing_gateway.api.errors import to_http_error
from financing_gateway.api.v1.schemas import (
    CreditAssessmentResponse,
    PreQualificationRequest,
    PreQualificationResponse,
)
from financing_gateway.domain.engine import FinancingEngine
from financing_gateway.domain.exceptions import DomainException
from financing_gateway.domain.models import PreQualificationRequest as PreQualificationInput
from financing_gateway.infrastructure.observability.logging import log_prequalification
from financing_gateway.infrastructure.observability.metrics import record_prequalification

router = APIRouter()


@router.post("/prequalification", response_model=PreQualificationResponse)
def evaluate_pre_qualification(
    request_body: PreQualificationRequest,
    request: Request,
    engine: FinancingEngine = Depends(get_engine),
):
    """
    Indicative qualification decision for a borrower.

    Flow:
    1. Size the largest loan the borrower's income supports at 28% DTI
    2. Apply status rules (DTI, credit score, LTV) in order
    3. Issue the result with a 90-day validity window
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        result = engine.evaluate_pre_qualification(
            PreQualificationInput(borrower=request_body.to_borrower())
        )
    except DomainException as e:
        raise to_http_error(e, request_id)

    duration_ms = (time.time() - start_time) * 1000
    record_prequalification(result.status.value)
    log_prequalification(
        request_id,
        result.status.value,
        len(result.conditions),
        result.estimated_max_loan_amount,
        duration_ms,
    )

    return PreQualificationResponse.model_validate(result)


@router.get("/credit/{borrower_id}", response_model=CreditAssessmentResponse)
async def evaluate_credit_risk(
    borrower_id: str,
    request: Request,
    engine: FinancingEngine = Depends(get_engine),
):
    """Weighted credit-factor assessment for a stored borrower"""
    try:
        assessment = await engine.evaluate_credit_risk(borrower_id)
    except DomainException as e:
        raise to_http_error(e, get_request_id(request))

    return CreditAssessmentResponse.model_validate(assessment)
