"""POST /v1/financing - lender matching and option ranking endpoints"""

import time
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from financing_gateway.api.dependencies import get_engine, get_request_id
from financing_gateway.api.errors import to_http_error
from financing_gateway.api.v1.schemas import (
    FinancingComparisonResponse,
    FinancingOptionSchema,
    FinancingOptionsResponse,
    FinancingRequest,
    LenderSchema,
    LendersResponse,
)
from financing_gateway.domain.engine import FinancingEngine
from financing_gateway.domain.exceptions import DomainException
from financing_gateway.infrastructure.observability.logging import log_ranking
from financing_gateway.infrastructure.observability.metrics import record_ranking

router = APIRouter()


@router.post("/financing/options", response_model=FinancingOptionsResponse)
async def rank_financing_options(
    request_body: FinancingRequest,
    request: Request,
    engine: FinancingEngine = Depends(get_engine),
):
    """
    Rank every eligible lender product for a loan request.

    Flow:
    1. Fetch the lender catalog snapshot
    2. Drop lenders and products whose eligibility rules fail
    3. Price each remaining product and score it
    4. Return options ordered by score, best first
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        options = await engine.rank_financing_options(request_body.to_domain())
    except DomainException as e:
        raise to_http_error(e, request_id)

    duration_ms = (time.time() - start_time) * 1000
    record_ranking(len(options))
    log_ranking(request_id, request_body.credit_score, request_body.loan_amount, len(options), duration_ms)

    return FinancingOptionsResponse(
        options=[FinancingOptionSchema.model_validate(option) for option in options]
    )


@router.post("/financing/comparison", response_model=FinancingComparisonResponse)
async def compare_financing(
    request_body: FinancingRequest,
    request: Request,
    engine: FinancingEngine = Depends(get_engine),
):
    """Ranked options together with the request echo and best option"""
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        comparison = await engine.compare_financing(request_body.to_domain())
    except DomainException as e:
        raise to_http_error(e, request_id)

    duration_ms = (time.time() - start_time) * 1000
    record_ranking(len(comparison.options))
    log_ranking(request_id, request_body.credit_score, request_body.loan_amount, len(comparison.options), duration_ms)

    return FinancingComparisonResponse.model_validate(comparison)


@router.get("/lenders", response_model=LendersResponse)
async def search_lenders(
    request: Request,
    min_amount: Optional[float] = Query(None, ge=0),
    max_amount: Optional[float] = Query(None, ge=0),
    lender_id: List[str] = Query(default=[]),
    location: List[str] = Query(default=[]),
    engine: FinancingEngine = Depends(get_engine),
):
    """
    Search the lender catalog.

    ``min_amount`` and ``max_amount`` must be given together; a lender matches
    when its loan amount limits overlap the requested range.
    """
    request_id = get_request_id(request)

    if (min_amount is None) != (max_amount is None):
        raise HTTPException(status_code=422, detail="min_amount and max_amount must be given together")
    amount_range = (min_amount, max_amount) if min_amount is not None else None

    try:
        lenders = await engine.search_lenders(
            loan_amount_range=amount_range,
            lender_ids=lender_id or None,
            locations=location or None,
        )
    except DomainException as e:
        raise to_http_error(e, request_id)

    return LendersResponse(lenders=[LenderSchema.model_validate(lender) for lender in lenders])
