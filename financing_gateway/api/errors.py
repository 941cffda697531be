"""Translation of domain failures into HTTP errors"""

import logging

from fastapi import HTTPException

from financing_gateway.domain.exceptions import (
    ArithmeticOverflowError,
    BorrowerNotFoundError,
    CatalogUnavailableError,
    DomainException,
    InvalidInputError,
)
from financing_gateway.infrastructure.observability.logging import log_calculation_failure
from financing_gateway.infrastructure.observability.metrics import (
    catalog_fetch_failures_counter,
    record_calculation_failure,
)

# Calculation failures by metric/log kind
CALCULATION_FAILURES = (
    (InvalidInputError, "invalid_input"),
    (ArithmeticOverflowError, "arithmetic_overflow"),
)


def to_http_error(exc: DomainException, request_id: str) -> HTTPException:
    """Log and count a domain failure, returning the HTTPException to raise"""
    for error_type, kind in CALCULATION_FAILURES:
        if isinstance(exc, error_type):
            record_calculation_failure(kind)
            log_calculation_failure(request_id, kind, exc)
            return HTTPException(status_code=422, detail=str(exc))

    if isinstance(exc, BorrowerNotFoundError):
        logging.info(f"Borrower not found: {exc}", extra={"request_id": request_id})
        return HTTPException(status_code=404, detail=str(exc))

    if isinstance(exc, CatalogUnavailableError):
        catalog_fetch_failures_counter.inc()
        logging.error(f"Catalog error: {exc}", extra={"request_id": request_id})
        return HTTPException(status_code=503, detail="Lender catalog service unavailable")

    logging.error(f"Unexpected domain error: {exc}", extra={"request_id": request_id})
    return HTTPException(status_code=500, detail="Internal server error")
