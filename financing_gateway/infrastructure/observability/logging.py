"""Structured JSON logging for the financing service"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO

from pythonjsonlogger import jsonlogger

from financing_gateway.config import settings

# Client libraries that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter stamping UTC time, level and service name"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO", stream: Optional[TextIO] = None) -> None:
    """Route the root logger to a single JSON handler"""
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def log_ranking(
    request_id: str,
    credit_score: int,
    loan_amount: float,
    option_count: int,
    duration_ms: float,
) -> None:
    """Log structured ranking outcome for analysis"""
    logging.info(
        "Financing options ranked",
        extra={
            "request_id": request_id,
            "step": "ranking_complete",
            "credit_score": credit_score,
            "loan_amount": loan_amount,
            "option_count": option_count,
            "outcome": "options_found" if option_count else "no_options",
            "duration_ms": duration_ms,
        },
    )


def log_prequalification(
    request_id: str,
    status: str,
    condition_count: int,
    estimated_max_loan_amount: float,
    duration_ms: float,
) -> None:
    logging.info(
        "Pre-qualification completed",
        extra={
            "request_id": request_id,
            "step": "prequalification_complete",
            "status": status,
            "condition_count": condition_count,
            "estimated_max_loan_amount": estimated_max_loan_amount,
            "duration_ms": duration_ms,
        },
    )


def log_calculation_failure(request_id: str, kind: str, error: Exception) -> None:
    """Log a rejected or aborted calculation with its failure kind"""
    logging.warning(
        "Calculation failed",
        extra={
            "request_id": request_id,
            "step": "calculation_failed",
            "kind": kind,
            "error": str(error),
        },
    )
