"""Prometheus metrics for monitoring ranking outcomes, qualification rates and calculation failures"""

from prometheus_client import Counter, Histogram

# Ranking metrics
ranking_counter = Counter(
    "financing_options_ranked_total",
    "Total financing option rankings performed",
    ["outcome"],  # options_found | no_options
)

option_count_histogram = Histogram(
    "financing_option_count",
    "Eligible options returned per ranking",
    buckets=[0, 1, 2, 5, 10, 25, 50],
)

# Pre-qualification metrics
prequalification_counter = Counter(
    "prequalification_total",
    "Pre-qualification decisions by status",
    ["status"],  # qualified | conditional | not_qualified
)

# Failure metrics
calculation_failures_counter = Counter(
    "calculation_failures_total",
    "Calculations rejected or aborted",
    ["kind"],  # invalid_input | arithmetic_overflow
)

catalog_fetch_failures_counter = Counter(
    "catalog_fetch_failures_total",
    "Failed lender catalog or borrower API calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_ranking(option_count: int) -> None:
    """Record ranking metrics for monitoring match rates"""
    outcome = "options_found" if option_count else "no_options"
    ranking_counter.labels(outcome=outcome).inc()
    option_count_histogram.observe(option_count)


def record_prequalification(status: str) -> None:
    prequalification_counter.labels(status=status).inc()


def record_calculation_failure(kind: str) -> None:
    calculation_failures_counter.labels(kind=kind).inc()
