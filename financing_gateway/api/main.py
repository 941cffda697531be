"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from financing_gateway.api.dependencies import shutdown_ranking_executor
from financing_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from financing_gateway.api.v1 import amortization, financing, prequalification
from financing_gateway.infrastructure.observability.logging import setup_logging
from financing_gateway.config import settings

setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    shutdown_ranking_executor()


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Financing Gateway",
        description="Mortgage calculation, lender matching and pre-qualification service",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Last added runs first: request ID is set before metrics are recorded
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    for module, tag in (
        (amortization, "amortization"),
        (financing, "financing"),
        (prequalification, "prequalification"),
    ):
        app.include_router(module.router, prefix="/v1", tags=[tag])

    return app


app = create_app()
