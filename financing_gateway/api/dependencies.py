"""Dependency injection for FastAPI endpoints"""

from concurrent.futures import Executor, ThreadPoolExecutor
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Request

from financing_gateway.config import settings
from financing_gateway.domain.engine import BorrowerProfileSource, FinancingEngine, LenderCatalogProvider
from financing_gateway.infrastructure.clients.borrowers import BorrowerProfileClient, InMemoryBorrowerProfiles
from financing_gateway.infrastructure.clients.catalog import LenderCatalogClient, StaticLenderCatalog


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


@lru_cache
def _static_catalog() -> StaticLenderCatalog:
    return StaticLenderCatalog()


@lru_cache
def _ranking_executor() -> Optional[Executor]:
    if settings.ranking_max_workers > 0:
        return ThreadPoolExecutor(max_workers=settings.ranking_max_workers, thread_name_prefix="ranking")
    return None


def get_catalog() -> LenderCatalogProvider:
    """Provide lender catalog: remote API when configured, packaged snapshot otherwise"""
    if settings.catalog_api_base:
        return LenderCatalogClient()
    return _static_catalog()


def get_borrower_source() -> BorrowerProfileSource:
    """Provide borrower profile source"""
    if settings.borrower_api_base:
        return BorrowerProfileClient()
    return InMemoryBorrowerProfiles()


def get_engine(
    catalog: LenderCatalogProvider = Depends(get_catalog),
    borrowers: BorrowerProfileSource = Depends(get_borrower_source),
) -> FinancingEngine:
    """Provide a financing engine wired to the request's collaborators"""
    return FinancingEngine(catalog=catalog, borrowers=borrowers, executor=_ranking_executor())


def shutdown_ranking_executor() -> None:
    """Stop ranking worker threads, if any were started"""
    if _ranking_executor.cache_info().currsize:
        executor = _ranking_executor()
        if executor is not None:
            executor.shutdown(wait=False)
        _ranking_executor.cache_clear()
