"""API router modules."""

from fastapi import APIRouter

from venue_pricing.api.v1 import health, pricing, rules, scenarios, surge


def build_api_router(prefix: str) -> APIRouter:
    """Mount every versioned router under ``prefix``."""
    router = APIRouter(prefix=prefix)
    router.include_router(health.router, prefix="/health", tags=["health"])
    router.include_router(pricing.router, tags=["pricing"])
    router.include_router(surge.router, tags=["surge"])
    router.include_router(rules.router, tags=["rules"])
    router.include_router(scenarios.router, prefix="/scenarios", tags=["scenarios"])
    return router


__all__ = ["build_api_router"]
