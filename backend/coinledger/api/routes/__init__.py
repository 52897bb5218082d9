"""Route registration helpers."""

from __future__ import annotations

from fastapi import APIRouter

from .alerts import router as alerts_router
from .portfolio import router as portfolio_router
from .prices import router as prices_router
from .reference import router as reference_router
from .strategies import router as strategies_router
from .swings import router as swings_router
from .transactions import router as transactions_router

api_router = APIRouter()
api_router.include_router(reference_router, tags=["reference"])
api_router.include_router(transactions_router, prefix="/transactions", tags=["transactions"])
api_router.include_router(portfolio_router, prefix="/portfolio", tags=["portfolio"])
api_router.include_router(strategies_router, prefix="/strategies", tags=["strategies"])
api_router.include_router(prices_router, prefix="/prices", tags=["prices"])
api_router.include_router(alerts_router, prefix="/alerts", tags=["alerts"])
api_router.include_router(swings_router, prefix="/swings", tags=["swings"])

__all__ = ["api_router"]
