"""HTTP controllers for the web API endpoints."""

from confswap.web.controllers.assets import router as assets_router
from confswap.web.controllers.balances import router as balances_router
from confswap.web.controllers.notifications import router as notifications_router
from confswap.web.controllers.quotes import router as quotes_router
from confswap.web.controllers.swaps import router as swaps_router

__all__ = [
    "assets_router",
    "balances_router",
    "notifications_router",
    "quotes_router",
    "swaps_router",
]
