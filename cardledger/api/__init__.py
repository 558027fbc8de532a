from cardledger.api.cards import router as cards_router
from cardledger.api.categories import router as categories_router
from cardledger.api.collections import router as collections_router
from cardledger.api.health import router as health_router
from cardledger.api.statistics import router as statistics_router
from cardledger.api.subscriptions import router as subscriptions_router
from cardledger.api.uploads import router as uploads_router

__all__ = [
    "cards_router",
    "categories_router",
    "collections_router",
    "health_router",
    "statistics_router",
    "subscriptions_router",
    "uploads_router",
]
