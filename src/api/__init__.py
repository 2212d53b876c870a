"""API routers."""

from src.api.data import router as data_router
from src.api.health import router as health_router
from src.api.insights import router as insights_router
from src.api.notifications import router as notifications_router
from src.api.practice import router as practice_router
from src.api.review import router as review_router
from src.api.settings import router as settings_router
from src.api.stats import router as stats_router
from src.api.users import router as users_router

__all__ = [
    "data_router",
    "health_router",
    "insights_router",
    "notifications_router",
    "practice_router",
    "review_router",
    "settings_router",
    "stats_router",
    "users_router",
]
