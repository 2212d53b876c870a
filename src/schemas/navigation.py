"""Navigation and review schemas."""

from enum import Enum

from src.schemas.base import CamelModel
from src.schemas.insight import Insight, ReviewOutcome


class View(str, Enum):
    """Screens the client can be on."""

    DASHBOARD = "dashboard"
    ADD = "add"
    REVIEW = "review"
    PRACTICE = "practice"
    SETTINGS = "settings"


class DashboardFilter(str, Enum):
    """Dashboard list filters."""

    TODAY = "today"
    ALL = "all"
    COMPLETED = "completed"


class NavigationState(CamelModel):
    """Persisted navigation state."""

    view: View = View.DASHBOARD
    reviewing_id: str | None = None


class NavigateRequest(CamelModel):
    """Request to move to another screen."""

    target: View


class NavigationResponse(CamelModel):
    """Current screen, with the insight under review when in review mode."""

    view: View
    reviewing: Insight | None = None


class ReviewRequest(CamelModel):
    """Outcome of reviewing one insight."""

    outcome: ReviewOutcome


class ReviewResponse(NavigationResponse):
    """Reviewed insight plus where navigation went next."""

    insight: Insight
