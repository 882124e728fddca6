# Domain Stats Package
from .models import (
    CardSetHistory,
    DeckStatistics,
    ForecastDay,
    SessionBreakdown,
    SessionPlan,
    SessionSummary,
    StudyHistory,
)

__all__ = [
    "CardSetHistory",
    "DeckStatistics",
    "ForecastDay",
    "SessionBreakdown",
    "SessionPlan",
    "SessionSummary",
    "StudyHistory",
]
