# Application Stats Package
from .history import prune_history, record_session
from .metrics_calculator import forecast, statistics
from .service import DeckStatsService
from .session_planner import optimal_session_size

__all__ = [
    "DeckStatsService",
    "forecast",
    "optimal_session_size",
    "prune_history",
    "record_session",
    "statistics",
]
