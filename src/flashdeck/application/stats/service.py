"""
Deck stats service: application layer orchestrator.

Loads card states for a card set from the store and hands them to the
pure calculators.
"""

import logging
from datetime import datetime

from flashdeck.application.queue_builder import build_study_queue
from flashdeck.domain.constants import (
    DEFAULT_AVAILABLE_MINUTES,
    DEFAULT_FORECAST_DAYS,
    DEFAULT_SECONDS_PER_CARD,
)
from flashdeck.domain.models import CardState
from flashdeck.domain.ports import CardSource, CardStateStore
from flashdeck.domain.stats.models import DeckStatistics, ForecastDay, SessionPlan

from .metrics_calculator import forecast, statistics
from .session_planner import optimal_session_size

logger = logging.getLogger(__name__)


class DeckStatsService:
    """
    Application service for per-card-set statistics.

    Depends on the CardStateStore and CardSource abstractions, not on
    concrete adapters.
    """

    def __init__(self, store: CardStateStore, source: CardSource):
        self._store = store
        self._source = source

    def load_states(self, card_set_id: str, now: datetime) -> list[CardState]:
        """
        States for every card in the set, defaulted for unseen cards.

        Raises:
            CardSetNotFound: if the source has no such set.
        """
        cards = self._source.load_cards(card_set_id)
        return [self._store.get_state(card_set_id, card.id, now) for card in cards]

    def statistics(self, card_set_id: str, now: datetime) -> DeckStatistics:
        return statistics(self.load_states(card_set_id, now), now.date())

    def forecast(
        self, card_set_id: str, now: datetime, days: int = DEFAULT_FORECAST_DAYS
    ) -> list[ForecastDay]:
        return forecast(self.load_states(card_set_id, now), now.date(), days)

    def plan_session(
        self,
        card_set_id: str,
        now: datetime,
        available_minutes: float = DEFAULT_AVAILABLE_MINUTES,
        avg_seconds_per_card: float = DEFAULT_SECONDS_PER_CARD,
    ) -> SessionPlan:
        cards = self._source.load_cards(card_set_id)
        due = build_study_queue(card_set_id, cards, self._store, now)
        plan = optimal_session_size(due, now.date(), available_minutes, avg_seconds_per_card)
        logger.info(
            "Planned %d of %d due cards for %s (%d min)",
            plan.total_cards,
            len(due),
            card_set_id,
            plan.estimated_minutes,
        )
        return plan
