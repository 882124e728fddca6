"""
Study session driver.

Walks an ordered queue one card at a time, runs the scheduler on each
answer, persists the new state and keeps running tallies.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from flashdeck.application import scheduler
from flashdeck.application.queue_builder import build_study_queue
from flashdeck.domain.models import Card, CardState, QueueEntry, Rating
from flashdeck.domain.ports import CardStateStore
from flashdeck.domain.stats.models import SessionSummary

logger = logging.getLogger(__name__)


@dataclass
class SessionStats:
    total: int = 0
    correct: int = 0
    wrong: int = 0


class StudySession:
    def __init__(
        self,
        card_set_id: str,
        entries: Sequence[QueueEntry],
        store: CardStateStore,
        started_at: datetime,
    ):
        self.card_set_id = card_set_id
        self.entries = list(entries)
        self.store = store
        self.started_at = started_at
        self.position = 0
        self.stats = SessionStats()

    @classmethod
    def start(
        cls,
        card_set_id: str,
        cards: Sequence[Card],
        store: CardStateStore,
        now: datetime,
        limit: int | None = None,
    ) -> "StudySession":
        """Open a session over the due cards of a set, in priority order."""
        queue = build_study_queue(card_set_id, cards, store, now, limit=limit)
        logger.info("Starting session on %s with %d cards", card_set_id, len(queue))
        return cls(card_set_id, queue, store, started_at=now)

    @property
    def finished(self) -> bool:
        return self.position >= len(self.entries)

    @property
    def current(self) -> QueueEntry | None:
        if self.finished:
            return None
        return self.entries[self.position]

    @property
    def remaining(self) -> int:
        return len(self.entries) - self.position

    def answer(self, rating: Rating | str, now: datetime) -> CardState:
        """
        Rate the current card and advance.

        The stored state is re-read so an answer always builds on the latest
        persisted value, not the snapshot taken when the queue was built.

        Raises:
            InvalidRating: for an unknown rating. The session does not advance.
            RuntimeError: if the session has no cards left.
        """
        entry = self.current
        if entry is None:
            raise RuntimeError("Study session is already finished")

        rating = Rating.parse(rating)
        current_state = self.store.get_state(self.card_set_id, entry.card_id, now)
        new_state = scheduler.update(current_state, rating, now)
        self.store.set_state(self.card_set_id, entry.card_id, new_state)

        self.stats.total += 1
        if rating.is_correct:
            self.stats.correct += 1
        else:
            self.stats.wrong += 1
        self.position += 1
        return new_state

    def summary(self, now: datetime) -> SessionSummary:
        """Totals for the session so far, with the mean interval of its cards."""
        average_interval = 0.0
        if self.entries:
            intervals = [
                self.store.get_state(self.card_set_id, e.card_id, now).interval
                for e in self.entries
            ]
            average_interval = round(sum(intervals) / len(intervals), 2)

        return SessionSummary(
            card_set_id=self.card_set_id,
            cards_studied=self.stats.total,
            correct_answers=self.stats.correct,
            wrong_answers=self.stats.wrong,
            time_spent_seconds=max(0, round((now - self.started_at).total_seconds())),
            average_interval=average_interval,
        )
