"""
Queue builder for study sessions.

Builds ordered study queues by:
1. Filtering card states to those due on or before today
2. Ordering by days overdue (most overdue first)
3. Breaking ties by ease factor (hardest cards first)

All functions are stateless; `today` is always passed in.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime
from typing import TypeVar

from flashdeck.domain.constants import DEFAULT_EASE
from flashdeck.domain.models import Card, CardState, QueueEntry
from flashdeck.domain.ports import CardStateStore

logger = logging.getLogger(__name__)

T = TypeVar("T", CardState, QueueEntry)


def _state_of(item: CardState | QueueEntry) -> CardState:
    return item.state if isinstance(item, QueueEntry) else item


def is_due(state: CardState, today: date) -> bool:
    """A card is due on or after its due date."""
    return state.due_date <= today


def days_overdue(state: CardState, today: date) -> int:
    """Whole days since the due date; negative if not yet due."""
    return (today - state.due_date).days


def select_due(items: Iterable[T], today: date) -> list[T]:
    """Keep the items whose state is due, in input order."""
    return [item for item in items if is_due(_state_of(item), today)]


def order_by_priority(items: Iterable[T], today: date) -> list[T]:
    """
    Sort most-overdue first, then lowest ease first.

    The sort is stable: items equal on both keys keep their input order.
    """

    def priority(item: T) -> tuple[int, float]:
        state = _state_of(item)
        ease = state.ease_factor if state.ease_factor is not None else DEFAULT_EASE
        return (-days_overdue(state, today), ease)

    return sorted(items, key=priority)


def build_study_queue(
    card_set_id: str,
    cards: Sequence[Card],
    store: CardStateStore,
    now: datetime,
    limit: int | None = None,
) -> list[QueueEntry]:
    """
    Build the ordered queue of due cards for a card set.

    Args:
        card_set_id: The card set being studied.
        cards: Cards of the set, in source order.
        store: Read-only here; unseen cards get default (due) states.
        now: Current time; its date is "today".
        limit: Optional cap on queue length.

    Returns:
        Due entries in priority order.
    """
    today = now.date()
    entries = [
        QueueEntry(card_id=card.id, state=store.get_state(card_set_id, card.id, now), card=card)
        for card in cards
    ]
    queue = order_by_priority(select_due(entries, today), today)
    logger.debug("Queue for %s: %d due of %d cards", card_set_id, len(queue), len(cards))

    if limit is not None:
        queue = queue[: max(0, limit)]
    return queue
