"""
Time-boxed session planning.

Fills a session in strict class order: overdue cards up to half of the
capacity, then new cards up to 30% of what remains, then ordinary reviews.
Slack left by a short class flows only to the classes after it.
"""

import math
from collections.abc import Iterable
from datetime import date

from flashdeck.application.queue_builder import days_overdue, order_by_priority
from flashdeck.domain.constants import (
    DEFAULT_AVAILABLE_MINUTES,
    DEFAULT_SECONDS_PER_CARD,
    NEW_SHARE,
    OVERDUE_SHARE,
)
from flashdeck.domain.models import QueueEntry
from flashdeck.domain.stats.models import SessionBreakdown, SessionPlan


def optimal_session_size(
    due_entries: Iterable[QueueEntry],
    today: date,
    available_minutes: float = DEFAULT_AVAILABLE_MINUTES,
    avg_seconds_per_card: float = DEFAULT_SECONDS_PER_CARD,
) -> SessionPlan:
    """
    Pick the cards to study in the available time.

    Args:
        due_entries: Due cards; reordered by priority here.
        today: Reference date for overdue detection.
        available_minutes: Study time budget.
        avg_seconds_per_card: Expected time spent per card.

    Raises:
        ValueError: if `avg_seconds_per_card` is not positive.
    """
    if avg_seconds_per_card <= 0:
        raise ValueError("avg_seconds_per_card must be positive")

    max_cards = max(0, math.floor(available_minutes * 60 / avg_seconds_per_card))
    ordered = order_by_priority(due_entries, today)

    # Classes are disjoint: a never-reviewed card that is overdue counts as overdue.
    overdue = [e for e in ordered if days_overdue(e.state, today) > 0]
    fresh = [e for e in ordered if days_overdue(e.state, today) <= 0 and e.state.is_new]
    review = [e for e in ordered if days_overdue(e.state, today) <= 0 and not e.state.is_new]

    picked_overdue = overdue[: math.floor(max_cards * OVERDUE_SHARE)]
    remaining = max_cards - len(picked_overdue)
    picked_new = fresh[: math.floor(remaining * NEW_SHARE)]
    remaining -= len(picked_new)
    picked_review = review[:remaining]

    cards = picked_overdue + picked_new + picked_review
    return SessionPlan(
        cards=cards,
        max_cards=max_cards,
        estimated_minutes=round(len(cards) * avg_seconds_per_card / 60),
        breakdown=SessionBreakdown(
            overdue=len(picked_overdue),
            new=len(picked_new),
            review=len(picked_review),
        ),
    )
