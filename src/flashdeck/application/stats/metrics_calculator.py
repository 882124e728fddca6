"""
Forecast and aggregate statistics over card states.

This is a pure computation module with no I/O.
"""

from collections.abc import Iterable
from datetime import date, timedelta

from flashdeck.application.queue_builder import days_overdue, is_due
from flashdeck.domain.constants import (
    DEFAULT_FORECAST_DAYS,
    LEARNING_REPETITIONS,
    MATURE_INTERVAL_DAYS,
)
from flashdeck.domain.models import CardState
from flashdeck.domain.stats.models import DeckStatistics, ForecastDay


def forecast(
    states: Iterable[CardState], today: date, days: int = DEFAULT_FORECAST_DAYS
) -> list[ForecastDay]:
    """
    Count cards falling due on each of the next `days` days, today included.

    Only exact due-date matches are counted; cards already overdue do not
    appear on today's entry.
    """
    if days < 0:
        raise ValueError(f"days must be non-negative, got {days}")

    new_counts: dict[date, int] = {}
    review_counts: dict[date, int] = {}
    for state in states:
        bucket = new_counts if state.is_new else review_counts
        bucket[state.due_date] = bucket.get(state.due_date, 0) + 1

    result = []
    for offset in range(days):
        day = today + timedelta(days=offset)
        result.append(
            ForecastDay(
                date=day,
                new_count=new_counts.get(day, 0),
                review_count=review_counts.get(day, 0),
            )
        )
    return result


def statistics(states: Iterable[CardState], today: date) -> DeckStatistics:
    """Classify cards by maturity and summarise ease, interval and due counts."""
    total = new = learning = review = mature = due_today = overdue = 0
    ease_sum = 0.0
    ease_count = 0
    interval_sum = 0.0

    for state in states:
        total += 1

        if state.repetitions == 0:
            new += 1
        elif state.repetitions < LEARNING_REPETITIONS:
            learning += 1
        elif state.interval < MATURE_INTERVAL_DAYS:
            review += 1
        else:
            mature += 1

        if is_due(state, today):
            due_today += 1
            if days_overdue(state, today) > 0:
                overdue += 1

        if state.ease_factor is not None:
            ease_sum += state.ease_factor
            ease_count += 1
        interval_sum += state.interval

    return DeckStatistics(
        total_cards=total,
        new_cards=new,
        learning_cards=learning,
        review_cards=review,
        mature_cards=mature,
        average_ease=round(ease_sum / ease_count, 2) if ease_count else 0.0,
        average_interval=round(interval_sum / total, 2) if total else 0.0,
        due_today=due_today,
        overdue=overdue,
    )
