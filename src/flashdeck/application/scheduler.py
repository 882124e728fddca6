"""
SM-2 scheduler.

Turns a card's current state and a rating into its next state. This is a
pure computation module with no I/O; the caller supplies `now` and is
responsible for persisting the result.

Intervals follow three phases:
1. First success: a fixed learning step per rating (minutes for Hard/Good).
2. Second success: a fixed second step (6 hours, 1 day or 4 days).
3. Afterwards: previous interval * ease factor * rating multiplier.
"""

import logging
from dataclasses import replace
from datetime import datetime, timedelta

from flashdeck.domain.constants import (
    DEFAULT_EASE,
    DEFAULT_INTERVAL,
    DIFFICULTY_MULTIPLIERS,
    EASE_BONUS,
    EASE_PENALTY,
    HARD_FLOOR_RATIO,
    INITIAL_INTERVALS,
    MAX_EASE,
    MIN_EASE,
    MINUTES_PER_DAY,
    SECOND_STEP_INTERVALS,
)
from flashdeck.domain.models import CardState, Rating

logger = logging.getLogger(__name__)


def update(state: CardState, rating: Rating | str, now: datetime) -> CardState:
    """
    Apply one review to a card.

    Args:
        state: The card's current state. It is not modified.
        rating: The learner's answer.
        now: Review time; determines the new due date.

    Returns:
        A new CardState with interval, ease factor, due date and counters updated.

    Raises:
        InvalidRating: if `rating` is not one of the four ratings.
    """
    rating = Rating.parse(rating)

    ease = state.ease_factor if state.ease_factor is not None else DEFAULT_EASE
    previous_interval = state.interval if state.interval and state.interval > 0 else DEFAULT_INTERVAL

    if rating is Rating.AGAIN:
        repetitions = 0
        interval = INITIAL_INTERVALS[Rating.AGAIN.value]
        ease -= EASE_PENALTY
    else:
        repetitions = state.repetitions + 1
        interval = _success_interval(rating, repetitions, previous_interval, ease)
        if rating is Rating.EASY:
            ease += EASE_BONUS
        elif rating is Rating.HARD:
            ease -= EASE_PENALTY

    ease = _clamp_ease(ease)
    due_date = (now + timedelta(days=interval)).date()

    new_state = replace(
        state,
        interval=round_interval(interval),
        ease_factor=ease,
        repetitions=repetitions,
        due_date=due_date,
        last_reviewed=now,
        total_reviews=state.total_reviews + 1,
        correct_reviews=state.correct_reviews + (1 if rating.is_correct else 0),
    )
    logger.debug(
        "Scheduled %s: reps=%d interval=%.4f ease=%.2f due=%s",
        rating.value,
        new_state.repetitions,
        new_state.interval,
        new_state.ease_factor,
        new_state.due_date,
    )
    return new_state


def _success_interval(
    rating: Rating, repetitions: int, previous_interval: float, ease: float
) -> float:
    if repetitions == 1:
        return INITIAL_INTERVALS[rating.value]
    if repetitions == 2:
        return SECOND_STEP_INTERVALS[rating.value]

    interval = previous_interval * ease * DIFFICULTY_MULTIPLIERS[rating.value]
    if rating is Rating.HARD:
        # Hard may shrink growth but never below 80% of the pre-review interval.
        interval = max(interval, previous_interval * HARD_FLOOR_RATIO)
    return interval


def _clamp_ease(ease: float) -> float:
    return round(min(MAX_EASE, max(MIN_EASE, ease)), 2)


def round_interval(days: float) -> float:
    """
    Round an interval for storage.

    Day-scale intervals keep two decimals. Learning steps shorter than a
    day are kept at whole-minute resolution, with one minute as the floor.
    """
    if days >= 1:
        return round(days, 2)
    minutes = max(1, round(days * MINUTES_PER_DAY))
    return minutes / MINUTES_PER_DAY


def preview_intervals(state: CardState, now: datetime) -> dict[Rating, float]:
    """Interval each rating would produce, for showing on answer buttons."""
    return {rating: update(state, rating, now).interval for rating in Rating}


def format_interval(days: float) -> str:
    """Compact human label: 10m, 4d, 3w, 2mo."""
    if days < 1:
        return f"{round(days * MINUTES_PER_DAY)}m"
    if days < 7:
        return f"{round(days)}d"
    if days < 30:
        return f"{round(days / 7)}w"
    return f"{round(days / 30)}mo"
