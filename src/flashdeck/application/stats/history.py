"""
Study history aggregation.

Pure functions that fold finished sessions into the lifetime record.
"""

import copy
from datetime import date, timedelta

from flashdeck.domain.constants import HISTORY_KEEP_DAYS
from flashdeck.domain.stats.models import CardSetHistory, SessionSummary, StudyHistory


def record_session(
    history: StudyHistory, summary: SessionSummary, today: date
) -> StudyHistory:
    """
    Return a new history with `summary` recorded on `today`.

    Streak: studying on the day after the last study date extends it,
    the same day leaves it unchanged, and any longer gap restarts it at 1.
    """
    updated = copy.deepcopy(history)

    updated.total_cards_studied += summary.cards_studied
    updated.total_sessions += 1
    updated.total_time_spent += summary.time_spent_seconds
    updated.cards_per_day[today] = updated.cards_per_day.get(today, 0) + summary.cards_studied
    updated.streak_days = _next_streak(history.streak_days, history.last_study_date, today)
    updated.last_study_date = today

    set_history = updated.card_sets.setdefault(summary.card_set_id, CardSetHistory())
    set_history.total_cards_studied += summary.cards_studied
    set_history.total_sessions += 1
    set_history.total_time_spent += summary.time_spent_seconds
    set_history.total_correct += summary.correct_answers
    set_history.total_answered += summary.cards_studied
    set_history.last_studied = today
    if set_history.total_answered > 0:
        set_history.average_accuracy = round(
            set_history.total_correct / set_history.total_answered * 100
        )

    return updated


def _next_streak(streak: int, last_study_date: date | None, today: date) -> int:
    if last_study_date is None:
        return 1
    gap = (today - last_study_date).days
    if gap == 0:
        return max(streak, 1)
    if gap == 1:
        return streak + 1
    return 1


def prune_history(
    history: StudyHistory, today: date, keep_days: int = HISTORY_KEEP_DAYS
) -> StudyHistory:
    """Drop per-day counts older than `keep_days` before today."""
    cutoff = today - timedelta(days=keep_days)
    updated = copy.deepcopy(history)
    updated.cards_per_day = {d: n for d, n in history.cards_per_day.items() if d >= cutoff}
    return updated
