"""
Domain models for deck statistics, forecasts and study history.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from flashdeck.domain.models import QueueEntry


@dataclass(frozen=True)
class ForecastDay:
    """Cards falling due on one calendar day."""

    date: date
    new_count: int
    review_count: int

    @property
    def card_count(self) -> int:
        return self.new_count + self.review_count


@dataclass(frozen=True)
class DeckStatistics:
    """
    Aggregate view of a card set.

    Attributes:
        new_cards: Never successfully reviewed (repetitions == 0).
        learning_cards: 1 <= repetitions < 3.
        review_cards: repetitions >= 3 and interval < 21 days.
        mature_cards: repetitions >= 3 and interval >= 21 days.
        average_ease: Mean ease over cards that have one.
        average_interval: Mean interval over all cards.
        due_today: Cards with due_date <= today.
        overdue: Due cards whose due date is strictly in the past.
    """

    total_cards: int = 0
    new_cards: int = 0
    learning_cards: int = 0
    review_cards: int = 0
    mature_cards: int = 0
    average_ease: float = 0.0
    average_interval: float = 0.0
    due_today: int = 0
    overdue: int = 0


@dataclass(frozen=True)
class SessionBreakdown:
    overdue: int = 0
    new: int = 0
    review: int = 0


@dataclass(frozen=True)
class SessionPlan:
    """Recommended subset of due cards for a time-boxed session."""

    cards: list[QueueEntry]
    max_cards: int
    estimated_minutes: int
    breakdown: SessionBreakdown

    @property
    def total_cards(self) -> int:
        return len(self.cards)


@dataclass(frozen=True)
class SessionSummary:
    """Outcome of one finished study session."""

    card_set_id: str
    cards_studied: int
    correct_answers: int
    wrong_answers: int
    time_spent_seconds: int
    average_interval: float = 0.0

    @property
    def accuracy(self) -> int:
        """Percentage of correct answers, rounded."""
        if self.cards_studied == 0:
            return 0
        return round(self.correct_answers / self.cards_studied * 100)


@dataclass
class CardSetHistory:
    total_cards_studied: int = 0
    total_sessions: int = 0
    total_time_spent: int = 0
    total_correct: int = 0
    total_answered: int = 0
    average_accuracy: int = 0
    last_studied: date | None = None


@dataclass
class StudyHistory:
    """Lifetime study record across all card sets."""

    total_cards_studied: int = 0
    total_sessions: int = 0
    total_time_spent: int = 0  # seconds
    streak_days: int = 0
    last_study_date: date | None = None
    cards_per_day: dict[date, int] = field(default_factory=dict)
    card_sets: dict[str, CardSetHistory] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StudyHistory":
        card_sets = {}
        for set_id, raw in (data.get("cardSets") or {}).items():
            last = raw.get("lastStudied")
            card_sets[set_id] = CardSetHistory(
                total_cards_studied=raw.get("totalCardsStudied", 0),
                total_sessions=raw.get("totalSessions", 0),
                total_time_spent=raw.get("totalTimeSpent", 0),
                total_correct=raw.get("totalCorrect", 0),
                total_answered=raw.get("totalAnswered", 0),
                average_accuracy=raw.get("averageAccuracy", 0),
                last_studied=date.fromisoformat(last) if last else None,
            )

        last_study = data.get("lastStudyDate")
        return cls(
            total_cards_studied=data.get("totalCardsStudied", 0),
            total_sessions=data.get("totalSessions", 0),
            total_time_spent=data.get("totalTimeSpent", 0),
            streak_days=data.get("streakDays", 0),
            last_study_date=date.fromisoformat(last_study) if last_study else None,
            cards_per_day={
                date.fromisoformat(day): count
                for day, count in (data.get("cardsPerDay") or {}).items()
            },
            card_sets=card_sets,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalCardsStudied": self.total_cards_studied,
            "totalSessions": self.total_sessions,
            "totalTimeSpent": self.total_time_spent,
            "streakDays": self.streak_days,
            "lastStudyDate": self.last_study_date.isoformat() if self.last_study_date else None,
            "cardsPerDay": {day.isoformat(): n for day, n in sorted(self.cards_per_day.items())},
            "cardSets": {
                set_id: {
                    "totalCardsStudied": h.total_cards_studied,
                    "totalSessions": h.total_sessions,
                    "totalTimeSpent": h.total_time_spent,
                    "totalCorrect": h.total_correct,
                    "totalAnswered": h.total_answered,
                    "averageAccuracy": h.average_accuracy,
                    "lastStudied": h.last_studied.isoformat() if h.last_studied else None,
                }
                for set_id, h in self.card_sets.items()
            },
        }
