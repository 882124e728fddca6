"""
Domain models for card scheduling.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

from .constants import DEFAULT_EASE, DEFAULT_INTERVAL
from .errors import InvalidRating


class Rating(str, Enum):
    """
    The learner's answer to a card.

    Again is a lapse; Hard, Good and Easy are successful reviews of
    increasing confidence.
    """

    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"

    @classmethod
    def parse(cls, value: "Rating | str") -> "Rating":
        """Return the Rating for `value`, raising InvalidRating otherwise."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidRating(value)

    @property
    def is_correct(self) -> bool:
        return self in (Rating.GOOD, Rating.EASY)


@dataclass(frozen=True)
class CardState:
    """
    Scheduling state of one card within one card set.

    Attributes:
        interval: Days until the next review.
        ease_factor: Interval growth multiplier. None when storage had no value.
        repetitions: Consecutive successful reviews since the last lapse.
        due_date: First calendar date the card is eligible for review.
        created_at: When the card was first seen.
        last_reviewed: Time of the most recent review, if any.
        total_reviews: Lifetime review count.
        correct_reviews: Reviews rated Good or Easy.
    """

    interval: float
    ease_factor: float | None
    repetitions: int
    due_date: date
    created_at: datetime
    last_reviewed: datetime | None = None
    total_reviews: int = 0
    correct_reviews: int = 0

    @classmethod
    def new(cls, now: datetime) -> "CardState":
        """Default state for a card on first exposure; due immediately."""
        return cls(
            interval=DEFAULT_INTERVAL,
            ease_factor=DEFAULT_EASE,
            repetitions=0,
            due_date=now.date(),
            created_at=now,
        )

    @property
    def is_new(self) -> bool:
        return self.repetitions == 0

    @classmethod
    def from_dict(cls, data: dict[str, Any], now: datetime) -> "CardState":
        """
        Build a state from its stored (camelCase) record.

        Missing fields fall back to first-exposure defaults. A missing
        easeFactor is kept as None; the scheduler defaults it.
        """
        due_raw = data.get("dueDate")
        created_raw = data.get("createdAt")
        reviewed_raw = data.get("lastReviewed")

        return cls(
            interval=float(data.get("interval") or DEFAULT_INTERVAL),
            ease_factor=(
                float(data["easeFactor"]) if data.get("easeFactor") is not None else None
            ),
            repetitions=int(data.get("repetitions") or 0),
            due_date=date.fromisoformat(due_raw) if due_raw else now.date(),
            created_at=datetime.fromisoformat(created_raw) if created_raw else now,
            last_reviewed=datetime.fromisoformat(reviewed_raw) if reviewed_raw else None,
            total_reviews=int(data.get("totalReviews") or 0),
            correct_reviews=int(data.get("correctReviews") or 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "interval": self.interval,
            "easeFactor": self.ease_factor,
            "repetitions": self.repetitions,
            "dueDate": self.due_date.isoformat(),
            "createdAt": self.created_at.isoformat(),
            "lastReviewed": self.last_reviewed.isoformat() if self.last_reviewed else None,
            "totalReviews": self.total_reviews,
            "correctReviews": self.correct_reviews,
        }


@dataclass(frozen=True)
class Card:
    """A question/answer pair from a card set."""

    id: str
    question: str
    answer: str
    hint: str | None = None
    category: str | None = None
    difficulty: str = "medium"


@dataclass(frozen=True)
class QueueEntry:
    """A card paired with its scheduling state. Built per query, never stored."""

    card_id: str
    state: CardState
    card: Card | None = None


@dataclass(frozen=True)
class CardSetInfo:
    """Summary of a discoverable card set."""

    id: str
    name: str
    file_name: str | None
    total_cards: int
    description: str | None = None
