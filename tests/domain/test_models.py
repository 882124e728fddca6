from datetime import date, datetime, timezone

import pytest

from flashdeck.domain.errors import InvalidRating
from flashdeck.domain.models import CardState, Rating


class TestRating:
    def test_parse_accepts_enum_and_strings(self):
        assert Rating.parse(Rating.HARD) is Rating.HARD
        assert Rating.parse("good") is Rating.GOOD
        assert Rating.parse(" EASY ") is Rating.EASY

    @pytest.mark.parametrize("value", ["", "medium", "0", None, 3])
    def test_parse_rejects_unknown(self, value):
        with pytest.raises(InvalidRating):
            Rating.parse(value)

    def test_invalid_rating_is_a_value_error(self):
        with pytest.raises(ValueError, match="meh"):
            Rating.parse("meh")

    def test_is_correct(self):
        assert [r for r in Rating if r.is_correct] == [Rating.GOOD, Rating.EASY]


class TestCardState:
    def test_new_card_is_due_immediately(self, now):
        state = CardState.new(now)

        assert state.interval == 1.0
        assert state.ease_factor == 2.5
        assert state.repetitions == 0
        assert state.due_date == now.date()
        assert state.created_at == now
        assert state.last_reviewed is None
        assert state.total_reviews == 0
        assert state.correct_reviews == 0
        assert state.is_new

    def test_from_dict_reads_browser_record(self, now):
        record = {
            "interval": 4,
            "easeFactor": 2.65,
            "repetitions": 1,
            "dueDate": "2024-01-05",
            "createdAt": "2024-01-01T08:30:00.000Z",
            "lastReviewed": "2024-01-01T08:31:00.000Z",
            "totalReviews": 1,
            "correctReviews": 1,
        }

        state = CardState.from_dict(record, now)

        assert state.interval == 4.0
        assert state.ease_factor == 2.65
        assert state.due_date == date(2024, 1, 5)
        assert state.created_at == datetime(2024, 1, 1, 8, 30, tzinfo=timezone.utc)
        assert state.last_reviewed == datetime(2024, 1, 1, 8, 31, tzinfo=timezone.utc)
        assert state.to_dict()["dueDate"] == "2024-01-05"

    def test_from_dict_defaults_missing_fields(self, now):
        state = CardState.from_dict({"repetitions": 2}, now)

        assert state.ease_factor is None
        assert state.interval == 1.0
        assert state.repetitions == 2
        assert state.due_date == now.date()
        assert state.created_at == now
        assert state.total_reviews == 0

    def test_state_is_immutable(self, now):
        state = CardState.new(now)
        with pytest.raises(AttributeError):
            state.interval = 5  # type: ignore[misc]
