import os
from datetime import date, datetime, timezone

import pytest

from flashdeck.domain.models import Card, CardState
from flashdeck.infrastructure.adapters.state_store import InMemoryStateStore

NOW = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)
TODAY = NOW.date()


def _make_state(
    interval: float = 1.0,
    ease_factor: float | None = 2.5,
    repetitions: int = 0,
    due_date: date = TODAY,
    **kwargs,
) -> CardState:
    return CardState(
        interval=interval,
        ease_factor=ease_factor,
        repetitions=repetitions,
        due_date=due_date,
        created_at=kwargs.pop("created_at", datetime(2023, 12, 1, tzinfo=timezone.utc)),
        **kwargs,
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def store():
    return InMemoryStateStore()


@pytest.fixture
def cards():
    return [
        Card(id="vocab-0", question="la casa", answer="the house"),
        Card(id="vocab-1", question="el perro", answer="the dog", hint="woof"),
        Card(id="vocab-2", question="el gato", answer="the cat"),
    ]


@pytest.fixture
def data_dir(tmp_path):
    """A card data directory with one CSV card set."""
    d = tmp_path / "data"
    d.mkdir()
    (d / "vocab.csv").write_text(
        "la casa,the house\nel perro,the dog,woof\nel gato,the cat\n", encoding="utf-8"
    )
    return d


@pytest.fixture(autouse=True)
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir and clears FLASHDECK_* variables."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config and state files
    monkeypatch.setenv("HOME", str(home))
    for key in [k for k in os.environ if k.startswith("FLASHDECK_")]:
        monkeypatch.delenv(key)
    return home


@pytest.fixture
def make_state():
    """Factory for CardState with test defaults; due today, never reviewed."""
    return _make_state
