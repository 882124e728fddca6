"""
Ports (interfaces) for card storage and card sources.

These define the contract that infrastructure adapters must implement.
The scheduling core never calls them; application services and the
session driver do.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from .models import Card, CardSetInfo, CardState
from .stats.models import StudyHistory


class CardStateStore(ABC):
    """
    Port for persisting card states keyed by (card_set_id, card_id).

    Implementations:
        - InMemoryStateStore: process-local dictionaries.
        - JsonStateStore: a single JSON document on disk.
    """

    @abstractmethod
    def get_state(self, card_set_id: str, card_id: str, now: datetime) -> CardState:
        """
        Return the stored state, or the first-exposure default when absent.

        The default is not persisted until `set_state` is called.
        """
        pass

    @abstractmethod
    def set_state(self, card_set_id: str, card_id: str, state: CardState) -> None:
        pass

    @abstractmethod
    def get_states(self, card_set_id: str, now: datetime) -> dict[str, CardState]:
        """All stored states for a card set, keyed by card id."""
        pass

    @abstractmethod
    def reset_card_set(self, card_set_id: str) -> None:
        """Forget all progress for a card set."""
        pass

    @abstractmethod
    def get_history(self) -> StudyHistory:
        pass

    @abstractmethod
    def save_history(self, history: StudyHistory) -> None:
        pass


class CardSource(ABC):
    """
    Port for reading card sets.

    Implementations:
        - CsvCardSource: CSV files in a data directory.
    """

    @abstractmethod
    def list_card_sets(self) -> list[CardSetInfo]:
        pass

    @abstractmethod
    def load_cards(self, card_set_id: str) -> list[Card]:
        """
        Return the ordered cards of a set.

        Raises:
            CardSetNotFound: if the set does not exist.
        """
        pass
