# Domain Package
from .errors import CardSetNotFound, FlashdeckError, InvalidImportData, InvalidRating
from .models import Card, CardSetInfo, CardState, QueueEntry, Rating
from .ports import CardSource, CardStateStore

__all__ = [
    "Card",
    "CardSetInfo",
    "CardSetNotFound",
    "CardSource",
    "CardState",
    "CardStateStore",
    "FlashdeckError",
    "InvalidImportData",
    "InvalidRating",
    "QueueEntry",
    "Rating",
]
