"""Errors raised by the scheduling core and its adapters."""


class FlashdeckError(Exception):
    """Base class for all flashdeck errors."""


class InvalidRating(FlashdeckError, ValueError):
    """A rating outside Again/Hard/Good/Easy was supplied."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid rating {value!r}; expected one of again, hard, good, easy")


class CardSetNotFound(FlashdeckError, LookupError):
    """The card source has no card set with the requested id."""

    def __init__(self, card_set_id: str):
        self.card_set_id = card_set_id
        super().__init__(f"Card set not found: {card_set_id}")


class InvalidImportData(FlashdeckError, ValueError):
    """An exported progress document could not be imported."""
