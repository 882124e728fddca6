"""flashdeck: SM-2 flashcard scheduling."""

from flashdeck.consts import VERSION

__version__ = VERSION
