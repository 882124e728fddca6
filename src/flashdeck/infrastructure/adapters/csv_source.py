"""
CSV card source: infrastructure adapter for the CardSource port.

A card set is `<data_dir>/<set-id>.csv` with rows of
`question,answer[,hint,category,difficulty]`. An optional `index.json`
lists sets with display names and descriptions. When no set can be found
a built-in demo set is offered.
"""

import csv
import io
import json
import logging
from pathlib import Path

from flashdeck.domain.constants import DEMO_CARD_SET_ID
from flashdeck.domain.errors import CardSetNotFound
from flashdeck.domain.models import Card, CardSetInfo
from flashdeck.domain.ports import CardSource

logger = logging.getLogger(__name__)

DEMO_CARDS = [
    Card(
        id="demo-1",
        question="What is spaced repetition?",
        answer=(
            "A learning method based on repeating material at increasing "
            "intervals to improve long-term memory."
        ),
    ),
    Card(id="demo-2", question="What is the capital of France?", answer="Paris"),
    Card(
        id="demo-3",
        question="How many planets are in the Solar System?",
        answer="8 planets (Mercury, Venus, Earth, Mars, Jupiter, Saturn, Uranus, Neptune)",
    ),
    Card(id="demo-4", question="What does HTML stand for?", answer="HyperText Markup Language"),
    Card(id="demo-5", question="In what year was Google founded?", answer="1998"),
]


def format_card_set_name(card_set_id: str) -> str:
    """'general-knowledge' -> 'General Knowledge'."""
    return " ".join(word[:1].upper() + word[1:] for word in card_set_id.split("-"))


def parse_cards(text: str, card_set_id: str) -> list[Card]:
    """
    Parse CSV text into cards.

    Rows with fewer than two columns are skipped. Ids are
    `<card_set_id>-<index>` where index counts the kept rows.
    """
    cards: list[Card] = []
    for line_no, row in enumerate(csv.reader(io.StringIO(text)), start=1):
        if not row or not any(field.strip() for field in row):
            continue
        if len(row) < 2:
            logger.warning(f"Skipping line {line_no} of {card_set_id}: expected question,answer")
            continue

        extra = [field.strip() or None for field in row[2:5]] + [None] * 3
        cards.append(
            Card(
                id=f"{card_set_id}-{len(cards)}",
                question=row[0].strip(),
                answer=row[1].strip(),
                hint=extra[0],
                category=extra[1],
                difficulty=extra[2] or "medium",
            )
        )
    return cards


class CsvCardSource(CardSource):
    def __init__(self, data_dir: Path):
        self.data_dir = data_dir

    def _index(self) -> list[dict]:
        index_path = self.data_dir / "index.json"
        if not index_path.exists():
            return []
        try:
            data = json.loads(index_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring malformed {index_path}: {e}")
            return []
        return [entry for entry in data.get("cardSets", []) if entry.get("filename")]

    def _csv_path(self, card_set_id: str) -> Path:
        # Set ids are bare file stems; anything path-like cannot name a set.
        if not card_set_id or Path(card_set_id).name != card_set_id or card_set_id.startswith("."):
            raise CardSetNotFound(card_set_id)
        return self.data_dir / f"{card_set_id}.csv"

    def list_card_sets(self) -> list[CardSetInfo]:
        sets: list[CardSetInfo] = []
        indexed = self._index()

        if indexed:
            for entry in indexed:
                path = self.data_dir / entry["filename"]
                if not path.exists():
                    logger.warning(f"{entry['filename']} is listed in index.json but not found")
                    continue
                set_id = path.stem
                sets.append(
                    CardSetInfo(
                        id=set_id,
                        name=entry.get("name") or format_card_set_name(set_id),
                        file_name=path.name,
                        total_cards=len(self.load_cards(set_id)),
                        description=entry.get("description"),
                    )
                )
        elif self.data_dir.is_dir():
            for path in sorted(self.data_dir.glob("*.csv")):
                sets.append(
                    CardSetInfo(
                        id=path.stem,
                        name=format_card_set_name(path.stem),
                        file_name=path.name,
                        total_cards=len(self.load_cards(path.stem)),
                    )
                )

        if not sets:
            logger.info("No CSV card sets found in %s, offering demo set", self.data_dir)
            sets.append(
                CardSetInfo(
                    id=DEMO_CARD_SET_ID,
                    name="Demo Flashcards",
                    file_name=None,
                    total_cards=len(DEMO_CARDS),
                )
            )
        return sets

    def load_cards(self, card_set_id: str) -> list[Card]:
        path = self._csv_path(card_set_id)
        if path.exists():
            return parse_cards(path.read_text(encoding="utf-8-sig"), card_set_id)
        if card_set_id == DEMO_CARD_SET_ID:
            return list(DEMO_CARDS)
        raise CardSetNotFound(card_set_id)
