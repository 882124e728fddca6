"""
Card state stores: infrastructure adapters for the CardStateStore port.

Both adapters keep the record layout of the browser version: a `cards`
map of card set id -> card id -> camelCase state record, plus a `history`
record of study sessions.
"""

import json
import logging
import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from flashdeck.domain.constants import STORAGE_VERSION
from flashdeck.domain.errors import InvalidImportData
from flashdeck.domain.models import CardState
from flashdeck.domain.ports import CardStateStore
from flashdeck.domain.stats.models import StudyHistory

logger = logging.getLogger(__name__)

# Shared by every JsonStateStore in the process; instances may point at the same file.
_file_lock = threading.RLock()


def validate_document(data: Any) -> dict[str, Any]:
    """
    Check that `data` is a loadable store document.

    Every card record and the history are parsed once, so a document that
    passes can be read back without errors.

    Raises:
        InvalidImportData: describing the first problem found.
    """
    if not isinstance(data, dict):
        raise InvalidImportData("Document must be a JSON object")

    cards = data.get("cards") or {}
    if not isinstance(cards, dict):
        raise InvalidImportData("'cards' must map card set ids to card states")

    now = datetime.now(timezone.utc)
    for set_id, records in cards.items():
        if not isinstance(records, dict):
            raise InvalidImportData(f"Card set {set_id!r} must map card ids to card states")
        for card_id, record in records.items():
            if not isinstance(record, dict):
                raise InvalidImportData(f"State of {set_id}/{card_id} must be an object")
            try:
                CardState.from_dict(record, now)
            except (ValueError, TypeError, AttributeError) as e:
                raise InvalidImportData(f"Invalid state for {set_id}/{card_id}: {e}") from e

    history = data.get("history") or {}
    try:
        StudyHistory.from_dict(history)
    except (ValueError, TypeError, AttributeError) as e:
        raise InvalidImportData(f"Invalid study history: {e}") from e

    return data


class InMemoryStateStore(CardStateStore):
    """Process-local store. Records are kept as dicts so both adapters share one format."""

    def __init__(self, data: dict[str, Any] | None = None):
        self._cards: dict[str, dict[str, dict[str, Any]]] = {}
        self._history: dict[str, Any] = {}
        self._lock = threading.RLock()
        if data:
            self._load(data)

    def _load(self, data: dict[str, Any]) -> None:
        self._cards = data.get("cards") or {}
        self._history = data.get("history") or {}

    def _refresh(self) -> None:
        """Hook for subclasses to pick up changes made outside this instance."""

    def _persist(self) -> None:
        """Hook for subclasses that write through to durable storage."""

    def get_state(self, card_set_id: str, card_id: str, now: datetime) -> CardState:
        record = self._cards.get(card_set_id, {}).get(card_id)
        if record is None:
            return CardState.new(now)
        return CardState.from_dict(record, now)

    def set_state(self, card_set_id: str, card_id: str, state: CardState) -> None:
        with self._lock:
            self._refresh()
            self._cards.setdefault(card_set_id, {})[card_id] = state.to_dict()
            self._persist()

    def get_states(self, card_set_id: str, now: datetime) -> dict[str, CardState]:
        return {
            card_id: CardState.from_dict(record, now)
            for card_id, record in self._cards.get(card_set_id, {}).items()
        }

    def reset_card_set(self, card_set_id: str) -> None:
        with self._lock:
            self._refresh()
            if self._cards.pop(card_set_id, None) is not None:
                logger.info("Reset progress for card set %s", card_set_id)
                self._persist()

    def get_history(self) -> StudyHistory:
        return StudyHistory.from_dict(self._history)

    def save_history(self, history: StudyHistory) -> None:
        with self._lock:
            self._refresh()
            self._history = history.to_dict()
            self._persist()

    def export_data(self, now: datetime | None = None) -> str:
        """Serialize all progress as a JSON document."""
        now = now or datetime.now(timezone.utc)
        return json.dumps(
            {
                "version": STORAGE_VERSION,
                "exportDate": now.isoformat(),
                "cards": self._cards,
                "history": self._history,
            },
            indent=2,
            ensure_ascii=False,
        )

    def import_data(self, raw: str) -> None:
        """
        Replace all progress with an exported document.

        Raises:
            InvalidImportData: if the document is not valid JSON, lacks the
                version/cards sections, or holds a record that cannot be
                read back. Nothing is changed in that case.
        """
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise InvalidImportData(f"Import is not valid JSON: {e}") from e

        if not isinstance(data, dict) or not data.get("version") or "cards" not in data:
            raise InvalidImportData("Import must contain 'version' and 'cards'")
        validate_document(data)

        if data["version"] != STORAGE_VERSION:
            logger.info("Importing data from version %s into %s", data["version"], STORAGE_VERSION)

        with self._lock:
            self._load(data)
            self._persist()


class JsonStateStore(InMemoryStateStore):
    """
    Store backed by a single JSON file.

    Every change re-reads the file under a process-wide lock, applies the
    change and rewrites the file, so instances sharing a path do not undo
    each other's writes. Writes go through a temp file and an atomic rename.
    """

    def __init__(self, path: Path):
        self.path = path
        super().__init__()
        self._lock = _file_lock
        self._refresh()

    def _read(self) -> dict[str, Any]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            validate_document(data)
        except (json.JSONDecodeError, InvalidImportData) as e:
            logger.warning(f"State file {self.path} is corrupt, starting empty: {e}")
            return {}

        version = data.get("version")
        if version and version != STORAGE_VERSION:
            logger.info("Migrating state file from version %s to %s", version, STORAGE_VERSION)
        return data

    def _refresh(self) -> None:
        with self._lock:
            if self.path.exists():
                self._load(self._read())

    def _persist(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(
            {"version": STORAGE_VERSION, "cards": self._cards, "history": self._history},
            indent=2,
            ensure_ascii=False,
        )
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".state-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
