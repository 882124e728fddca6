import json
import threading
from datetime import date

import pytest

from flashdeck.domain.errors import InvalidImportData
from flashdeck.domain.stats.models import StudyHistory
from flashdeck.infrastructure.adapters.state_store import InMemoryStateStore, JsonStateStore


def test_unseen_card_gets_default_state(store, now):
    state = store.get_state("vocab", "vocab-0", now)

    assert state.is_new
    assert state.due_date == now.date()
    assert store.get_states("vocab", now) == {}


def test_set_and_get(store, now, make_state):
    state = make_state(repetitions=3, interval=10, due_date=date(2024, 1, 20))

    store.set_state("vocab", "vocab-0", state)

    assert store.get_state("vocab", "vocab-0", now) == state
    assert store.get_states("vocab", now) == {"vocab-0": state}
    assert store.get_states("other", now) == {}


def test_reset_card_set_only_touches_that_set(store, now, make_state):
    store.set_state("vocab", "vocab-0", make_state(repetitions=2))
    store.set_state("other", "other-0", make_state(repetitions=2))

    store.reset_card_set("vocab")

    assert store.get_state("vocab", "vocab-0", now).is_new
    assert store.get_state("other", "other-0", now).repetitions == 2


def test_reads_records_written_by_browser(now):
    store = InMemoryStateStore(
        {
            "cards": {
                "vocab": {
                    "vocab-0": {
                        "interval": 6,
                        "easeFactor": 2.36,
                        "repetitions": 3,
                        "dueDate": "2024-01-12",
                        "createdAt": "2023-12-01T10:00:00.000Z",
                        "lastReviewed": "2024-01-06T10:00:00.000Z",
                        "totalReviews": 4,
                        "correctReviews": 3,
                    }
                }
            }
        }
    )

    state = store.get_state("vocab", "vocab-0", now)

    assert state.interval == 6.0
    assert state.ease_factor == 2.36
    assert state.due_date == date(2024, 1, 12)
    assert state.correct_reviews == 3


def test_history_round_trip(store):
    assert store.get_history() == StudyHistory()

    history = StudyHistory(total_sessions=2, streak_days=2, last_study_date=date(2024, 1, 9))
    store.save_history(history)

    assert store.get_history() == history


# --- Export / import ---


def test_export_then_import(store, now, make_state):
    store.set_state("vocab", "vocab-0", make_state(repetitions=3, interval=10))
    store.save_history(StudyHistory(total_sessions=1))

    exported = store.export_data(now)
    data = json.loads(exported)
    assert data["version"] == "1.0"
    assert data["exportDate"].startswith("2024-01-10")
    assert data["cards"]["vocab"]["vocab-0"]["repetitions"] == 3

    restored = InMemoryStateStore()
    restored.import_data(exported)

    assert restored.get_state("vocab", "vocab-0", now).repetitions == 3
    assert restored.get_history().total_sessions == 1


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[]",
        json.dumps({"cards": {}}),
        json.dumps({"version": "1.0"}),
        json.dumps({"version": "1.0", "cards": []}),
        json.dumps({"version": "1.0", "cards": {"vocab": "x"}}),
        json.dumps({"version": "1.0", "cards": {"vocab": {"vocab-0": ["not", "a", "record"]}}}),
        json.dumps({"version": "1.0", "cards": {"vocab": {"vocab-0": {"dueDate": "not-a-date"}}}}),
        json.dumps({"version": "1.0", "cards": {"vocab": {"vocab-0": {"repetitions": "many"}}}}),
        json.dumps({"version": "1.0", "cards": {}, "history": {"cardSets": "x"}}),
        json.dumps({"version": "1.0", "cards": {}, "history": {"lastStudyDate": "yesterday"}}),
    ],
)
def test_import_rejects_bad_documents(store, now, make_state, raw):
    store.set_state("vocab", "vocab-0", make_state(repetitions=2))

    with pytest.raises(InvalidImportData):
        store.import_data(raw)

    assert store.get_state("vocab", "vocab-0", now).repetitions == 2


# --- JSON file store ---


def test_json_store_persists_across_instances(tmp_path, now, make_state):
    path = tmp_path / "nested" / "state.json"
    state = make_state(repetitions=1, interval=1 / 144)

    JsonStateStore(path).set_state("vocab", "vocab-0", state)

    assert path.exists()
    assert JsonStateStore(path).get_state("vocab", "vocab-0", now) == state
    assert list(path.parent.glob(".state-*")) == []


def test_json_store_reset_is_persisted(tmp_path, now, make_state):
    path = tmp_path / "state.json"
    JsonStateStore(path).set_state("vocab", "vocab-0", make_state(repetitions=4))

    JsonStateStore(path).reset_card_set("vocab")

    assert JsonStateStore(path).get_states("vocab", now) == {}


def test_json_store_import_is_persisted(tmp_path, now):
    path = tmp_path / "state.json"
    doc = {"version": "1.0", "cards": {"vocab": {"vocab-1": {"repetitions": 5, "interval": 30}}}}

    JsonStateStore(path).import_data(json.dumps(doc))

    assert JsonStateStore(path).get_state("vocab", "vocab-1", now).repetitions == 5


def test_corrupt_state_file_starts_empty(tmp_path, now, caplog):
    path = tmp_path / "state.json"
    path.write_text("{not json")

    store = JsonStateStore(path)

    assert store.get_states("vocab", now) == {}
    assert "corrupt" in caplog.text


@pytest.mark.parametrize("content", ["[1, 2, 3]", '"text"', '{"cards": {"vocab": "x"}}'])
def test_unreadable_state_document_starts_empty(tmp_path, now, caplog, content):
    path = tmp_path / "state.json"
    path.write_text(content)

    store = JsonStateStore(path)

    assert store.get_states("vocab", now) == {}
    assert "corrupt" in caplog.text


def test_json_stores_sharing_a_file_keep_each_others_writes(tmp_path, now, make_state):
    path = tmp_path / "state.json"
    first = JsonStateStore(path)
    second = JsonStateStore(path)

    first.set_state("vocab", "vocab-0", make_state(repetitions=1))
    second.set_state("vocab", "vocab-1", make_state(repetitions=2))
    first.save_history(StudyHistory(total_sessions=1))

    reloaded = JsonStateStore(path)
    assert set(reloaded.get_states("vocab", now)) == {"vocab-0", "vocab-1"}
    assert reloaded.get_history().total_sessions == 1


def test_concurrent_writes_are_not_lost(tmp_path, now, make_state):
    path = tmp_path / "state.json"
    stores = [JsonStateStore(path) for _ in range(4)]

    def write(index):
        stores[index % 4].set_state("vocab", f"vocab-{index}", make_state(repetitions=1))

    threads = [threading.Thread(target=write, args=(i,)) for i in range(20)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(JsonStateStore(path).get_states("vocab", now)) == 20
