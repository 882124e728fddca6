import json

import pytest

from flashdeck.domain.errors import CardSetNotFound
from flashdeck.infrastructure.adapters.csv_source import (
    DEMO_CARDS,
    CsvCardSource,
    format_card_set_name,
    parse_cards,
)


def test_parse_cards_basic():
    cards = parse_cards("la casa,the house\nel perro,the dog\n", "vocab")

    assert [c.id for c in cards] == ["vocab-0", "vocab-1"]
    assert cards[0].question == "la casa"
    assert cards[0].answer == "the house"
    assert cards[0].hint is None
    assert cards[0].difficulty == "medium"


def test_parse_cards_quoted_fields():
    text = '"Capital, France","Paris"\n"Say ""hi""","hello",a hint,geo,hard\n'

    cards = parse_cards(text, "mixed")

    assert cards[0].question == "Capital, France"
    assert cards[1].question == 'Say "hi"'
    assert cards[1].hint == "a hint"
    assert cards[1].category == "geo"
    assert cards[1].difficulty == "hard"


def test_parse_cards_multiline_quoted_field():
    cards = parse_cards('"line one\nline two",answer\n', "multi")

    assert len(cards) == 1
    assert cards[0].question == "line one\nline two"


def test_parse_cards_skips_short_and_blank_rows(caplog):
    cards = parse_cards("only a question\n\nq,a\n,\n", "vocab")

    assert [(c.id, c.question) for c in cards] == [("vocab-0", "q")]
    assert "Skipping line 1" in caplog.text


def test_format_card_set_name():
    assert format_card_set_name("general-knowledge") == "General Knowledge"
    assert format_card_set_name("vocab") == "Vocab"


def test_list_card_sets_from_directory(data_dir):
    (data_dir / "general-knowledge.csv").write_text("q,a\n")

    sets = CsvCardSource(data_dir).list_card_sets()

    assert [(s.id, s.name, s.total_cards) for s in sets] == [
        ("general-knowledge", "General Knowledge", 1),
        ("vocab", "Vocab", 3),
    ]


def test_list_card_sets_from_index(data_dir):
    index = {
        "cardSets": [
            {"filename": "vocab.csv", "name": "Spanish", "description": "Basics"},
            {"filename": "missing.csv", "name": "Gone"},
        ]
    }
    (data_dir / "index.json").write_text(json.dumps(index))

    sets = CsvCardSource(data_dir).list_card_sets()

    assert len(sets) == 1
    assert sets[0].name == "Spanish"
    assert sets[0].description == "Basics"
    assert sets[0].file_name == "vocab.csv"


def test_empty_directory_offers_demo(tmp_path):
    source = CsvCardSource(tmp_path / "nothing-here")

    sets = source.list_card_sets()

    assert [s.id for s in sets] == ["demo"]
    assert sets[0].total_cards == len(DEMO_CARDS)
    assert source.load_cards("demo") == DEMO_CARDS


def test_load_cards(data_dir):
    cards = CsvCardSource(data_dir).load_cards("vocab")

    assert len(cards) == 3
    assert cards[1].hint == "woof"


def test_load_cards_strips_byte_order_mark(data_dir):
    (data_dir / "bom.csv").write_bytes("\ufeffq,a\n".encode("utf-8"))

    assert CsvCardSource(data_dir).load_cards("bom")[0].question == "q"


@pytest.mark.parametrize("card_set_id", ["missing", "../vocab", "sub/vocab", ".hidden", ""])
def test_load_cards_unknown_set(data_dir, card_set_id):
    with pytest.raises(CardSetNotFound):
        CsvCardSource(data_dir).load_cards(card_set_id)
