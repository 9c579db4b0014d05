import json

import pytest

from nl_query import vocabulary as vocabulary_module
from nl_query.vocabulary import Predicate, Vocabulary, load_vocabulary, tokenize


def test_default_tables(vocabulary):
    assert vocabulary.tables == ("posts", "todos", "users")
    assert vocabulary.entities["tasks"] == "todos"


def test_vocabulary_is_read_only(vocabulary):
    with pytest.raises(TypeError):
        vocabulary.entities["things"] = "todos"
    with pytest.raises(AttributeError):
        vocabulary.id_window = 10


def test_tokenize():
    assert tokenize("  Show ME id=12,  please! ") == ("show", "me", "id", "12", "please")
    assert tokenize("") == ()


def test_predicate_round_trip():
    predicate = Predicate.parse("is_done=eq.true")
    assert predicate == Predicate("is_done", "eq", "true")
    assert predicate.to_filter() == "is_done=eq.true"


@pytest.mark.parametrize(
    "expression",
    ["is_done=like.true", "is_done", "=eq.true", "a=eq.1&b=eq.2", "id=gt."],
)
def test_predicate_rejects_invalid(expression):
    with pytest.raises(ValueError):
        Predicate.parse(expression)


def test_predicate_rejects_unknown_operator():
    with pytest.raises(ValueError):
        Predicate("id", "ilike", "1")


def test_duplicate_synonym_across_tables():
    with pytest.raises(ValueError, match="maps to both"):
        Vocabulary.from_dict({"entities": {"todos": ["item"], "posts": ["item"]}})


def test_multi_word_synonym_rejected():
    with pytest.raises(ValueError):
        Vocabulary.from_dict({"entities": {"todos": ["to do"]}})


def test_invalid_comparison_operator():
    with pytest.raises(ValueError):
        Vocabulary.from_dict({"entities": {"todos": []}, "comparisons": {"like": "ilike"}})


def test_table_name_is_its_own_synonym():
    vocabulary = Vocabulary.from_dict({"entities": {"tickets": ["issue"]}})
    assert vocabulary.entities["tickets"] == "tickets"


def test_load_vocabulary_defaults():
    assert load_vocabulary(None) == Vocabulary.default()


def test_load_vocabulary_from_file(tmp_path):
    path = tmp_path / "vocabulary.json"
    path.write_text(json.dumps({
        "entities": {"notes": ["note", "memo"]},
        "predicates": {"archived": "archived=eq.true"},
        "id_window": 1,
    }))

    vocabulary = load_vocabulary(str(path))
    assert vocabulary.entities["memo"] == "notes"
    assert vocabulary.predicates[("archived",)] == Predicate("archived", "eq", "true")
    assert vocabulary.id_window == 1


def test_get_vocabulary_is_singleton(monkeypatch):
    monkeypatch.setattr(vocabulary_module, "_vocabulary", None)
    first = vocabulary_module.get_vocabulary()
    assert vocabulary_module.get_vocabulary() is first


def test_tokenize_keeps_signed_and_decimal_numbers():
    assert tokenize("id -3") == ("id", "-3")
    assert tokenize("id 1.5") == ("id", "1.5")
    assert tokenize("the 1st todo") == ("the", "1st", "todo")


@pytest.mark.parametrize(
    "predicate, expected",
    [
        (Predicate("is_done", "eq", "true"), Predicate("is_done", "eq", "false")),
        (Predicate("status", "eq", "closed"), Predicate("status", "neq", "closed")),
        (Predicate("status", "neq", "closed"), Predicate("status", "eq", "closed")),
        (Predicate("id", "gt", "5"), None),
    ],
)
def test_predicate_negated(predicate, expected):
    assert predicate.negated() == expected


def test_id_column_is_normalized():
    vocabulary = Vocabulary.from_dict({"entities": {"todos": []}, "id_column": " ID "})
    assert vocabulary.id_column == "id"


def test_id_column_must_be_a_word():
    with pytest.raises(ValueError):
        Vocabulary.from_dict({"entities": {"todos": []}, "id_column": "todo id"})


def test_custom_negations():
    vocabulary = Vocabulary.from_dict({
        "entities": {"todos": []},
        "predicates": {"done": "is_done=eq.true"},
        "negations": ["NOT", "without"],
    })
    assert vocabulary.negations == ("not", "without")
