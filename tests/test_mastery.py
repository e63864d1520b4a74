"""Tests for mastery scores."""
from tafel_trainer.db import MASTERY_KEY, save, save_json
from tafel_trainer.mastery import (
    credited_table, get_mastery_color, get_mastery_label, get_score,
    get_table_overview, load_mastery, mastery_key, record_answer, reset_mastery,
    table_weight, update_mastery,
)
from tafel_trainer.models import Exercise, Operation, UserSettings

MUL = Operation.MULTIPLICATION
DIV = Operation.DIVISION


def test_mastery_key_format():
    assert mastery_key(MUL, 5) == "multiplication-5"
    assert mastery_key(DIV, 3) == "division-3"


def test_get_score_missing_is_zero():
    assert get_score({}, MUL, 5) == 0
    assert get_score({"multiplication-5": 4}, MUL, 5) == 4


def test_table_weight_range():
    assert table_weight(0) == 11
    assert table_weight(10) == 1


def test_credited_table_prefers_a():
    e = Exercise(a=3, b=5, op=MUL, result=15)
    assert credited_table(e, [3, 5]) == 3
    assert credited_table(e, [5]) == 5


def test_credited_table_division_is_divisor():
    e = Exercise(a=15, b=5, op=DIV, result=3)
    assert credited_table(e, [3]) == 5


def test_update_mastery_increments():
    e = Exercise(a=5, b=2, op=MUL, result=10)
    assert update_mastery({}, e, True, [5]) == {"multiplication-5": 1}


def test_update_mastery_is_pure():
    e = Exercise(a=5, b=2, op=MUL, result=10)
    original = {"multiplication-5": 4}
    update_mastery(original, e, True, [5])
    assert original == {"multiplication-5": 4}


def test_update_mastery_stays_in_bounds():
    for op in (MUL, DIV):
        e = Exercise(a=10, b=5, op=op, result=50 if op is MUL else 2)
        for score in range(0, 11):
            for correct in (True, False):
                key = mastery_key(op, credited_table(e, [5]))
                updated = update_mastery({key: score}, e, correct, [5])
                assert 0 <= updated[key] <= 10


def test_update_mastery_caps_and_floors():
    e = Exercise(a=4, b=4, op=DIV, result=1)
    assert update_mastery({"division-4": 10}, e, True, [])["division-4"] == 10
    assert update_mastery({}, e, False, [])["division-4"] == 0


def test_record_answer_persists(ready_db):
    e = Exercise(a=2, b=7, op=MUL, result=14)
    record_answer(ready_db, e, True, [7])
    record_answer(ready_db, e, True, [7])
    assert load_mastery(ready_db) == {"multiplication-7": 2}


def test_load_mastery_corrupt(ready_db):
    save(ready_db, MASTERY_KEY, "}{")
    assert load_mastery(ready_db) == {}


def test_load_mastery_cleans_values(ready_db):
    save_json(ready_db, MASTERY_KEY, {"multiplication-2": 14, "division-3": "x", "division-4": -2})
    assert load_mastery(ready_db) == {"multiplication-2": 10, "division-4": 0}


def test_reset_mastery(ready_db):
    save_json(ready_db, MASTERY_KEY, {"multiplication-2": 5})
    reset_mastery(ready_db)
    assert load_mastery(ready_db) == {}


def test_mastery_labels():
    assert get_mastery_label(10) == "MASTERED"
    assert get_mastery_label(6) == "GOOD"
    assert get_mastery_label(3) == "LEARNING"
    assert get_mastery_label(0) == "NEW"
    assert get_mastery_color(9) == "green"
    assert get_mastery_color(2) == "red"


def test_table_overview():
    settings = UserSettings(multiplication_tables=[2, 5], division_tables=[3])
    rows = get_table_overview(settings, {"multiplication-5": 9})
    assert [(r["op"], r["table"]) for r in rows] == [(MUL, 2), (MUL, 5), (DIV, 3)]
    assert rows[1]["score"] == 9
    assert rows[1]["weight"] == 2
    assert rows[1]["label"] == "MASTERED"
