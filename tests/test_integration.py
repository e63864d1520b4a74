# tests/test_integration.py
"""End-to-end test of the core workflow."""
import random

from tafel_trainer.db import init_db
from tafel_trainer.mastery import get_table_overview, load_mastery
from tafel_trainer.models import Operation
from tafel_trainer.results import get_result_summary
from tafel_trainer.session import Mode, PracticeSession
from tafel_trainer.settings import load_settings, set_exercise_count, set_player_name, toggle_table


def test_full_practice_workflow(tmp_db):
    """Configure tables, play two sessions, and check mastery and results add up."""
    init_db(tmp_db)
    toggle_table(tmp_db, Operation.MULTIPLICATION, 5)
    toggle_table(tmp_db, Operation.DIVISION, 3)
    set_exercise_count(tmp_db, 10)
    set_player_name(tmp_db, "Mila")

    session = PracticeSession(tmp_db, rng=random.Random(99))
    session.start()

    # First session: only division answered correctly
    while session.mode is Mode.PRACTICE:
        exercise = session.current_exercise
        if exercise.op is Operation.DIVISION:
            session.submit(str(exercise.result))
        else:
            session.submit(None)
        session.advance()

    assert session.stats.total == 10
    mastery = load_mastery(tmp_db)
    assert mastery.get("multiplication-5", 0) == 0
    division_correct = sum(1 for h in session.history if h.exercise.op is Operation.DIVISION)
    assert session.stats.correct == division_correct
    assert mastery.get("division-3", 0) == division_correct

    # Second session starts clean but keeps mastery
    session.restart()
    assert session.stats.total == 0
    assert session.history == []
    while session.mode is Mode.PRACTICE:
        session.submit(str(session.current_exercise.result))
        session.advance()
    assert session.stats.correct == 10

    summary = get_result_summary(tmp_db)
    assert summary["sessions"] == 2
    assert summary["questions_answered"] == 20

    overview = get_table_overview(load_settings(tmp_db), load_mastery(tmp_db))
    assert {(r["op"], r["table"]) for r in overview} == {
        (Operation.MULTIPLICATION, 5), (Operation.DIVISION, 3),
    }
    session.back_to_settings()
    assert session.mode is Mode.SETTINGS
