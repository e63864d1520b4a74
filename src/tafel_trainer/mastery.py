"""Per-table mastery scores and how answers move them."""
import logging

from tafel_trainer.db import MASTERY_KEY, delete, load_json, save_json
from tafel_trainer.models import MAX_SCORE, Exercise, Operation, UserSettings

logger = logging.getLogger(__name__)


def mastery_key(op: Operation, table: int) -> str:
    return f"{op.value}-{table}"


def get_score(mastery: dict, op: Operation, table: int) -> int:
    return mastery.get(mastery_key(op, table), 0)


def table_weight(score: int) -> int:
    """Selection weight: 11 for an untouched table down to 1 for a mastered one."""
    return MAX_SCORE + 1 - score


def credited_table(exercise: Exercise, multiplication_tables) -> int:
    if exercise.op is Operation.MULTIPLICATION:
        return exercise.a if exercise.a in multiplication_tables else exercise.b
    return exercise.b


def update_mastery(mastery: dict, exercise: Exercise, was_correct: bool,
                   multiplication_tables) -> dict:
    """Return a new mapping with the credited table's score moved one step, clamped to 0-10."""
    key = mastery_key(exercise.op, credited_table(exercise, multiplication_tables))
    score = mastery.get(key, 0)
    if was_correct:
        score = min(MAX_SCORE, score + 1)
    else:
        score = max(0, score - 1)
    return {**mastery, key: score}


def load_mastery(db_path: str) -> dict:
    stored = load_json(db_path, MASTERY_KEY, {})
    mastery = {}
    for key, value in stored.items():
        if isinstance(value, bool) or not isinstance(value, int):
            logger.warning("Dropping mastery entry %r with non-integer score %r", key, value)
            continue
        mastery[key] = max(0, min(MAX_SCORE, value))
    return mastery


def save_mastery(db_path: str, mastery: dict) -> None:
    save_json(db_path, MASTERY_KEY, mastery)


def record_answer(db_path: str, exercise: Exercise, was_correct: bool,
                  multiplication_tables) -> dict:
    mastery = update_mastery(load_mastery(db_path), exercise, was_correct, multiplication_tables)
    save_mastery(db_path, mastery)
    key = mastery_key(exercise.op, credited_table(exercise, multiplication_tables))
    logger.debug("Mastery %s -> %d", key, mastery[key])
    return mastery


def reset_mastery(db_path: str) -> None:
    delete(db_path, MASTERY_KEY)


def get_mastery_label(score: int) -> str:
    if score >= 9:
        return "MASTERED"
    elif score >= 6:
        return "GOOD"
    elif score >= 3:
        return "LEARNING"
    return "NEW"


def get_mastery_color(score: int) -> str:
    if score >= 9:
        return "green"
    elif score >= 6:
        return "yellow"
    elif score >= 3:
        return "dark_orange"
    return "red"


def get_table_overview(settings: UserSettings, mastery: dict) -> list[dict]:
    rows = []
    for op in Operation:
        for table in settings.tables_for(op):
            score = get_score(mastery, op, table)
            rows.append({
                "op": op,
                "table": table,
                "score": score,
                "weight": table_weight(score),
                "label": get_mastery_label(score),
            })
    return rows
