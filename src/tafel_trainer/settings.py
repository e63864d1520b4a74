"""User settings: which tables to practise and how long a session lasts."""
import logging

from tafel_trainer.db import SETTINGS_KEY, load_json, save_json
from tafel_trainer.models import EXERCISE_COUNTS, Operation, UserSettings, is_valid_exercise_count

logger = logging.getLogger(__name__)

QUESTIONS_PER_TABLE = 11


class InvalidTableError(ValueError):
    """Table number outside the valid range for its operation."""


def load_settings(db_path: str) -> UserSettings:
    return UserSettings.from_dict(load_json(db_path, SETTINGS_KEY, {}))


def save_settings(db_path: str, settings: UserSettings) -> None:
    save_json(db_path, SETTINGS_KEY, settings.to_dict())


def toggle_table(db_path: str, op: Operation, table: int) -> UserSettings:
    """Add the table to the operation's set, or remove it if already selected."""
    if table not in op.valid_tables:
        raise InvalidTableError(f"{table} is not a valid {op.value} table")
    settings = load_settings(db_path)
    current = settings.tables_for(op)
    if table in current:
        updated = [t for t in current if t != table]
    else:
        updated = sorted(current + [table])
    if op is Operation.MULTIPLICATION:
        settings.multiplication_tables = updated
    else:
        settings.division_tables = updated
    save_settings(db_path, settings)
    logger.debug("Toggled %s table %d -> %s", op.value, table, updated)
    return settings


def set_exercise_count(db_path: str, count) -> UserSettings:
    if not is_valid_exercise_count(count):
        raise ValueError(f"Exercise count must be one of {EXERCISE_COUNTS}, got {count!r}")
    settings = load_settings(db_path)
    settings.exercise_count = count
    save_settings(db_path, settings)
    return settings


def set_player_name(db_path: str, name: str) -> UserSettings:
    settings = load_settings(db_path)
    settings.player_name = name.strip()
    save_settings(db_path, settings)
    return settings


def session_length(settings: UserSettings) -> int:
    """Number of questions in one session.

    "all" covers every operand 0-10 once for each selected table.
    """
    if settings.exercise_count == "all":
        tables = len(settings.multiplication_tables) + len(settings.division_tables)
        return QUESTIONS_PER_TABLE * tables
    return settings.exercise_count
