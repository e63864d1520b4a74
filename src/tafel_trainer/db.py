"""Database initialization and the key-value store behind settings and mastery."""
import json
import logging
import os
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = str(Path.home() / ".tafel_trainer" / "trainer.db")
DB_PATH_ENV = "TAFEL_TRAINER_DB"

SETTINGS_KEY = "tafel-settings"
MASTERY_KEY = "tafel-mastery"
RESULTS_KEY = "tafel-results"

SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    key TEXT NOT NULL UNIQUE,
    value TEXT
);
"""


def resolve_db_path() -> str:
    """Database path from the environment, or the default under the home directory."""
    return os.environ.get(DB_PATH_ENV) or DEFAULT_DB_PATH


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating the store if it doesn't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()


def load(db_path: str, key: str) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else None


def save(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO kv_store (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
        (key, value, value),
    )
    conn.commit()
    conn.close()


def delete(db_path: str, key: str) -> None:
    conn = get_connection(db_path)
    conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
    conn.commit()
    conn.close()


def load_json(db_path: str, key: str, default):
    """Decode a stored JSON record.

    A missing record, unparsable JSON, or a value whose top-level type differs
    from ``default`` all yield ``default``; corrupt records are logged, never raised.
    """
    raw = load(db_path, key)
    if raw is None:
        return default
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Stored record %r is not valid JSON, using defaults", key)
        return default
    if not isinstance(value, type(default)):
        logger.warning("Stored record %r has unexpected type %s, using defaults",
                       key, type(value).__name__)
        return default
    return value


def save_json(db_path: str, key: str, value) -> None:
    save(db_path, key, json.dumps(value, ensure_ascii=False))
