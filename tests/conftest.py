import random

import pytest

from tafel_trainer.db import init_db


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_trainer.db")
    return db_path


@pytest.fixture
def ready_db(tmp_db):
    """Temporary database with the store already created."""
    init_db(tmp_db)
    return tmp_db


@pytest.fixture
def rng():
    return random.Random(1234)
