"""
Pytest fixtures for the turn pipeline tests.
"""

import pytest
import pytest_asyncio

from db.connections import ensure_db
from services.dispatch import TurnDispatcher
from stores.sqlite_game_store import SqliteGameStore


class RecordingDispatcher(TurnDispatcher):
    """Dispatcher that only remembers what it was asked to do."""

    def __init__(self):
        self.expirations = []
        self.notifications = []

    def schedule_expiration(self, session_id, game_id, turn_number, delay_seconds):
        self.expirations.append((session_id, game_id, turn_number, delay_seconds))

    def notify_bots(self, session_id, game_id, turn_number):
        self.notifications.append((session_id, game_id, turn_number))


@pytest_asyncio.fixture
async def store(tmp_path):
    """A SqliteGameStore on a fresh database file."""
    db_path = str(tmp_path / "turns.sqlite3")
    await ensure_db(db_path)
    game_store = SqliteGameStore(db_path)
    await game_store.init()
    yield game_store
    await game_store.close()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()
