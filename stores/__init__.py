# Abstractions
from .game_store import GameStore, GameTransaction, MoveStatusListener

# Exceptions
from .exceptions import (
    StoreError,
    GameStoreError,
    GameNotFound,
    PlayerNotFound,
    UnexpectedResult,
    GameAlreadyExists,
    PlayerAlreadyExists,
    TurnMismatch,
    MoveAlreadySubmitted,
    PlayerNotAlive,
    GameOver,
    InvalidMove,
    InvalidState,
    ConfigurationError,
    UnsupportedGameType,
    InvalidGameSetup,
    TurnLimitExceeded,
)

# Concrete implementations are private; only abstract interfaces are exported.
from .sqlite_game_store import SqliteGameStore as _SqliteGameStore

__all__ = [
    # Abstractions
    "GameStore",
    "GameTransaction",
    "MoveStatusListener",
    # Exceptions
    "StoreError",
    "GameStoreError",
    "GameNotFound",
    "PlayerNotFound",
    "UnexpectedResult",
    "GameAlreadyExists",
    "PlayerAlreadyExists",
    "TurnMismatch",
    "MoveAlreadySubmitted",
    "PlayerNotAlive",
    "GameOver",
    "InvalidMove",
    "InvalidState",
    "ConfigurationError",
    "UnsupportedGameType",
    "InvalidGameSetup",
    "TurnLimitExceeded",
    # Runtime helpers
    "init_stores",
    "close_stores",
    "get_game_store",
    "open_game_store",
]


# Runtime singletons and initialization helpers
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from db.connections import ensure_db

game_store: Optional[GameStore] = None


async def init_stores(db_path: str) -> GameStore:
    """Create the process-wide store singleton (idempotent).

    Used by the web process at startup. Celery tasks run each job in a fresh
    event loop and use `open_game_store` instead, since an aiosqlite
    connection cannot outlive the loop that opened it.
    """
    global game_store

    if game_store is None:
        await ensure_db(db_path)
        store = _SqliteGameStore(db_path)
        await store.init()
        game_store = store
    return game_store


async def close_stores() -> None:
    global game_store
    if game_store is not None:
        await game_store.close()
        game_store = None


def get_game_store() -> GameStore:
    """Return the initialized store singleton."""
    if game_store is None:
        raise RuntimeError("Game store not initialized; call init_stores() first")
    return game_store


@asynccontextmanager
async def open_game_store(db_path: str) -> AsyncIterator[GameStore]:
    """A store bound to the current event loop, closed on exit."""
    await ensure_db(db_path)
    store = _SqliteGameStore(db_path)
    await store.init()
    try:
        yield store
    finally:
        await store.close()
