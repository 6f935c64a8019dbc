"""SQLite bootstrap for the game store.

`ensure_db` is what the web process and the Celery workers call on
startup; `connect` opens a connection configured the way
`stores.sqlite_game_store` expects (autocommit, explicit transactions).
"""

from .connections import connect, init_db, ensure_db, SCHEMA_PATH

__all__ = ["connect", "init_db", "ensure_db", "SCHEMA_PATH"]
