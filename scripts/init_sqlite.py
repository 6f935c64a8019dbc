#!/usr/bin/env python3
"""(Re)create the turn-engine SQLite database from db/schema.sql.

Destructive: the game tables are dropped first (players are kept unless
--reset-players is passed). For a non-destructive bootstrap use
`db.ensure_db`, which the web process and workers call on startup.

Usage: init_sqlite.py [DB_PATH] [SCHEMA_PATH] [--reset-players]
"""
import sqlite3
import sys
import os
from pathlib import Path

# children first so foreign keys never dangle mid-drop
GAME_TABLES = ['move_statuses', 'moves', 'turns', 'games']
CRITICAL_TABLES = ['players', 'games', 'turns', 'moves', 'move_statuses']


def reset_db(db_path: str, schema_path: str, reset_players: bool = False) -> None:
    db_path = Path(db_path).resolve()
    schema_path = Path(schema_path).resolve()

    if not schema_path.exists():
        print(f"[INIT] ✗ Error: Schema file not found at {schema_path}", file=sys.stderr)
        sys.exit(1)

    conn = sqlite3.connect(str(db_path))
    try:
        to_drop = GAME_TABLES + (['players'] if reset_players else [])
        for table in to_drop:
            conn.execute(f"DROP TABLE IF EXISTS {table}")
        conn.commit()

        conn.executescript(schema_path.read_text())
        conn.commit()

        created = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
        missing = [t for t in CRITICAL_TABLES if t not in created]
        if missing:
            print(f"[INIT] ✗ Error: Missing critical tables {missing}", file=sys.stderr)
            sys.exit(1)

        players = conn.execute("SELECT COUNT(*) FROM players").fetchone()[0]
    except sqlite3.Error as e:
        print(f"[INIT] ✗ Error: Failed to initialize database: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        conn.close()

    # Ensure database file is readable and writable by all users (especially for Docker containers)
    os.chmod(str(db_path), 0o666)
    print(f"[INIT] ✓ Database initialized at {db_path} ({players} players kept)")


if __name__ == "__main__":
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    db_path = args[0] if args else os.environ.get("TURNS_DB_PATH", "./dev.db")
    schema_path = args[1] if len(args) > 1 else str(Path(__file__).parent.parent / "db" / "schema.sql")
    reset_db(db_path, schema_path, reset_players="--reset-players" in sys.argv)
