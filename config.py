import os
from pathlib import Path

# Path to the SQLite database file used by stores. Can be overridden
# using the TURNS_DB_PATH environment variable.
DB_PATH = os.environ.get("TURNS_DB_PATH", str(Path(__file__).parent / "db.sqlite3"))

# "celery" enqueues expirations and bot notifications on the broker,
# "local" runs them on an in-process APScheduler (single process / dev).
TURN_DISPATCHER = os.environ.get("TURN_DISPATCHER", "celery")

# Per-call deadline for outbound bot move requests (seconds)
BOT_REQUEST_TIMEOUT = float(os.environ.get("BOT_REQUEST_TIMEOUT", "10"))

# Used when a game setup does not carry its own max_turn_time (seconds)
DEFAULT_TURN_SECONDS = int(os.environ.get("DEFAULT_TURN_SECONDS", "30"))

# Scheduled turn processing above this turn number is refused
MAX_TURN_NUMBER = int(os.environ.get("MAX_TURN_NUMBER", "1000"))

# How long past its expiry a turn may sit before the sweep forces it
STALLED_TURN_GRACE_SECONDS = int(os.environ.get("STALLED_TURN_GRACE_SECONDS", "60"))

CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "http://localhost:5173").split(",") if o.strip()]
