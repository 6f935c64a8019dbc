"""Celery app for the turn pipeline: queues, routing and the beat schedule.

Queues:
- game_turns: expiration-triggered turn processing (latency sensitive)
- bots: outbound bot move requests (slow, bounded by BOT_REQUEST_TIMEOUT)
- maintenance: the periodic stalled-turn sweep
- default: anything not routed explicitly
"""
import sys
import os
import logging
from pathlib import Path

# Add project root to Python path so imports work when celery runs this module directly
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Configure timezone BEFORE importing anything else
import pytz
os.environ['TZ'] = 'UTC'

from celery import Celery
from celery.schedules import crontab
from kombu import Exchange, Queue

logger = logging.getLogger(__name__)

broker_url = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
result_backend = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/1")

app = Celery("turn_engine", include=["workers.tasks"])
logger.info(f"[CELERY] broker={broker_url} backend={result_backend}")

app.config_from_object({
    "broker_url": broker_url,
    "result_backend": result_backend,
    "task_serializer": "json",
    "accept_content": ["json"],
    "result_serializer": "json",
    "timezone": pytz.UTC,
    "enable_utc": True,
    # a worker dying mid-task leaves the message on the broker; the turn engine makes redelivery harmless
    "task_acks_late": True,
    "worker_prefetch_multiplier": 1,
    "task_default_retry_delay": 60,
    "task_max_retries": 5,
})

QUEUE_NAMES = ("default", "game_turns", "bots", "maintenance")

app.conf.task_queues = tuple(
    Queue(
        name,
        exchange=Exchange(name, type="direct"),
        routing_key=name,
        queue_arguments={"x-max-priority": 10},
    )
    for name in QUEUE_NAMES
)
app.conf.task_default_queue = "default"
app.conf.task_default_exchange = "default"
app.conf.task_default_routing_key = "default"

app.conf.task_routes = {
    "workers.tasks.process_turn_expiration": {"queue": "game_turns"},
    "workers.tasks.notify_bots": {"queue": "bots"},
    "workers.tasks.sweep_stalled_turns": {"queue": "maintenance"},
}

# Beat keeps its schedule in a database so restarts do not reset it.
# CELERY_BEAT_SCHEDULER=celery.beat:PersistentScheduler falls back to the file-based default.
app.conf.beat_scheduler = os.getenv(
    "CELERY_BEAT_SCHEDULER",
    "celery_sqlalchemy_scheduler.schedulers:DatabaseScheduler",
)
app.conf.sqlalchemy_engine_options = {
    "url": os.getenv("CELERY_SCHEDULER_DB_URL", "sqlite:///celery_beat_schedule.db"),
}
app.conf.sqlalchemy_session_options = {}

app.conf.beat_schedule = {
    # Safety net for turns whose expiration message was never enqueued
    "sweep-stalled-turns": {
        "task": "workers.tasks.sweep_stalled_turns",
        "schedule": crontab(minute="*"),
        "options": {
            "queue": "maintenance",
            "priority": 2,
        },
    },
}

# NOTE: Stores are NOT opened here at module import time. An aiosqlite
# connection is bound to the event loop that created it, and every task runs
# its own asyncio.run(); tasks open a store inside that loop instead
# (see stores.open_game_store).
