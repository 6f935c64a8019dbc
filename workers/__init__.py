"""Workers package: Celery app and background task definitions.

Public API:
- `celery_app`: Celery application instance and configuration
- `tasks`: task implementations (`process_turn_expiration`, `notify_bots`,
  `sweep_stalled_turns`)

Both are loaded lazily so that importing `workers` from the web process does
not configure Celery until a task is actually enqueued.
"""


def __getattr__(name):
    if name == "celery_app":
        from .celery_app import app
        return app
    elif name == "tasks":
        from . import tasks
        return tasks
    elif name in (
        "process_turn_expiration",
        "notify_bots",
        "sweep_stalled_turns",
    ):
        from . import tasks
        return getattr(tasks, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "celery_app",
    "tasks",
    "process_turn_expiration",
    "notify_bots",
    "sweep_stalled_turns",
]
