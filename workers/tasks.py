"""Celery task definitions for the turn pipeline."""
from celery import Task
from celery.exceptions import SoftTimeLimitExceeded
import logging
from datetime import datetime, UTC
from typing import Any, Awaitable, Callable, Dict
import asyncio
from functools import wraps

import config
import stores
from stores.game_store import GameStore
from services.dispatch import CeleryTurnDispatcher, TurnDispatcher
from services.move_completion import MoveCompletionDetector
from services import bot_notifier, turn_expiration
from workers.celery_app import app

logger = logging.getLogger(__name__)

soft_time_limit = 60  # seconds
hard_time_limit = 180  # seconds


def celery_task(**task_kwargs):
    """Combined decorator that registers a Celery task and adds error handling.

    Replaces the need for @app.task() and a separate error-handling decorator.
    Automatically:
    - Registers the function as a Celery task via @app.task()
    - Wraps execution with error handling (SoftTimeLimitExceeded, generic exceptions)
    - For retryable exceptions: logs and re-raises to allow Celery's autoretry mechanism
    - For non-retryable exceptions: logs and returns graceful failure dict

    Usage:
        @celery_task(bind=True, queue="game_turns", ...)
        def my_task(self, ...):
            # business logic
    """
    def decorator(func):
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            try:
                return func(self, *args, **kwargs)
            except SoftTimeLimitExceeded:
                logger.warning(f"{func.__name__} exceeded soft time limit, graceful shutdown")
                raise
            except Exception as exc:
                # Unknown exceptions are treated as retryable
                is_retryable = getattr(exc, 'retryable', True)

                if not is_retryable:
                    logger.error(f"{func.__name__} failed with non-retryable error: {exc.__class__.__name__}: {exc}", exc_info=True)
                    return {
                        "status": "failure",
                        "error": exc.__class__.__name__,
                        "message": str(exc),
                        "timestamp": datetime.now(UTC).isoformat(),
                    }
                else:
                    logger.error(f"{func.__name__} failed with retryable error: {exc.__class__.__name__}: {exc}", exc_info=True)
                    raise
        return app.task(base=GameServerTask, **task_kwargs)(wrapper)
    return decorator


class GameServerTask(Task):
    """Base task class with custom error handling and logging."""

    autoretry_for = (Exception,)
    retry_kwargs = {"max_retries": 5}
    retry_backoff = True
    retry_backoff_max = 3600
    retry_jitter = True

    def on_retry(self, exc: Exception, task_id: str, args: tuple, kwargs: dict, einfo: Any) -> None:
        """Log retry events."""
        logger.warning(
            f"Task {self.name} (id={task_id}) retrying after {exc}",
            extra={"task_id": task_id, "task_args": args, "task_kwargs": kwargs},
        )

    def on_failure(self, exc: Exception, task_id: str, args: tuple, kwargs: dict, einfo: Any) -> None:
        """Log task failures."""
        logger.error(
            f"Task {self.name} (id={task_id}) failed with {exc}",
            extra={"task_id": task_id, "task_args": args, "task_kwargs": kwargs},
            exc_info=einfo,
        )

    def on_success(self, result: Any, task_id: str, args: tuple, kwargs: dict) -> None:
        """Log task successes."""
        logger.info(
            f"Task {self.name} (id={task_id}) succeeded",
            extra={"task_id": task_id, "task_result": result},
        )


async def _with_store(job: Callable[[GameStore, TurnDispatcher], Awaitable[Dict[str, Any]]]) -> Dict[str, Any]:
    """Run `job` against a store opened in the current event loop.

    The completion detector is registered so that moves recorded from inside
    the worker (bot answers) can complete a turn just like HTTP submissions.
    """
    dispatcher = CeleryTurnDispatcher()
    async with stores.open_game_store(config.DB_PATH) as store:
        MoveCompletionDetector(store, dispatcher).register()
        return await job(store, dispatcher)


@celery_task(
    bind=True,
    name="workers.tasks.process_turn_expiration",
    queue="game_turns",
    priority=1,
    soft_time_limit=soft_time_limit,
    time_limit=hard_time_limit,
)
def process_turn_expiration(self, session_id: str, game_id: str, turn_number: int) -> Dict[str, Any]:
    """
    Force `turn_number` of a game to resolve; fired `max_turn_time` after the turn started.

    A no-op when the turn already advanced because everyone moved.

    Returns:
        dict: TurnResult fields plus "status" and "timestamp".

    Raises:
        TurnLimitExceeded: above config.MAX_TURN_NUMBER (reported, not retried)
    """
    logger.info(f"process_turn_expiration called for {session_id}/{game_id} turn_number={turn_number}")

    result = asyncio.run(_with_store(
        lambda store, dispatcher: turn_expiration.handle_turn_expiration(
            store, dispatcher, session_id, game_id, turn_number
        )
    ))

    result = {"status": "success", **result, "timestamp": datetime.now(UTC).isoformat()}
    logger.info(f"process_turn_expiration completed for {session_id}/{game_id}: {result}")
    return result


@celery_task(
    bind=True,
    name="workers.tasks.notify_bots",
    queue="bots",
    priority=1,
    soft_time_limit=soft_time_limit,
    time_limit=hard_time_limit,
)
def notify_bots(self, session_id: str, game_id: str, turn_number: int) -> Dict[str, Any]:
    """Solicit moves from every alive bot on `turn_number`."""
    logger.info(f"notify_bots called for {session_id}/{game_id} turn_number={turn_number}")

    summary = asyncio.run(_with_store(
        lambda store, dispatcher: bot_notifier.notify_bots(store, session_id, game_id, turn_number)
    ))
    return {"status": "success", **summary, "timestamp": datetime.now(UTC).isoformat()}


@celery_task(
    bind=True,
    name="workers.tasks.sweep_stalled_turns",
    queue="maintenance",
    priority=2,
    soft_time_limit=soft_time_limit,
    time_limit=hard_time_limit,
)
def sweep_stalled_turns(self) -> Dict[str, Any]:
    """
    Periodic task (every minute) that advances games stuck past their expiry.

    Catches games whose expiration task was lost, e.g. an all-bot game where
    enqueueing failed right after a commit.

    Returns:
        dict: {
            "status": "success" | "partial_failure",
            "stalled": int,
            "advanced": int,
            "errors": list[str],
            "timestamp": str,
        }
    """
    logger.info("Starting sweep_stalled_turns task")

    summary = asyncio.run(_with_store(
        lambda store, dispatcher: turn_expiration.sweep_stalled_turns(store, dispatcher)
    ))
    result = {
        "status": "partial_failure" if summary["errors"] else "success",
        **summary,
        "timestamp": datetime.now(UTC).isoformat(),
    }
    logger.info(f"sweep_stalled_turns task completed: {result}")
    return result
