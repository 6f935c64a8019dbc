"""Post-commit follow-ons of a turn advance.

After a new turn is committed two things should happen: an expiration
timer for that turn is armed, and bots are asked for their moves. Both
are best effort; the committed turn stands whatever happens here.
"""
import logging
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Awaitable, Callable, Optional

import pytz
from apscheduler.schedulers.asyncio import AsyncIOScheduler

import config
from models.domain_models import TurnResult
from utils.time import now_utc

logger = logging.getLogger(__name__)


class TurnDispatcher(ABC):

    @abstractmethod
    def schedule_expiration(self, session_id: str, game_id: str, turn_number: int, delay_seconds: float) -> None:
        """Process `turn_number` once `delay_seconds` have passed."""

    @abstractmethod
    def notify_bots(self, session_id: str, game_id: str, turn_number: int) -> None:
        """Ask every alive bot in the game for its move on `turn_number`."""


class CeleryTurnDispatcher(TurnDispatcher):
    """Enqueue follow-ons on the Celery broker."""

    def schedule_expiration(self, session_id, game_id, turn_number, delay_seconds):
        # Deferred import so the web process does not pull in the worker config at import time
        from workers.tasks import process_turn_expiration

        process_turn_expiration.apply_async(
            args=[session_id, game_id, turn_number],
            countdown=max(0, delay_seconds),
        )

    def notify_bots(self, session_id, game_id, turn_number):
        from workers.tasks import notify_bots as notify_bots_task

        notify_bots_task.apply_async(args=[session_id, game_id, turn_number])


class LocalTurnDispatcher(TurnDispatcher):
    """
    Run follow-ons in this process on an APScheduler AsyncIOScheduler.

    For single-process deployments and development. Timers do not survive a
    restart; the stalled-turn sweep only runs under Celery beat.
    """

    def __init__(
        self,
        expire: Callable[[str, str, int], Awaitable[object]],
        notify: Callable[[str, str, int], Awaitable[object]],
        scheduler: Optional[AsyncIOScheduler] = None,
    ):
        self._expire = expire
        self._notify = notify
        self.scheduler = scheduler or AsyncIOScheduler(timezone=pytz.utc)

    def start(self) -> None:
        if not self.scheduler.running:
            self.scheduler.start()

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    def schedule_expiration(self, session_id, game_id, turn_number, delay_seconds):
        self.scheduler.add_job(
            self._expire,
            trigger="date",
            run_date=now_utc() + timedelta(seconds=max(0, delay_seconds)),
            args=[session_id, game_id, turn_number],
            id=f"expire:{session_id}:{game_id}:{turn_number}",
            replace_existing=True,
            misfire_grace_time=None,
        )

    def notify_bots(self, session_id, game_id, turn_number):
        self.scheduler.add_job(
            self._notify,
            trigger="date",
            run_date=now_utc(),
            args=[session_id, game_id, turn_number],
            misfire_grace_time=None,
        )


def run_follow_ups(dispatcher: TurnDispatcher, session_id: str, game_id: str, result: TurnResult) -> None:
    """Arm the next expiration and solicit bots after a committed advance.

    Nothing happens for a no-op result or a terminal turn. Each step is
    isolated: a failure is logged and the other still runs.
    """
    if not result.get("new_turn_created") or result.get("game_over"):
        return
    turn_number = result.get("new_turn_number")

    delay = result.get("turn_duration_seconds") or config.DEFAULT_TURN_SECONDS
    try:
        dispatcher.schedule_expiration(session_id, game_id, turn_number, delay)
        logger.info(f"[DISPATCH] {session_id}/{game_id}: expiration for turn {turn_number} in {delay}s")
    except Exception as exc:
        logger.error(
            f"[DISPATCH] Failed to schedule expiration for {session_id}/{game_id} turn {turn_number}: {exc}",
            exc_info=True,
        )

    try:
        dispatcher.notify_bots(session_id, game_id, turn_number)
    except Exception as exc:
        logger.error(
            f"[DISPATCH] Failed to notify bots for {session_id}/{game_id} turn {turn_number}: {exc}",
            exc_info=True,
        )


# Runtime singleton, set by the web process at startup
_dispatcher: Optional[TurnDispatcher] = None


def set_dispatcher(dispatcher: Optional[TurnDispatcher]) -> None:
    global _dispatcher
    _dispatcher = dispatcher


def get_dispatcher() -> TurnDispatcher:
    if _dispatcher is None:
        raise RuntimeError("Turn dispatcher not configured; call set_dispatcher() first")
    return _dispatcher
