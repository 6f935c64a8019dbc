import logging
from typing import Optional

from gameprocessors import get_processor
from models.domain_models import MoveStatus, TurnResult
from stores.game_store import GameStore
from .dispatch import TurnDispatcher, run_follow_ups
from .turn_engine import ProcessorFactory, advance_turn

logger = logging.getLogger(__name__)


class MoveCompletionDetector:
    """
    Advances a turn as soon as every alive player has moved.

    Subscribed to the store's MoveStatus notifications. It fires on every
    committed move, so the last two submissions of a turn may both see
    `all_moved()`; the Turn Engine lets only one of them create the turn.
    """

    def __init__(
        self,
        store: GameStore,
        dispatcher: TurnDispatcher,
        processor_factory: ProcessorFactory = get_processor,
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.processor_factory = processor_factory

    def register(self) -> "MoveCompletionDetector":
        self.store.add_move_status_listener(self.on_move_status_updated)
        return self

    async def on_move_status_updated(self, session_id: str, game_id: str, status: MoveStatus) -> Optional[TurnResult]:
        if not status.all_moved():
            logger.debug(
                f"[DETECT] {session_id}/{game_id} turn={status.move_number}: waiting on {status.waiting_on()}"
            )
            return None

        logger.info(f"[DETECT] {session_id}/{game_id} turn={status.move_number}: all players moved")
        result = await advance_turn(
            self.store, session_id, game_id, status.move_number, self.processor_factory
        )
        run_follow_ups(self.dispatcher, session_id, game_id, result)
        return result
