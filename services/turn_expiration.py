import logging
from typing import Any, Dict, Optional

import config
from gameprocessors import get_processor
from models.domain_models import TurnResult
from stores.exceptions import InvalidState, TurnLimitExceeded
from stores.game_store import GameStore
from .dispatch import TurnDispatcher, run_follow_ups
from .turn_engine import ProcessorFactory, advance_turn

logger = logging.getLogger(__name__)


async def handle_turn_expiration(
    store: GameStore,
    dispatcher: TurnDispatcher,
    session_id: str,
    game_id: str,
    turn_number: Any,
    processor_factory: ProcessorFactory = get_processor,
    max_turn_number: Optional[int] = None,
) -> TurnResult:
    """Force `turn_number` to resolve once its time is up.

    Players who have not moved get their default move. If the turn already
    advanced through normal completion this is a no-op.

    Raises:
        InvalidState: If turn_number is not an int.
        TurnLimitExceeded: If turn_number is above the sanity ceiling.
    """
    if not isinstance(turn_number, int) or isinstance(turn_number, bool):
        raise InvalidState(f"turn_number must be an int, got {turn_number!r}")

    ceiling = config.MAX_TURN_NUMBER if max_turn_number is None else max_turn_number
    if turn_number > ceiling:
        logger.error(f"[EXPIRE] {session_id}/{game_id}: turn {turn_number} exceeds ceiling {ceiling}, refusing")
        raise TurnLimitExceeded(f"Turn {turn_number} exceeds maximum of {ceiling}")

    logger.info(f"[EXPIRE] {session_id}/{game_id}: turn {turn_number} expired")
    result = await advance_turn(store, session_id, game_id, turn_number, processor_factory)
    run_follow_ups(dispatcher, session_id, game_id, result)
    return result


async def sweep_stalled_turns(
    store: GameStore,
    dispatcher: TurnDispatcher,
    grace_seconds: Optional[int] = None,
    processor_factory: ProcessorFactory = get_processor,
) -> Dict[str, Any]:
    """Advance every open game whose current turn is long past its expiry.

    Covers games whose expiration task was never enqueued. One game failing
    does not stop the sweep.
    """
    grace = config.STALLED_TURN_GRACE_SECONDS if grace_seconds is None else grace_seconds
    stalled = await store.list_stalled_games(grace)
    advanced = 0
    errors = []

    for session_id, game_id, turn_number in stalled:
        try:
            result = await handle_turn_expiration(
                store, dispatcher, session_id, game_id, turn_number, processor_factory
            )
            if result.get("new_turn_created"):
                advanced += 1
        except Exception as exc:
            logger.error(f"[EXPIRE] Sweep failed for {session_id}/{game_id} turn {turn_number}: {exc}", exc_info=True)
            errors.append(f"{session_id}/{game_id}: {exc.__class__.__name__}: {exc}")

    if stalled:
        logger.info(f"[EXPIRE] Sweep found {len(stalled)} stalled games, advanced {advanced}")
    return {"stalled": len(stalled), "advanced": advanced, "errors": errors}
