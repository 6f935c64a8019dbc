import logging

from gameprocessors import get_processor_class
from models.domain_models import GameSetup, TurnResult
from stores.game_store import GameStore
from .dispatch import TurnDispatcher, run_follow_ups
from .turn_engine import stamp_turn, turn_seconds

logger = logging.getLogger(__name__)


async def start_game(
    store: GameStore,
    dispatcher: TurnDispatcher,
    session_id: str,
    game_id: str,
    setup: GameSetup,
) -> TurnResult:
    """Validate a setup, lay out Turn 0 and persist it.

    Configuration problems surface here and nowhere later.

    Raises:
        UnsupportedGameType: If no rule engine exists for the game type.
        InvalidGameSetup: If the setup cannot be played.
        GameAlreadyExists: If (session_id, game_id) is taken.
    """
    processor_cls = get_processor_class(setup.game_type)
    processor_cls.validate_setup(setup)

    first_turn = stamp_turn(processor_cls(setup, game_id).initialize(), setup)
    await store.create_game(session_id, game_id, setup, first_turn)
    logger.info(
        f"[TURN] {session_id}/{game_id}: started {setup.game_type.value} "
        f"with {len(first_turn.alive_players)} active players"
    )

    result = TurnResult(
        new_turn_created=True,
        new_turn_number=first_turn.turn_number,
        turn_duration_seconds=turn_seconds(setup),
        game_over=first_turn.game_over,
        reason="started",
    )
    run_follow_ups(dispatcher, session_id, game_id, result)
    return result
