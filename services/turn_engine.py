"""The Turn Engine: advance a game by exactly one turn, at most once.

Several triggers may ask for the same turn to be processed: the move
completion detector, the expiration timer, the stalled-turn sweep, an
operator. All of them funnel into `process_turn`, which runs inside one
store transaction and re-checks everything it read before writing, so
only the first trigger to arrive creates Turn n+1. Every later call is
an idempotent no-op reported through `TurnResult.reason`.

Follow-on work (scheduling the next expiration, asking bots to move) is
not done here; callers run it after the transaction has committed.
"""
import logging
from typing import Callable

import config
from gameprocessors import GameProcessor, get_processor
from models.domain_models import GameSetup, Move, Turn, TurnResult
from stores.exceptions import InvalidState
from stores.game_store import GameStore, GameTransaction
from utils.time import now_utc, seconds_from

logger = logging.getLogger(__name__)

ProcessorFactory = Callable[[GameSetup, str], GameProcessor]


def turn_seconds(setup: GameSetup) -> int:
    return setup.max_turn_time or config.DEFAULT_TURN_SECONDS


def stamp_turn(turn: Turn, setup: GameSetup) -> Turn:
    """Set started_at / expires_at on a freshly built turn."""
    started = now_utc()
    if turn.game_over:
        return turn.model_copy(update={"started_at": started, "expires_at": None})
    return turn.model_copy(
        update={"started_at": started, "expires_at": seconds_from(started, turn_seconds(setup))}
    )


def no_op(reason: str, turn_number=None) -> TurnResult:
    return TurnResult(
        new_turn_created=False,
        new_turn_number=turn_number,
        turn_duration_seconds=None,
        game_over=False,
        reason=reason,
    )


async def process_turn(
    tx: GameTransaction,
    session_id: str,
    game_id: str,
    turn_number: int,
    processor_factory: ProcessorFactory = get_processor,
) -> TurnResult:
    """Resolve `turn_number` into the next turn inside an open transaction.

    Steps:
    1. Sanity: the game exists, `turn_number` is its current turn and that
       turn is not terminal. Otherwise return a no-op result.
    2. Record a default move for every alive player without one.
    3. Apply the game kind's rules.
    4. Stamp timestamps and append the new turn (conditional write).

    Raises:
        InvalidState: If the rules revive an eliminated player.
        TurnMismatch: If another writer appended the turn first.
    """
    state = await tx.get_game_state()
    if state is None:
        logger.info(f"[TURN] {session_id}/{game_id}: game not found, nothing to do")
        return no_op("not_found")

    current = state.current_turn
    if current is None or current.turn_number != turn_number:
        logger.info(
            f"[TURN] {session_id}/{game_id}: turn {turn_number} is stale "
            f"(current={current.turn_number if current else None})"
        )
        return no_op("stale_turn", current.turn_number if current else None)

    if current.is_terminal:
        logger.info(f"[TURN] {session_id}/{game_id}: game already over at turn {turn_number}")
        return no_op("game_over", turn_number)

    processor = processor_factory(state.setup, game_id)

    recorded = {m.player_id: m for m in await tx.get_moves(turn_number)}
    moves: list[Move] = []
    defaulted = []
    for pid in current.alive_players:
        if pid in recorded:
            moves.append(recorded[pid])
            continue
        default = Move(
            move_number=turn_number,
            player_id=pid,
            move=processor.default_move(current, pid),
            timestamp=now_utc(),
        )
        await tx.record_move(turn_number, default)
        defaulted.append(pid)
        moves.append(default)
    if defaulted:
        logger.info(f"[TURN] {session_id}/{game_id} turn={turn_number}: default moves for {defaulted}")

    next_turn = processor.apply_moves(current, moves)

    revived = set(next_turn.alive_players) - set(current.alive_players)
    if revived:
        raise InvalidState(f"Turn {next_turn.turn_number} revives eliminated players {sorted(revived)}")

    next_turn = stamp_turn(next_turn, state.setup)
    await tx.append_turn(next_turn)

    logger.info(
        f"[TURN] {session_id}/{game_id}: created turn {next_turn.turn_number}"
        f"{' (game over)' if next_turn.game_over else ''}"
    )
    return TurnResult(
        new_turn_created=True,
        new_turn_number=next_turn.turn_number,
        turn_duration_seconds=None if next_turn.game_over else turn_seconds(state.setup),
        game_over=next_turn.game_over,
        reason="advanced",
    )


async def advance_turn(
    store: GameStore,
    session_id: str,
    game_id: str,
    turn_number: int,
    processor_factory: ProcessorFactory = get_processor,
) -> TurnResult:
    """Run `process_turn` in its own transaction. Commits only if a turn was appended."""
    async with store.transaction(session_id, game_id) as tx:
        return await process_turn(tx, session_id, game_id, turn_number, processor_factory)
