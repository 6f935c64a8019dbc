"""Services package: the turn pipeline that sits between routes/workers and the store.

- `turn_engine`: advance a game by one turn, at most once
- `move_completion`: advance as soon as everyone has moved
- `turn_expiration`: advance when time is up, plus the stalled-turn sweep
- `bot_notifier`: solicit bot moves over HTTP
- `dispatch`: where post-commit follow-ons run (Celery or in-process)
- `game_setup`: validate a setup and write Turn 0
"""

from .turn_engine import advance_turn, process_turn
from .dispatch import (
	TurnDispatcher,
	CeleryTurnDispatcher,
	LocalTurnDispatcher,
	run_follow_ups,
	set_dispatcher,
	get_dispatcher,
)
from .move_completion import MoveCompletionDetector
from .turn_expiration import handle_turn_expiration, sweep_stalled_turns
from .bot_notifier import notify_bots, build_move_request, direction_to_move_index
from .game_setup import start_game

__all__ = [
	"advance_turn",
	"process_turn",
	"TurnDispatcher",
	"CeleryTurnDispatcher",
	"LocalTurnDispatcher",
	"run_follow_ups",
	"set_dispatcher",
	"get_dispatcher",
	"MoveCompletionDetector",
	"handle_turn_expiration",
	"sweep_stalled_turns",
	"notify_bots",
	"build_move_request",
	"direction_to_move_index",
	"start_game",
]
