"""Ask bots for their moves after a turn commits.

Each alive bot gets one POST to `{url}/move` carrying the board in its own
coordinate view. The answer is a direction, which is turned back into an
absolute target cell next to the bot's head and recorded through the
store like any other move, so the completion detector sees it.

All requests run concurrently. A bot that times out, errors, or answers
nonsense is logged and left un-moved; the expiration timer covers it.
"""
import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

import config
from models.bot_protocol import (
    BotBoard,
    BotGame,
    Coord,
    Customizations,
    Direction,
    MoveRequest,
    MoveResponse,
    Snake,
)
from models.domain_models import GamePlayer, GameSetup, GameType, PlayerProfile, Turn
from stores.game_store import GameStore
from utils.board import adjust_position, flattened_to_xy, step

logger = logging.getLogger(__name__)

TEAM_GAME_TYPES = (GameType.TEAMSNEK, GameType.KINGSNEK)
DEFAULT_SNAKE_COLOUR = "#FF0000"


# -------------------------------------------------
# Coordinates
# -------------------------------------------------

def to_bot_coord(index: int, setup: GameSetup) -> Coord:
    x, y = flattened_to_xy(index, setup.board_width)
    bx, by = adjust_position(x, y, setup.board_height)
    return Coord(x=bx, y=by)


def direction_to_move_index(direction: str, head_index: int, board_width: int, board_height: int) -> int:
    """Target cell for `direction` from the head, in board indices.

    The bot's "up" is toward the top row of the stored board. A direction
    that would leave the board returns the head itself.
    """
    return step(head_index, direction, board_width, board_height)


# -------------------------------------------------
# Payload
# -------------------------------------------------

def snake_colour(setup: GameSetup, player_id: str, profiles: Dict[str, PlayerProfile]) -> str:
    """Team colour in team games, otherwise the player's own colour."""
    if setup.game_type in TEAM_GAME_TYPES:
        gp = setup.player(player_id)
        team = setup.team(gp.team_id) if gp else None
        if team is not None:
            return team.color
    profile = profiles.get(player_id)
    return (profile.colour if profile and profile.colour else None) or DEFAULT_SNAKE_COLOUR


def build_snake(setup: GameSetup, turn: Turn, player_id: str, profiles: Dict[str, PlayerProfile]) -> Snake:
    body = [to_bot_coord(cell, setup) for cell in turn.player_pieces.get(player_id, [])]
    profile = profiles.get(player_id)
    snake = Snake(
        id=player_id,
        name=profile.name if profile else player_id,
        health=turn.player_health.get(player_id, 0),
        body=body,
        head=body[0],
        length=len(body),
        customizations=Customizations(color=snake_colour(setup, player_id, profiles)),
    )

    gp = setup.player(player_id)
    if setup.game_type in TEAM_GAME_TYPES and gp and gp.team_id:
        update: Dict[str, Any] = {"teamID": gp.team_id}
        if setup.game_type == GameType.KINGSNEK:
            update["isKing"] = gp.is_king
            update["teamKingID"] = setup.team_king(gp.team_id)
        snake = snake.model_copy(update=update)
    return snake


def build_move_request(
    game_id: str,
    setup: GameSetup,
    turn: Turn,
    bot_id: str,
    profiles: Dict[str, PlayerProfile],
) -> MoveRequest:
    snakes = [
        build_snake(setup, turn, pid, profiles)
        for pid in turn.alive_players
        if turn.player_pieces.get(pid)
    ]
    return MoveRequest(
        game=BotGame(id=game_id),
        turn=turn.turn_number,
        board=BotBoard(
            height=setup.board_height - 2,
            width=setup.board_width - 2,
            food=[to_bot_coord(c, setup) for c in turn.food],
            hazards=[to_bot_coord(c, setup) for c in turn.hazards],
            snakes=snakes,
        ),
        you=build_snake(setup, turn, bot_id, profiles),
    )


# -------------------------------------------------
# Orchestration
# -------------------------------------------------

async def request_bot_move(
    http: aiohttp.ClientSession,
    url: str,
    request: MoveRequest,
    timeout: aiohttp.ClientTimeout,
) -> Direction:
    async with http.post(f"{url.rstrip('/')}/move", json=request.to_payload(), timeout=timeout) as resp:
        resp.raise_for_status()
        data = await resp.json(content_type=None)
    return MoveResponse.model_validate(data).move


async def _solicit_bot(
    store: GameStore,
    http: aiohttp.ClientSession,
    timeout: aiohttp.ClientTimeout,
    session_id: str,
    game_id: str,
    setup: GameSetup,
    turn: Turn,
    bot: GamePlayer,
    profiles: Dict[str, PlayerProfile],
) -> bool:
    profile = profiles.get(bot.id)
    if profile is None or not profile.url:
        logger.warning(f"[BOTS] {game_id}: bot {bot.id} has no registered url, skipping")
        return False
    if not turn.player_pieces.get(bot.id):
        logger.warning(f"[BOTS] {game_id}: bot {bot.id} has no pieces on turn {turn.turn_number}, skipping")
        return False

    try:
        request = build_move_request(game_id, setup, turn, bot.id, profiles)
        logger.info(f"[BOTS] Sending move request to bot {bot.id} for turn {turn.turn_number}")
        direction = await request_bot_move(http, profile.url, request, timeout)
        head = turn.player_pieces[bot.id][0]
        move = direction_to_move_index(direction, head, setup.board_width, setup.board_height)
        await store.submit_move(session_id, game_id, bot.id, turn.turn_number, move)
        logger.info(f"[BOTS] Bot {bot.id} moved {direction} -> {move} on turn {turn.turn_number}")
        return True
    except Exception as exc:
        logger.error(
            f"[BOTS] Bot {bot.id} failed on {session_id}/{game_id} turn {turn.turn_number}: "
            f"{exc.__class__.__name__}: {exc}"
        )
        return False


async def notify_bots(
    store: GameStore,
    session_id: str,
    game_id: str,
    turn_number: int,
    http: Optional[aiohttp.ClientSession] = None,
    request_timeout: Optional[float] = None,
) -> Dict[str, Any]:
    """Solicit a move from every alive bot on `turn_number`.

    Returns a summary dict; never raises for an individual bot.
    """
    summary: Dict[str, Any] = {"requested": 0, "moved": 0, "failed": []}

    state = await store.get_game_state(session_id, game_id)
    if state is None:
        logger.error(f"[BOTS] Game {session_id}/{game_id} not found")
        return summary

    turn = state.get_turn(turn_number)
    if turn is None:
        logger.error(f"[BOTS] Turn {turn_number} does not exist in {game_id} (turns: {len(state.turns)})")
        return summary
    if turn.is_terminal or turn.turn_number != state.current_turn.turn_number:
        logger.info(f"[BOTS] Turn {turn_number} of {game_id} is no longer open, nothing to ask")
        return summary

    bots = [gp for gp in state.setup.game_players if gp.type == "bot" and gp.id in turn.alive_players]
    if not bots:
        logger.info(f"[BOTS] No bots in turn {turn_number} for game {game_id}")
        return summary

    profiles = await store.get_players([gp.id for gp in state.setup.game_players])
    timeout = aiohttp.ClientTimeout(total=request_timeout or config.BOT_REQUEST_TIMEOUT)

    owns_session = http is None
    if owns_session:
        http = aiohttp.ClientSession(timeout=timeout)
    try:
        results = await asyncio.gather(
            *(
                _solicit_bot(store, http, timeout, session_id, game_id, state.setup, turn, bot, profiles)
                for bot in bots
            )
        )
    finally:
        if owns_session:
            await http.close()

    summary["requested"] = len(bots)
    summary["moved"] = sum(1 for ok in results if ok)
    summary["failed"] = [bot.id for bot, ok in zip(bots, results) if not ok]
    logger.info(f"[BOTS] Finished bot moves for {game_id} turn {turn_number}: {summary}")
    return summary
