from fastapi import APIRouter, HTTPException, Depends
from fastapi.responses import JSONResponse
from pydantic import ValidationError
import logging

from gameprocessors import get_processor_class

from models import (
	GameSetup,
	StartGameRequest,
	SubmitMoveRequest,
	ProcessTurnRequest,
	TurnResultResponse,
	MoveStatusResponse,
)
from stores import (
	get_game_store,
	GameNotFound,
	GameAlreadyExists,
	GameOver,
	TurnMismatch,
	MoveAlreadySubmitted,
	PlayerNotAlive,
	InvalidMove,
	InvalidState,
	ConfigurationError,
	UnexpectedResult,
)
from services import advance_turn, get_dispatcher, run_follow_ups, start_game as start_game_service
from utils.validation import is_valid_id

logger = logging.getLogger(__name__)

router = APIRouter()


def _check_ids(*ids: str) -> None:
	for value in ids:
		if not is_valid_id(value):
			raise HTTPException(status_code=400, detail=f"Invalid id format: {value!r}. (Use only letters, numbers, '_' and '-'.)")


@router.post("/api/start_game")
async def start_game(req: StartGameRequest, store = Depends(get_game_store), dispatcher = Depends(get_dispatcher)):
	try:
		get_processor_class(req.setup.get("game_type"))
		setup = GameSetup.model_validate(req.setup)
	except ConfigurationError as exc:
		logger.info(f"Rejected setup for {req.session_id}/{req.game_id}: {exc}")
		raise HTTPException(status_code=400, detail=str(exc))
	except ValidationError as exc:
		logger.info(f"Malformed setup for {req.session_id}/{req.game_id}: {exc.error_count()} errors")
		raise HTTPException(status_code=400, detail=exc.errors(include_url=False, include_context=False))

	_check_ids(req.session_id, req.game_id, *[gp.id for gp in setup.game_players])

	try:
		result = await start_game_service(store, dispatcher, req.session_id, req.game_id, setup)
	except ConfigurationError as exc:
		logger.info(f"Rejected setup for {req.session_id}/{req.game_id}: {exc}")
		raise HTTPException(status_code=400, detail=str(exc))
	except GameAlreadyExists as exc:
		logger.info(f"Attempt to start existing game {req.session_id}/{req.game_id}: {exc}")
		raise HTTPException(status_code=409, detail=str(exc))

	body = TurnResultResponse(session_id=req.session_id, game_id=req.game_id, **result)
	return JSONResponse(status_code=201, content=body.model_dump())


@router.post("/api/submit_move")
async def submit_move(req: SubmitMoveRequest, store = Depends(get_game_store)):
	_check_ids(req.session_id, req.game_id, req.player_id)

	try:
		status = await store.submit_move(req.session_id, req.game_id, req.player_id, req.turn_number, req.move)
	except GameNotFound:
		raise HTTPException(status_code=404, detail="Game not found")
	except (TurnMismatch, MoveAlreadySubmitted, GameOver) as exc:
		logger.info(f"Move rejected for {req.player_id} in {req.session_id}/{req.game_id}: {exc}")
		raise HTTPException(status_code=409, detail=str(exc))
	except (PlayerNotAlive, InvalidMove) as exc:
		raise HTTPException(status_code=400, detail=str(exc))

	body = MoveStatusResponse(
		session_id=req.session_id,
		game_id=req.game_id,
		turn_number=status.move_number,
		alive_player_ids=status.alive_player_ids,
		moved_player_ids=status.moved_player_ids,
		waiting_on=status.waiting_on(),
	)
	return JSONResponse(content=body.model_dump())


@router.get("/api/game_state")
async def get_game_state(session_id: str, game_id: str, store = Depends(get_game_store)):
	state = await store.get_game_state(session_id, game_id)
	if state is None:
		raise HTTPException(status_code=404, detail="Game not found")
	return JSONResponse(content=state.model_dump(mode="json"))


@router.get("/api/move_status")
async def get_move_status(session_id: str, game_id: str, turn_number: int, store = Depends(get_game_store)):
	status = await store.get_move_status(session_id, game_id, turn_number)
	if status is None:
		raise HTTPException(status_code=404, detail="Turn not found")
	body = MoveStatusResponse(
		session_id=session_id,
		game_id=game_id,
		turn_number=turn_number,
		alive_player_ids=status.alive_player_ids,
		moved_player_ids=status.moved_player_ids,
		waiting_on=status.waiting_on(),
	)
	return JSONResponse(content=body.model_dump())


@router.post("/api/process_turn")
async def process_turn(req: ProcessTurnRequest, store = Depends(get_game_store), dispatcher = Depends(get_dispatcher)):
	"""Operator trigger: resolve a turn now, as if it had expired."""
	try:
		result = await advance_turn(store, req.session_id, req.game_id, req.turn_number)
	except InvalidState as exc:
		logger.error(f"Invalid game state for game {req.session_id}/{req.game_id}: {exc}")
		raise HTTPException(status_code=400, detail=f"Invalid game state: {str(exc)}")
	except UnexpectedResult as exc:
		logger.error(f"Unexpected result for game {req.session_id}/{req.game_id}: {exc}")
		raise HTTPException(status_code=500, detail="Internal server error")

	run_follow_ups(dispatcher, req.session_id, req.game_id, result)
	if result.get("reason") == "not_found":
		raise HTTPException(status_code=404, detail="Game not found")

	body = TurnResultResponse(session_id=req.session_id, game_id=req.game_id, **result)
	return JSONResponse(content=body.model_dump())
