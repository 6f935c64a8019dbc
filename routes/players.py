from fastapi import APIRouter, HTTPException, Depends
from fastapi.responses import JSONResponse
import logging

from stores import (
	get_game_store,
	PlayerNotFound,
	PlayerAlreadyExists,
)
from models import CreatePlayerRequest, PlayerProfile, PublicPlayerInfo
from utils.validation import is_valid_colour, is_valid_id, is_valid_name

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/api/create_player")
async def create_player(req: CreatePlayerRequest, game_store = Depends(get_game_store)):
	"""Register a human or a bot in the player directory."""
	if not is_valid_id(req.player_id):
		raise HTTPException(status_code=400, detail="Invalid player ID format. (Use only letters, numbers, '_' and '-'.)")
	if not is_valid_name(req.name):
		raise HTTPException(status_code=400, detail="Invalid name format. (Use only letters, numbers, spaces, and .'-`’· characters.)")
	if req.colour is not None and not is_valid_colour(req.colour):
		raise HTTPException(status_code=400, detail="Invalid colour. (Use #rrggbb or hsl(h, s%, l%).)")
	if req.kind == "bot" and not req.url:
		raise HTTPException(status_code=400, detail="Bots need a url")

	profile = PlayerProfile(
		player_id=req.player_id,
		name=req.name.strip(),
		emoji=req.emoji,
		kind=req.kind,
		colour=req.colour,
		url=req.url,
	)
	try:
		await game_store.create_player(profile)
	except PlayerAlreadyExists:
		logger.warning(f"Attempt to create player with existing ID: {req.player_id}")
		return JSONResponse({"error": "Player ID already exists"}, status_code=409)

	return JSONResponse({"player_id": req.player_id}, status_code=201)


@router.get("/api/public_info")
async def public_info(player_id: str, game_store = Depends(get_game_store)):
	"""Display name, emoji and kind; never the bot url."""
	player_id = player_id.strip()
	if not player_id:
		raise HTTPException(status_code=400, detail="player_id is required")

	try:
		profile = await game_store.get_player(player_id)
	except PlayerNotFound:
		raise HTTPException(status_code=404, detail="Player not found")

	body = PublicPlayerInfo(
		player_id=profile.player_id,
		name=profile.name or "Unknown",
		emoji=profile.emoji,
		type=profile.kind,
	)
	return JSONResponse(content=body.model_dump())
