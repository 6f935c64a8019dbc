"""Pydantic request/response models for the FastAPI endpoints.

Keep transport concerns (validation, docs) here and keep business/domain
types in `models.domain_models`.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from .domain_models import PlayerKind


class GameRef(BaseModel):
	session_id: str
	game_id: str


class StartGameRequest(GameRef):
	# parsed into GameSetup by the route; setup errors are 400s
	setup: Dict[str, Any]


class SubmitMoveRequest(GameRef):
	player_id: str
	turn_number: int
	move: int


class ProcessTurnRequest(GameRef):
	turn_number: int


class CreatePlayerRequest(BaseModel):
	player_id: str
	name: str
	emoji: str = ""
	kind: PlayerKind = "human"
	colour: Optional[str] = None
	# base url of a bot; `/move` is appended
	url: Optional[str] = None


class PublicPlayerInfo(BaseModel):
	player_id: str
	name: str
	emoji: str = ""
	type: PlayerKind = "human"


class TurnResultResponse(GameRef):
	new_turn_created: bool
	new_turn_number: Optional[int] = None
	turn_duration_seconds: Optional[int] = None
	game_over: bool = False
	reason: str = ""


class MoveStatusResponse(GameRef):
	turn_number: int
	alive_player_ids: list[str] = Field(default_factory=list)
	moved_player_ids: list[str] = Field(default_factory=list)
	waiting_on: list[str] = Field(default_factory=list)


__all__ = [
	"GameRef",
	"StartGameRequest",
	"SubmitMoveRequest",
	"ProcessTurnRequest",
	"CreatePlayerRequest",
	"PublicPlayerInfo",
	"TurnResultResponse",
	"MoveStatusResponse",
]
