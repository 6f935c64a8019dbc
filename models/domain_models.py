"""Domain-level models used by the rule engines, services and stores.

Turns, moves and setups are persisted as JSON documents, so they are
pydantic models rather than plain dicts: the store round-trips them with
`model_dump_json` / `model_validate_json`. Turn, Move and GameSetup are
frozen; a rule engine builds a new Turn instead of editing the old one.

Small results passed between services stay as `TypedDict`s.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal, Optional, TypedDict

from pydantic import BaseModel, ConfigDict, Field


class GameType(str, Enum):
	CONNECT4 = "connect4"
	LONGBOI = "longboi"
	TACTICTOES = "tactictoes"
	SNEK = "snek"
	TEAMSNEK = "teamsnek"
	KINGSNEK = "kingsnek"
	COLOURCLASH = "colourclash"
	REVERSI = "reversi"


PlayerKind = Literal["human", "bot"]


class GamePlayer(BaseModel):
	"""A participant's static binding to one game."""
	model_config = ConfigDict(frozen=True)

	id: str
	type: PlayerKind = "human"
	team_id: Optional[str] = None
	is_king: bool = False


class Team(BaseModel):
	model_config = ConfigDict(frozen=True)

	id: str
	name: Optional[str] = None
	color: str = "#FF0000"


class GameSetup(BaseModel):
	"""Immutable configuration captured when a session leaves the lobby."""
	model_config = ConfigDict(frozen=True)

	game_type: GameType
	board_width: int
	board_height: int
	game_players: list[GamePlayer]
	teams: list[Team] = Field(default_factory=list)
	# seconds; None falls back to config.DEFAULT_TURN_SECONDS
	max_turn_time: Optional[int] = None

	def player(self, player_id: str) -> Optional[GamePlayer]:
		for gp in self.game_players:
			if gp.id == player_id:
				return gp
		return None

	def team(self, team_id: Optional[str]) -> Optional[Team]:
		if team_id is None:
			return None
		for team in self.teams:
			if team.id == team_id:
				return team
		return None

	def team_members(self, team_id: str) -> list[str]:
		return [gp.id for gp in self.game_players if gp.team_id == team_id]

	def team_king(self, team_id: str) -> Optional[str]:
		for gp in self.game_players:
			if gp.team_id == team_id and gp.is_king:
				return gp.id
		return None


class Winner(BaseModel):
	model_config = ConfigDict(frozen=True)

	player_id: str
	score: int = 0
	winning_squares: list[int] = Field(default_factory=list)


class Clash(BaseModel):
	"""A cell nobody got this turn, and why."""
	model_config = ConfigDict(frozen=True)

	index: int
	player_ids: list[str]
	reason: str = "contested"


class Turn(BaseModel):
	"""One immutable, numbered snapshot of a game."""
	model_config = ConfigDict(frozen=True)

	turn_number: int
	player_pieces: dict[str, list[int]] = Field(default_factory=dict)
	player_health: dict[str, int] = Field(default_factory=dict)
	alive_players: list[str] = Field(default_factory=list)
	allowed_moves: dict[str, list[int]] = Field(default_factory=dict)
	food: list[int] = Field(default_factory=list)
	hazards: list[int] = Field(default_factory=list)
	walls: list[int] = Field(default_factory=list)
	clashes: list[Clash] = Field(default_factory=list)
	scores: dict[str, int] = Field(default_factory=dict)
	winners: list[Winner] = Field(default_factory=list)
	game_over: bool = False
	started_at: Optional[datetime] = None
	expires_at: Optional[datetime] = None

	@property
	def is_terminal(self) -> bool:
		return self.game_over


class Move(BaseModel):
	"""One participant's action for one turn.

	`move` is a flattened board index. None is only ever synthesized by the
	turn engine and means "no action this turn".
	"""
	model_config = ConfigDict(frozen=True)

	move_number: int
	player_id: str
	move: Optional[int] = None
	timestamp: Optional[datetime] = None


class MoveStatus(BaseModel):
	"""Which alive participants have moved for one turn."""

	move_number: int
	alive_player_ids: list[str]
	moved_player_ids: list[str] = Field(default_factory=list)

	def all_moved(self) -> bool:
		return all(pid in self.moved_player_ids for pid in self.alive_player_ids)

	def waiting_on(self) -> list[str]:
		return [pid for pid in self.alive_player_ids if pid not in self.moved_player_ids]


class GameState(BaseModel):
	"""Aggregate root: setup plus the append-only turn sequence."""

	session_id: str
	game_id: str
	setup: GameSetup
	turns: list[Turn] = Field(default_factory=list)

	@property
	def current_turn(self) -> Optional[Turn]:
		return self.turns[-1] if self.turns else None

	def get_turn(self, turn_number: int) -> Optional[Turn]:
		if 0 <= turn_number < len(self.turns):
			return self.turns[turn_number]
		return None


class PlayerProfile(BaseModel):
	"""Directory entry for a human or a bot; presentation only."""

	player_id: str
	name: str
	emoji: str = ""
	kind: PlayerKind = "human"
	colour: Optional[str] = None
	url: Optional[str] = None


class TurnResult(TypedDict, total=False):
	new_turn_created: bool
	new_turn_number: Optional[int]
	turn_duration_seconds: Optional[int]
	game_over: bool
	reason: str


__all__ = [
	"GameType",
	"PlayerKind",
	"GamePlayer",
	"Team",
	"GameSetup",
	"Winner",
	"Clash",
	"Turn",
	"Move",
	"MoveStatus",
	"GameState",
	"PlayerProfile",
	"TurnResult",
]
