"""Wire models for the outbound bot move protocol.

Bots receive a Battlesnake-style `/move` request. Coordinates in here are
already in the bot's view: the one-cell perimeter is stripped and the
origin is bottom-left (see `utils.board.adjust_position`).
"""
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


Direction = Literal["up", "down", "left", "right"]


class Coord(BaseModel):
	x: int
	y: int


class Customizations(BaseModel):
	color: str = "#FF0000"
	head: str = "default"
	tail: str = "default"


class RulesetSettings(BaseModel):
	foodSpawnChance: int = 15
	minimumFood: int = 1
	hazardDamagePerTurn: int = 14


class Ruleset(BaseModel):
	name: str = "standard"
	version: str = "v1.1.15"
	settings: RulesetSettings = Field(default_factory=RulesetSettings)


class BotGame(BaseModel):
	id: str
	ruleset: Ruleset = Field(default_factory=Ruleset)
	map: str = "standard"
	source: str = "league"
	# milliseconds, as bots expect
	timeout: int = 500


class Snake(BaseModel):
	id: str
	name: str
	health: int
	body: list[Coord]
	head: Coord
	length: int
	latency: str = "111"
	shout: str = ""
	customizations: Customizations = Field(default_factory=Customizations)
	teamID: Optional[str] = None
	isKing: Optional[bool] = None
	teamKingID: Optional[str] = None


class BotBoard(BaseModel):
	height: int
	width: int
	food: list[Coord] = Field(default_factory=list)
	hazards: list[Coord] = Field(default_factory=list)
	snakes: list[Snake] = Field(default_factory=list)


class MoveRequest(BaseModel):
	game: BotGame
	turn: int
	board: BotBoard
	you: Snake

	def to_payload(self) -> dict:
		return self.model_dump(exclude_none=True)


class MoveResponse(BaseModel):
	"""What a bot answers. Unknown extra keys (e.g. `shout`) are ignored."""
	model_config = ConfigDict(extra="ignore")

	move: Direction
	shout: Optional[str] = None


__all__ = [
	"Direction",
	"Coord",
	"Customizations",
	"RulesetSettings",
	"Ruleset",
	"BotGame",
	"Snake",
	"BotBoard",
	"MoveRequest",
	"MoveResponse",
]
