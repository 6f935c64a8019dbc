"""Data models used by the application.

Split into:
- `api_models`: Pydantic models used for request/response validation
- `domain_models`: turns, moves, setups and other business objects
- `bot_protocol`: the JSON exchanged with bots

Import submodules to make them available as `models.api_models`.
"""

from . import api_models, bot_protocol, domain_models

# Re-export API models (Pydantic models used for request/response)
from .api_models import (
	GameRef,
	StartGameRequest,
	SubmitMoveRequest,
	ProcessTurnRequest,
	CreatePlayerRequest,
	PublicPlayerInfo,
	TurnResultResponse,
	MoveStatusResponse,
)

# Re-export domain models
from .domain_models import (
	GameType,
	GamePlayer,
	Team,
	GameSetup,
	Winner,
	Clash,
	Turn,
	Move,
	MoveStatus,
	GameState,
	PlayerProfile,
	TurnResult,
)

__all__ = [
	# submodules
	"api_models",
	"bot_protocol",
	"domain_models",
	# api models
	"GameRef",
	"StartGameRequest",
	"SubmitMoveRequest",
	"ProcessTurnRequest",
	"CreatePlayerRequest",
	"PublicPlayerInfo",
	"TurnResultResponse",
	"MoveStatusResponse",
	# domain models
	"GameType",
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
