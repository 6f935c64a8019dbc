"""FastAPI routers for the turn pipeline.

- `games_router`: start a game, submit moves, read state, force a turn
- `players_router`: the player/bot directory

Both are mounted by `main.py` under `/games` and `/players`. Each
submodule exposes an `APIRouter` named `router`.
"""

from .games import router as games_router
from .players import router as players_router

__all__ = [
	"games_router",
	"players_router",
]
