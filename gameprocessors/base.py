import random
from abc import ABC, abstractmethod
from typing import Iterable, Optional

from models.domain_models import GamePlayer, GameSetup, GameType, Move, Turn
from stores.exceptions import InvalidGameSetup


class GameProcessor(ABC):
    """
    Base class for all game processors.

    A processor owns the complete rules of one game kind: how Turn 0 is laid
    out and how a batch of simultaneous moves turns Turn n into Turn n+1.

    Contract:
    - `initialize()` and `apply_moves()` are pure: they never touch the store
      and never mutate the Turn they are given.
    - `apply_moves()` receives exactly one Move per alive player. Missing
      moves have already been filled in from `default_move()`.
    - Randomness comes from `rng(turn_number)`, which is seeded from the game
      id, so replaying the same moves gives the same turn.
    """

    game_type: GameType
    min_players: int = 1
    max_players: Optional[int] = None
    min_board: int = 3
    max_board: int = 50

    def __init__(self, setup: GameSetup, game_id: str = ""):
        self.setup = setup
        self.game_id = game_id
        self.width = setup.board_width
        self.height = setup.board_height

    # -------------------------------------------------
    # Setup-level hooks
    # -------------------------------------------------

    @classmethod
    def filter_active_players(cls, setup: GameSetup) -> list[GamePlayer]:
        """Players who actively take part; everyone else observes.

        Default: every configured player is active.
        """
        return list(setup.game_players)

    @classmethod
    def validate_setup(cls, setup: GameSetup) -> None:
        """Reject setups this game kind can never play.

        Raises:
            InvalidGameSetup: describing the first problem found.
        """
        for name, size in (("board_width", setup.board_width), ("board_height", setup.board_height)):
            if not cls.min_board <= size <= cls.max_board:
                raise InvalidGameSetup(
                    f"{setup.game_type.value}: {name} must be between {cls.min_board} and {cls.max_board}, got {size}"
                )

        ids = [gp.id for gp in setup.game_players]
        if not ids:
            raise InvalidGameSetup("Game has no players")
        if len(set(ids)) != len(ids):
            raise InvalidGameSetup("Duplicate player ids in game setup")

        team_ids = {t.id for t in setup.teams}
        for gp in setup.game_players:
            if gp.team_id is not None and gp.team_id not in team_ids:
                raise InvalidGameSetup(f"Player {gp.id} references unknown team {gp.team_id}")

        if setup.max_turn_time is not None and setup.max_turn_time <= 0:
            raise InvalidGameSetup("max_turn_time must be positive")

        active = cls.filter_active_players(setup)
        if len(active) < cls.min_players:
            raise InvalidGameSetup(
                f"{setup.game_type.value} needs at least {cls.min_players} active players, got {len(active)}"
            )
        if cls.max_players is not None and len(active) > cls.max_players:
            raise InvalidGameSetup(
                f"{setup.game_type.value} allows at most {cls.max_players} active players, got {len(active)}"
            )

    # -------------------------------------------------
    # Turn rules
    # -------------------------------------------------

    @abstractmethod
    def initialize(self) -> Turn:
        """Lay out the board and return Turn 0."""

    @abstractmethod
    def apply_moves(self, current_turn: Turn, moves: list[Move]) -> Turn:
        """Resolve one batch of simultaneous moves and return the next Turn."""

    def default_move(self, current_turn: Turn, player_id: str) -> Optional[int]:
        """Move used for an alive player who did not submit one in time.

        Default: None, i.e. the player passes.
        """
        return None

    # -------------------------------------------------
    # Helpers for subclasses
    # -------------------------------------------------

    @property
    def active_player_ids(self) -> list[str]:
        return [gp.id for gp in self.filter_active_players(self.setup)]

    @property
    def board_size(self) -> int:
        return self.width * self.height

    def rng(self, turn_number: int) -> random.Random:
        return random.Random(f"{self.game_id}:{self.game_type.value}:{turn_number}")

    def in_setup_order(self, player_ids: Iterable[str]) -> list[str]:
        """Order players by their position in the setup (lowest index first)."""
        wanted = set(player_ids)
        return [gp.id for gp in self.setup.game_players if gp.id in wanted]

    def moves_by_player(self, current_turn: Turn, moves: list[Move]) -> dict[str, Optional[int]]:
        """Map each alive player to their move, in setup order.

        Moves from players who are not alive, or for another turn, are ignored.
        """
        by_player = {
            m.player_id: m.move
            for m in moves
            if m.move_number == current_turn.turn_number and m.player_id in current_turn.alive_players
        }
        return {pid: by_player.get(pid) for pid in self.in_setup_order(current_turn.alive_players)}

    def valid_index(self, index: Optional[int]) -> bool:
        return index is not None and 0 <= index < self.board_size

    def next_turn(self, current_turn: Turn, **fields) -> Turn:
        """Build Turn n+1; timestamps are left for the turn engine to stamp."""
        fields.setdefault("started_at", None)
        fields.setdefault("expires_at", None)
        return Turn(turn_number=current_turn.turn_number + 1, **fields)
