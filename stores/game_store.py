from typing import AsyncContextManager, Awaitable, Callable, Iterable, Optional
from abc import ABC, abstractmethod

from models.domain_models import (
    GameSetup,
    GameState,
    Move,
    MoveStatus,
    PlayerProfile,
    Turn,
)


# Called after a MoveStatus change has been committed.
MoveStatusListener = Callable[[str, str, MoveStatus], Awaitable[None]]


# =========================
# Transaction Interface
# =========================

class GameTransaction(ABC):
    """
    Read-modify-write view of one game, valid only inside
    `GameStore.transaction()`.

    Everything read through it is consistent with everything written
    through it; the enclosing context manager commits on a clean exit and
    rolls back on any exception.
    """

    @abstractmethod
    async def get_game_state(self) -> Optional[GameState]:
        """Setup plus every turn so far, or None if the game does not exist."""

    @abstractmethod
    async def get_moves(self, turn_number: int) -> list[Move]:
        """Moves recorded for `turn_number`."""

    @abstractmethod
    async def record_move(self, turn_number: int, move: Move) -> None:
        """Store an engine-chosen move (`move.move` may be None for a pass) and mark the player as moved.

        Listeners are not notified.

        Raises:
            MoveAlreadySubmitted: If the player already has a move for this turn.
        """

    @abstractmethod
    async def append_turn(self, turn: Turn) -> None:
        """Write `turn` as the next turn and, unless it is terminal, open its MoveStatus.

        Conditional: `turn.turn_number` must be exactly current + 1.

        Raises:
            TurnMismatch: If another writer already appended this turn.
        """


# =========================
# GameStore Interface
# =========================

class GameStore(ABC):
    """
    The GameStore is the sole authority over game state.

    Invariants:
    - Turns are append-only; turn n+1 is written at most once
    - A participant records at most one move per turn
    - MoveStatus listeners only ever see committed changes
    - All concurrency control lives here
    """

    # -------------------------------------------------
    # Lifecycle
    # -------------------------------------------------

    @abstractmethod
    async def create_game(
        self,
        session_id: str,
        game_id: str,
        setup: GameSetup,
        first_turn: Turn,
    ) -> None:
        """Persist the setup, Turn 0 and MoveStatus 0 atomically.

        Raises:
            GameAlreadyExists: If (session_id, game_id) is taken.
        """

    @abstractmethod
    def transaction(self, session_id: str, game_id: str) -> AsyncContextManager[GameTransaction]:
        """Exclusive read-modify-write access to one game."""

    # -------------------------------------------------
    # Read-side queries (NO state changes)
    # -------------------------------------------------

    @abstractmethod
    async def get_game_state(self, session_id: str, game_id: str) -> Optional[GameState]:
        """Return setup plus all turns, or None."""

    @abstractmethod
    async def get_turn(self, session_id: str, game_id: str, turn_number: int) -> Optional[Turn]:
        """Return one turn, or None."""

    @abstractmethod
    async def get_move_status(self, session_id: str, game_id: str, turn_number: int) -> Optional[MoveStatus]:
        """Return the completion tracker for one turn, or None."""

    @abstractmethod
    async def list_moves(self, session_id: str, game_id: str, turn_number: int) -> list[Move]:
        """Return moves recorded for one turn."""

    @abstractmethod
    async def list_stalled_games(self, grace_seconds: int) -> list[tuple[str, str, int]]:
        """
        (session_id, game_id, turn_number) of open games whose current turn
        expired more than `grace_seconds` ago.
        """

    # -------------------------------------------------
    # Move submission (atomic path)
    # -------------------------------------------------

    @abstractmethod
    async def submit_move(
        self,
        session_id: str,
        game_id: str,
        player_id: str,
        turn_number: int,
        move: Optional[int],
    ) -> MoveStatus:
        """Record a move and mark the player as moved, then notify listeners.

        Raises:
            GameNotFound: If the game does not exist.
            GameOver: If the game has finished.
            TurnMismatch: If turn_number is not the current turn.
            PlayerNotAlive: If the player is not alive on this turn.
            InvalidMove: If the move is off the board.
            MoveAlreadySubmitted: If the player already moved this turn.
        """

    @abstractmethod
    def add_move_status_listener(self, listener: MoveStatusListener) -> None:
        """Register a coroutine called with (session_id, game_id, status) after each committed move."""

    # -------------------------------------------------
    # Player directory
    # -------------------------------------------------

    @abstractmethod
    async def create_player(self, profile: PlayerProfile) -> None:
        """Create a directory entry.

        Raises:
            PlayerAlreadyExists: If a player with this ID already exists.
        """

    @abstractmethod
    async def get_player(self, player_id: str) -> PlayerProfile:
        """
        Raises:
            PlayerNotFound: If no such player exists.
        """

    @abstractmethod
    async def get_players(self, player_ids: Iterable[str]) -> dict[str, PlayerProfile]:
        """Profiles for the ids that exist; unknown ids are skipped."""
