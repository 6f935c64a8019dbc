from abc import abstractmethod

from models.domain_models import Clash, Move, Turn, Winner
from .base import GameProcessor


class ClaimProcessor(GameProcessor):
    """
    Shared rules for games where every player claims one cell per turn.

    - A move must be one of the player's `allowed_moves` on the current turn;
      anything else (occupied cell, wall, off-board, pass) is forfeited.
    - Two or more players claiming the same cell clash: nobody gets it and
      the cell becomes a wall for the rest of the game.

    Subclasses decide which cells are claimable and when the game ends.
    """

    min_players = 2

    def initialize(self) -> Turn:
        active = self.active_player_ids
        pieces = self.starting_pieces(active)
        blocked = {cell for cells in pieces.values() for cell in cells}
        return Turn(
            turn_number=0,
            player_pieces=pieces,
            alive_players=active,
            allowed_moves={pid: self.claimable(pid, pieces, blocked) for pid in active},
            scores={pid: len(cells) for pid, cells in pieces.items()},
        )

    def starting_pieces(self, player_ids: list[str]) -> dict[str, list[int]]:
        return {pid: [] for pid in player_ids}

    def claimable(self, player_id: str, pieces: dict[str, list[int]], blocked: set[int]) -> list[int]:
        """Cells `player_id` may claim next turn. Default: every free cell."""
        return [cell for cell in range(self.board_size) if cell not in blocked]

    @abstractmethod
    def evaluate(
        self,
        pieces: dict[str, list[int]],
        alive: list[str],
        allowed: dict[str, list[int]],
    ) -> tuple[list[Winner], bool, dict[str, int]]:
        """Return (winners, game_over, scores) for the board after claims."""

    def apply_moves(self, current_turn: Turn, moves: list[Move]) -> Turn:
        pieces = {pid: list(cells) for pid, cells in current_turn.player_pieces.items()}
        walls = list(current_turn.walls)

        claims: dict[int, list[str]] = {}
        for pid, move in self.moves_by_player(current_turn, moves).items():
            if move is None or move not in current_turn.allowed_moves.get(pid, []):
                continue
            claims.setdefault(move, []).append(pid)

        clashes = []
        for cell, claimants in sorted(claims.items()):
            if len(claimants) == 1:
                pieces.setdefault(claimants[0], []).append(cell)
            else:
                walls.append(cell)
                clashes.append(Clash(index=cell, player_ids=claimants))

        alive = list(current_turn.alive_players)
        blocked = set(walls) | {cell for cells in pieces.values() for cell in cells}
        allowed = {pid: self.claimable(pid, pieces, blocked) for pid in alive}

        winners, game_over, scores = self.evaluate(pieces, alive, allowed)
        if game_over:
            allowed = {pid: [] for pid in alive}

        return self.next_turn(
            current_turn,
            player_pieces=pieces,
            alive_players=alive,
            allowed_moves=allowed,
            walls=walls,
            clashes=clashes,
            scores=scores,
            winners=winners,
            game_over=game_over,
        )


def top_scorers(scores: dict[str, int], order: list[str]) -> list[str]:
    """Players sharing the best positive score, in `order`."""
    best = max((scores.get(pid, 0) for pid in order), default=0)
    if best <= 0:
        return []
    return [pid for pid in order if scores.get(pid, 0) == best]
