from models.domain_models import GamePlayer, GameSetup, GameType, Move, Turn, Winner
from utils.board import EIGHT_WAY, flattened_to_xy, in_bounds, xy_to_flattened
from .base import GameProcessor
from .claims import top_scorers


class ReversiProcessor(GameProcessor):
    """
    Othello-style disc flipping for the first two configured players.

    Both players move in the same turn. Moves are applied in setup order and
    each is checked against the board as it stands at that moment, so the
    first move can make the second one illegal. Illegal moves are forfeited.
    """

    game_type = GameType.REVERSI
    min_players = 2
    max_players = 2
    min_board = 4

    @classmethod
    def filter_active_players(cls, setup: GameSetup) -> list[GamePlayer]:
        return list(setup.game_players[:2])

    def initialize(self) -> Turn:
        first, second = self.active_player_ids
        cx, cy = self.width // 2, self.height // 2
        w = self.width
        pieces = {
            first: sorted([xy_to_flattened(cx - 1, cy, w), xy_to_flattened(cx, cy - 1, w)]),
            second: sorted([xy_to_flattened(cx - 1, cy - 1, w), xy_to_flattened(cx, cy, w)]),
        }
        return Turn(
            turn_number=0,
            player_pieces=pieces,
            alive_players=[first, second],
            allowed_moves=self._all_legal(pieces),
            scores={pid: len(cells) for pid, cells in pieces.items()},
        )

    def apply_moves(self, current_turn: Turn, moves: list[Move]) -> Turn:
        owner = {cell: pid for pid, cells in current_turn.player_pieces.items() for cell in cells}

        for pid, move in self.moves_by_player(current_turn, moves).items():
            if not self.valid_index(move) or move in owner:
                continue
            flips = self._flips(owner, pid, move)
            if not flips:
                continue
            owner[move] = pid
            for cell in flips:
                owner[cell] = pid

        pieces = {pid: [] for pid in current_turn.alive_players}
        for cell, pid in sorted(owner.items()):
            pieces.setdefault(pid, []).append(cell)

        allowed = self._all_legal(pieces)
        scores = {pid: len(cells) for pid, cells in pieces.items()}
        game_over = not any(allowed.values())
        winners = []
        if game_over:
            winners = [
                Winner(player_id=pid, score=scores[pid])
                for pid in top_scorers(scores, self.in_setup_order(current_turn.alive_players))
            ]

        return self.next_turn(
            current_turn,
            player_pieces=pieces,
            alive_players=list(current_turn.alive_players),
            allowed_moves=allowed,
            scores=scores,
            winners=winners,
            game_over=game_over,
        )

    def _flips(self, owner: dict[int, str], player_id: str, cell: int) -> list[int]:
        """Opponent discs flanked by placing `player_id` on `cell`."""
        x0, y0 = flattened_to_xy(cell, self.width)
        flips = []
        for dx, dy in EIGHT_WAY:
            x, y = x0 + dx, y0 + dy
            line = []
            while in_bounds(x, y, self.width, self.height):
                idx = xy_to_flattened(x, y, self.width)
                holder = owner.get(idx)
                if holder is None:
                    break
                if holder == player_id:
                    flips.extend(line)
                    break
                line.append(idx)
                x, y = x + dx, y + dy
        return flips

    def _all_legal(self, pieces: dict[str, list[int]]) -> dict[str, list[int]]:
        owner = {cell: pid for pid, cells in pieces.items() for cell in cells}
        return {
            pid: [c for c in range(self.board_size) if c not in owner and self._flips(owner, pid, c)]
            for pid in pieces
        }
