from typing import Optional

from models.domain_models import Clash, GameType, Move, Turn, Winner
from utils.board import find_line, flattened_to_xy, xy_to_flattened
from .base import GameProcessor


class Connect4Processor(GameProcessor):
    """
    Piece-drop game: a move names any cell, only its column matters.

    - The disc falls to the lowest empty cell of that column.
    - Several players dropping into one column stack in setup order.
    - Dropping into a full column is rejected (a no-op, recorded as a
      `column_full` clash).
    - Four in a row on any axis wins; everyone completing a line on the same
      turn is a winner. A full board with no line is a draw.

    Missing moves default to a pass.
    """

    game_type = GameType.CONNECT4
    min_players = 2
    min_board = 4
    win_length = 4

    def initialize(self) -> Turn:
        active = self.active_player_ids
        landing = self._landing_cells({})
        return Turn(
            turn_number=0,
            player_pieces={pid: [] for pid in active},
            alive_players=active,
            allowed_moves={pid: list(landing) for pid in active},
        )

    def apply_moves(self, current_turn: Turn, moves: list[Move]) -> Turn:
        pieces = {pid: list(cells) for pid, cells in current_turn.player_pieces.items()}
        occupied = {cell: pid for pid, cells in pieces.items() for cell in cells}
        clashes = []

        for pid, move in self.moves_by_player(current_turn, moves).items():
            if not self.valid_index(move):
                continue
            column, _ = flattened_to_xy(move, self.width)
            cell = self._landing_cell(column, occupied)
            if cell is None:
                clashes.append(Clash(index=move, player_ids=[pid], reason="column_full"))
                continue
            occupied[cell] = pid
            pieces.setdefault(pid, []).append(cell)

        winners = []
        for pid in self.in_setup_order(current_turn.alive_players):
            line = find_line(pieces.get(pid, []), self.width, self.height, self.win_length)
            if line:
                winners.append(Winner(player_id=pid, score=len(line), winning_squares=line))

        game_over = bool(winners) or len(occupied) >= self.board_size
        landing = [] if game_over else self._landing_cells(occupied)

        return self.next_turn(
            current_turn,
            player_pieces=pieces,
            alive_players=list(current_turn.alive_players),
            allowed_moves={pid: list(landing) for pid in current_turn.alive_players},
            clashes=clashes,
            scores={pid: len(cells) for pid, cells in pieces.items()},
            winners=winners,
            game_over=game_over,
        )

    def _landing_cell(self, column: int, occupied: dict) -> Optional[int]:
        for y in range(self.height - 1, -1, -1):
            cell = xy_to_flattened(column, y, self.width)
            if cell not in occupied:
                return cell
        return None

    def _landing_cells(self, occupied: dict) -> list[int]:
        cells = []
        for column in range(self.width):
            cell = self._landing_cell(column, occupied)
            if cell is not None:
                cells.append(cell)
        return cells
