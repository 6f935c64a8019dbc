from models.domain_models import GameType, Winner
from utils.board import find_line, longest_run
from .claims import ClaimProcessor


class TacticToesProcessor(ClaimProcessor):
    """
    Multi-player tic-tac-toe: the first player(s) to hold four cells in a
    row on any axis win. A board with no free cells and no line is a draw.

    Illegal claims are forfeited; missing moves default to a pass.
    """

    game_type = GameType.TACTICTOES
    win_length = 4

    def evaluate(self, pieces, alive, allowed):
        scores = {pid: len(longest_run(pieces.get(pid, []), self.width, self.height)) for pid in alive}

        winners = []
        for pid in self.in_setup_order(alive):
            line = find_line(pieces.get(pid, []), self.width, self.height, self.win_length)
            if line:
                winners.append(Winner(player_id=pid, score=len(line), winning_squares=line))

        game_over = bool(winners) or not any(allowed.values())
        return winners, game_over, scores
