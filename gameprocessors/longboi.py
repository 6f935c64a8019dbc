from models.domain_models import GameType, Winner
from utils.board import longest_run
from .claims import ClaimProcessor, top_scorers


class LongboiProcessor(ClaimProcessor):
    """
    Line majority: claim cells until the board is full, then the longest
    straight run (any axis) wins. Equal longest runs share the win.

    Illegal claims are forfeited; missing moves default to a pass.
    """

    game_type = GameType.LONGBOI

    def evaluate(self, pieces, alive, allowed):
        runs = {pid: longest_run(pieces.get(pid, []), self.width, self.height) for pid in alive}
        scores = {pid: len(run) for pid, run in runs.items()}

        game_over = not any(allowed.values())
        winners = []
        if game_over:
            winners = [
                Winner(player_id=pid, score=scores[pid], winning_squares=runs[pid])
                for pid in top_scorers(scores, self.in_setup_order(alive))
            ]
        return winners, game_over, scores
