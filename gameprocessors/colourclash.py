from models.domain_models import GameType, Winner
from utils.board import neighbours, xy_to_flattened
from .claims import ClaimProcessor, top_scorers


class ColourClashProcessor(ClaimProcessor):
    """
    Territory capture: everyone starts on their own cell and grows their
    territory by one orthogonally adjacent free cell per turn.

    Contested cells turn into walls. The game ends when nobody can grow;
    the largest territory wins and equal territories share the win.
    Illegal claims are forfeited; missing moves default to a pass.
    """

    game_type = GameType.COLOURCLASH
    max_players = 8

    def _start_cells(self) -> list[int]:
        w, h = self.width, self.height
        spots = [
            (0, 0), (w - 1, h - 1), (w - 1, 0), (0, h - 1),
            (w // 2, 0), (w // 2, h - 1), (0, h // 2), (w - 1, h // 2),
        ]
        return [xy_to_flattened(x, y, w) for x, y in spots]

    def starting_pieces(self, player_ids):
        starts = self._start_cells()
        return {pid: [starts[i]] for i, pid in enumerate(player_ids)}

    def claimable(self, player_id, pieces, blocked):
        frontier = set()
        for cell in pieces.get(player_id, []):
            for n in neighbours(cell, self.width, self.height):
                if n not in blocked:
                    frontier.add(n)
        return sorted(frontier)

    def evaluate(self, pieces, alive, allowed):
        scores = {pid: len(pieces.get(pid, [])) for pid in alive}
        game_over = not any(allowed.values())
        winners = []
        if game_over:
            winners = [
                Winner(player_id=pid, score=scores[pid], winning_squares=sorted(pieces.get(pid, [])))
                for pid in top_scorers(scores, self.in_setup_order(alive))
            ]
        return winners, game_over, scores
