import logging
from typing import Optional

from models.domain_models import GameType, Move, Turn, Winner
from utils.board import (
    direction_between,
    neighbours,
    perimeter_cells,
    step,
    xy_to_flattened,
)
from .base import GameProcessor

logger = logging.getLogger(__name__)


class SnekProcessor(GameProcessor):
    """
    Simultaneous snake game on a board ringed by a one-cell wall.

    Bodies are stored head first. A new snake is `start_length` copies of its
    spawn cell, so it unfolds over its first moves.

    Per turn, for every alive snake:
    - the move must be a cell orthogonally adjacent to the head; anything else
      is replaced by the default move (keep going the same way, `up` if the
      snake has not moved yet);
    - the head advances and the tail is popped unless the snake ate, in which
      case it grows and its health is restored, otherwise it loses 1 health.

    A snake is eliminated when its head lands on a wall, its health runs out,
    its head lands on any body cell (its own included, vacated tails are not
    body cells), or it meets a head that is at least as long.
    """

    game_type = GameType.SNEK
    min_board = 5
    max_players = 8
    start_length = 3
    max_health = 100
    extra_food_chance = 0.15

    # -------------------------------------------------
    # Turn 0
    # -------------------------------------------------

    def initialize(self) -> Turn:
        active = self.active_player_ids
        walls = perimeter_cells(self.width, self.height)
        spawns = self._spawn_cells(len(active))

        pieces = {pid: [spawns[i]] * self.start_length for i, pid in enumerate(active)}
        health = {pid: self.max_health for pid in active}
        food = self._place_food(self.rng(0), pieces, walls, [], len(active))

        return Turn(
            turn_number=0,
            player_pieces=pieces,
            player_health=health,
            alive_players=active,
            allowed_moves=self._allowed_moves(pieces, active),
            food=food,
            walls=walls,
            scores={pid: len(body) for pid, body in pieces.items()},
        )

    def _spawn_cells(self, count: int) -> list[int]:
        w, h = self.width, self.height
        spots = [
            (1, 1), (w - 2, h - 2), (w - 2, 1), (1, h - 2),
            (w // 2, 1), (w // 2, h - 2), (1, h // 2), (w - 2, h // 2),
        ]
        cells = []
        for x, y in spots:
            cell = xy_to_flattened(x, y, w)
            if cell not in cells:
                cells.append(cell)
        # tiny boards: fill up with the remaining interior cells
        if len(cells) < count:
            walls = set(perimeter_cells(w, h))
            cells.extend(c for c in range(self.board_size) if c not in walls and c not in cells)
        return cells[:count]

    # -------------------------------------------------
    # Moves
    # -------------------------------------------------

    def default_move(self, current_turn: Turn, player_id: str) -> Optional[int]:
        body = current_turn.player_pieces.get(player_id)
        if not body:
            return None
        head = body[0]
        direction = None
        if len(body) > 1 and body[1] != head:
            direction = direction_between(body[1], head, self.width)
        return step(head, direction or "up", self.width, self.height)

    def apply_moves(self, current_turn: Turn, moves: list[Move]) -> Turn:
        alive = self.in_setup_order(current_turn.alive_players)
        submitted = self.moves_by_player(current_turn, moves)
        walls = set(current_turn.walls)
        food = set(current_turn.food)
        pieces = {pid: list(current_turn.player_pieces.get(pid, [])) for pid in alive}
        health = {pid: current_turn.player_health.get(pid, self.max_health) for pid in alive}

        eaten = set()
        for pid in alive:
            body = pieces[pid]
            if not body:
                continue
            target = submitted.get(pid)
            if target is None or target not in neighbours(body[0], self.width, self.height):
                target = self.default_move(current_turn, pid)
            body.insert(0, target)
            if target in food:
                eaten.add(target)
                health[pid] = self.max_health
            else:
                body.pop()
                health[pid] -= 1
        food -= eaten

        dead = self._collisions(pieces, health, walls)
        dead |= self.extra_eliminations(pieces, dead)
        if dead:
            logger.info(f"[TURN] game={self.game_id} turn={current_turn.turn_number} eliminated={sorted(dead)}")

        survivors = [pid for pid in alive if pid not in dead]
        pieces = {pid: pieces[pid] for pid in survivors}
        health = {pid: health[pid] for pid in survivors}

        scores = dict(current_turn.scores)
        scores.update({pid: len(body) for pid, body in pieces.items()})

        game_over, winners = self.outcome(survivors, scores)

        next_number = current_turn.turn_number + 1
        if not game_over:
            food = set(self._respawn_food(self.rng(next_number), pieces, walls, sorted(food)))

        return self.next_turn(
            current_turn,
            player_pieces=pieces,
            player_health=health,
            alive_players=survivors,
            allowed_moves={} if game_over else self._allowed_moves(pieces, survivors),
            food=sorted(food),
            hazards=list(current_turn.hazards),
            walls=list(current_turn.walls),
            scores=scores,
            winners=winners,
            game_over=game_over,
        )

    def _collisions(self, pieces: dict[str, list[int]], health: dict[str, int], walls: set[int]) -> set[str]:
        dead = set()
        heads = {pid: body[0] for pid, body in pieces.items() if body}
        for pid, head in heads.items():
            if head in walls or not 0 <= head < self.board_size:
                dead.add(pid)
            elif health[pid] <= 0:
                dead.add(pid)
            elif any(head in body[1:] for body in pieces.values()):
                dead.add(pid)

        for pid, head in heads.items():
            for other, other_head in heads.items():
                if other != pid and other_head == head and len(pieces[pid]) <= len(pieces[other]):
                    dead.add(pid)
        return dead

    def extra_eliminations(self, pieces: dict[str, list[int]], dead: set[str]) -> set[str]:
        """Players eliminated as a consequence of someone else's death."""
        return set()

    def outcome(self, survivors: list[str], scores: dict[str, int]) -> tuple[bool, list[Winner]]:
        started = len(self.active_player_ids)
        if survivors and (started < 2 or len(survivors) > 1):
            return False, []
        winners = [Winner(player_id=pid, score=scores.get(pid, 0)) for pid in survivors]
        return True, winners

    def _allowed_moves(self, pieces: dict[str, list[int]], player_ids: list[str]) -> dict[str, list[int]]:
        return {
            pid: neighbours(pieces[pid][0], self.width, self.height)
            for pid in player_ids
            if pieces.get(pid)
        }

    # -------------------------------------------------
    # Food
    # -------------------------------------------------

    def _free_cells(self, pieces, walls, food) -> list[int]:
        taken = set(walls) | set(food)
        for body in pieces.values():
            taken.update(body)
        return [cell for cell in range(self.board_size) if cell not in taken]

    def _place_food(self, rng, pieces, walls, food, count: int) -> list[int]:
        food = list(food)
        free = self._free_cells(pieces, walls, food)
        for cell in rng.sample(free, min(count, len(free))):
            food.append(cell)
        return sorted(food)

    def _respawn_food(self, rng, pieces, walls, food) -> list[int]:
        wanted = 0 if food else 1
        if rng.random() < self.extra_food_chance:
            wanted += 1
        if not wanted:
            return food
        return self._place_food(rng, pieces, walls, food, wanted)
