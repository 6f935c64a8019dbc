"""Board geometry helpers shared by the rule engines and the bot protocol.

Boards are rectangular and stored flattened: ``index = y * width + x`` with
``y = 0`` on the top row. Nothing in here knows about players or turns.
"""
from typing import Iterable, Optional


DIRECTIONS = ("up", "down", "left", "right")

# (dx, dy) in board space, y grows downward
DIRECTION_OFFSETS = {
    "up": (0, -1),
    "down": (0, 1),
    "left": (-1, 0),
    "right": (1, 0),
}

# horizontal, vertical, both diagonals
LINE_AXES = ((1, 0), (0, 1), (1, 1), (1, -1))

EIGHT_WAY = ((1, 0), (-1, 0), (0, 1), (0, -1), (1, 1), (1, -1), (-1, 1), (-1, -1))


def flattened_to_xy(index: int, width: int) -> tuple[int, int]:
    """Return the (x, y) coordinates of a flattened cell index."""
    return index % width, index // width


def xy_to_flattened(x: int, y: int, width: int) -> int:
    """Return the flattened index of the (x, y) cell."""
    return y * width + x


def in_bounds(x: int, y: int, width: int, height: int) -> bool:
    return 0 <= x < width and 0 <= y < height


def is_valid_index(index, width: int, height: int) -> bool:
    return isinstance(index, int) and not isinstance(index, bool) and 0 <= index < width * height


def neighbours(index: int, width: int, height: int) -> list[int]:
    """Orthogonally adjacent cells that lie on the board."""
    x, y = flattened_to_xy(index, width)
    result = []
    for dx, dy in DIRECTION_OFFSETS.values():
        nx, ny = x + dx, y + dy
        if in_bounds(nx, ny, width, height):
            result.append(xy_to_flattened(nx, ny, width))
    return result


def step(index: int, direction: str, width: int, height: int) -> int:
    """Move one cell from `index` in `direction`.

    A step that would leave the board returns `index` unchanged: the edge
    acts as a no-op rather than wrapping around.
    """
    if direction not in DIRECTION_OFFSETS:
        return index
    x, y = flattened_to_xy(index, width)
    dx, dy = DIRECTION_OFFSETS[direction]
    nx, ny = x + dx, y + dy
    if not in_bounds(nx, ny, width, height):
        return index
    return xy_to_flattened(nx, ny, width)


def direction_between(from_index: int, to_index: int, width: int) -> Optional[str]:
    """Return the direction that takes `from_index` to an adjacent `to_index`."""
    fx, fy = flattened_to_xy(from_index, width)
    tx, ty = flattened_to_xy(to_index, width)
    for name, (dx, dy) in DIRECTION_OFFSETS.items():
        if fx + dx == tx and fy + dy == ty:
            return name
    return None


def perimeter_cells(width: int, height: int) -> list[int]:
    """All cells on the outer ring of the board."""
    return [
        xy_to_flattened(x, y, width)
        for y in range(height)
        for x in range(width)
        if x == 0 or y == 0 or x == width - 1 or y == height - 1
    ]


def adjust_position(x: int, y: int, board_height: int) -> tuple[int, int]:
    """Map a board cell into the margin-free, bottom-left-origin view.

    Strips the one-cell perimeter and flips the vertical axis.
    """
    return x - 1, board_height - y - 2


def run_length(cells: set[int], start: int, dx: int, dy: int, width: int, height: int) -> list[int]:
    """Cells of the straight run through `start` along (dx, dy), in order."""
    x, y = flattened_to_xy(start, width)
    while in_bounds(x - dx, y - dy, width, height) and xy_to_flattened(x - dx, y - dy, width) in cells:
        x, y = x - dx, y - dy
    run = []
    while in_bounds(x, y, width, height) and xy_to_flattened(x, y, width) in cells:
        run.append(xy_to_flattened(x, y, width))
        x, y = x + dx, y + dy
    return run


def find_line(cells: Iterable[int], width: int, height: int, length: int) -> Optional[list[int]]:
    """Return the first straight line of at least `length` cells, if any."""
    owned = set(cells)
    for start in sorted(owned):
        for dx, dy in LINE_AXES:
            run = run_length(owned, start, dx, dy, width, height)
            if len(run) >= length:
                return run
    return None


def longest_run(cells: Iterable[int], width: int, height: int) -> list[int]:
    """Return the longest straight run of cells (any axis)."""
    owned = set(cells)
    best: list[int] = []
    for start in sorted(owned):
        for dx, dy in LINE_AXES:
            run = run_length(owned, start, dx, dy, width, height)
            if len(run) > len(best):
                best = run
    return best
