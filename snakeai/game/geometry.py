"""
Grid geometry helpers.

Positions are ``(x, y)`` tuples in screen coordinates: x grows to the
right and y grows downward. Directions are ordered clockwise so that
turning is modular arithmetic.
"""
from enum import IntEnum
from typing import Tuple

Position = Tuple[int, int]


class Direction(IntEnum):
    """Global grid direction, clockwise ordered."""
    UP = 0
    RIGHT = 1
    DOWN = 2
    LEFT = 3

    def left_of(self) -> 'Direction':
        return Direction((self + 3) % 4)

    def right_of(self) -> 'Direction':
        return Direction((self + 1) % 4)

    def opposite(self) -> 'Direction':
        return Direction((self + 2) % 4)


_DELTAS = {
    Direction.UP: (0, -1),
    Direction.RIGHT: (1, 0),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
}


def adjacent(position: Position, direction: Direction) -> Position:
    """Return the cell next to ``position`` in ``direction``."""
    dx, dy = _DELTAS[direction]
    return position[0] + dx, position[1] + dy


def relative_vector(origin: Position, dest: Position, heading: Direction) -> Tuple[int, int]:
    """
    Displacement from ``origin`` to ``dest`` in the frame of ``heading``.

    The returned ``(x, y)`` has ``heading`` as the +y axis and the
    direction right of ``heading`` as the +x axis, i.e. the world as seen
    by an agent facing ``heading``.

    Example:
        # food 3 cells ahead and 1 to the right of a snake moving right
        relative_vector((5, 5), (8, 6), Direction.RIGHT)  # -> (1, 3)
    """
    dx = dest[0] - origin[0]
    dy = origin[1] - dest[1]  # screen y grows downward

    if heading == Direction.UP:
        return dx, dy
    if heading == Direction.RIGHT:
        return -dy, dx
    if heading == Direction.DOWN:
        return -dx, -dy
    return dy, -dx
