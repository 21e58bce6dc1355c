"""
Headless snake world.

A square grid bordered by walls, with one snake and one food item. The
world answers the geometric queries the snake's sensors need and
advances one cell per ``step``.
"""
import logging
import random
from collections import deque
from enum import Enum
from typing import Deque, Optional, Set, Tuple

from .geometry import Direction, Position, adjacent, relative_vector

logger = logging.getLogger(__name__)


class Event(Enum):
    """Outcome of a snake step."""
    NEW_TILE = 'new_tile'
    ATE = 'ate'
    COLLIDED = 'collided'


class SnakeWorld:
    """
    Grid world with walls on the border.

    Attributes:
        grid_side_length: Side of the square grid, walls included.
        heading: Current snake direction.
        alive: False once the snake has collided.
        food: Position of the food, or None when the grid is full.
        steps_since_food: Steps taken since the last meal (or the start).

    Example:
        world = SnakeWorld(grid_side_length=31, rng=random.Random(0))
        while world.alive:
            world.step(world.heading.right_of())
        print(world.score)
    """

    def __init__(self, grid_side_length: int = 31, rng: Optional[random.Random] = None):
        """
        Initialize the world and place the snake and the first food item.

        Args:
            grid_side_length: Side of the grid (at least 3, walls included).
            rng: Random source for food placement.

        Raises:
            ValueError: If the grid is too small to hold the snake.
        """
        if grid_side_length < 3:
            raise ValueError(f"Grid side length must be at least 3, got {grid_side_length}")

        self.grid_side_length = grid_side_length
        self.rng = rng or random.Random()

        self._body: Deque[Position] = deque()
        self._occupied: Set[Position] = set()
        self.heading = Direction.UP
        self.alive = True
        self.food: Optional[Position] = None
        self.steps_since_food = 0

        self.reset()

    @property
    def start_position(self) -> Position:
        return self.grid_side_length // 2, self.grid_side_length // 2

    def reset(self) -> None:
        """Put a size 1 snake heading up at the centre and grow new food."""
        self._body = deque([self.start_position])
        self._occupied = {self.start_position}
        self.heading = Direction.UP
        self.alive = True
        self.steps_since_food = 0
        self.grow_food()

    # ------------------------------------------------------------------
    # Snake state

    @property
    def head(self) -> Position:
        return self._body[0]

    @property
    def tail(self) -> Position:
        return self._body[-1]

    @property
    def size(self) -> int:
        return len(self._body)

    @property
    def score(self) -> int:
        return self.size - 1

    @property
    def body(self) -> Tuple[Position, ...]:
        """Snake positions from head to tail."""
        return tuple(self._body)

    # ------------------------------------------------------------------
    # Grid queries

    def is_wall(self, position: Position) -> bool:
        x, y = position
        last = self.grid_side_length - 1
        return x <= 0 or y <= 0 or x >= last or y >= last

    def is_obstacle(self, position: Position) -> bool:
        """Walls, cells outside the grid and snake parts are obstacles."""
        return self.is_wall(position) or position in self._occupied

    def distance_to_obstacle(self, direction: Direction) -> int:
        """
        Count cells from the head to the closest obstacle in ``direction``.

        An obstacle in the adjacent cell is at distance 1.
        """
        position = self.head
        steps = 0
        while True:
            position = adjacent(position, direction)
            steps += 1
            if self.is_obstacle(position):
                return steps

    def vector_to_food(self) -> Tuple[int, int]:
        """Displacement from the head to the food, in the snake's frame."""
        if self.food is None:
            return 0, 0
        return relative_vector(self.head, self.food, self.heading)

    # ------------------------------------------------------------------
    # Updates

    def grow_food(self) -> Optional[Position]:
        """Place food on a random free cell; None when no cell is free."""
        last = self.grid_side_length - 1
        free = [
            (x, y)
            for y in range(1, last)
            for x in range(1, last)
            if (x, y) not in self._occupied
        ]
        self.food = self.rng.choice(free) if free else None
        return self.food

    def step(self, direction: Optional[Direction] = None) -> Event:
        """
        Move the snake one cell.

        Args:
            direction: New heading. The opposite of the current heading is
                ignored, as is None.

        Returns:
            The outcome of the move.

        Raises:
            RuntimeError: If the snake already collided.
        """
        if not self.alive:
            raise RuntimeError("Cannot move a snake that has collided")

        if direction is not None and direction != self.heading.opposite():
            self.heading = Direction(direction)

        target = adjacent(self.head, self.heading)
        if self.is_obstacle(target):
            self.alive = False
            logger.debug("Snake collided at %s with size %d", target, self.size)
            return Event.COLLIDED

        self._body.appendleft(target)
        self._occupied.add(target)

        if target == self.food:
            self.steps_since_food = 0
            self.grow_food()
            return Event.ATE

        self._occupied.discard(self._body.pop())
        self.steps_since_food += 1
        return Event.NEW_TILE
