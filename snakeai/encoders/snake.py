"""
Snake sensor encoder.

Encodes what the snake perceives into 5 features, all relative to its
own heading:

Features (5 total):
- [0] Distance to the closest obstacle left of the heading
- [1] Distance to the closest obstacle straight ahead
- [2] Distance to the closest obstacle right of the heading
- [3] Food displacement along the snake's right-hand axis
- [4] Food displacement along the snake's heading axis

Distances are counted in cells, an adjacent obstacle being at distance 1.
"""
from typing import TYPE_CHECKING

import numpy as np

from .base import BaseEncoder

if TYPE_CHECKING:
    from ..game.world import SnakeWorld


class SnakeEncoder(BaseEncoder):
    """
    Encoder of the snake's sensory input.

    Example:
        encoder = SnakeEncoder()
        features = encoder.encode(world)
        # array([3., 15., 27., -2., 6.])
    """

    input_size = 5
    game_type = 'snake'

    def encode(self, world: 'SnakeWorld') -> np.ndarray:
        heading = world.heading
        food_x, food_y = world.vector_to_food()

        return np.array(
            [
                world.distance_to_obstacle(heading.left_of()),
                world.distance_to_obstacle(heading),
                world.distance_to_obstacle(heading.right_of()),
                food_x,
                food_y,
            ],
            dtype=np.float64,
        )
