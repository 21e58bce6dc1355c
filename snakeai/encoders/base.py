"""
Base encoder abstraction for sensor encoding.

Encoders turn the world, as seen by the agent, into fixed-size numerical
feature vectors suitable for network input.
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import numpy as np
import torch

if TYPE_CHECKING:
    from ..game.world import SnakeWorld


class BaseEncoder(ABC):
    """
    Abstract base class for sensor encoders.

    Attributes:
        input_size: The size of the output feature vector.
        game_type: The game type this encoder is designed for.

    Example:
        encoder = SnakeEncoder()
        features = encoder.encode(world)         # numpy array
        tensor = encoder.encode_tensor(world)    # torch tensor
    """

    input_size: int = 0
    game_type: str = ''

    @abstractmethod
    def encode(self, world: 'SnakeWorld') -> np.ndarray:
        """
        Encode the world into a feature vector.

        Args:
            world: The world to observe.

        Returns:
            A numpy array of shape (input_size,) with float values.
        """
        pass

    def encode_tensor(self, world: 'SnakeWorld') -> torch.Tensor:
        """Encode the world into a float64 torch tensor."""
        features = self.encode(world)
        return torch.from_numpy(features).double()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(input_size={self.input_size})"
