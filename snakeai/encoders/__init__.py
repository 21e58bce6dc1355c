"""
Sensor encoders that turn the world into network input vectors.
"""
from .base import BaseEncoder
from .snake import SnakeEncoder

__all__ = [
    'BaseEncoder',
    'SnakeEncoder',
]
