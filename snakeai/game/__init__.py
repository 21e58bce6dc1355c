"""
Minimal snake world used by the agent's sensors and by headless training.
"""
from .geometry import (
    Direction,
    Position,
    adjacent,
    relative_vector,
)
from .world import Event, SnakeWorld

__all__ = [
    'Direction',
    'Position',
    'adjacent',
    'relative_vector',
    'Event',
    'SnakeWorld',
]
