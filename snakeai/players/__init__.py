"""
Snake controllers.

This module provides:
- BasePlayer: interface every controller implements
- Action: relative moves (turn left, go straight, turn right)
- NeuralPlayer: auto-mode snake driven by an evolving MLP
"""
from .base import Action, BasePlayer
from .neural import NeuralPlayer, action_from_output

__all__ = [
    'Action',
    'BasePlayer',
    'NeuralPlayer',
    'action_from_output',
]
