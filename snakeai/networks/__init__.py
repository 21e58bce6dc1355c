"""
Neural network infrastructure for the snake agent.

This module provides:
- MLP: fixed-topology perceptron with flat weight vector exchange
- Preset architectures and chromosome length helpers
"""
from .mlp import MLP
from .architectures import (
    snake_mlp_architecture,
    weights_count_for,
    build_network,
)

__all__ = [
    'MLP',
    'snake_mlp_architecture',
    'weights_count_for',
    'build_network',
]
