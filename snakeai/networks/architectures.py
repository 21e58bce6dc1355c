"""
Preset network architectures.

Architectures are plain dictionaries so they can be stored alongside
other configuration:

    {'name': 'Snake MLP', 'input_size': 5, 'layer_sizes': [5, 5, 3]}
"""
from typing import Any, Dict, Optional, Sequence

from .. import settings


def snake_mlp_architecture(
    input_size: Optional[int] = None,
    layer_sizes: Optional[Sequence[int]] = None,
) -> Dict[str, Any]:
    """
    Default decision model of the snake.

    Architecture:
        Input (5: three obstacle distances + food vector)
        -> Hidden (5, tanh) -> Hidden (5, tanh) -> Output (3, logistic)

    Args:
        input_size: Override for the sensor vector length.
        layer_sizes: Override for the layer sizes.

    Returns:
        Architecture specification.
    """
    return {
        'name': 'Snake MLP',
        'input_size': settings.SNAKE_MLP_INPUT_SIZE if input_size is None else input_size,
        'layer_sizes': list(
            settings.SNAKE_MLP_LAYER_SIZES if layer_sizes is None else layer_sizes
        ),
    }


def weights_count_for(input_size: int, layer_sizes: Sequence[int]) -> int:
    """
    Number of weights (bias weights included) of an MLP topology.

    This is the chromosome length the genetic algorithm must be built with.
    """
    count = 0
    num_cols = input_size + 1
    for size in layer_sizes:
        count += size * num_cols
        num_cols = size + 1
    return count


def build_network(architecture: Dict[str, Any], generator=None):
    """
    Build an MLP from an architecture dictionary.

    Raises:
        ValueError: If required keys are missing.
    """
    from .mlp import MLP

    if not isinstance(architecture, dict):
        raise ValueError("Architecture must be a dictionary")
    for key in ('input_size', 'layer_sizes'):
        if key not in architecture:
            raise ValueError(f"Architecture must have '{key}' key")

    return MLP(
        input_size=architecture['input_size'],
        layer_sizes=architecture['layer_sizes'],
        generator=generator,
    )
