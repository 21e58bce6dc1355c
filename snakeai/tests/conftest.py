"""
Pytest fixtures for snake AI tests.

Provides fixtures for:
- Networks and matching optimizers
- Worlds with a known food position
- Small training configurations
"""
import pytest

from snakeai.tests.factories import GeneticAlgorithmFactory, MLPFactory, SnakeWorldFactory


@pytest.fixture
def network():
    """Return the default snake network."""
    return MLPFactory()


@pytest.fixture
def genetic_algorithm(network):
    """Return a small optimizer matching the default network."""
    return GeneticAlgorithmFactory(chromosome_length=network.weights_count)


@pytest.fixture
def world():
    """Return an 11x11 world with the food parked in a corner."""
    world = SnakeWorldFactory()
    world.food = (1, 1)
    return world


@pytest.fixture
def training_config(save_path):
    """Return a training configuration small enough for unit tests."""
    from snakeai.training import TrainingConfig

    return TrainingConfig(
        grid_side_length=7,
        max_idle_steps=20,
        input_size=5,
        layer_sizes=[4, 3],
        population_size=4,
        selection_size=2,
        mutation_rate=0.1,
        save_path=str(save_path),
        checkpoint_interval=2,
        seed=0,
    )
