"""
Neuroevolution module for evolving the snake's network weights.

Implements a simple generational genetic algorithm over flat weight
vectors (chromosomes):
- Truncation selection of the fittest survivors
- Uniform per-gene crossover between two random survivors
- Per-gene Gaussian mutation
- Population management with a cursor over the individual on trial,
  and text persistence of the full state

Example usage:
    from snakeai.evolution import GeneticAlgorithm
    from snakeai.networks import MLP

    mlp = MLP(input_size=5, layer_sizes=[5, 5, 3])
    ga = GeneticAlgorithm(mlp.weights_count, population_size=100, selection_size=10)

    for _ in range(1000):
        mlp.set_weights(ga.current_individual())
        ga.grade_current_fitness(play_round(mlp))

    print(f"Generation {ga.generation_count}, best={ga.best_fitness:.1f}")
"""
from .mutations import GaussianMutator
from .crossover import UniformCrossover
from .selection import (
    Individual,
    TruncationSelection,
    sample_parents,
)
from .population import (
    GeneticAlgorithm,
    EvolutionConfig,
    GenerationStats,
    PopulationState,
)

__all__ = [
    # Mutations
    'GaussianMutator',

    # Crossover
    'UniformCrossover',

    # Selection
    'Individual',
    'TruncationSelection',
    'sample_parents',

    # Population management
    'GeneticAlgorithm',
    'EvolutionConfig',
    'GenerationStats',
    'PopulationState',
]
