"""
Selection strategies for the genetic algorithm.

Selection determines which individuals survive a generation and which
of the survivors become parents:
- Truncation: only the fittest ``n`` survive, verbatim
- Uniform parent sampling: any survivor is equally likely to reproduce

Both work on ``Individual`` (chromosome, fitness) pairs.
"""
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import torch


@dataclass
class Individual:
    """A chromosome (flat weight vector) and its fitness."""
    chromosome: torch.Tensor
    fitness: float = 0.0


class TruncationSelection:
    """
    Truncation selection strategy.

    Sorts the population by fitness, fittest first, and keeps the top
    ``selection_size`` individuals. The sort is stable: individuals with
    equal fitness keep their relative order.

    Example:
        selection = TruncationSelection(selection_size=50)
        survivors = selection.select(population)
    """

    def __init__(self, selection_size: int = 1):
        """
        Initialize truncation selection.

        Args:
            selection_size: Number of survivors (at least 1).
        """
        self.selection_size = max(int(selection_size), 1)

    def select(self, population: Sequence[Individual]) -> List[Individual]:
        """
        Return the fittest individuals, fittest first.

        Args:
            population: Individuals with fitness.

        Returns:
            Up to ``selection_size`` individuals.
        """
        if not population:
            return []

        # sorted() with reverse=True stays stable for equal keys
        sorted_pop = sorted(population, key=lambda ind: ind.fitness, reverse=True)
        return sorted_pop[:self.selection_size]


def sample_parents(
    survivors: Sequence[Individual],
    generator: Optional[torch.Generator] = None,
) -> Tuple[Individual, Individual]:
    """
    Pick two parents independently and uniformly among the survivors.

    The same survivor may be drawn twice.

    Raises:
        ValueError: If there are no survivors.
    """
    if not survivors:
        raise ValueError("Cannot sample parents from an empty population")

    indices = torch.randint(0, len(survivors), (2,), generator=generator)
    return survivors[int(indices[0])], survivors[int(indices[1])]
