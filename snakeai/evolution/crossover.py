"""
Crossover operator for chromosome evolution.

Chromosomes are flat weight vectors of a fixed-topology network, so
parents are always aligned gene by gene and recombination can be done
per gene.
"""
from typing import Optional

import torch


class UniformCrossover:
    """
    Uniform per-gene crossover.

    For each gene position an unbiased coin decides whether the child
    copies the value of parent A or parent B. Values are copied, never
    interpolated.

    Example:
        crossover = UniformCrossover(generator=torch.Generator().manual_seed(0))
        child = crossover.crossover(parent_a, parent_b)
    """

    def __init__(self, generator: Optional[torch.Generator] = None):
        self.generator = generator

    def crossover(
        self,
        parent_a: torch.Tensor,
        parent_b: torch.Tensor,
    ) -> torch.Tensor:
        """
        Create a child chromosome from two parents.

        Args:
            parent_a: First parent chromosome.
            parent_b: Second parent chromosome.

        Returns:
            New chromosome of the same length.

        Raises:
            ValueError: If parents have different lengths.
        """
        if parent_a.shape != parent_b.shape:
            raise ValueError(
                f"Parents must have identical lengths, got "
                f"{tuple(parent_a.shape)} and {tuple(parent_b.shape)}"
            )

        mask = torch.rand(parent_a.shape, generator=self.generator) < 0.5
        return torch.where(mask, parent_a, parent_b)
