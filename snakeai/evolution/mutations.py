"""
Mutation operator for chromosome evolution.

Genes are perturbed independently: each gene is selected with a fixed
probability and, if selected, receives an offset drawn from a standard
normal distribution. Unselected genes are left untouched.
"""
from typing import Optional

import torch


class GaussianMutator:
    """
    Per-gene Gaussian perturbation.

    Attributes:
        mutation_rate: Probability of mutating each gene (0-1).
            0.0 = never mutate, 1.0 = mutate every gene.
        sigma: Standard deviation of the offset.

    Example:
        mutator = GaussianMutator(mutation_rate=0.02)
        child = mutator.mutate(child)
    """

    def __init__(
        self,
        mutation_rate: float = 0.02,
        sigma: float = 1.0,
        generator: Optional[torch.Generator] = None,
    ):
        self.mutation_rate = float(mutation_rate)
        self.sigma = sigma
        self.generator = generator

    def mutate(self, chromosome: torch.Tensor, in_place: bool = False) -> torch.Tensor:
        """
        Apply Gaussian offsets to a random subset of genes.

        Args:
            chromosome: The chromosome to mutate.
            in_place: If True, modify the chromosome in place.

        Returns:
            Mutated chromosome (same object if in_place=True).
        """
        if not in_place:
            chromosome = chromosome.clone()

        mask = torch.rand(chromosome.shape, generator=self.generator) < self.mutation_rate
        noise = torch.randn(
            chromosome.shape, generator=self.generator, dtype=chromosome.dtype
        ) * self.sigma
        chromosome[mask] += noise[mask]

        return chromosome
