"""
Population management for the generational genetic algorithm.

The algorithm evaluates one individual at a time: the game binds the
chromosome under the cursor to the snake's network, plays a round, and
grades the result. Once every individual has been graded, the fittest
survive, the rest of the population is refilled with their offspring and
the cursor starts over.

Full state (parameters, counters, chromosomes and fitness values) can be
written to and read from a text stream so that an interrupted run
resumes with the same individual.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, TextIO, Tuple, Union

import torch

from .. import settings
from ..serialization import TokenReader, as_reader, format_float, format_floats
from .crossover import UniformCrossover
from .mutations import GaussianMutator
from .selection import Individual, TruncationSelection, sample_parents

logger = logging.getLogger(__name__)

DTYPE = torch.float64


@dataclass
class EvolutionConfig:
    """Configuration of the genetic algorithm."""
    population_size: int = settings.GA_POPULATION_SIZE
    selection_size: int = settings.GA_SURVIVORS_CNT
    mutation_rate: float = settings.GA_MUTATION_RATE


@dataclass
class GenerationStats:
    """Fitness statistics of a fully evaluated generation."""
    generation: int = 0
    best_fitness: float = 0.0
    avg_fitness: float = 0.0
    min_fitness: float = 0.0
    fitness_std: float = 0.0


@dataclass
class PopulationState:
    """Parameters, counters and individuals read back from a save file."""
    chromosome_length: int
    selection_size: int
    mutation_rate: float
    generation_count: int
    individual_count: int
    individuals: List[Individual] = field(default_factory=list)

    @property
    def population_size(self) -> int:
        return len(self.individuals)


class GeneticAlgorithm:
    """
    Generational genetic algorithm over fixed-length real chromosomes.

    Handles the evolutionary cycle one individual at a time:
    1. Hand out the chromosome under the cursor (``current_individual``)
    2. Record its fitness and advance (``grade_current_fitness``)
    3. After the last individual, select the fittest ``selection_size``
       and refill the population with crossover + mutation offspring
    4. Repeat

    The algorithm never interprets genes; chromosome length is the
    weight count of the network being evolved.

    Example:
        ga = GeneticAlgorithm(
            chromosome_length=mlp.weights_count,
            population_size=1000,
            selection_size=50,
            mutation_rate=0.02,
        )

        mlp.set_weights(ga.current_individual())
        score = play_round(mlp)
        ga.grade_current_fitness(score)

    Not thread-safe: calls that mutate the population must be serialized
    by the caller.
    """

    def __init__(
        self,
        chromosome_length: int,
        population_size: int = settings.GA_POPULATION_SIZE,
        selection_size: int = settings.GA_SURVIVORS_CNT,
        mutation_rate: float = settings.GA_MUTATION_RATE,
        generator: Optional[torch.Generator] = None,
    ):
        """
        Initialize the algorithm with a random population.

        Args:
            chromosome_length: Number of genes per individual.
            population_size: Individuals per generation (clamped to >= 1).
            selection_size: Survivors per generation
                (clamped to [1, population_size]).
            mutation_rate: Per-gene mutation probability.
            generator: Optional torch generator for every random draw.

        Raises:
            ValueError: If chromosome_length is less than 1.
        """
        chromosome_length = int(chromosome_length)
        if chromosome_length < 1:
            raise ValueError(
                f"Chromosome length must be at least 1, got {chromosome_length}"
            )

        self.generator = generator
        self._chromosome_length = chromosome_length
        self._population_size, self._selection_size = self._clamp_sizes(
            population_size, selection_size
        )
        self._mutation_rate = float(mutation_rate)

        # Evolution operators
        self.crossover_operator = UniformCrossover(generator=generator)
        self.mutator = GaussianMutator(mutation_rate=self._mutation_rate, generator=generator)
        self.selection = TruncationSelection(selection_size=self._selection_size)

        # Population state
        self.individuals: List[Individual] = [
            Individual(chromosome=self._random_chromosome(), fitness=0.0)
            for _ in range(self._population_size)
        ]
        self._cursor = 0
        self._generation_count = 0
        self._individual_count = 0

        # Statistics
        self.stats_history: List[GenerationStats] = []

    @classmethod
    def from_config(
        cls,
        chromosome_length: int,
        config: EvolutionConfig,
        generator: Optional[torch.Generator] = None,
    ) -> 'GeneticAlgorithm':
        """Create the algorithm from an ``EvolutionConfig``."""
        return cls(
            chromosome_length=chromosome_length,
            population_size=config.population_size,
            selection_size=config.selection_size,
            mutation_rate=config.mutation_rate,
            generator=generator,
        )

    @staticmethod
    def _clamp_sizes(population_size: int, selection_size: int) -> Tuple[int, int]:
        population_size = max(int(population_size), 1)
        selection_size = max(min(int(selection_size), population_size), 1)
        return population_size, selection_size

    def _random_chromosome(self) -> torch.Tensor:
        """Initial genes are drawn from a standard normal distribution."""
        return torch.randn(self._chromosome_length, generator=self.generator, dtype=DTYPE)

    # ------------------------------------------------------------------
    # Read-only state

    @property
    def chromosome_length(self) -> int:
        return self._chromosome_length

    @property
    def population_size(self) -> int:
        return self._population_size

    @property
    def selection_size(self) -> int:
        return self._selection_size

    @property
    def mutation_rate(self) -> float:
        return self._mutation_rate

    @property
    def generation_count(self) -> int:
        """Number of completed generation transitions."""
        return self._generation_count

    @property
    def individual_count(self) -> int:
        """Number of individuals already graded in the current generation."""
        return self._individual_count

    @property
    def cursor(self) -> int:
        """Index of the individual currently on trial."""
        return self._cursor

    @property
    def population(self) -> Tuple[Individual, ...]:
        return tuple(self.individuals)

    @property
    def best_fitness(self) -> float:
        """Best fitness in the current population."""
        return max(ind.fitness for ind in self.individuals)

    @property
    def avg_fitness(self) -> float:
        """Average fitness in the current population."""
        return sum(ind.fitness for ind in self.individuals) / len(self.individuals)

    def get_best(self) -> Individual:
        """Get the best individual in the current population."""
        return max(self.individuals, key=lambda ind: ind.fitness)

    # ------------------------------------------------------------------
    # Evaluation cycle

    def current_individual(self) -> torch.Tensor:
        """
        Return the chromosome of the individual on trial.

        The tensor is owned by the population and is replaced at the next
        generation transition; clone it to keep it longer.
        """
        return self.individuals[self._cursor].chromosome

    def grade_current_fitness(self, fitness: float) -> None:
        """
        Set the fitness of the individual on trial and move to the next one.

        Grading the last individual of the population triggers a new
        generation.

        Args:
            fitness: Outcome of the individual's trial.

        Raises:
            RuntimeError: If the cursor doesn't point at an individual.
        """
        if not 0 <= self._cursor < len(self.individuals):
            raise RuntimeError(
                f"Cannot grade individual {self._cursor}: population has "
                f"{len(self.individuals)} individuals"
            )

        self.individuals[self._cursor].fitness = float(fitness)

        self._cursor += 1
        self._individual_count += 1

        if self._cursor >= len(self.individuals):
            self.new_generation()

    def new_generation(self) -> GenerationStats:
        """
        Replace the population with survivors and their offspring.

        Survivors keep their chromosome and fitness. Offspring start with
        fitness 0.

        Returns:
            Statistics of the generation that was just evaluated.
        """
        stats = self._compute_stats()
        self.stats_history.append(stats)

        survivors = self.selection.select(self.individuals)
        new_individuals = list(survivors)

        while len(new_individuals) < self._population_size:
            parent_a, parent_b = sample_parents(survivors, generator=self.generator)
            child = self.crossover(parent_a.chromosome, parent_b.chromosome)
            new_individuals.append(Individual(chromosome=child, fitness=0.0))

        self.individuals = new_individuals
        self._cursor = 0
        self._individual_count = 0
        self._generation_count += 1

        logger.info(
            "Generation %d evaluated: best=%.3f avg=%.3f min=%.3f",
            stats.generation, stats.best_fitness, stats.avg_fitness, stats.min_fitness,
        )
        return stats

    def crossover(self, parent_a: torch.Tensor, parent_b: torch.Tensor) -> torch.Tensor:
        """
        Create one offspring chromosome.

        Genes are copied from either parent with equal probability, then
        each gene is mutated independently with probability
        ``mutation_rate`` by adding a standard normal offset.

        Raises:
            ValueError: If the parents' length differs from chromosome_length.
        """
        for parent in (parent_a, parent_b):
            if parent.numel() != self._chromosome_length:
                raise ValueError(
                    f"Parent length ({parent.numel()}) doesn't match "
                    f"chromosome length ({self._chromosome_length})"
                )

        child = self.crossover_operator.crossover(parent_a, parent_b)
        return self.mutator.mutate(child, in_place=True)

    def _compute_stats(self) -> GenerationStats:
        fitnesses = [ind.fitness for ind in self.individuals]
        mean = sum(fitnesses) / len(fitnesses)
        variance = sum((f - mean) ** 2 for f in fitnesses) / len(fitnesses)
        return GenerationStats(
            generation=self._generation_count,
            best_fitness=max(fitnesses),
            avg_fitness=mean,
            min_fitness=min(fitnesses),
            fitness_std=math.sqrt(variance),
        )

    # ------------------------------------------------------------------
    # Persistence

    def store_state(self, stream: TextIO) -> None:
        """
        Write parameters, counters and the whole population to a text stream.

        Layout (one value per line, then one chromosome line and one fitness
        line per individual):

            chromosome_length
            population_size
            selection_size
            mutation_rate
            generation_count
            individual_count
            gene_0 gene_1 ... gene_{L-1}
            fitness
            ...
        """
        stream.write(f'{self._chromosome_length}\n')
        stream.write(f'{self._population_size}\n')
        stream.write(f'{self._selection_size}\n')
        stream.write(f'{format_float(self._mutation_rate)}\n')
        stream.write(f'{self._generation_count}\n')
        stream.write(f'{self._individual_count}\n')
        for ind in self.individuals:
            stream.write(format_floats(ind.chromosome.tolist()) + '\n')
            stream.write(format_float(ind.fitness) + '\n')

    @classmethod
    def read_state(cls, stream: Union[TextIO, TokenReader]) -> PopulationState:
        """
        Parse and validate a state written by ``store_state``.

        Args:
            stream: Text stream or a TokenReader positioned at the state.

        Raises:
            ValueError: If a field is missing, malformed or inconsistent.
        """
        reader = as_reader(stream)

        chromosome_length = reader.read_int('ga.chromosome_length')
        population_size = reader.read_int('ga.population_size')
        selection_size = reader.read_int('ga.selection_size')
        mutation_rate = reader.read_float('ga.mutation_rate')
        generation_count = reader.read_int('ga.generation_count')
        individual_count = reader.read_int('ga.individual_count')

        if chromosome_length < 1:
            raise ValueError(f"Saved chromosome length must be at least 1, got {chromosome_length}")
        if population_size < 1:
            raise ValueError(f"Saved population size must be at least 1, got {population_size}")
        if not 1 <= selection_size <= population_size:
            raise ValueError(
                f"Saved selection size ({selection_size}) must be within "
                f"[1, {population_size}]"
            )
        if generation_count < 0:
            raise ValueError(f"Saved generation count must not be negative, got {generation_count}")
        if not 0 <= individual_count < population_size:
            raise ValueError(
                f"Saved individual count ({individual_count}) must be within "
                f"[0, {population_size - 1}]"
            )

        individuals = []
        for i in range(population_size):
            genes = reader.read_floats(chromosome_length, f'ga.population[{i}].chromosome')
            fitness = reader.read_float(f'ga.population[{i}].fitness')
            individuals.append(
                Individual(chromosome=torch.tensor(genes, dtype=DTYPE), fitness=fitness)
            )

        return PopulationState(
            chromosome_length=chromosome_length,
            selection_size=selection_size,
            mutation_rate=mutation_rate,
            generation_count=generation_count,
            individual_count=individual_count,
            individuals=individuals,
        )

    def apply_state(self, state: PopulationState) -> None:
        """
        Replace parameters, counters and population with a parsed state.

        The cursor is placed on the individual at index ``individual_count``
        so evaluation continues where it stopped.
        """
        self._chromosome_length = state.chromosome_length
        self._population_size = len(state.individuals)
        self._selection_size = state.selection_size
        self._mutation_rate = state.mutation_rate
        self._generation_count = state.generation_count
        self._individual_count = state.individual_count
        self.individuals = list(state.individuals)
        self._cursor = state.individual_count

        self.mutator.mutation_rate = state.mutation_rate
        self.selection.selection_size = state.selection_size

    def load_state(self, stream: Union[TextIO, TokenReader]) -> None:
        """
        Restore the state written by ``store_state``.

        Nothing changes when the state is invalid.

        Raises:
            ValueError: If a field is missing, malformed or inconsistent.
        """
        self.apply_state(self.read_state(stream))
