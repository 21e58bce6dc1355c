"""
Save-state management for training sessions.

Save and load the full training state:
- Best scores of the player and of the AI
- Network topology (weights are re-randomized on load)
- Genetic algorithm parameters, counters and population

Saved state enables resuming evolution with the very individual that
was on trial when the game was closed.

File layout (plain text, whitespace/newline separated):

    <max_score_player>
    <max_score_ai>
    <mlp.input_size>
    <mlp.layer_count>
    <layer_size_0> ... <layer_size_{n-1}>
    <ga.chromosome_length>
    <ga.population_size>
    <ga.selection_size>
    <ga.mutation_rate>
    <ga.generation_count>
    <ga.individual_count>
    <chromosome_0 gene_0> ... <gene_{L-1}>
    <fitness_0>
    ...
"""
import json
import logging
from dataclasses import asdict, dataclass, fields
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple, Union

from ..evolution.population import GenerationStats
from ..networks import weights_count_for
from ..serialization import TokenReader

if TYPE_CHECKING:
    from ..evolution.population import GeneticAlgorithm
    from ..networks.mlp import MLP

logger = logging.getLogger(__name__)


@dataclass
class ScoreRecord:
    """Best scores achieved so far."""
    max_score_player: int = 0
    max_score_ai: int = 0

    def update_ai(self, score: int) -> bool:
        """Record an AI score; returns True on a new record."""
        if score > self.max_score_ai:
            self.max_score_ai = int(score)
            return True
        return False


class SaveStateManager:
    """
    Read and write the training save file.

    Attributes:
        path: Location of the save file.

    Example:
        manager = SaveStateManager('save/save_state.txt')

        scores = manager.load(mlp, ga) or ScoreRecord()
        ...
        manager.save(mlp, ga, scores)
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def save(
        self,
        network: 'MLP',
        genetic_algorithm: 'GeneticAlgorithm',
        scores: Optional[ScoreRecord] = None,
    ) -> Path:
        """
        Write the save file, creating parent directories as needed.

        Args:
            network: The snake's MLP (only its topology is stored).
            genetic_algorithm: The optimizer to store.
            scores: Best scores (zeros if omitted).

        Returns:
            Path to the saved file.

        Raises:
            OSError: If the file cannot be written.
        """
        scores = scores or ScoreRecord()

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w') as f:
            f.write(f'{scores.max_score_player}\n')
            f.write(f'{scores.max_score_ai}\n')
            network.store_config(f)
            genetic_algorithm.store_state(f)

        logger.info(
            "Saved state to %s (generation %d, individual %d)",
            self.path, genetic_algorithm.generation_count, genetic_algorithm.individual_count,
        )
        return self.path

    def load(
        self,
        network: 'MLP',
        genetic_algorithm: 'GeneticAlgorithm',
    ) -> Optional[ScoreRecord]:
        """
        Restore network topology and optimizer state from the save file.

        The whole file is parsed and checked before either object is
        touched, so a rejected file leaves both as they were.

        Args:
            network: MLP whose topology is replaced (and re-randomized).
            genetic_algorithm: Optimizer whose state is replaced.

        Returns:
            The saved scores, or None if there is no save file.

        Raises:
            ValueError: If the file is malformed or the chromosome length
                doesn't match the saved network's weight count.
        """
        if not self.path.exists():
            logger.info("No saved state at %s, starting fresh", self.path)
            return None

        with open(self.path, 'r') as f:
            reader = TokenReader(f)
            scores = ScoreRecord(
                max_score_player=reader.read_int('max_score_player'),
                max_score_ai=reader.read_int('max_score_ai'),
            )
            input_size, layer_sizes = network.read_config(reader)
            state = genetic_algorithm.read_state(reader)

        weights_count = weights_count_for(input_size, layer_sizes)
        if state.chromosome_length != weights_count:
            raise ValueError(
                f"Saved chromosome length ({state.chromosome_length}) "
                f"doesn't match network weight count ({weights_count})"
            )

        network.set_topology(input_size, layer_sizes)
        genetic_algorithm.apply_state(state)

        logger.info(
            "Loaded state from %s (generation %d, individual %d)",
            self.path, genetic_algorithm.generation_count, genetic_algorithm.individual_count,
        )
        return scores

    def read_summary(self) -> Optional[Dict[str, Any]]:
        """
        Read the scores and optimizer counters without building a network.

        Returns:
            Dictionary with scores, topology and counters, or None if
            there is no save file.
        """
        if not self.path.exists():
            return None

        with open(self.path, 'r') as f:
            reader = TokenReader(f)
            summary: Dict[str, Any] = {
                'max_score_player': reader.read_int('max_score_player'),
                'max_score_ai': reader.read_int('max_score_ai'),
                'input_size': reader.read_int('mlp.input_size'),
            }
            layer_count = reader.read_int('mlp.layer_count')
            summary['layer_sizes'] = [
                reader.read_int(f'mlp.layer_sizes[{i}]') for i in range(layer_count)
            ]
            summary['chromosome_length'] = reader.read_int('ga.chromosome_length')
            summary['population_size'] = reader.read_int('ga.population_size')
            summary['selection_size'] = reader.read_int('ga.selection_size')
            summary['mutation_rate'] = reader.read_float('ga.mutation_rate')
            summary['generation_count'] = reader.read_int('ga.generation_count')
            summary['individual_count'] = reader.read_int('ga.individual_count')

        return summary


class TrainingLogger:
    """
    JSON-lines history of evaluated generations.

    Each ``GenerationStats`` becomes one line of
    ``<log_dir>/<experiment_name>.jsonl``. Lines are appended, so a resumed
    run extends the history of the runs before it.

    Example:
        training_logger = TrainingLogger('logs')
        training_logger.load()
        training_logger.log_generation(ga.stats_history[-1])

        generations, best = training_logger.fitness_history('best_fitness')
    """

    FITNESS_FIELDS = ('best_fitness', 'avg_fitness', 'min_fitness', 'fitness_std')

    def __init__(
        self,
        log_dir: Union[str, Path],
        experiment_name: str = 'training',
    ):
        self.log_dir = Path(log_dir)
        self.experiment_name = experiment_name
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.log_file = self.log_dir / f'{experiment_name}.jsonl'
        self.history: List[GenerationStats] = []

    def log_generation(self, stats: GenerationStats) -> None:
        """Append a generation to the history and to the log file."""
        entry = asdict(stats)
        entry['logged_at'] = datetime.now().isoformat(timespec='seconds')

        self.history.append(stats)
        with open(self.log_file, 'a') as f:
            f.write(json.dumps(entry) + '\n')

    def load(self) -> List[GenerationStats]:
        """
        Replace the in-memory history with the content of the log file.

        Raises:
            ValueError: If a line isn't a generation entry.
        """
        self.history = []
        if not self.log_file.exists():
            return self.history

        names = [f.name for f in fields(GenerationStats)]
        with open(self.log_file, 'r') as f:
            for line_number, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    entry = json.loads(line)
                    stats = GenerationStats(**{name: entry[name] for name in names})
                except (json.JSONDecodeError, KeyError, TypeError) as e:
                    raise ValueError(
                        f"Malformed generation entry at {self.log_file}:{line_number}"
                    ) from e
                self.history.append(stats)

        return self.history

    def fitness_history(self, field: str = 'best_fitness') -> Tuple[List[int], List[float]]:
        """
        Return one fitness statistic over the logged generations.

        Returns:
            Tuple of (generations, values).

        Raises:
            ValueError: If ``field`` isn't one of ``FITNESS_FIELDS``.
        """
        if field not in self.FITNESS_FIELDS:
            raise ValueError(
                f"Unknown fitness field '{field}', expected one of {self.FITNESS_FIELDS}"
            )
        return (
            [stats.generation for stats in self.history],
            [getattr(stats, field) for stats in self.history],
        )

    def summary(self) -> Dict[str, Any]:
        """Best and average fitness across the logged generations."""
        if not self.history:
            return {}

        best = max(self.history, key=lambda stats: stats.best_fitness)
        averages = [stats.avg_fitness for stats in self.history]

        return {
            'experiment_name': self.experiment_name,
            'generations': len(self.history),
            'last_generation': self.history[-1].generation,
            'best_fitness': best.best_fitness,
            'best_generation': best.generation,
            'last_avg_fitness': averages[-1],
            'mean_avg_fitness': sum(averages) / len(averages),
        }
