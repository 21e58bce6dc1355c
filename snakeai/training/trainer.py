"""
Headless training orchestration.

Plays snake rounds without any display, letting the neural player evolve
its MLP round after round. The save file is shared with interactive
sessions, so training can be resumed from either side.
"""
import logging
import random
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import torch

from .. import settings

logger = logging.getLogger(__name__)


@dataclass
class TrainingConfig:
    """Configuration for a training run."""

    # World settings
    grid_side_length: int = settings.GRID_SIDE_LENGTH
    max_idle_steps: int = settings.MAX_IDLE_STEPS

    # Network settings
    input_size: int = settings.SNAKE_MLP_INPUT_SIZE
    layer_sizes: List[int] = field(default_factory=lambda: list(settings.SNAKE_MLP_LAYER_SIZES))

    # Genetic algorithm parameters
    population_size: int = settings.GA_POPULATION_SIZE
    selection_size: int = settings.GA_SURVIVORS_CNT
    mutation_rate: float = settings.GA_MUTATION_RATE

    # Persistence
    save_path: str = settings.SAVE_STATE_FILE_PATH
    checkpoint_interval: int = settings.CHECKPOINT_INTERVAL
    resume: bool = True

    # Logging
    log_dir: Optional[str] = None
    experiment_name: str = 'training'

    seed: Optional[int] = None


@dataclass
class TrainingResult:
    """Results from a training run."""
    rounds_played: int = 0
    generations_completed: int = 0
    best_score: int = 0
    final_generation: int = 0
    final_individual: int = 0
    training_time_seconds: float = 0.0
    save_path: Optional[str] = None
    generation_history: List[Dict[str, Any]] = field(default_factory=list)


class Trainer:
    """
    High-level headless training interface.

    Example:
        config = TrainingConfig(population_size=200, selection_size=20)

        trainer = Trainer(config)
        result = trainer.train(rounds=10000)

        print(f"Best score: {result.best_score}")
    """

    def __init__(self, config: Optional[TrainingConfig] = None):
        self.config = config or TrainingConfig()
        self.network = None
        self.genetic_algorithm = None
        self.world = None
        self.player = None
        self.save_manager = None
        self.training_logger = None
        self.scores = None
        self.generator = None

    def setup(self) -> None:
        """
        Build the network, optimizer, world and player.

        When resuming and a save file exists, the topology, population and
        scores are restored from it, so the first round replays the
        individual that was on trial when the file was written.

        Raises:
            ValueError: If the save file is malformed.
        """
        from ..encoders import SnakeEncoder
        from ..evolution import EvolutionConfig, GeneticAlgorithm
        from ..game import SnakeWorld
        from ..networks import build_network, snake_mlp_architecture
        from ..players import NeuralPlayer
        from .checkpoints import SaveStateManager, ScoreRecord, TrainingLogger

        config = self.config

        self.generator = torch.Generator()
        if config.seed is not None:
            self.generator.manual_seed(config.seed)
        else:
            self.generator.seed()

        self.network = build_network(
            snake_mlp_architecture(config.input_size, config.layer_sizes),
            generator=self.generator,
        )
        evolution_config = EvolutionConfig(
            population_size=config.population_size,
            selection_size=config.selection_size,
            mutation_rate=config.mutation_rate,
        )
        self.genetic_algorithm = GeneticAlgorithm.from_config(
            self.network.weights_count, evolution_config, generator=self.generator
        )

        self.save_manager = SaveStateManager(config.save_path)
        scores = None
        if config.resume:
            scores = self.save_manager.load(self.network, self.genetic_algorithm)
            if scores is not None:
                self._warn_overridden(evolution_config)
        self.scores = scores or ScoreRecord()

        self.world = SnakeWorld(
            grid_side_length=config.grid_side_length,
            rng=random.Random(config.seed),
        )
        self.player = NeuralPlayer(
            network=self.network,
            genetic_algorithm=self.genetic_algorithm,
            encoder=SnakeEncoder(),
        )

        if config.log_dir:
            self.training_logger = TrainingLogger(
                log_dir=config.log_dir,
                experiment_name=config.experiment_name,
            )
            self.training_logger.load()

    def _warn_overridden(self, requested) -> None:
        """Log the requested settings that the save file replaced."""
        ga = self.genetic_algorithm
        config = self.config
        loaded = {
            'population_size': ga.population_size,
            'selection_size': ga.selection_size,
            'mutation_rate': ga.mutation_rate,
            'input_size': self.network.input_size,
            'layer_sizes': list(self.network.layer_sizes),
        }
        wanted = {
            'population_size': requested.population_size,
            'selection_size': requested.selection_size,
            'mutation_rate': requested.mutation_rate,
            'input_size': config.input_size,
            'layer_sizes': list(config.layer_sizes),
        }
        for name, value in loaded.items():
            if value != wanted[name]:
                logger.warning(
                    "Using %s=%s from %s instead of requested %s",
                    name, value, self.save_manager.path, wanted[name],
                )

    def play_round(self) -> int:
        """
        Play one headless round with the individual on trial.

        The round ends when the snake collides or after ``max_idle_steps``
        steps without eating.

        Returns:
            The round's score.
        """
        if self.player is None:
            self.setup()

        world = self.world
        world.reset()
        self.player.on_game_start(world)

        while world.alive and world.steps_since_food < self.config.max_idle_steps:
            action = self.player.select_action(world)
            world.step(action.apply_to(world.heading))

        score = world.score
        self.player.on_game_end(world, score)
        if self.scores.update_ai(score):
            logger.info("New AI record: %d", score)
        return score

    def save(self) -> Path:
        """Write the current state to the save file."""
        return self.save_manager.save(self.network, self.genetic_algorithm, self.scores)

    def train(
        self,
        rounds: int,
        progress_callback: Optional[Callable[[int, Dict], None]] = None,
    ) -> TrainingResult:
        """
        Run the training loop.

        Args:
            rounds: Number of rounds to play.
            progress_callback: Called with (round_num, stats) after each
                completed generation.

        Returns:
            Training results.
        """
        if self.player is None:
            self.setup()

        start_time = time.time()
        result = TrainingResult()
        seen_generations = len(self.genetic_algorithm.stats_history)

        logger.info(
            "Training for %d rounds from generation %d, individual %d",
            rounds, self.genetic_algorithm.generation_count, self.genetic_algorithm.individual_count,
        )

        for round_num in range(1, rounds + 1):
            score = self.play_round()
            result.rounds_played += 1
            result.best_score = max(result.best_score, score)

            # A graded round may have closed a generation
            history = self.genetic_algorithm.stats_history
            for stats in history[seen_generations:]:
                result.generations_completed += 1
                entry = {
                    'generation': stats.generation,
                    'best_fitness': stats.best_fitness,
                    'avg_fitness': stats.avg_fitness,
                    'min_fitness': stats.min_fitness,
                }
                result.generation_history.append(entry)

                if self.training_logger:
                    self.training_logger.log_generation(stats)
                if progress_callback:
                    progress_callback(round_num, entry)
            seen_generations = len(history)

            interval = self.config.checkpoint_interval
            if interval > 0 and round_num % interval == 0 and round_num < rounds:
                self.save()

        result.save_path = str(self.save())
        result.final_generation = self.genetic_algorithm.generation_count
        result.final_individual = self.genetic_algorithm.individual_count
        result.training_time_seconds = time.time() - start_time

        logger.info(
            "Training finished: %d rounds, %d generations, best score %d",
            result.rounds_played, result.generations_completed, result.best_score,
        )
        return result
