"""
Command line entry point.

Usage:
    python -m snakeai train [--rounds 10000] [--save-path save/save_state.txt]
    python -m snakeai status [--save-path save/save_state.txt] [--log-dir logs]

``train`` evolves the snake's network headlessly and writes the save file
that interactive sessions share. ``status`` prints what a save file holds.
"""
import argparse
import logging
import logging.config
import sys
from typing import List, Optional

from . import settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='snakeai',
        description='Evolve a neural network that plays snake',
    )
    subparsers = parser.add_subparsers(dest='command')
    subparsers.required = True

    train = subparsers.add_parser('train', help='Train the snake headlessly')
    train.add_argument(
        '--rounds',
        type=int,
        default=10000,
        help='Number of rounds to play (default: 10000)',
    )
    train.add_argument(
        '--save-path',
        type=str,
        default=settings.SAVE_STATE_FILE_PATH,
        help='Save file to resume from and write to',
    )
    train.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Random seed for reproducible runs',
    )
    train.add_argument(
        '--population-size',
        type=int,
        default=settings.GA_POPULATION_SIZE,
        help=f'Individuals per generation, ignored when resuming from a save file (default: {settings.GA_POPULATION_SIZE})',
    )
    train.add_argument(
        '--selection-size',
        type=int,
        default=settings.GA_SURVIVORS_CNT,
        help=f'Survivors per generation, ignored when resuming from a save file (default: {settings.GA_SURVIVORS_CNT})',
    )
    train.add_argument(
        '--mutation-rate',
        type=float,
        default=settings.GA_MUTATION_RATE,
        help=f'Per-gene mutation probability, ignored when resuming from a save file (default: {settings.GA_MUTATION_RATE})',
    )
    train.add_argument(
        '--checkpoint-interval',
        type=int,
        default=settings.CHECKPOINT_INTERVAL,
        help=f'Rounds between saves (default: {settings.CHECKPOINT_INTERVAL})',
    )
    train.add_argument(
        '--fresh',
        action='store_true',
        help='Ignore any existing save file',
    )
    train.add_argument(
        '--log-dir',
        type=str,
        default=None,
        help='Directory for the JSON-lines generation log',
    )
    train.add_argument(
        '--log-level',
        type=str,
        default=settings.LOG_LEVEL,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help=f'Console log level (default: {settings.LOG_LEVEL})',
    )

    status = subparsers.add_parser('status', help='Show the contents of a save file')
    status.add_argument(
        '--save-path',
        type=str,
        default=settings.SAVE_STATE_FILE_PATH,
        help='Save file to inspect',
    )
    status.add_argument(
        '--log-dir',
        type=str,
        default=None,
        help='Also summarize the generation log in this directory',
    )
    status.add_argument(
        '--experiment-name',
        type=str,
        default='training',
        help='Name of the generation log file (default: training)',
    )

    return parser


def configure_logging(level: Optional[str] = None) -> None:
    config = dict(settings.LOGGING)
    if level:
        loggers = {name: dict(logger) for name, logger in config['loggers'].items()}
        loggers['snakeai']['level'] = level
        config['loggers'] = loggers
    logging.config.dictConfig(config)


def handle_train(args: argparse.Namespace) -> int:
    from .training import Trainer, TrainingConfig

    if args.rounds < 1:
        raise ValueError(f"--rounds must be at least 1, got {args.rounds}")
    if not 0.0 <= args.mutation_rate <= 1.0:
        raise ValueError(f"--mutation-rate must be within [0, 1], got {args.mutation_rate}")

    config = TrainingConfig(
        population_size=args.population_size,
        selection_size=args.selection_size,
        mutation_rate=args.mutation_rate,
        save_path=args.save_path,
        checkpoint_interval=args.checkpoint_interval,
        resume=not args.fresh,
        log_dir=args.log_dir,
        seed=args.seed,
    )

    trainer = Trainer(config)
    trainer.setup()

    print(
        f"Training for {args.rounds} rounds from generation "
        f"{trainer.genetic_algorithm.generation_count}, "
        f"individual {trainer.genetic_algorithm.individual_count}"
    )

    def progress(round_num, stats):
        print(
            f"  Round {round_num}: generation {stats['generation']} "
            f"best={stats['best_fitness']:.0f} avg={stats['avg_fitness']:.2f}"
        )

    result = trainer.train(rounds=args.rounds, progress_callback=progress)

    print(
        f"\nTraining completed!"
        f"\n  Rounds played: {result.rounds_played}"
        f"\n  Generations completed: {result.generations_completed}"
        f"\n  Best score: {result.best_score}"
        f"\n  Now at generation {result.final_generation}, individual {result.final_individual}"
        f"\n  Saved to: {result.save_path}"
    )
    return 0


def handle_status(args: argparse.Namespace) -> int:
    from .training import SaveStateManager

    summary = SaveStateManager(args.save_path).read_summary()
    if summary is None:
        print(f"No saved state at {args.save_path}")
    else:
        print_save_summary(args.save_path, summary)

    if args.log_dir:
        print_log_summary(args.log_dir, args.experiment_name)
    return 0


def print_log_summary(log_dir: str, experiment_name: str, recent: int = 5) -> None:
    from .training import TrainingLogger

    training_logger = TrainingLogger(log_dir, experiment_name=experiment_name)
    training_logger.load()
    summary = training_logger.summary()
    if not summary:
        print(f"No generations logged in {training_logger.log_file}")
        return

    generations, best = training_logger.fitness_history('best_fitness')
    trend = ', '.join(
        f'{generation}:{value:.0f}'
        for generation, value in zip(generations[-recent:], best[-recent:])
    )
    print(
        f"Generation log: {training_logger.log_file}"
        f"\n  Generations logged: {summary['generations']} (last {summary['last_generation']})"
        f"\n  Best fitness: {summary['best_fitness']:.0f} (generation {summary['best_generation']})"
        f"\n  Average fitness: last {summary['last_avg_fitness']:.2f}, "
        f"mean {summary['mean_avg_fitness']:.2f}"
        f"\n  Recent best: {trend}"
    )


def print_save_summary(save_path: str, summary: dict) -> None:
    print(
        f"Save file: {save_path}"
        f"\n  Max score (player): {summary['max_score_player']}"
        f"\n  Max score (AI): {summary['max_score_ai']}"
        f"\n  Network: {summary['input_size']} inputs, layers {summary['layer_sizes']}"
        f"\n  Population: {summary['population_size']} "
        f"(survivors {summary['selection_size']}, mutation rate {summary['mutation_rate']})"
        f"\n  Generation: {summary['generation_count']}"
        f"\n  Individual: {summary['individual_count']}"
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(getattr(args, 'log_level', None))

    handlers = {
        'train': handle_train,
        'status': handle_status,
    }

    try:
        return handlers[args.command](args)
    except ValueError as e:
        parser.error(str(e))
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
