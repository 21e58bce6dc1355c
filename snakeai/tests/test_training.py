"""
Tests for training infrastructure.

Tests:
- Save-state file format and recovery
- Training logger
- Headless trainer, checkpointing and resuming
"""
import json
import logging

import pytest
import torch

from snakeai.evolution import GenerationStats, GeneticAlgorithm
from snakeai.networks import MLP
from snakeai.tests.factories import GeneticAlgorithmFactory, TinyMLPFactory
from snakeai.training import (
    SaveStateManager,
    ScoreRecord,
    Trainer,
    TrainingConfig,
    TrainingLogger,
)


class TestScoreRecord:
    """Tests for ScoreRecord."""

    def test_defaults(self):
        scores = ScoreRecord()
        assert scores.max_score_player == 0
        assert scores.max_score_ai == 0

    def test_update_keeps_maximum(self):
        """Test that only new records are kept."""
        scores = ScoreRecord()

        assert scores.update_ai(5)
        assert not scores.update_ai(3)
        assert not scores.update_ai(5)

        assert scores.max_score_ai == 5
        assert scores.max_score_player == 0


class TestSaveStateManager:
    """Tests for SaveStateManager."""

    @pytest.fixture
    def manager(self, save_path):
        return SaveStateManager(save_path)

    def test_load_missing_file(self, manager, network, genetic_algorithm):
        """Test that a missing save file means a fresh start."""
        assert manager.load(network, genetic_algorithm) is None
        assert genetic_algorithm.generation_count == 0

    def test_save_creates_directories(self, manager, network, genetic_algorithm):
        """Test that saving creates the parent directory."""
        path = manager.save(network, genetic_algorithm, ScoreRecord(3, 7))

        assert path.exists()
        assert manager.exists()

    def test_file_layout(self, manager, network, genetic_algorithm):
        """Test the leading lines of the save file."""
        manager.save(network, genetic_algorithm, ScoreRecord(3, 7))

        lines = manager.path.read_text().splitlines()

        assert lines[:11] == ['3', '7', '5', '3', '5 5 3', '78', '10', '3', '0.02', '0', '0']
        assert len(lines) == 11 + 2 * 10
        assert len(lines[11].split()) == 78

    def test_round_trip(self, manager, network, genetic_algorithm):
        """Test that scores, topology and population are restored."""
        for score in [2.0, 1.0, 3.0]:
            genetic_algorithm.grade_current_fitness(score)
        manager.save(network, genetic_algorithm, ScoreRecord(max_score_player=4, max_score_ai=9))

        loaded_network = TinyMLPFactory()
        loaded_ga = GeneticAlgorithm(chromosome_length=1, population_size=1, selection_size=1)
        scores = manager.load(loaded_network, loaded_ga)

        assert scores == ScoreRecord(max_score_player=4, max_score_ai=9)
        assert loaded_network.input_size == 5
        assert list(loaded_network.layer_sizes) == [5, 5, 3]
        assert loaded_ga.chromosome_length == loaded_network.weights_count
        assert loaded_ga.individual_count == 3
        assert torch.equal(loaded_ga.current_individual(), genetic_algorithm.current_individual())
        for original, loaded in zip(genetic_algorithm.population, loaded_ga.population):
            assert torch.equal(original.chromosome, loaded.chromosome)
            assert original.fitness == loaded.fitness

    def test_truncated_file(self, manager, network, genetic_algorithm):
        """Test that a truncated save file is rejected and nothing is restored."""
        manager.save(network, genetic_algorithm)
        lines = manager.path.read_text().splitlines()
        manager.path.write_text('\n'.join(lines[:20]) + '\n')

        target_network = TinyMLPFactory()
        target_ga = GeneticAlgorithmFactory(chromosome_length=target_network.weights_count)
        target_ga.grade_current_fitness(4.0)
        before = snapshot(target_network, target_ga)

        with pytest.raises(ValueError, match='end of data'):
            manager.load(target_network, target_ga)

        assert_unchanged(before, target_network, target_ga)

    def test_mismatched_chromosome_length(self, manager):
        """Test that a population that doesn't fit the network is rejected."""
        network = MLP(5, [5, 5, 3])
        ga = GeneticAlgorithmFactory(chromosome_length=3, population_size=2, selection_size=1)
        manager.save(network, ga)

        with pytest.raises(ValueError, match=r"chromosome length \(3\) doesn't match network weight count \(78\)"):
            manager.load(TinyMLPFactory(), GeneticAlgorithmFactory(chromosome_length=1))

    def test_mismatched_load_leaves_objects_unchanged(self, manager):
        """Test that a valid topology isn't applied when the population doesn't fit it."""
        manager.save(
            MLP(5, [5, 5, 3]),
            GeneticAlgorithmFactory(chromosome_length=3, population_size=2, selection_size=1),
        )

        target_network = TinyMLPFactory()
        target_ga = GeneticAlgorithmFactory(chromosome_length=target_network.weights_count)
        for score in [1.0, 2.0]:
            target_ga.grade_current_fitness(score)
        before = snapshot(target_network, target_ga)

        with pytest.raises(ValueError):
            manager.load(target_network, target_ga)

        assert_unchanged(before, target_network, target_ga)

    def test_invalid_population_leaves_network_unchanged(self, manager, network, genetic_algorithm):
        """Test that a bad optimizer section doesn't leak the parsed topology."""
        manager.save(network, genetic_algorithm)
        lines = manager.path.read_text().splitlines()
        lines[7] = '11'  # selection size larger than the population
        manager.path.write_text('\n'.join(lines) + '\n')

        target_network = TinyMLPFactory()
        target_ga = GeneticAlgorithmFactory(chromosome_length=target_network.weights_count)
        before = snapshot(target_network, target_ga)

        with pytest.raises(ValueError, match='selection size'):
            manager.load(target_network, target_ga)

        assert_unchanged(before, target_network, target_ga)

    def test_read_summary(self, manager, network, genetic_algorithm):
        """Test reading counters without a network."""
        genetic_algorithm.grade_current_fitness(1.0)
        manager.save(network, genetic_algorithm, ScoreRecord(1, 2))

        summary = manager.read_summary()

        assert summary['max_score_player'] == 1
        assert summary['max_score_ai'] == 2
        assert summary['layer_sizes'] == [5, 5, 3]
        assert summary['population_size'] == 10
        assert summary['generation_count'] == 0
        assert summary['individual_count'] == 1

    def test_read_summary_missing_file(self, manager):
        assert manager.read_summary() is None


class TestTrainingLogger:
    """Tests for TrainingLogger."""

    def test_log_generation_writes_jsonl(self, tmp_path):
        """Test that each generation is one JSON line with every statistic."""
        training_logger = TrainingLogger(log_dir=tmp_path / 'logs', experiment_name='run')

        training_logger.log_generation(GenerationStats(0, 3.0, 1.5, 0.0, 1.0))
        training_logger.log_generation(GenerationStats(1, 5.0, 2.5, 1.0, 1.5))

        lines = (tmp_path / 'logs' / 'run.jsonl').read_text().splitlines()
        assert len(lines) == 2
        entry = json.loads(lines[1])
        assert entry['generation'] == 1
        assert entry['best_fitness'] == 5.0
        assert entry['fitness_std'] == 1.5
        assert 'logged_at' in entry
        assert [stats.generation for stats in training_logger.history] == [0, 1]

    def test_log_generation_from_optimizer(self, tmp_path):
        """Test logging the statistics of an evaluated generation."""
        ga = GeneticAlgorithmFactory(chromosome_length=2, population_size=2, selection_size=1)
        ga.grade_current_fitness(1.0)
        ga.grade_current_fitness(3.0)
        training_logger = TrainingLogger(log_dir=tmp_path)

        training_logger.log_generation(ga.stats_history[0])

        assert training_logger.history == [ga.stats_history[0]]
        assert training_logger.fitness_history('avg_fitness') == ([0], [2.0])

    def test_load_restores_generation_stats(self, tmp_path):
        """Test that a new logger reads back what earlier runs appended."""
        TrainingLogger(log_dir=tmp_path).log_generation(GenerationStats(0, 3.0, 1.0, 0.0, 1.0))
        TrainingLogger(log_dir=tmp_path).log_generation(GenerationStats(1, 5.0, 2.0, 0.0, 2.0))

        training_logger = TrainingLogger(log_dir=tmp_path)
        history = training_logger.load()

        assert history == [
            GenerationStats(0, 3.0, 1.0, 0.0, 1.0),
            GenerationStats(1, 5.0, 2.0, 0.0, 2.0),
        ]
        assert training_logger.fitness_history() == ([0, 1], [3.0, 5.0])
        assert training_logger.fitness_history('fitness_std') == ([0, 1], [1.0, 2.0])

    def test_load_missing_file(self, tmp_path):
        assert TrainingLogger(log_dir=tmp_path).load() == []

    def test_load_malformed_line(self, tmp_path):
        """Test that a line without generation statistics is rejected."""
        (tmp_path / 'training.jsonl').write_text(
            json.dumps({'generation': 0, 'best_fitness': 1.0}) + '\n'
        )

        with pytest.raises(ValueError, match=r'training.jsonl:1'):
            TrainingLogger(log_dir=tmp_path).load()

    def test_unknown_fitness_field(self, tmp_path):
        with pytest.raises(ValueError, match='Unknown fitness field'):
            TrainingLogger(log_dir=tmp_path).fitness_history('generation')

    def test_summary(self, tmp_path):
        """Test the best and average fitness summary."""
        training_logger = TrainingLogger(log_dir=tmp_path, experiment_name='run')
        training_logger.log_generation(GenerationStats(0, 4.0, 1.0, 0.0, 1.0))
        training_logger.log_generation(GenerationStats(1, 9.0, 2.0, 0.0, 3.0))
        training_logger.log_generation(GenerationStats(2, 6.0, 6.0, 6.0, 0.0))

        summary = training_logger.summary()

        assert summary == {
            'experiment_name': 'run',
            'generations': 3,
            'last_generation': 2,
            'best_fitness': 9.0,
            'best_generation': 1,
            'last_avg_fitness': 6.0,
            'mean_avg_fitness': 3.0,
        }

    def test_empty_summary(self, tmp_path):
        assert TrainingLogger(log_dir=tmp_path).summary() == {}


class TestTrainer:
    """Tests for Trainer."""

    def test_setup(self, training_config):
        """Test that setup builds matching components."""
        trainer = Trainer(training_config)
        trainer.setup()

        assert trainer.network.weights_count == weights_for(training_config)
        assert trainer.genetic_algorithm.chromosome_length == trainer.network.weights_count
        assert trainer.genetic_algorithm.population_size == 4
        assert trainer.world.grid_side_length == 7
        assert trainer.scores == ScoreRecord()

    def test_play_round(self, training_config):
        """Test that a round grades one individual."""
        trainer = Trainer(training_config)

        score = trainer.play_round()

        assert score >= 0
        assert trainer.genetic_algorithm.individual_count == 1
        assert not trainer.world.alive or trainer.world.steps_since_food >= 20

    def test_train(self, training_config, save_path):
        """Test a short run across generations."""
        progress = []
        trainer = Trainer(training_config)

        result = trainer.train(rounds=10, progress_callback=lambda n, s: progress.append(n))

        assert result.rounds_played == 10
        assert result.generations_completed == 2
        assert result.final_generation == 2
        assert result.final_individual == 2
        assert progress == [4, 8]
        assert [entry['generation'] for entry in result.generation_history] == [0, 1]
        assert result.save_path == str(save_path)
        assert save_path.exists()
        assert trainer.scores.max_score_ai == result.best_score

    def test_train_resumes_from_save_file(self, training_config):
        """Test that a new trainer continues with the individual on trial."""
        first = Trainer(training_config)
        first.train(rounds=6)

        second = Trainer(training_config)
        second.setup()

        assert second.genetic_algorithm.generation_count == 1
        assert second.genetic_algorithm.individual_count == 2
        assert torch.equal(
            second.genetic_algorithm.current_individual(),
            first.genetic_algorithm.current_individual(),
        )
        assert torch.equal(
            second.network.get_weights_vector(),
            first.genetic_algorithm.current_individual(),
        )
        assert second.scores.max_score_ai == first.scores.max_score_ai

    def test_fresh_start_ignores_save_file(self, training_config):
        """Test that resume=False starts from generation 0."""
        Trainer(training_config).train(rounds=6)
        training_config.resume = False

        trainer = Trainer(training_config)
        trainer.setup()

        assert trainer.genetic_algorithm.generation_count == 0
        assert trainer.genetic_algorithm.individual_count == 0

    def test_generation_log(self, training_config, tmp_path):
        """Test that finished generations are written to the training log."""
        training_config.log_dir = str(tmp_path / 'logs')

        Trainer(training_config).train(rounds=8)

        lines = (tmp_path / 'logs' / 'training.jsonl').read_text().splitlines()
        assert [json.loads(line)['generation'] for line in lines] == [0, 1]

    def test_resume_warns_about_overridden_settings(self, training_config, caplog, monkeypatch):
        """Test that saved optimizer settings replace requested ones with a warning."""
        monkeypatch.setattr(logging.getLogger('snakeai'), 'propagate', True)
        Trainer(training_config).train(rounds=2)
        training_config.population_size = 6
        training_config.mutation_rate = 0.3

        trainer = Trainer(training_config)
        with caplog.at_level(logging.WARNING, logger='snakeai'):
            trainer.setup()

        assert trainer.genetic_algorithm.population_size == 4
        assert trainer.genetic_algorithm.mutation_rate == 0.1
        messages = [record.getMessage() for record in caplog.records]
        assert any(message.startswith('Using population_size=4 from') for message in messages)
        assert any(message.startswith('Using mutation_rate=0.1 from') for message in messages)
        assert not any('selection_size' in message for message in messages)

    def test_resume_with_matching_settings_is_silent(self, training_config, caplog, monkeypatch):
        monkeypatch.setattr(logging.getLogger('snakeai'), 'propagate', True)
        Trainer(training_config).train(rounds=2)

        with caplog.at_level(logging.WARNING, logger='snakeai'):
            Trainer(training_config).setup()

        assert not [record for record in caplog.records if record.levelno >= logging.WARNING]

    def test_default_config(self):
        """Test that defaults describe the standard snake network."""
        config = TrainingConfig()
        assert config.input_size == 5
        assert config.layer_sizes[-1] == 3


def weights_for(config):
    count = 0
    num_cols = config.input_size + 1
    for size in config.layer_sizes:
        count += size * num_cols
        num_cols = size + 1
    return count


def snapshot(network, ga):
    return {
        'input_size': network.input_size,
        'layer_sizes': list(network.layer_sizes),
        'weights': network.get_weights_vector(),
        'ga': (
            ga.chromosome_length,
            ga.population_size,
            ga.selection_size,
            ga.mutation_rate,
            ga.generation_count,
            ga.individual_count,
            ga.cursor,
        ),
        'chromosomes': [ind.chromosome.clone() for ind in ga.population],
        'fitness': [ind.fitness for ind in ga.population],
    }


def assert_unchanged(before, network, ga):
    after = snapshot(network, ga)
    assert after['input_size'] == before['input_size']
    assert after['layer_sizes'] == before['layer_sizes']
    assert torch.equal(after['weights'], before['weights'])
    assert after['ga'] == before['ga']
    assert after['fitness'] == before['fitness']
    assert all(torch.equal(a, b) for a, b in zip(after['chromosomes'], before['chromosomes']))
    assert len(after['chromosomes']) == len(before['chromosomes'])
