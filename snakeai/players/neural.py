"""
Neural network player implementation.

The auto-mode snake: its moves come from an MLP whose weights are the
chromosome currently on trial in the genetic algorithm. Each finished
round grades that chromosome and binds the next one.
"""
import logging
from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence

from .base import Action, BasePlayer

if TYPE_CHECKING:
    from ..encoders.base import BaseEncoder
    from ..evolution.population import GeneticAlgorithm
    from ..game.world import SnakeWorld
    from ..networks.mlp import MLP

logger = logging.getLogger(__name__)


def action_from_output(output: Sequence[float]) -> Action:
    """
    Pick the move with the highest network output.

    Outputs are ordered (turn left, go straight, turn right). On exact
    ties, going straight wins over turning right, which wins over
    turning left.
    """
    left, straight, right = (float(value) for value in output)

    if straight >= left and straight >= right:
        return Action.GO_STRAIGHT
    elif right >= left:
        return Action.TURN_RIGHT
    else:
        return Action.TURN_LEFT


class NeuralPlayer(BasePlayer):
    """
    A player driven by an evolving MLP.

    Attributes:
        network: The MLP deciding the moves.
        genetic_algorithm: Optimizer owning the population of weight vectors.
        encoder: Sensor encoder matching the network input.
        learning: False if the current round must not be graded (e.g. the
            player took manual control at some point).

    Example:
        mlp = MLP(5, [5, 5, 3])
        ga = GeneticAlgorithm(mlp.weights_count, 1000, 50, 0.02)
        player = NeuralPlayer(network=mlp, genetic_algorithm=ga)

        player.on_game_start(world)
        while world.alive:
            world.step(player.select_action(world).apply_to(world.heading))
        player.on_game_end(world, world.score)
    """

    def __init__(
        self,
        network: 'MLP',
        genetic_algorithm: 'GeneticAlgorithm',
        encoder: Optional['BaseEncoder'] = None,
        name: Optional[str] = None,
    ):
        """
        Initialize the player and bind the current individual's weights.

        Args:
            network: MLP with 3 outputs.
            genetic_algorithm: Optimizer whose chromosome length equals the
                network's weight count.
            encoder: Sensor encoder (defaults to SnakeEncoder).
            name: Optional display name.

        Raises:
            ValueError: If the network and optimizer sizes don't match.
        """
        if encoder is None:
            from ..encoders import SnakeEncoder
            encoder = SnakeEncoder()

        if network.weights_count != genetic_algorithm.chromosome_length:
            raise ValueError(
                f"Network weight count ({network.weights_count}) doesn't match "
                f"chromosome length ({genetic_algorithm.chromosome_length})"
            )
        if network.input_size != encoder.input_size:
            raise ValueError(
                f"Network input size ({network.input_size}) doesn't match "
                f"encoder size ({encoder.input_size})"
            )

        super().__init__(name=name or 'Neural Snake')
        self.network = network
        self.genetic_algorithm = genetic_algorithm
        self.encoder = encoder
        self.learning = True

        self.bind_current_individual()

    def bind_current_individual(self) -> None:
        """Load the weights of the individual on trial into the network."""
        self.network.set_weights(self.genetic_algorithm.current_individual())

    def on_game_start(self, world: 'SnakeWorld') -> None:
        self.learning = True
        self.bind_current_individual()

    def select_action(self, world: 'SnakeWorld') -> Action:
        """
        Run the network on the snake's sensors and pick a move.

        Args:
            world: Current world state.

        Returns:
            The chosen relative move.
        """
        features = self.encoder.encode_tensor(world)
        output = self.network(features)
        return action_from_output(output.tolist())

    def disable_learning(self) -> None:
        """Exclude the current round from evolution."""
        self.learning = False

    def on_game_end(self, world: 'SnakeWorld', score: float) -> None:
        """
        Grade the individual on trial and bind the next one.

        Rounds played with learning disabled are not graded; the same
        individual is tried again.
        """
        if self.learning:
            logger.debug(
                "Generation %d individual %d scored %s",
                self.generation_count, self.individual_count, score,
            )
            self.genetic_algorithm.grade_current_fitness(float(score))
        self.learning = True
        self.bind_current_individual()

    @property
    def generation_count(self) -> int:
        return self.genetic_algorithm.generation_count

    @property
    def individual_count(self) -> int:
        return self.genetic_algorithm.individual_count

    def get_player_type(self) -> str:
        """Return 'neural' as the player type."""
        return 'neural'

    def get_config(self) -> Dict[str, Any]:
        """Return configuration."""
        config = super().get_config()
        config['network'] = self.network.get_config()
        config['encoder'] = self.encoder.__class__.__name__
        return config
