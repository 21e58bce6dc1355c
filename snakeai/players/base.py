"""
Base player abstraction for snake controllers.

A player looks at the world and decides the snake's next relative move.
The game loop calls ``on_game_start`` before the first step of a round
and ``on_game_end`` once the snake is dead.
"""
from abc import ABC, abstractmethod
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Dict

if TYPE_CHECKING:
    from ..game.geometry import Direction
    from ..game.world import SnakeWorld


class Action(IntEnum):
    """Relative move of the snake; values index the network outputs."""
    TURN_LEFT = 0
    GO_STRAIGHT = 1
    TURN_RIGHT = 2

    def apply_to(self, heading: 'Direction') -> 'Direction':
        """Return the absolute direction resulting from this move."""
        if self == Action.TURN_LEFT:
            return heading.left_of()
        if self == Action.TURN_RIGHT:
            return heading.right_of()
        return heading


class BasePlayer(ABC):
    """
    Abstract base class for all snake controllers.

    Example:
        class AlwaysRight(BasePlayer):
            def select_action(self, world):
                return Action.TURN_RIGHT

            def get_player_type(self):
                return 'always_right'
    """

    def __init__(self, name: str = ''):
        self.name = name or self.get_player_type()

    @abstractmethod
    def select_action(self, world: 'SnakeWorld') -> Action:
        """
        Choose the next move.

        Args:
            world: Current world state.

        Returns:
            The relative move to perform.
        """
        pass

    @abstractmethod
    def get_player_type(self) -> str:
        """Return the type identifier for this player."""
        pass

    def on_game_start(self, world: 'SnakeWorld') -> None:
        """Called before the first step of a round."""
        pass

    def on_game_end(self, world: 'SnakeWorld', score: float) -> None:
        """
        Called when a round ends.

        Args:
            world: Final world state.
            score: Outcome of the round.
        """
        pass

    def get_config(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'type': self.get_player_type(),
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name})"
