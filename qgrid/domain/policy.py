"""Epsilon-greedy exploration policy."""

from typing import Optional

from ..utils.rng import SeededRNG
from .qtable import ActionValueTable


class EpsilonGreedyPolicy:
    """Explore uniformly with probability epsilon, otherwise exploit the table."""

    def __init__(self, rng: Optional[SeededRNG] = None):
        self.rng = rng or SeededRNG()

    def select(self, state: int, table: ActionValueTable, epsilon: float) -> int:
        """
        Select an action index for a state.

        Exactly one uniform draw decides the branch; the exploration branch
        then draws the action uniformly over all actions.

        Args:
            state: Flattened cell index
            table: Current action-value table
            epsilon: Exploration probability

        Returns:
            Action index
        """
        if self.rng.random() < epsilon:
            return self.rng.randrange(table.num_actions)
        return table.best_action(state)
