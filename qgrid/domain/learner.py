"""Q-learning update rule."""

from .qtable import ActionValueTable


class QLearner:
    """One-step off-policy Bellman backup."""

    def update(self, table: ActionValueTable, state: int, action: int, reward: float,
               next_state: int, alpha: float, gamma: float) -> float:
        """
        Move Q(state, action) toward reward + gamma * max_a Q(next_state, a).

        The successor value is bootstrapped even on terminal transitions; the
        goal row is never the current state, so it stays at zero.

        Returns:
            The new Q-value
        """
        best_next = table.best_value(next_state)
        current_q = table.get(state, action)

        target = reward + gamma * best_next
        new_q = current_q + alpha * (target - current_q)

        table.set(state, action, new_q)
        return new_q
