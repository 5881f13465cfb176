"""Action-value table backed by a numpy array."""

import numpy as np

from .types import NUM_ACTIONS


class ActionValueTable:
    """Estimated return for every (state, action) pair.

    Rows are flattened cell indices, columns are action indices. Every cell
    has a row, obstacles included, and all values start at zero.
    """

    def __init__(self, num_states: int, num_actions: int = NUM_ACTIONS):
        if num_states <= 0 or num_actions <= 0:
            raise ValueError(f"Table dimensions must be positive, got {num_states}x{num_actions}")
        self._values = np.zeros((num_states, num_actions), dtype=np.float64)

    @property
    def num_states(self) -> int:
        return self._values.shape[0]

    @property
    def num_actions(self) -> int:
        return self._values.shape[1]

    def get(self, state: int, action: int) -> float:
        """Get Q-value for state-action pair."""
        return float(self._values[state, action])

    def set(self, state: int, action: int, value: float) -> None:
        """Set Q-value for state-action pair."""
        self._values[state, action] = value

    def row(self, state: int) -> np.ndarray:
        """Copy of the action values for one state."""
        return self._values[state].copy()

    def best_value(self, state: int) -> float:
        """Maximum action value for a state."""
        return float(self._values[state].max())

    def best_action(self, state: int) -> int:
        """Action with the highest value.

        Ties go to the lowest action index. ``np.argmax`` returns the first
        occurrence of the maximum, which is exactly that rule.
        """
        return int(np.argmax(self._values[state]))

    def as_array(self) -> np.ndarray:
        """Read-only copy of the whole table."""
        values = self._values.copy()
        values.setflags(write=False)
        return values
