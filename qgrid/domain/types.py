"""Core type definitions for the tabular Q-learning trainer."""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, NamedTuple, Optional, Tuple

import numpy as np


class Cell(NamedTuple):
    """Grid coordinate; x grows to the right, y grows downward."""
    x: int
    y: int


class Action(IntEnum):
    """Moves available to the agent.

    Declaration order is the index order of the action-value table and the
    tie-break order of greedy selection (lowest index wins).
    """
    UP = 0
    RIGHT = 1
    DOWN = 2
    LEFT = 3


ACTIONS: Tuple[Action, ...] = tuple(Action)
NUM_ACTIONS = len(ACTIONS)

ACTION_DELTAS: Dict[Action, Tuple[int, int]] = {
    Action.UP: (0, -1),
    Action.RIGHT: (1, 0),
    Action.DOWN: (0, 1),
    Action.LEFT: (-1, 0),
}

ACTION_ARROWS: Dict[Action, str] = {
    Action.UP: "↑",
    Action.RIGHT: "→",
    Action.DOWN: "↓",
    Action.LEFT: "←",
}

# Environment rewards
REWARD_GOAL = 10.0
REWARD_STEP = -1.0


@dataclass
class TrainerConfig:
    """Hyperparameters for the trainer, shared with whoever drives the controls."""
    alpha: float = 0.1  # learning rate
    gamma: float = 0.9  # discount factor
    epsilon: float = 0.2  # initial exploration rate
    epsilon_floor: float = 0.01
    epsilon_ceiling: float = 1.0
    epsilon_decay: float = 0.995  # multiplicative, applied once per finished episode
    step_delay: int = 100  # milliseconds between scheduled steps
    seed: Optional[int] = None
    history_limit: int = 1000


@dataclass
class TrainingState:
    """Mutable counters describing the run; owned by the episode controller."""
    current_cell: Cell
    epsilon: float
    episode_count: int = 0
    step_count: int = 0
    cumulative_reward: float = 0.0
    running: bool = False


@dataclass(frozen=True)
class Transition:
    """Result of applying one action in the environment."""
    next_cell: Cell
    reward: float
    terminal: bool


@dataclass(frozen=True)
class Episode:
    """Summary of one finished episode."""
    number: int
    steps: int
    total_reward: float
    epsilon_used: float


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of the trainer published after every step."""
    episode_count: int
    step_count: int
    cumulative_reward: float
    epsilon: float
    current_cell: Cell
    grid_size: int
    table: np.ndarray = field(repr=False)
    running: bool = False

    def q_values(self, cell: Cell) -> np.ndarray:
        """Action values for one cell, in action order."""
        return self.table[cell.y * self.grid_size + cell.x]


@dataclass(frozen=True)
class RolloutResult:
    """Cells visited by following the greedy policy from the start cell."""
    path: Tuple[Cell, ...]
    reached_goal: bool

    @property
    def steps(self) -> int:
        """Number of moves taken."""
        return len(self.path) - 1
