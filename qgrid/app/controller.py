"""Episode controller driving Q-learning training step by step."""

import logging
import math
from collections import deque
from dataclasses import asdict
from typing import Any, Deque, Dict, Optional, Tuple

import numpy as np
from PySide6.QtCore import QObject, Signal

from ..domain.environment import GridEnvironment
from ..domain.learner import QLearner
from ..domain.policy import EpsilonGreedyPolicy
from ..domain.qtable import ActionValueTable
from ..domain.types import (
    Episode, RolloutResult, Snapshot, TrainerConfig, TrainingState, Transition
)
from ..utils.grid_factory import create_default_environment
from ..utils.rng import SeededRNG
from .fsm import TrainerState, TrainerStateMachine
from .scheduler import QtStepScheduler, StepHandle, StepScheduler

logger = logging.getLogger(__name__)

MAX_STEP_DELAY = 600_000  # milliseconds

# Applied in this order so that bounds are settled before the values they bound
_CONFIG_ORDER = (
    "alpha", "gamma", "epsilon_decay", "epsilon_floor", "epsilon_ceiling",
    "epsilon", "step_delay", "history_limit", "seed",
)


def _clamp(value: Any, low: float, high: float) -> float:
    value = float(value)
    if math.isnan(value):
        return low
    return min(max(value, low), high)


class EpisodeController(QObject):
    """
    Owns the table, the training counters and the paced training loop.

    Every mutation happens inside ``step`` or a control call (``start``,
    ``stop``, ``reset``, ``configure``), and the loop only ever has one
    continuation pending, so steps never interleave.

    Signals:
        snapshot_updated: Emitted with a Snapshot after every step and state-changing call
        episode_completed: Emitted with an Episode on every terminal transition
        state_changed: Emitted with the new TrainerState on lifecycle transitions
    """

    snapshot_updated = Signal(object)  # Snapshot
    episode_completed = Signal(object)  # Episode
    state_changed = Signal(object)  # TrainerState

    def __init__(self, environment: Optional[GridEnvironment] = None,
                 config: Optional[TrainerConfig] = None,
                 scheduler: Optional[StepScheduler] = None,
                 parent: Optional[QObject] = None):
        super().__init__(parent)

        # Core components
        self._env = environment or create_default_environment()
        self._config = config or TrainerConfig()
        self._scheduler = scheduler or QtStepScheduler()
        self._rng = SeededRNG(self._config.seed)
        self._policy = EpsilonGreedyPolicy(self._rng)
        self._learner = QLearner()
        self._state_machine = TrainerStateMachine()

        # Pending continuation and the token that must match for it to run
        self._pending: Optional[StepHandle] = None
        self._generation = 0

        self._history: Deque[Episode] = deque(maxlen=1)
        self._apply_config(asdict(self._config))
        self._table: ActionValueTable
        self._state: TrainingState
        self._new_run()

        self._setup_state_callbacks()

    def _setup_state_callbacks(self):
        """Setup callbacks for state machine transitions."""
        self._state_machine.on_state_enter(TrainerState.RUNNING, self._on_running_entered)
        self._state_machine.on_state_enter(TrainerState.PAUSED, self._on_paused_entered)
        self._state_machine.on_state_enter(TrainerState.IDLE, self._on_idle_entered)

    def _new_run(self):
        """Create the table and the counters together."""
        self._table = ActionValueTable(self._env.num_states)
        self._state = TrainingState(
            current_cell=self._env.start,
            epsilon=_clamp(self._config.epsilon, 0.0, self._config.epsilon_ceiling),
        )
        self._history.clear()

    # Properties

    @property
    def environment(self) -> GridEnvironment:
        return self._env

    @property
    def config(self) -> TrainerConfig:
        return self._config

    @property
    def current_state(self) -> TrainerState:
        """Get the current lifecycle state."""
        return self._state_machine.current_state

    @property
    def running(self) -> bool:
        return self._state.running

    @property
    def epsilon(self) -> float:
        return self._state.epsilon

    @property
    def history(self) -> Tuple[Episode, ...]:
        """Recently finished episodes, oldest first."""
        return tuple(self._history)

    # Training

    def step(self) -> Transition:
        """
        Run exactly one training step.

        Works whether or not the loop is running, so it doubles as a manual
        single-step control.

        Returns:
            The environment transition that was applied
        """
        # Hyperparameters are read fresh on every step
        alpha = self._config.alpha
        gamma = self._config.gamma
        state = self._state

        state_index = self._env.state_index(state.current_cell)
        action = self._policy.select(state_index, self._table, state.epsilon)
        transition = self._env.step(state.current_cell, action)
        self._learner.update(
            self._table, state_index, action, transition.reward,
            self._env.state_index(transition.next_cell), alpha, gamma
        )

        state.current_cell = transition.next_cell
        state.step_count += 1
        state.cumulative_reward += transition.reward

        episode = None
        if transition.terminal:
            episode = self._finish_episode()

        # Signals go out only once the step is fully applied
        if episode is not None:
            self.episode_completed.emit(episode)
        self._publish()
        return transition

    def _finish_episode(self) -> Episode:
        """Count the episode, decay epsilon and send the agent back to the start."""
        state = self._state
        state.episode_count += 1

        episode = Episode(
            number=state.episode_count,
            steps=state.step_count,
            total_reward=state.cumulative_reward,
            epsilon_used=state.epsilon,
        )
        self._history.append(episode)
        logger.debug("Episode %d finished in %d steps (reward %.1f, epsilon %.3f)",
                     episode.number, episode.steps, episode.total_reward, episode.epsilon_used)

        state.epsilon = _clamp(
            state.epsilon * self._config.epsilon_decay,
            self._config.epsilon_floor,
            self._config.epsilon_ceiling,
        )

        state.step_count = 0
        state.cumulative_reward = 0.0
        state.current_cell = self._env.start
        return episode

    # Loop control

    def start(self):
        """Start the paced training loop; no-op while already running."""
        if self._state_machine.is_running():
            return

        # Exploration restarts from the configured rate on every start
        self._state.epsilon = _clamp(self._config.epsilon, 0.0, self._config.epsilon_ceiling)
        self._state_machine.start()
        logger.info("Training started at episode %d (epsilon %.3f)",
                    self._state.episode_count, self._state.epsilon)

        generation = self._generation
        self.step()
        if self._state.running and generation == self._generation:
            self._schedule_next()

    def stop(self):
        """Stop the loop; a pending step is cancelled and never runs."""
        self._cancel_pending()
        self._state_machine.pause()
        logger.info("Training stopped at episode %d", self._state.episode_count)
        self._publish()

    def reset(self):
        """Stop the loop, then discard the table and counters together."""
        self._cancel_pending()
        self._new_run()
        self._state_machine.reset_to_idle()
        logger.info("Training reset")
        self._publish()

    def _schedule_next(self):
        """Schedule the next step after the configured delay."""
        generation = self._generation
        delay = int(_clamp(self._config.step_delay, 0, MAX_STEP_DELAY))
        self._pending = self._scheduler.schedule(delay, lambda: self._on_tick(generation))

    def _on_tick(self, generation: int):
        """Called when a scheduled continuation fires."""
        if generation != self._generation or not self._state.running:
            return  # Cancelled by stop/reset

        self._pending = None
        self.step()
        if self._state.running and generation == self._generation:
            self._schedule_next()

    def _cancel_pending(self):
        self._generation += 1
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    # Configuration

    def configure(self, **kwargs):
        """
        Update hyperparameters; out-of-range values are clamped, never rejected.

        Accepts any TrainerConfig field. Unknown keys, ``None`` values (other
        than ``seed``) and non-numeric values are ignored.
        """
        for key in kwargs:
            if key not in _CONFIG_ORDER:
                logger.warning("Ignoring unknown configuration key: %s", key)

        applied = self._apply_config(kwargs)

        if "epsilon" in applied:
            self._state.epsilon = self._config.epsilon
        else:
            self._state.epsilon = min(self._state.epsilon, self._config.epsilon_ceiling)

        self._publish()

    def _apply_config(self, values: Dict[str, Any]) -> Tuple[str, ...]:
        """Clamp values into the shared config; returns the keys that were applied."""
        config = self._config
        applied = []

        for key in _CONFIG_ORDER:
            if key not in values:
                continue
            value = values[key]
            if value is None and key != "seed":
                continue

            try:
                if key in ("alpha", "gamma", "epsilon_decay", "epsilon_floor"):
                    setattr(config, key, _clamp(value, 0.0, 1.0))
                elif key == "epsilon_ceiling":
                    config.epsilon_ceiling = _clamp(value, config.epsilon_floor, 1.0)
                elif key == "epsilon":
                    config.epsilon = _clamp(value, 0.0, config.epsilon_ceiling)
                elif key == "step_delay":
                    config.step_delay = int(round(_clamp(value, 0, MAX_STEP_DELAY)))
                elif key == "history_limit":
                    config.history_limit = int(_clamp(value, 1, 1_000_000))
                    self._history = deque(self._history, maxlen=config.history_limit)
                elif key == "seed":
                    config.seed = None if value is None else int(value)
                    self._rng.reseed(config.seed)
            except (TypeError, ValueError):
                logger.warning("Ignoring non-numeric value for %s: %r", key, value)
                continue
            applied.append(key)

        # Keep the ceiling consistent with a raised floor
        if config.epsilon_ceiling < config.epsilon_floor:
            config.epsilon_ceiling = config.epsilon_floor
        # A lowered ceiling also bounds the configured epsilon
        config.epsilon = min(config.epsilon, config.epsilon_ceiling)

        return tuple(applied)

    # Views

    def snapshot(self) -> Snapshot:
        """Read-only view of the trainer for renderers."""
        state = self._state
        return Snapshot(
            episode_count=state.episode_count,
            step_count=state.step_count,
            cumulative_reward=state.cumulative_reward,
            epsilon=state.epsilon,
            current_cell=state.current_cell,
            grid_size=self._env.grid_size,
            table=self._table.as_array(),
            running=state.running,
        )

    def _publish(self):
        self.snapshot_updated.emit(self.snapshot())

    def greedy_path(self, max_steps: Optional[int] = None) -> RolloutResult:
        """
        Follow the greedy policy from the start cell without learning.

        Args:
            max_steps: Move limit (defaults to the number of cells)

        Returns:
            RolloutResult with the visited cells
        """
        limit = self._env.num_states if max_steps is None else max(0, int(max_steps))
        cell = self._env.start
        path = [cell]

        for _ in range(limit):
            action = self._table.best_action(self._env.state_index(cell))
            transition = self._env.step(cell, action)
            cell = transition.next_cell
            path.append(cell)
            if transition.terminal:
                return RolloutResult(path=tuple(path), reached_goal=True)

        return RolloutResult(path=tuple(path), reached_goal=False)

    def statistics(self, window: int = 100) -> Dict[str, Any]:
        """Get current training statistics."""
        recent = list(self._history)[-max(1, window):]
        return {
            "episodes_completed": self._state.episode_count,
            "current_epsilon": self._state.epsilon,
            "recent_mean_steps": float(np.mean([ep.steps for ep in recent])) if recent else 0.0,
            "recent_mean_reward": float(np.mean([ep.total_reward for ep in recent])) if recent else 0.0,
            "current_state": self._state_machine.current_state.name,
            "state_description": self._state_machine.get_state_description(),
        }

    def cleanup(self):
        """Cancel any pending step before shutdown."""
        self._cancel_pending()
        self._state_machine.pause()

    # State Machine Callbacks

    def _on_running_entered(self, context):
        """Called when entering RUNNING state."""
        self._state.running = True
        self.state_changed.emit(TrainerState.RUNNING)

    def _on_paused_entered(self, context):
        """Called when entering PAUSED state."""
        self._state.running = False
        self.state_changed.emit(TrainerState.PAUSED)

    def _on_idle_entered(self, context):
        """Called when entering IDLE state."""
        self._state.running = False
        self.state_changed.emit(TrainerState.IDLE)
