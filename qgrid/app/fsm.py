"""Finite State Machine for the trainer's run lifecycle."""

from enum import Enum, auto
from typing import Callable, Dict, Optional


class TrainerState(Enum):
    """Lifecycle states of the training loop."""
    IDLE = auto()
    RUNNING = auto()
    PAUSED = auto()


class TrainerStateMachine:
    """State machine for managing start/stop/reset of the training loop."""

    def __init__(self):
        self.current_state = TrainerState.IDLE
        self._enter_callbacks: Dict[TrainerState, Callable[[Optional[Dict]], None]] = {}

        # Define valid state transitions
        self._valid_transitions = {
            TrainerState.IDLE: {TrainerState.RUNNING, TrainerState.IDLE},
            TrainerState.RUNNING: {TrainerState.PAUSED, TrainerState.IDLE},
            TrainerState.PAUSED: {TrainerState.RUNNING, TrainerState.IDLE, TrainerState.PAUSED},
        }

    def on_state_enter(self, state: TrainerState, callback: Callable[[Optional[Dict]], None]):
        """Register callback for state entry."""
        self._enter_callbacks[state] = callback

    def can_transition(self, to_state: TrainerState) -> bool:
        """Check if transition to target state is valid."""
        return to_state in self._valid_transitions.get(self.current_state, set())

    def transition(self, to_state: TrainerState, context: Optional[Dict] = None) -> bool:
        """Attempt to transition to target state."""
        if not self.can_transition(to_state):
            return False

        self.current_state = to_state

        if to_state in self._enter_callbacks:
            self._enter_callbacks[to_state](context)

        return True

    # Convenience methods for common transitions

    def start(self, context: Optional[Dict] = None) -> bool:
        """Enter the running state."""
        return self.transition(TrainerState.RUNNING, context)

    def pause(self, context: Optional[Dict] = None) -> bool:
        """Stop a running loop, or stay paused.

        Stopping a fresh trainer leaves it idle.
        """
        if self.current_state == TrainerState.IDLE:
            return self.transition(TrainerState.IDLE, context)
        return self.transition(TrainerState.PAUSED, context)

    def reset_to_idle(self, context: Optional[Dict] = None) -> bool:
        """Reset to idle state."""
        return self.transition(TrainerState.IDLE, context)

    # State checking methods

    def is_idle(self) -> bool:
        return self.current_state == TrainerState.IDLE

    def is_running(self) -> bool:
        return self.current_state == TrainerState.RUNNING

    def is_paused(self) -> bool:
        return self.current_state == TrainerState.PAUSED

    def get_state_description(self) -> str:
        """Get human-readable state description."""
        descriptions = {
            TrainerState.IDLE: "Ready - start training to begin learning",
            TrainerState.RUNNING: "Training agent with Q-Learning",
            TrainerState.PAUSED: "Training paused",
        }
        return descriptions.get(self.current_state, "Unknown state")
