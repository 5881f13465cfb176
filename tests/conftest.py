"""Shared fixtures for the trainer tests."""

from typing import Callable, List

import pytest
from PySide6.QtCore import QCoreApplication

from qgrid.app.controller import EpisodeController
from qgrid.domain.types import TrainerConfig
from qgrid.utils.grid_factory import create_default_environment


@pytest.fixture(scope="session", autouse=True)
def qapp():
    """Single Qt application for the whole session."""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


class ManualHandle:
    def __init__(self, delay_ms: int, callback: Callable[[], None]):
        self.delay_ms = delay_ms
        self.callback = callback
        self.cancelled = False
        self.fired = False

    @property
    def active(self) -> bool:
        return not self.cancelled and not self.fired

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler double: continuations only run when the test fires them."""

    def __init__(self):
        self.handles: List[ManualHandle] = []

    def schedule(self, delay_ms, callback):
        handle = ManualHandle(delay_ms, callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> List[ManualHandle]:
        return [h for h in self.handles if h.active]

    def fire_next(self) -> bool:
        """Run the oldest active continuation; False if none is pending."""
        pending = self.pending
        if not pending:
            return False
        handle = pending[0]
        handle.fired = True
        handle.callback()
        return True

    def fire_all_scheduled(self) -> None:
        """Run every continuation ever scheduled, cancelled ones included."""
        for handle in list(self.handles):
            handle.callback()


@pytest.fixture
def env():
    return create_default_environment()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def make_controller(env, scheduler):
    def factory(**overrides):
        config = TrainerConfig(**overrides)
        return EpisodeController(env, config, scheduler)
    return factory
