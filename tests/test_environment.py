"""Tests for the grid environment transition model."""

import pytest

from qgrid.domain.environment import GridEnvironment
from qgrid.domain.types import ACTIONS, Action, Cell, REWARD_GOAL, REWARD_STEP


def passable_cells(env):
    return [Cell(x, y) for y in range(env.grid_size) for x in range(env.grid_size)
            if env.is_passable(Cell(x, y))]


def test_step_is_deterministic(env):
    for cell in passable_cells(env):
        for action in ACTIONS:
            assert env.step(cell, action) == env.step(cell, action)


def test_plain_move(env):
    transition = env.step(Cell(0, 0), Action.RIGHT)
    assert transition.next_cell == Cell(1, 0)
    assert transition.reward == REWARD_STEP
    assert transition.terminal is False


@pytest.mark.parametrize("cell, action", [
    (Cell(0, 0), Action.UP),
    (Cell(0, 0), Action.LEFT),
    (Cell(4, 0), Action.RIGHT),
    (Cell(2, 4), Action.DOWN),
])
def test_wall_collision_stays_in_place(env, cell, action):
    transition = env.step(cell, action)
    assert transition.next_cell == cell
    assert transition.reward == -1
    assert transition.terminal is False


@pytest.mark.parametrize("cell, action", [
    (Cell(1, 1), Action.RIGHT),  # into (2, 1)
    (Cell(2, 0), Action.DOWN),   # into (2, 1)
    (Cell(1, 2), Action.DOWN),   # into (1, 3)
    (Cell(4, 2), Action.LEFT),   # into (3, 2)
    (Cell(3, 3), Action.UP),     # into (3, 2)
])
def test_obstacle_collision_stays_in_place(env, cell, action):
    transition = env.step(cell, action)
    assert transition.next_cell == cell
    assert transition.reward == -1
    assert transition.terminal is False


@pytest.mark.parametrize("cell, action", [
    (Cell(3, 4), Action.RIGHT),
    (Cell(4, 3), Action.DOWN),
])
def test_goal_detection(env, cell, action):
    transition = env.step(cell, action)
    assert transition.next_cell == env.goal
    assert transition.reward == REWARD_GOAL == 10
    assert transition.terminal is True


def test_collision_while_on_goal_is_terminal(env):
    # The absorbed candidate equals the goal cell
    transition = env.step(env.goal, Action.RIGHT)
    assert transition.next_cell == env.goal
    assert transition.terminal is True


def test_never_produces_invalid_cell(env):
    for cell in passable_cells(env):
        for action in ACTIONS:
            assert env.is_passable(env.step(cell, action).next_cell)


def test_unknown_action_rejected(env):
    with pytest.raises(ValueError, match="Unknown action"):
        env.step(Cell(0, 0), 7)


def test_state_index_round_trip(env):
    assert env.state_index(Cell(0, 0)) == 0
    assert env.state_index(Cell(3, 2)) == 13
    assert env.cell_at(13) == Cell(3, 2)
    assert env.num_states == 25


@pytest.mark.parametrize("kwargs, message", [
    (dict(grid_size=1, start=(0, 0), goal=(0, 0)), "at least 2"),
    (dict(grid_size=3, start=(3, 0), goal=(2, 2)), "Start position .* out of bounds"),
    (dict(grid_size=3, start=(0, 0), goal=(2, -1)), "Goal position .* out of bounds"),
    (dict(grid_size=3, start=(0, 0), goal=(2, 2), obstacles=[(0, 0)]), "Start position .* obstacle"),
    (dict(grid_size=3, start=(0, 0), goal=(2, 2), obstacles=[(2, 2)]), "Goal position .* obstacle"),
    (dict(grid_size=3, start=(0, 0), goal=(2, 2), obstacles=[(5, 1)]), "Obstacle .* out of bounds"),
    (dict(grid_size=3, start=(1, 1), goal=(1, 1)), "cannot be the same"),
])
def test_inconsistent_layout_rejected(kwargs, message):
    with pytest.raises(ValueError, match=message):
        GridEnvironment(**kwargs)
