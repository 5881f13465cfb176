"""Tests for environment construction helpers."""

import pytest

from qgrid.domain.types import Cell
from qgrid.utils.grid_factory import (
    create_default_environment, environment_from_rows, environment_to_rows,
    generate_random_environment, is_goal_reachable
)

LAYOUT = [
    "S....",
    "..#..",
    "...#.",
    ".#...",
    "....G",
]


def test_default_environment():
    env = create_default_environment()
    assert env.grid_size == 5
    assert env.start == Cell(0, 0)
    assert env.goal == Cell(4, 4)
    assert env.obstacles == {Cell(2, 1), Cell(1, 3), Cell(3, 2)}


def test_layout_matches_default():
    env = environment_from_rows(LAYOUT)
    default = create_default_environment()
    assert (env.grid_size, env.start, env.goal, env.obstacles) == \
        (default.grid_size, default.start, default.goal, default.obstacles)
    assert environment_to_rows(env) == LAYOUT


def test_layout_ignores_blank_lines_and_padding():
    env = environment_from_rows(["", "  S#  ", ".G", ""])
    assert env.grid_size == 2
    assert env.goal == Cell(1, 1)
    assert env.obstacles == {Cell(1, 0)}


@pytest.mark.parametrize("rows, message", [
    ([], "empty"),
    (["S..", "..G"], "square"),
    (["S.", ".."], "no goal"),
    (["..", ".G"], "no start"),
    (["SS", ".G"], "more than one start"),
    (["SG", "G."], "more than one goal"),
    (["S?", ".G"], "Unknown layout character"),
])
def test_bad_layouts(rows, message):
    with pytest.raises(ValueError, match=message):
        environment_from_rows(rows)


def test_reachability():
    assert is_goal_reachable(3, Cell(0, 0), Cell(2, 2), set())
    wall = {Cell(1, 0), Cell(1, 1), Cell(1, 2)}
    assert not is_goal_reachable(3, Cell(0, 0), Cell(2, 2), wall)


def test_random_environment_is_solvable_and_seeded():
    env = generate_random_environment(8, density=0.4, seed=3)
    again = generate_random_environment(8, density=0.4, seed=3)

    assert env.obstacles == again.obstacles
    assert len(env.obstacles) > 0
    assert is_goal_reachable(env.grid_size, env.start, env.goal, set(env.obstacles))


def test_random_environment_validates_arguments():
    with pytest.raises(ValueError):
        generate_random_environment(1)
    with pytest.raises(ValueError):
        generate_random_environment(5, density=1.5)
