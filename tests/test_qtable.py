"""Tests for the action-value table."""

import numpy as np
import pytest

from qgrid.domain.qtable import ActionValueTable


def test_starts_at_zero():
    table = ActionValueTable(25)
    assert table.as_array().shape == (25, 4)
    assert not table.as_array().any()


def test_get_and_set():
    table = ActionValueTable(4)
    table.set(2, 3, 1.5)
    assert table.get(2, 3) == 1.5
    assert table.get(2, 2) == 0.0


def test_best_action_tie_goes_to_lowest_index():
    table = ActionValueTable(3)
    assert table.best_action(0) == 0

    table.set(1, 1, 2.0)
    table.set(1, 3, 2.0)
    assert table.best_action(1) == 1


def test_best_action_with_negative_values():
    table = ActionValueTable(1)
    for action, value in enumerate([-3.0, -0.5, -1.0, -0.5]):
        table.set(0, action, value)
    assert table.best_action(0) == 1
    assert table.best_value(0) == -0.5


def test_best_value_matches_best_action():
    table = ActionValueTable(1)
    table.set(0, 2, 4.0)
    assert table.best_value(0) == table.get(0, table.best_action(0)) == 4.0


def test_as_array_is_read_only_copy():
    table = ActionValueTable(2)
    values = table.as_array()
    with pytest.raises(ValueError):
        values[0, 0] = 1.0
    table.set(0, 0, 1.0)
    assert values[0, 0] == 0.0
    assert np.array_equal(table.row(0), [1.0, 0.0, 0.0, 0.0])


def test_invalid_dimensions():
    with pytest.raises(ValueError):
        ActionValueTable(0)
