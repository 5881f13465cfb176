"""Deterministic grid environment for Q-learning."""

from typing import FrozenSet, Iterable

from .types import ACTION_DELTAS, Action, Cell, REWARD_GOAL, REWARD_STEP, Transition


class GridEnvironment:
    """Fixed square grid with a start cell, a goal cell and static obstacles.

    The environment holds no episode state: ``step`` is a pure function of
    the current cell and the action, so the same inputs always give the same
    transition. Moves that would leave the grid or enter an obstacle are
    absorbed and the agent stays where it was.
    """

    def __init__(self, grid_size: int, start: Cell, goal: Cell,
                 obstacles: Iterable[Cell] = ()):
        """
        Args:
            grid_size: Number of cells per side (must be >= 2)
            start: Cell every episode begins in
            goal: Terminal cell
            obstacles: Cells the agent can never enter

        Raises:
            ValueError: If the layout is inconsistent
        """
        if grid_size < 2:
            raise ValueError(f"Grid size must be at least 2, got {grid_size}")

        self._grid_size = int(grid_size)
        self._start = Cell(*start)
        self._goal = Cell(*goal)
        self._obstacles: FrozenSet[Cell] = frozenset(Cell(*c) for c in obstacles)

        for name, cell in (("Start", self._start), ("Goal", self._goal)):
            if not self.in_bounds(cell):
                raise ValueError(f"{name} position {tuple(cell)} is out of bounds")
            if cell in self._obstacles:
                raise ValueError(f"{name} position {tuple(cell)} is an obstacle")
        if self._start == self._goal:
            raise ValueError("Start and goal positions cannot be the same")
        for cell in sorted(self._obstacles):
            if not self.in_bounds(cell):
                raise ValueError(f"Obstacle {tuple(cell)} is out of bounds")

    @property
    def grid_size(self) -> int:
        return self._grid_size

    @property
    def start(self) -> Cell:
        return self._start

    @property
    def goal(self) -> Cell:
        return self._goal

    @property
    def obstacles(self) -> FrozenSet[Cell]:
        return self._obstacles

    @property
    def num_states(self) -> int:
        """Number of table rows; obstacles keep a row even though never occupied."""
        return self._grid_size * self._grid_size

    def in_bounds(self, cell: Cell) -> bool:
        """Check if coordinate is within grid bounds."""
        x, y = cell
        return 0 <= x < self._grid_size and 0 <= y < self._grid_size

    def is_obstacle(self, cell: Cell) -> bool:
        return Cell(*cell) in self._obstacles

    def is_passable(self, cell: Cell) -> bool:
        """Check if the agent may occupy this cell."""
        return self.in_bounds(cell) and not self.is_obstacle(cell)

    def state_index(self, cell: Cell) -> int:
        """Flatten a cell into its table row (row-major)."""
        return cell[1] * self._grid_size + cell[0]

    def cell_at(self, state_index: int) -> Cell:
        """Inverse of ``state_index``."""
        y, x = divmod(int(state_index), self._grid_size)
        return Cell(x, y)

    def step(self, cell: Cell, action: int) -> Transition:
        """
        Apply an action from a cell.

        Args:
            cell: Current (passable) cell
            action: Action index in declaration order

        Returns:
            Transition with the next cell, the reward and the terminal flag
        """
        try:
            dx, dy = ACTION_DELTAS[Action(action)]
        except ValueError:
            raise ValueError(f"Unknown action index: {action}") from None

        candidate = Cell(cell[0] + dx, cell[1] + dy)
        if not self.is_passable(candidate):
            # Collision with a wall or obstacle - stay in place
            candidate = Cell(*cell)

        if candidate == self._goal:
            return Transition(candidate, REWARD_GOAL, True)
        return Transition(candidate, REWARD_STEP, False)

    def __repr__(self) -> str:
        return (f"GridEnvironment(grid_size={self._grid_size}, start={tuple(self._start)}, "
                f"goal={tuple(self._goal)}, obstacles={sorted(tuple(c) for c in self._obstacles)})")
