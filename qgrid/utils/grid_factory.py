"""Grid factory for building environments for the Q-learning trainer."""

from collections import deque
from typing import Iterable, List, Optional, Set

from ..domain.environment import GridEnvironment
from ..domain.types import ACTION_DELTAS, Cell
from .rng import SeededRNG

DEFAULT_GRID_SIZE = 5
DEFAULT_START = Cell(0, 0)
DEFAULT_GOAL = Cell(DEFAULT_GRID_SIZE - 1, DEFAULT_GRID_SIZE - 1)
DEFAULT_OBSTACLES = (Cell(2, 1), Cell(1, 3), Cell(3, 2))

# Layout characters
START_CHAR = "S"
GOAL_CHAR = "G"
OBSTACLE_CHAR = "#"
FREE_CHAR = "."


def create_default_environment() -> GridEnvironment:
    """The 5x5 demo layout: start top-left, goal bottom-right, three obstacles."""
    return GridEnvironment(DEFAULT_GRID_SIZE, DEFAULT_START, DEFAULT_GOAL, DEFAULT_OBSTACLES)


def environment_from_rows(rows: Iterable[str]) -> GridEnvironment:
    """
    Build an environment from an ASCII layout.

    Args:
        rows: One string per grid row, top row first, using ``S`` for the
            start, ``G`` for the goal, ``#`` for obstacles and ``.`` for
            free cells. Blank lines and surrounding whitespace are ignored.

    Returns:
        GridEnvironment matching the layout

    Raises:
        ValueError: If the layout is not square or start/goal are missing or repeated
    """
    lines = [row.strip() for row in rows if row.strip()]
    size = len(lines)
    if size == 0:
        raise ValueError("Layout is empty")

    start: Optional[Cell] = None
    goal: Optional[Cell] = None
    obstacles: List[Cell] = []

    for y, line in enumerate(lines):
        if len(line) != size:
            raise ValueError(f"Layout must be square: row {y} has {len(line)} cells, expected {size}")
        for x, char in enumerate(line):
            cell = Cell(x, y)
            if char == START_CHAR:
                if start is not None:
                    raise ValueError(f"Layout has more than one start ({tuple(start)} and {tuple(cell)})")
                start = cell
            elif char == GOAL_CHAR:
                if goal is not None:
                    raise ValueError(f"Layout has more than one goal ({tuple(goal)} and {tuple(cell)})")
                goal = cell
            elif char == OBSTACLE_CHAR:
                obstacles.append(cell)
            elif char != FREE_CHAR:
                raise ValueError(f"Unknown layout character {char!r} at {tuple(cell)}")

    if start is None:
        raise ValueError("Layout has no start cell")
    if goal is None:
        raise ValueError("Layout has no goal cell")

    return GridEnvironment(size, start, goal, obstacles)


def environment_to_rows(env: GridEnvironment) -> List[str]:
    """Render an environment back into the ASCII layout format."""
    rows = []
    for y in range(env.grid_size):
        chars = []
        for x in range(env.grid_size):
            cell = Cell(x, y)
            if cell == env.start:
                chars.append(START_CHAR)
            elif cell == env.goal:
                chars.append(GOAL_CHAR)
            elif env.is_obstacle(cell):
                chars.append(OBSTACLE_CHAR)
            else:
                chars.append(FREE_CHAR)
        rows.append("".join(chars))
    return rows


def is_goal_reachable(grid_size: int, start: Cell, goal: Cell, obstacles: Set[Cell]) -> bool:
    """Breadth-first search from start to goal around obstacles."""
    frontier = deque([start])
    seen = {start}
    while frontier:
        x, y = frontier.popleft()
        if (x, y) == goal:
            return True
        for dx, dy in ACTION_DELTAS.values():
            nxt = Cell(x + dx, y + dy)
            if (0 <= nxt.x < grid_size and 0 <= nxt.y < grid_size
                    and nxt not in obstacles and nxt not in seen):
                seen.add(nxt)
                frontier.append(nxt)
    return False


def generate_random_environment(grid_size: int, density: float = 0.2,
                                seed: Optional[int] = None) -> GridEnvironment:
    """
    Generate a grid with random obstacles where the goal stays reachable.

    Start and goal sit in opposite corners. Obstacles are added one at a
    time in random order and skipped whenever one would cut the goal off.

    Args:
        grid_size: Cells per side (must be >= 2)
        density: Fraction of the free cells to try to block, in [0, 1]
        seed: Random seed for reproducibility

    Returns:
        GridEnvironment with a solvable layout
    """
    if grid_size < 2:
        raise ValueError(f"Grid size must be at least 2, got {grid_size}")
    if not 0.0 <= density <= 1.0:
        raise ValueError(f"Obstacle density must be in [0, 1], got {density}")

    rng = SeededRNG(seed)
    start = Cell(0, 0)
    goal = Cell(grid_size - 1, grid_size - 1)

    candidates = [Cell(x, y) for y in range(grid_size) for x in range(grid_size)
                  if Cell(x, y) not in (start, goal)]
    target_count = int(len(candidates) * density)
    order = rng.sample(candidates, len(candidates))

    obstacles: Set[Cell] = set()
    for cell in order:
        if len(obstacles) >= target_count:
            break
        obstacles.add(cell)
        if not is_goal_reachable(grid_size, start, goal, obstacles):
            obstacles.discard(cell)

    return GridEnvironment(grid_size, start, goal, obstacles)
