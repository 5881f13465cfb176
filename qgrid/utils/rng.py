"""Random number generation utilities for the Q-learning trainer."""

import random
from typing import Optional


class SeededRNG:
    """Seeded random number generator for reproducible results.

    Each instance owns its own ``random.Random`` so two trainers never share
    a stream.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._random = random.Random(seed)

    def reseed(self, seed: Optional[int]) -> None:
        """Restart the stream from a new seed."""
        self.seed = seed
        self._random.seed(seed)

    def random(self) -> float:
        """Generate random float in [0, 1)."""
        return self._random.random()

    def randrange(self, n: int) -> int:
        """Generate random integer in [0, n)."""
        return self._random.randrange(n)

    def choice(self, seq):
        """Choose random element from sequence."""
        return self._random.choice(seq)

    def sample(self, population, k: int):
        """Sample k elements from population without replacement."""
        return self._random.sample(population, k)
