"""Q-Learning Grid Trainer - tabular reinforcement learning on a small grid.

This package implements a Q-Learning agent that learns to walk from a start
cell to a goal cell around static obstacles, driven by a paced, cancellable
training loop that publishes snapshots for an external renderer.
"""

__version__ = "1.0.0"
