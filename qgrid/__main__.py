"""Headless entry point: train on the Qt event loop and log progress."""

import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional

from PySide6.QtCore import QCoreApplication, QTimer

from .app.controller import EpisodeController
from .domain.types import ACTION_ARROWS, Action, TrainerConfig
from .utils.grid_factory import (
    create_default_environment, environment_from_rows, environment_to_rows
)

logger = logging.getLogger("qgrid")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qgrid",
        description="Train a tabular Q-learning agent on a grid.",
    )
    parser.add_argument("--episodes", type=int, default=200,
                        help="Number of episodes to train before exiting (default: 200)")
    parser.add_argument("--delay", type=int, default=0,
                        help="Milliseconds between steps (default: 0)")
    parser.add_argument("--alpha", type=float, default=TrainerConfig.alpha,
                        help="Learning rate")
    parser.add_argument("--gamma", type=float, default=TrainerConfig.gamma,
                        help="Discount factor")
    parser.add_argument("--epsilon", type=float, default=TrainerConfig.epsilon,
                        help="Initial exploration rate")
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed for reproducible exploration")
    parser.add_argument("--layout", type=Path, default=None,
                        help="ASCII layout file (S start, G goal, # obstacle, . free)")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging verbosity")
    return parser


def format_policy(controller: EpisodeController) -> List[str]:
    """Greedy action arrow per free cell, one string per row."""
    env = controller.environment
    snapshot = controller.snapshot()
    rows = environment_to_rows(env)
    lines = []
    for y, row in enumerate(rows):
        chars = []
        for x, char in enumerate(row):
            if char == ".":
                best = int(snapshot.table[env.state_index((x, y))].argmax())
                chars.append(ACTION_ARROWS[Action(best)])
            else:
                chars.append(char)
        lines.append(" ".join(chars))
    return lines


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for headless training."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.layout is not None:
        environment = environment_from_rows(args.layout.read_text(encoding="utf-8").splitlines())
    else:
        environment = create_default_environment()

    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    app.setApplicationName("Q-Learning Grid Trainer")

    controller = EpisodeController(environment)
    controller.configure(alpha=args.alpha, gamma=args.gamma, epsilon=args.epsilon,
                         step_delay=args.delay, seed=args.seed)
    logger.info("Training on %r", environment)

    def on_episode(episode):
        logger.info("Episode %d: %d steps, reward %.1f, epsilon %.3f",
                    episode.number, episode.steps, episode.total_reward, episode.epsilon_used)
        if episode.number >= args.episodes:
            controller.stop()
            app.quit()

    controller.episode_completed.connect(on_episode)

    def signal_handler(sig, frame):
        """Handle system signals for graceful shutdown."""
        logger.info("Received signal %s, shutting down", sig)
        controller.stop()
        app.quit()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    # Let Python run its signal handlers while the Qt loop is idle
    heartbeat = QTimer()
    heartbeat.timeout.connect(lambda: None)
    heartbeat.start(200)

    if args.episodes > 0:
        QTimer.singleShot(0, controller.start)
        app.exec()
    controller.cleanup()

    result = controller.greedy_path()
    stats = controller.statistics()
    logger.info("Trained %d episodes, mean steps over last 100: %.1f",
                stats["episodes_completed"], stats["recent_mean_steps"])
    logger.info("Greedy path (%s, %d steps): %s",
                "reaches goal" if result.reached_goal else "does not reach goal",
                result.steps, " -> ".join(f"({c.x},{c.y})" for c in result.path))
    for line in format_policy(controller):
        logger.info("  %s", line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
