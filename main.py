#!/usr/bin/env python3
"""
Neural Chase - Headless Runner
==============================

Runs the chase without any display: a scripted player moves around the
playfield while the pursuer learns online to catch it.

Usage:
    # Default: orbiting player, 10 simulated minutes at 60 FPS
    python main.py

    # Reproducible run with a faster-learning pursuer
    python main.py --seed 7 --cadence 10 --frames 20000

    # Player that stands still (the pursuer should learn to reach it)
    python main.py --player static

    # Verbose: log every training step's loss to a file as well
    python main.py --log-level DEBUG --log-file
"""

import argparse
import math
import random
import sys
import time
from typing import Callable, Tuple

import numpy as np

from config import Config
from chaser.ai import clamp_position
from chaser.game import ChaseGame, GameScene
from chaser.utils.logger import LogLevel, get_log_path, log_pursuit_metrics, setup_logging


PlayerScript = Callable[[int, float], Tuple[float, float]]


def make_player_script(kind: str, config: Config, rng: random.Random) -> PlayerScript:
    """
    Build a function mapping (frame, dt) to the player's next position.

    Args:
        kind: 'orbit', 'static' or 'random'
        config: Configuration (world size and start position)
        rng: Random source for the random walk
    """
    start_x, start_y = config.PLAYER_START

    if kind == 'static':
        return lambda frame, dt: (start_x, start_y)

    if kind == 'orbit':
        radius = min(config.GAME_WIDTH, config.GAME_HEIGHT) / 3.0

        def orbit(frame: int, dt: float) -> Tuple[float, float]:
            angle = frame * dt * 0.5
            return radius * math.cos(angle), radius * math.sin(angle)
        return orbit

    if kind == 'random':
        pos = np.array([start_x, start_y], dtype=float)
        step = 0.08

        def random_walk(frame: int, dt: float) -> Tuple[float, float]:
            pos[0] += rng.uniform(-step, step)
            pos[1] += rng.uniform(-step, step)
            pos[:] = clamp_position(pos, config.GAME_WIDTH, config.GAME_HEIGHT)
            return float(pos[0]), float(pos[1])
        return random_walk

    raise ValueError(f"Unknown player script: {kind!r}")


def run(config: Config, frames: int, player: str) -> ChaseGame:
    """
    Simulate ``frames`` frames and report progress.

    Returns:
        The game, for inspection after the run
    """
    rng = random.Random(config.SEED)
    game = ChaseGame(config, rng=rng)
    script = make_player_script(player, config, rng)
    dt = 1.0 / config.FPS

    game.start()
    start_time = time.time()

    for _ in range(frames):
        if game.scene == GameScene.PLAY:
            game.move_player(*script(game.frame, dt))
        game.step(dt)

        if game.frame % config.REPORT_EVERY == 0 and game.scene == GameScene.PLAY:
            log_pursuit_metrics(
                frame=game.frame,
                level=game.agent.level,
                knowledge=game.agent.knowledge,
                avg_loss=game.agent.average_loss,
                last_loss=game.agent.last_loss,
                train_steps=game.agent.train_steps,
            )

    elapsed = time.time() - start_time
    print("\n" + "=" * 60)
    print("Run Complete")
    print(f"   Frames:          {frames:,}")
    print(f"   Frames/sec:      {frames / elapsed:,.0f}" if elapsed > 0 else "   Frames/sec:      n/a")
    print(f"   Games lost:      {game.games_played}")
    print(f"   Best score:      {max(game.best_score, game.score):,}")
    print(f"   Pursuer level:   {game.agent.level}")
    print(f"   Training steps:  {game.agent.train_steps:,}")
    print(f"   Average loss:    {game.agent.average_loss:.6f}")
    if game.divergence_resets:
        print(f"   Divergence resets: {game.divergence_resets}")
    print("=" * 60)

    return game


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Neural Chase - a pursuer that learns to catch you while you play",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        '--frames', type=int, default=36000,
        help='Number of frames to simulate (default: 36000, 10 minutes at 60 FPS)'
    )
    parser.add_argument(
        '--player', type=str, default='orbit', choices=['orbit', 'static', 'random'],
        help='Scripted player movement (default: orbit)'
    )
    parser.add_argument(
        '--seed', type=int, default=None,
        help='Random seed for weights and names'
    )
    parser.add_argument(
        '--cadence', type=int, default=None,
        help='Train every N frames (default: config TRAIN_CADENCE)'
    )
    parser.add_argument(
        '--lr', type=float, default=None,
        help='Network learning rate (default: config LEARNING_RATE)'
    )
    parser.add_argument(
        '--log-level', type=str, default=None,
        choices=[level.name for level in LogLevel],
        help='Logging verbosity (default: config LOG_LEVEL)'
    )
    parser.add_argument(
        '--log-file', action='store_true',
        help='Also write logs to a file under config LOG_DIR'
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    config = Config()
    if args.seed is not None:
        config.SEED = args.seed
    if args.cadence is not None:
        config.TRAIN_CADENCE = args.cadence
    if args.lr is not None:
        config.LEARNING_RATE = args.lr
    if args.log_level is not None:
        config.LOG_LEVEL = args.log_level

    try:
        config.__post_init__()
    except AssertionError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    setup_logging(
        log_dir=config.LOG_DIR,
        level=LogLevel.from_name(config.LOG_LEVEL),
        file_output=args.log_file,
        force=True,
    )
    log_path = get_log_path()
    if log_path is not None:
        print(f"Logging to {log_path}")

    try:
        run(config, args.frames, args.player)
    except KeyboardInterrupt:
        print("\n\nRun interrupted by user")
    return 0


if __name__ == "__main__":
    sys.exit(main())
