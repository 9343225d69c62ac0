#!/usr/bin/env python3
"""
Minefield - Main entry point.

Usage:
    python main.py demo [--mode {desktop,mobile}] [--rounds N] [--save PATH]
    python main.py inspect PATH
"""
import argparse
import logging
import time

import numpy as np

from src.minefield.environment import MinesweeperEnv
from src.minefield.mode import DESKTOP, MOBILE
from src.minefield.persistence import CorruptSaveError, PersistenceCodec
from src.minefield.round import RoundStatus


MODES = {"desktop": DESKTOP, "mobile": MOBILE}


def demo(args: argparse.Namespace) -> None:
    """Play random valid moves through several rounds."""
    env = MinesweeperEnv(mode=MODES[args.mode], render_mode="ansi")
    obs, info = env.reset(seed=args.seed)
    env.action_space.seed(args.seed)

    wins = 0
    for round_number in range(1, args.rounds + 1):
        print(f"=== Round {round_number}/{args.rounds} | {info['size']}x{info['size']} ===")
        done = False
        while not done:
            action = env.action_space.sample(mask=env.get_action_mask())
            obs, reward, done, _, info = env.step(action)
            env.controller.tick(args.delay)
            if args.delay:
                time.sleep(args.delay)

        print(env.render())
        if env.status is RoundStatus.WON:
            wins += 1
            print("\n*** WIN! ***\n")
        else:
            print("\n*** LOST (hit mine) ***\n")

        if args.save:
            PersistenceCodec.save(env.controller, args.save)
        if round_number < args.rounds:
            obs, info = env.reset()

    print(f"=== Final: {wins}/{args.rounds} wins ===")


def inspect(args: argparse.Namespace) -> None:
    """Print a summary of a save file."""
    try:
        with open(args.path, "rb") as f:
            snapshot = PersistenceCodec.decode(f.read())
    except (OSError, CorruptSaveError) as error:
        print(f"Cannot read {args.path}: {error}")
        return

    grid = snapshot.grid
    obs = grid.get_observation()
    if snapshot.game_over:
        status = "won" if snapshot.game_won else "lost"
    else:
        status = "in progress"

    print(f"Grid: {grid.size}x{grid.size} with {grid.count_mines()} mines")
    print(f"Status: {status}")
    print(f"Time: {snapshot.game_time:.1f}s")
    print(f"Remaining cells: {snapshot.remaining_cells}")
    print(f"Remaining mines: {snapshot.remaining_mines}")
    print(f"Revealed: {int(np.count_nonzero(obs >= 0))} | Flagged: {int(np.count_nonzero(obs == -2))}")


def main() -> None:
    """Parse arguments and run the appropriate command."""
    parser = argparse.ArgumentParser(
        description="Minefield - Minesweeper round engine"
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Show engine debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Demo command
    demo_parser = subparsers.add_parser("demo", help="Watch random play")
    demo_parser.add_argument(
        "--mode", choices=sorted(MODES), default="desktop", help="Product mode"
    )
    demo_parser.add_argument(
        "--rounds", type=int, default=3, help="Number of rounds to play"
    )
    demo_parser.add_argument(
        "--delay", type=float, default=0.0, help="Delay between moves"
    )
    demo_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    demo_parser.add_argument(
        "--save", default=None, help="Save each finished round to this file"
    )

    # Inspect command
    inspect_parser = subparsers.add_parser("inspect", help="Summarize a save file")
    inspect_parser.add_argument("path", help="Save file to read")

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    if args.command == "demo":
        demo(args)
    elif args.command == "inspect":
        inspect(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
