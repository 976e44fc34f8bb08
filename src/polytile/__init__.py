"""Polyomino Tiling Puzzle Solver.

Attempts to cover a rectangular board exactly with a fixed set of pieces, each used once in
any of its rotations.  A pool of worker threads runs a backtracking search that always fills
the lowest free cell next, and the first complete tiling found is reported.
"""

import argparse
import sys

from .errors import ConfigError
from .examples import EXAMPLES, load_example
from .puzzle_config import load_config
from .solver import solver


def main(args: list[str] | None = None) -> None:
    """Main entry point for the polytile solver."""
    parser = argparse.ArgumentParser(
        prog="polytile",
        description="Find a tiling of a rectangular board with the given pieces.",
    )
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("config_path", nargs="?", help="Path to the puzzle file.")
    group.add_argument("--example", choices=sorted(EXAMPLES), help="Solve a bundled example.")
    ns = parser.parse_args(args)

    try:
        config = load_example(ns.example) if ns.example else load_config(ns.config_path)
    except ConfigError as e:
        print(f"Cannot initialize puzzle: {e}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"Cannot read puzzle file: {e}", file=sys.stderr)
        sys.exit(1)

    result = solver.run(config)
    if result.status != "success":
        sys.exit(1)
