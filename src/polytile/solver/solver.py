"""Main solver module: runs a search and writes the log for one puzzle."""

import sys
from datetime import datetime
from pathlib import Path
from pprint import pprint
from typing import TextIO

from polytile.puzzle_config import PuzzleConfig
from polytile.render import render_state
from polytile.solver.config import config as solver_config
from polytile.solver.engine import Result, resolve_n_workers, solve
from polytile.solver.utils import TIMESTAMP_FMT, int_comma, time_str, validate_tiling


def log_path(config: PuzzleConfig) -> Path:
    """Path of the log file for a puzzle run."""
    return Path(solver_config.log_dir) / config.name / f"{config.width}x{config.height}.log"


def run(config: PuzzleConfig) -> Result:
    """Run the solver on the given configuration, logging to a file.

    Args:
        config (PuzzleConfig): The configuration for the puzzle to solve.

    Returns:
        The search Result.
    """
    print(f"config: {config}")

    logfile = log_path(config)
    print(f"Log file: {logfile}")
    logfile.parent.mkdir(parents=True, exist_ok=True)

    with open(logfile, "w", encoding="utf-8") as logf:
        try:
            result = solve_one(config, logf=logf)
        except KeyboardInterrupt:
            print("Solver interrupted by user.", file=logf, flush=True)
            print("Solver interrupted by user.")
            sys.exit(1)

    if result.status == "success" and result.solution is not None:
        print(render_state(result.solution))
    elif result.status == "no_solution":
        print("No solution found.")
    else:
        print("Search failed; see the log file for details.")
    print()
    return result


def solve_one(config: PuzzleConfig, *, logf: TextIO) -> Result:
    """Attempt to solve a puzzle, writing progress and the outcome to `logf`.

    Args:
        config (PuzzleConfig): The configuration for the puzzle to solve.
        logf: File object to log the solving process.
    """
    print(f"Selected puzzle: {config.name}", file=logf, flush=True)
    print(f"Dimensions: {config.width}x{config.height}", file=logf, flush=True)
    print(f"Pieces ({len(config.pieces)}):", file=logf, flush=True)
    for piece in config.pieces:
        print(
            f"  {piece.name}: {piece.n_cells} cells, {piece.n_orientations} orientation(s)",
            file=logf,
            flush=True,
        )
        for line in piece.shape_lines():
            print(f"     {line}", file=logf, flush=True)
    print("", file=logf, flush=True)
    print("Solver config:", file=logf, flush=True)
    pprint(solver_config.model_dump(), stream=logf, width=120)
    print(f"Worker threads: {resolve_n_workers()}", file=logf, flush=True)

    start_time_str = datetime.now().astimezone().strftime(TIMESTAMP_FMT)
    print(f"Start time: {start_time_str}", file=logf, flush=True)
    print("", file=logf, flush=True)
    print("#" * 80, file=logf, flush=True)
    print("", file=logf, flush=True)

    result = solve(config, logf=logf)

    stats = result.stats
    if stats is not None:
        print(f"States expanded: {int_comma(stats.states_expanded)}", file=logf, flush=True)
        print(f"States queued: {int_comma(stats.states_queued)}", file=logf, flush=True)
        print(f"Max depth: {stats.max_depth}", file=logf, flush=True)
        print(f"Time taken: {time_str(stats.elapsed())}", file=logf, flush=True)

    if result.status == "success" and result.solution is not None:
        print("Solution found!", file=logf, flush=True)
        tiling = result.solution.tiling()
        if not validate_tiling(config.width, config.height, tiling):
            raise RuntimeError("Search returned a tiling that does not cover the board exactly.")
        print(render_state(result.solution), file=logf, flush=True)
    elif result.status == "no_solution":
        print("No solution found.", file=logf, flush=True)
    else:
        print("Search failed:", file=logf, flush=True)
        print(result.err_msg, file=logf, flush=True)
    return result
