"""Implementation of the parallel search: worker pool, shared work queue and result slot.

All workers take states from one unbounded queue and push the children of each state back into
it.  By default the queue is LIFO, so the search runs depth-first and few states are pending
at once.  The first worker to produce a complete tiling offers it to a single-slot result
queue; later offers are dropped.  The work queue's unfinished-task count tracks outstanding
work: once it reaches zero without a tiling having been offered, the puzzle is unsolvable.
"""

import os
import traceback
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from queue import LifoQueue, Queue
from threading import Event, Lock
from time import time
from typing import Literal, TextIO

from polytile.bitboard import NO_FREE_SPOT
from polytile.puzzle_config import PuzzleConfig
from polytile.solver.config import config as solver_config
from polytile.solver.state import SearchState
from polytile.solver.utils import int_comma, time_str


@dataclass
class SearchStats:
    """Statistics collected during a search, shared by all workers."""

    start_time: float = field(default_factory=time)
    """Timestamp when the search started."""

    states_expanded: int = 0
    """Number of states taken from the queue and expanded."""

    states_queued: int = 0
    """Number of child states pushed back into the queue."""

    max_depth: int = 0
    """Largest number of pieces placed in any expanded state."""

    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    def record(self, depth: int, n_children: int) -> int:
        """Record one expanded state and return the updated expansion count."""
        with self._lock:
            self.states_expanded += 1
            self.states_queued += n_children
            self.max_depth = max(self.max_depth, depth)
            return self.states_expanded

    def elapsed(self) -> float:
        """Seconds since the search started."""
        return time() - self.start_time


@dataclass
class Result:
    """Outcome of a search."""

    status: Literal["success", "no_solution", "error"]
    solution: SearchState | None = None
    err_msg: str | None = None
    stats: SearchStats | None = None


@dataclass(kw_only=True)
class SearchContext:
    """State shared by the workers of one search."""

    work: Queue
    """Pending search states; `None` tells a worker to exit."""

    found: Queue
    """Single-slot result queue."""

    stop: Event
    """Set once the search result has been taken (or a worker failed)."""

    stats: SearchStats

    n_workers: int

    report_interval: int

    logf: TextIO | None = None

    delivered: bool = False
    """Whether a result has been offered; stays set after the result is taken."""

    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    def offer(self, result: Result) -> bool:
        """Deliver a result unless one was delivered already (first writer wins).

        Later offers are dropped even after `solve` has taken the first result out of the
        slot.
        """
        with self._lock:
            if self.delivered:
                return False
            self.delivered = True
        self.found.put_nowait(result)
        return True


def resolve_n_workers(n_workers: int | None = None) -> int:
    """Return the number of worker threads to start.

    Args:
        n_workers (int | None): Explicit worker count.  If None, falls back to the configured
            `max_workers`, then to `worker_multiplier` threads per CPU.
    """
    if n_workers is None:
        n_workers = solver_config.max_workers
    if n_workers is None:
        cpus = os.cpu_count() or 1  # Fallback to 1 if os.cpu_count() is None
        n_workers = cpus * solver_config.worker_multiplier
    if n_workers < 1:
        raise ValueError(f"Number of workers must be at least 1, got {n_workers}.")
    return n_workers


def get_executor(n_workers: int) -> ThreadPoolExecutor:
    """Get a ThreadPoolExecutor with room for the workers and the exhaustion monitor."""
    return ThreadPoolExecutor(max_workers=n_workers + 1, thread_name_prefix="polytile")


def expand(ctx: SearchContext, state: SearchState) -> None:
    """Queue the children of a state, or offer the first complete child as the solution."""
    n_children = 0
    for child in state.children():
        if child.is_complete:
            ctx.offer(Result(status="success", solution=child))
            break
        if child.first_free == NO_FREE_SPOT:
            continue  # Board full with pieces left over; cannot happen for a valid config
        ctx.work.put(child)
        n_children += 1

    expanded = ctx.stats.record(state.depth, n_children)
    if ctx.report_interval and expanded % ctx.report_interval == 0:
        print(
            f"[{time_str(ctx.stats.elapsed())}] {int_comma(expanded)} states expanded, "
            f"{int_comma(ctx.work.qsize())} queued, max depth {ctx.stats.max_depth}, "
            f"current {state.board.filled_cells()}/{state.board.n_cells} cells filled",
            file=ctx.logf,
            flush=True,
        )


def worker_loop(ctx: SearchContext, worker_idx: int) -> None:
    """Take states from the work queue and expand them until told to exit.

    Once `ctx.stop` is set, remaining states are drained without being expanded.
    """
    while True:
        state = ctx.work.get()
        try:
            if state is None:
                return
            if ctx.stop.is_set():
                continue
            expand(ctx, state)
        except Exception:
            ctx.offer(
                Result(
                    status="error",
                    err_msg=f"Worker {worker_idx} encountered an error:\n{traceback.format_exc()}",
                )
            )
            ctx.stop.set()
        finally:
            ctx.work.task_done()


def monitor(ctx: SearchContext) -> None:
    """Wait until no work is outstanding, report exhaustion, then release the workers."""
    ctx.work.join()
    # Dropped if a solution (or error) was offered first
    ctx.offer(Result(status="no_solution"))
    for _ in range(ctx.n_workers):
        ctx.work.put(None)


def solve(
    config: PuzzleConfig,
    *,
    n_workers: int | None = None,
    stop_on_solution: bool | None = None,
    logf: TextIO | None = None,
) -> Result:
    """Search for a tiling of the configured board.

    Returns as soon as any worker finds a complete tiling, or once the search space is
    exhausted.  When several tilings exist, which one is returned depends on thread
    scheduling.

    Args:
        config (PuzzleConfig): The puzzle to solve.
        n_workers (int | None): Number of worker threads (see `resolve_n_workers`).
        stop_on_solution (bool | None): Whether to stop the workers once a result is taken.
            If False, workers keep expanding the remaining states in the background.  Defaults
            to the configured `stop_on_solution`.
        logf: Stream for progress lines; stdout if None.

    Returns:
        A Result whose status is "success" (with the complete state), "no_solution", or
        "error" (with the worker traceback).
    """
    n_workers = resolve_n_workers(n_workers)
    if stop_on_solution is None:
        stop_on_solution = solver_config.stop_on_solution

    ctx = SearchContext(
        work=LifoQueue() if solver_config.queue_order == "lifo" else Queue(),
        found=Queue(maxsize=1),
        stop=Event(),
        stats=SearchStats(),
        n_workers=n_workers,
        report_interval=solver_config.report_interval,
        logf=logf,
    )
    ctx.work.put(SearchState.initial(config))

    executor = get_executor(n_workers)
    interrupted = True
    try:
        for worker_idx in range(n_workers):
            executor.submit(worker_loop, ctx, worker_idx)
        executor.submit(monitor, ctx)
        result: Result = ctx.found.get()
        interrupted = False
    finally:
        if interrupted or stop_on_solution:
            ctx.stop.set()
        executor.shutdown(wait=ctx.stop.is_set())

    result.stats = ctx.stats
    return result
