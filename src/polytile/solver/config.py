"""Polytile solver configuration."""

from typing import Literal

from dotenv import find_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Determine the environment file path, or None if not found
ENV_FILE = find_dotenv(usecwd=True) or None


class SolverConfig(BaseSettings):
    """Configuration settings for the polytile solver.

    Each field may be overridden by a `POLYTILE_<FIELD>` environment variable or `.env` entry.
    """

    deterministic: bool = True
    """Whether to sort each placement index entry, making single-threaded replay repeatable.

    Default: True.
    """

    max_workers: int | None = None
    """Number of worker threads. If None (default), uses `worker_multiplier` per CPU."""

    worker_multiplier: int = 2
    """Worker threads per CPU when `max_workers` is None. Default: 2."""

    report_interval: int = 100_000
    """Interval (in number of expanded states) at which to report progress. Default: 100000."""

    queue_order: Literal["lifo", "fifo"] = "lifo"
    """Order in which workers take pending states. "lifo" (default) searches depth-first and
    keeps few states pending; "fifo" searches breadth-first.
    """

    stop_on_solution: bool = True
    """Whether workers stop expanding states once a result has been taken. Default: True.

    When False, workers keep draining and expanding the queue until it is empty.
    """

    log_dir: str = "logs"
    """Directory in which per-run log files are written. Default: "logs"."""

    model_config = SettingsConfigDict(
        env_prefix="POLYTILE_",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )


config = SolverConfig()
