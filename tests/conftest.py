import pytest

from polytile.puzzle_config import PuzzleConfig
from polytile.solver.config import config as solver_config

DOMINO = {(0, 0), (1, 0)}
L_TROMINO = {(0, 0), (0, 1), (1, 1)}
SINGLE = {(0, 0)}
T_TETROMINO = {(0, 0), (1, 0), (2, 0), (1, 1)}


@pytest.fixture
def small_config() -> PuzzleConfig:
    """3x2 board: a domino, an L-tromino and a single cell."""
    return PuzzleConfig.from_dict(
        {
            "width": 3,
            "height": 2,
            "pieces": [
                {"identifier": "A", "cells": DOMINO},
                {"identifier": "B", "cells": L_TROMINO},
                {"identifier": "C", "cells": SINGLE},
            ],
        }
    )


@pytest.fixture
def two_t_config() -> PuzzleConfig:
    """4x2 board with two T-tetrominoes: the area matches, but no tiling exists."""
    return PuzzleConfig.from_dict(
        {
            "width": 4,
            "height": 2,
            "name": "two-t",
            "pieces": [
                {"identifier": "A", "cells": T_TETROMINO},
                {"identifier": "B", "cells": T_TETROMINO},
            ],
        }
    )


@pytest.fixture
def log_dir(tmp_path, monkeypatch):
    """Send solver log files to a temporary directory."""
    monkeypatch.setattr(solver_config, "log_dir", str(tmp_path / "logs"))
    return tmp_path / "logs"
