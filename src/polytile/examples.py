"""Bundled example puzzles."""

from polytile.puzzle_config import PuzzleConfig

SIMPLE = (
    3,
    2,
    """
    **

    *

    **
    *
    """,
)
"""A 3x2 board with a domino, a single cell and an L-tromino.

One solution:

    ┌───┬─┐
    │A A│C│
    ├─┬─┘ │
    │B│C C│
    └─┴───┘
"""

MILK = (
    10,
    6,
    """
    ****
    *

    ***
     **

    ****
     *

     *
    ***
     *

    **
     *
    **

    *
    *
    ***

      *
    ***
    *

    **
     **
      *

     *
    ***
      *

    ***
     *
     *

      **
    ***

    *****
    """,
)
"""The twelve pentominoes on a 10x6 board (a chocolate box puzzle)."""

EXAMPLES = {"simple": SIMPLE, "milk": MILK}


def load_example(name: str) -> PuzzleConfig:
    """Build the configuration of a bundled example puzzle."""
    width, height, pieces_text = EXAMPLES[name]
    return PuzzleConfig.from_text(width, height, pieces_text, name=name)
