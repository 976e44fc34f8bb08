"""Search states: partial tilings explored by the solver."""

from collections.abc import Iterator
from dataclasses import dataclass
from typing import NamedTuple

from polytile.bitboard import NO_FREE_SPOT, Board, PlacementMask, grid_positions
from polytile.piece import Piece
from polytile.puzzle_config import PuzzleConfig


class Placement(NamedTuple):
    """A piece committed to the board with a specific mask."""

    piece: Piece
    mask: PlacementMask

    def cells(self, width: int) -> frozenset[tuple[int, int]]:
        """The `(x, y)` cells covered by this placement."""
        return frozenset(grid_positions(self.mask, width))


@dataclass(frozen=True)
class SearchState:
    """An immutable partial tiling.

    States are shared between worker threads; expanding a state produces new states and
    never modifies it.
    """

    board: Board
    """Snapshot of the occupied cells."""

    first_free: int
    """Lowest free cell of `board`, or `NO_FREE_SPOT` if the board is full."""

    placed: tuple[Placement, ...]
    """Placements committed so far, in order."""

    remaining: tuple[Piece, ...]
    """Pieces not yet placed, in configuration order."""

    @classmethod
    def initial(cls, config: PuzzleConfig) -> "SearchState":
        """The root state: an empty board and every piece still to place."""
        board = Board.new(config.width, config.height)
        return cls(
            board=board,
            first_free=board.first_free_spot(),
            placed=(),
            remaining=tuple(config.pieces),
        )

    @property
    def is_complete(self) -> bool:
        """Whether every cell is covered and every piece used."""
        return self.first_free == NO_FREE_SPOT and not self.remaining

    @property
    def depth(self) -> int:
        """Number of pieces placed."""
        return len(self.placed)

    def children(self) -> Iterator["SearchState"]:
        """Yield the states reachable by placing one remaining piece at the first free cell.

        Pieces are tried in configuration order and masks in placement index order.  Masks
        that overlap the board are skipped.
        """
        if self.first_free == NO_FREE_SPOT:
            return
        for i, piece in enumerate(self.remaining):
            for mask in piece.masks_at(self.first_free):
                board = self.board.place(mask)
                if board is None:
                    continue
                yield SearchState(
                    board=board,
                    first_free=board.first_free_spot(),
                    placed=(*self.placed, Placement(piece, mask)),
                    remaining=self.remaining[:i] + self.remaining[i + 1 :],
                )

    def tiling(self) -> list[tuple[str, frozenset[tuple[int, int]]]]:
        """The placements as `(piece identifier, cell set)` pairs, in placement order."""
        return [(p.piece.name, p.cells(self.board.width)) for p in self.placed]
