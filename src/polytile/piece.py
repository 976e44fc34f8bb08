"""Piece shapes, their orientations, and the per-cell placement index.

A piece's placement index answers the question the search asks at every step: "which
placements of this piece cover the lowest free cell of the board?"  Entry `c` holds every
placement mask whose lowest occupied cell is `c`, for every orientation of the piece.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import NamedTuple, TypeAlias

import numpy as np
from sortedcontainers import SortedSet

from polytile.bitboard import PlacementMask, mask_from_cells
from polytile.errors import ConfigError
from polytile.solver.config import config as solver_config

Grid: TypeAlias = np.ndarray
"""A 2D boolean occupancy grid, indexed `[row, col]`."""

PlacementIndex: TypeAlias = tuple[tuple[PlacementMask, ...], ...]
"""One tuple of placement masks per board cell."""

FILLED = "*"
"""Character marking an occupied cell in ASCII shapes."""

EMPTY = " "
"""Character marking an unoccupied cell in ASCII shapes."""


class Template(NamedTuple):
    """Occupied-cell offsets of one orientation, relative to an anchor cell.

    The anchor is the leftmost occupied cell of one row of the orientation.  The clearance
    fields give how far the piece extends around the anchor, which bounds the board
    positions the anchor may take.
    """

    rows_above: int
    rows_below: int
    cols_left: int
    cols_right: int
    offsets: tuple[tuple[int, int], ...]
    """`(dx, dy)` offset of every occupied cell from the anchor."""


def parse_shape(text: str) -> Grid:
    """Parse an ASCII drawing of a piece into an occupancy grid.

    `*` marks an occupied cell and spaces mark empty cells.  Tabs are treated as spaces and
    carriage returns are dropped.  Common indentation and trailing spaces are ignored.

    Raises:
        ConfigError: If the drawing has an invalid character, a line without any `*`, or no
            `*` at all.
    """
    text = text.replace("\r", "").replace("\t", EMPTY).strip("\n")
    lines = text.split("\n")
    for line_no, line in enumerate(lines):
        invalid = set(line) - {FILLED, EMPTY}
        if invalid:
            raise ConfigError(f"Invalid character(s) in piece: {''.join(sorted(invalid))!r}")
        if FILLED not in line:
            raise ConfigError(f"Line {line_no} of piece has no '{FILLED}': {line!r}")
    width = max(len(line) for line in lines)
    grid = np.array([[ch == FILLED for ch in line.ljust(width)] for line in lines], dtype=bool)
    return normalize(grid)


def shape_from_cells(cells: Iterable[tuple[int, int]]) -> Grid:
    """Build an occupancy grid from a set of `(x, y)` cell coordinates.

    Coordinates are relative: the shape is shifted so its smallest x and y become 0.
    """
    cells = set(cells)
    if not cells:
        raise ConfigError("Piece has no cells.")
    min_x = min(x for x, _ in cells)
    min_y = min(y for _, y in cells)
    width = max(x for x, _ in cells) - min_x + 1
    height = max(y for _, y in cells) - min_y + 1
    grid = np.zeros((height, width), dtype=bool)
    for x, y in cells:
        grid[y - min_y, x - min_x] = True
    return normalize(grid)


def normalize(grid: Grid) -> Grid:
    """Trim a grid to the bounding box of its occupied cells.

    Raises:
        ConfigError: If the grid has no occupied cell, or a row inside the bounding box has
            none.
    """
    grid = np.asarray(grid, dtype=bool)
    if grid.ndim != 2:
        raise ConfigError(f"Piece grid must be 2D, got shape {grid.shape}.")
    rows = np.flatnonzero(grid.any(axis=1))
    cols = np.flatnonzero(grid.any(axis=0))
    if rows.size == 0:
        raise ConfigError("Piece has no occupied cells.")
    trimmed = grid[rows[0] : rows[-1] + 1, cols[0] : cols[-1] + 1]
    empty_rows = np.flatnonzero(~trimmed.any(axis=1))
    if empty_rows.size:
        raise ConfigError(f"Row {int(empty_rows[0])} of piece has no occupied cells.")
    return np.ascontiguousarray(trimmed)


def orientations(grid: Grid) -> list[Grid]:
    """Return the distinct rotations of a normalized grid, starting with the grid itself.

    Rotation stops at the first 90 degree turn that reproduces an orientation already seen,
    so symmetric pieces yield 1 or 2 orientations instead of 4.
    """
    found = [grid]
    current = grid
    for _ in range(3):
        current = np.ascontiguousarray(np.rot90(current))
        if any(np.array_equal(current, prev) for prev in found):
            break
        found.append(current)
    return found


def fitting_orientations(orients: list[Grid], board_width: int, board_height: int) -> list[Grid]:
    """Drop orientations whose bounding box does not fit on the board.

    Raises:
        ConfigError: If no orientation fits.
    """
    fitting = [o for o in orients if o.shape[0] <= board_height and o.shape[1] <= board_width]
    if not fitting:
        raise ConfigError(
            f"Piece is too large to fit on the {board_width}x{board_height} board "
            "in any orientation."
        )
    return fitting


def anchor_templates(orientation: Grid) -> list[Template]:
    """Compute one template per row of an orientation, anchored at that row's leftmost cell."""
    height, width = orientation.shape
    occupied = [(int(c), int(r)) for r, c in np.argwhere(orientation)]
    templates = []
    for row in range(height):
        col = int(np.flatnonzero(orientation[row])[0])
        templates.append(
            Template(
                rows_above=row,
                rows_below=height - row - 1,
                cols_left=col,
                cols_right=width - col - 1,
                offsets=tuple((x - col, y - row) for x, y in occupied),
            )
        )
    return templates


def build_placement_index(
    orients: list[Grid],
    board_width: int,
    board_height: int,
    *,
    deterministic: bool = True,
) -> PlacementIndex:
    """Build the placement index for a piece's orientations on the given board.

    Every in-bounds position of every template yields a mask; the mask is recorded under its
    lowest cell index.  Templates anchored on lower rows reproduce masks already found from
    the top row, so each entry is de-duplicated.

    Args:
        orients: Orientations that fit on the board.
        board_width: Board width in cells.
        board_height: Board height in cells.
        deterministic: Sort each entry, so the search order does not depend on generation
            order.
    """
    n_cells = board_width * board_height
    entries: list[dict[PlacementMask, None]] = [{} for _ in range(n_cells)]
    for orientation in orients:
        for tpl in anchor_templates(orientation):
            for y in range(tpl.rows_above, board_height - tpl.rows_below):
                for x in range(tpl.cols_left, board_width - tpl.cols_right):
                    cells = [(y + dy) * board_width + x + dx for dx, dy in tpl.offsets]
                    entries[min(cells)].setdefault(mask_from_cells(cells))
    if deterministic:
        return tuple(tuple(SortedSet(entry)) for entry in entries)
    return tuple(tuple(entry) for entry in entries)


@dataclass(frozen=True, eq=False)
class Piece:
    """An immutable piece together with its placement index for one board size."""

    name: str
    """Single-character identifier, also used when rendering."""

    shape: Grid
    """Normalized occupancy grid of the piece as given."""

    n_cells: int
    """Number of cells the piece covers."""

    n_orientations: int
    """Number of distinct orientations that fit on the board."""

    board_width: int
    """Width of the board the placement index was built for."""

    board_height: int
    """Height of the board the placement index was built for."""

    placement_index: PlacementIndex
    """Placement masks keyed by their lowest cell index."""

    def __str__(self) -> str:
        return f"{{{self.name}, {self.n_cells} cells}}"

    def __repr__(self) -> str:
        return f"Piece({self.name!r}, n_cells={self.n_cells})"

    @classmethod
    def from_grid(
        cls,
        name: str,
        grid: Grid,
        board_width: int,
        board_height: int,
        *,
        deterministic: bool | None = None,
    ) -> "Piece":
        """Build a piece from an occupancy grid.

        Raises:
            ConfigError: If the shape is malformed or too large for the board.
        """
        if deterministic is None:
            deterministic = solver_config.deterministic
        shape = normalize(grid).copy()
        shape.flags.writeable = False
        orients = fitting_orientations(orientations(shape), board_width, board_height)
        return cls(
            name=name,
            shape=shape,
            n_cells=int(shape.sum()),
            n_orientations=len(orients),
            board_width=board_width,
            board_height=board_height,
            placement_index=build_placement_index(
                orients, board_width, board_height, deterministic=deterministic
            ),
        )

    @classmethod
    def from_cells(
        cls,
        name: str,
        cells: Iterable[tuple[int, int]],
        board_width: int,
        board_height: int,
        **kwargs,
    ) -> "Piece":
        """Build a piece from a set of relative `(x, y)` cell coordinates."""
        return cls.from_grid(name, shape_from_cells(cells), board_width, board_height, **kwargs)

    @classmethod
    def from_text(
        cls, name: str, text: str, board_width: int, board_height: int, **kwargs
    ) -> "Piece":
        """Build a piece from an ASCII drawing (see `parse_shape`)."""
        return cls.from_grid(name, parse_shape(text), board_width, board_height, **kwargs)

    def masks_at(self, cell: int) -> tuple[PlacementMask, ...]:
        """Placement masks whose lowest occupied cell is `cell`."""
        return self.placement_index[cell]

    def cells(self) -> frozenset[tuple[int, int]]:
        """The piece's `(x, y)` cells, oriented as given."""
        return frozenset((int(c), int(r)) for r, c in np.argwhere(self.shape))

    def shape_lines(self) -> list[str]:
        """ASCII drawing of the piece, trailing spaces stripped."""
        return ["".join(FILLED if v else EMPTY for v in row).rstrip() for row in self.shape]
