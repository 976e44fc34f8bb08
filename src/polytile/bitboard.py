"""Bit-packed board representation and placement masks.

The board is a sequence of 64-bit words read as one long bitfield.  Bit `i` is the cell
`(i % width, i // width)`.  A set bit means the cell is occupied.  Bits past the last real
cell (padding) are set when the board is created, so a scan for the first zero bit never
needs a separate bounds check.
"""

from collections import defaultdict
from collections.abc import Iterable
from typing import NamedTuple, TypeAlias

import numpy as np

WORD_BITS = 64
"""Number of board cells stored in each word."""

ALL_SET = np.uint64(0xFFFF_FFFF_FFFF_FFFF)
"""A word with every bit set; full words are skipped when looking for free cells."""

NO_FREE_SPOT = -1
"""Returned by `Board.first_free_spot` when every cell is occupied."""


class WordMask(NamedTuple):
    """The bits a placement occupies within a single board word."""

    index: int
    """Index of the word within the board."""

    bits: int
    """Bit mask applied to that word."""


PlacementMask: TypeAlias = tuple[WordMask, ...]
"""The cells one positioned piece covers, as word masks sorted by ascending word index."""


def n_words(width: int, height: int) -> int:
    """Number of words needed to hold a `width` x `height` board."""
    return -(-(width * height) // WORD_BITS)


def mask_from_cells(cells: Iterable[int]) -> PlacementMask:
    """Build a placement mask in which each given absolute cell index is a set bit."""
    words: defaultdict[int, int] = defaultdict(int)
    for cell in cells:
        word_idx, bit = divmod(cell, WORD_BITS)
        words[word_idx] |= 1 << bit
    return tuple(WordMask(idx, words[idx]) for idx in sorted(words))


def mask_cells(mask: PlacementMask) -> list[int]:
    """Return the absolute cell indices covered by a mask, in ascending order."""
    cells: list[int] = []
    for word_idx, bits in mask:
        bit = 0
        while bits:
            if bits & 1:
                cells.append(word_idx * WORD_BITS + bit)
            bits >>= 1
            bit += 1
    return cells


def grid_positions(mask: PlacementMask, width: int) -> list[tuple[int, int]]:
    """Return the `(x, y)` grid positions covered by a mask on a board of the given width."""
    return [(cell % width, cell // width) for cell in mask_cells(mask)]


class Board:
    """An immutable bitboard.

    Boards are shared between search branches running on different threads, so no
    operation modifies a board: `place` returns a new one.
    """

    __slots__ = ("words", "width", "height")

    def __init__(self, words: np.ndarray, width: int, height: int) -> None:
        if words.dtype != np.uint64 or words.shape != (n_words(width, height),):
            raise ValueError(f"Expected {n_words(width, height)} uint64 words for a "
                             f"{width}x{height} board, got {words.dtype} {words.shape}.")
        # Freeze a private copy; the caller's array is left untouched
        words = words.copy()
        words.flags.writeable = False
        self.words: np.ndarray = words
        """The board words; read-only."""

        self.width: int = width
        """Number of columns."""

        self.height: int = height
        """Number of rows."""

    @classmethod
    def new(cls, width: int, height: int) -> "Board":
        """Create an empty board: real cells clear, padding bits set."""
        size = width * height
        words = np.zeros(n_words(width, height), dtype=np.uint64)
        used_bits = size % WORD_BITS
        if used_bits:
            words[-1] = np.uint64(((1 << WORD_BITS) - 1) ^ ((1 << used_bits) - 1))
        return cls(words, width, height)

    @property
    def n_cells(self) -> int:
        """Number of real (non-padding) cells."""
        return self.width * self.height

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and np.array_equal(self.words, other.words)
        )

    def __hash__(self) -> int:
        return hash((self.width, self.height, self.words.tobytes()))

    def __repr__(self) -> str:
        words = ", ".join(f"{i}: {int(w):x}" for i, w in enumerate(self.words))
        return f"Board({self.width}x{self.height}; {words})"

    def is_set(self, cell: int) -> bool:
        """Return whether the given absolute cell index (or padding bit) is occupied."""
        word_idx, bit = divmod(cell, WORD_BITS)
        return bool((int(self.words[word_idx]) >> bit) & 1)

    def first_free_spot(self) -> int:
        """Return the lowest unoccupied cell index, or `NO_FREE_SPOT` if the board is full."""
        open_words = np.flatnonzero(self.words != ALL_SET)
        if open_words.size == 0:
            return NO_FREE_SPOT
        word_idx = int(open_words[0])
        value = int(self.words[word_idx])
        for bit in range(WORD_BITS):
            if not value & 1:
                return word_idx * WORD_BITS + bit
            value >>= 1
        raise RuntimeError(f"Word {word_idx} ({value:x}) is not full, yet has no unset bit.")

    def place(self, mask: PlacementMask) -> "Board | None":
        """Return a new board with the mask's bits set, or None if the mask overlaps this board."""
        for word_idx, bits in mask:
            if int(self.words[word_idx]) & bits:
                return None
        words = self.words.copy()
        for word_idx, bits in mask:
            words[word_idx] |= np.uint64(bits)
        return Board(words, self.width, self.height)

    def filled_cells(self) -> int:
        """Number of occupied real cells (padding excluded)."""
        padding = self.words.size * WORD_BITS - self.n_cells
        return sum(int(w).bit_count() for w in self.words) - padding
