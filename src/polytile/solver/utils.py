"""Utility functions for the polytile solver."""

from collections.abc import Iterable

from bitarray.util import count_and, zeros

TIMESTAMP_FMT = "%Y-%m-%d %H:%M:%S.%f %Z%z"


def time_str(seconds: float) -> str:
    """Convert a time duration in seconds to a human-readable string.

    Args:
        seconds: Time duration in seconds.

    Returns:
        A string formatted as "HH:MM:SS.ss".
    """
    hours, rem = divmod(seconds, 3600)
    minutes, secs = divmod(rem, 60)
    return f"{int(hours):02}:{int(minutes):02}:{secs:05.2f}"


def int_comma(n: int) -> str:
    """Format an integer with commas as thousands separators.

    Args:
        n: The integer to format.

    Returns:
        A string representation of the integer with commas.
    """
    return f"{n:,}"


def validate_tiling(
    width: int, height: int, tiling: Iterable[tuple[str, Iterable[tuple[int, int]]]]
) -> bool:
    """Check that a tiling covers every cell of a `width` x `height` board exactly once.

    Args:
        width: Board width.
        height: Board height.
        tiling: `(piece identifier, cells)` pairs, as returned by `SearchState.tiling`.
    """
    covered = zeros(width * height)
    for _name, cells in tiling:
        piece_bits = zeros(width * height)
        for x, y in cells:
            if not (0 <= x < width and 0 <= y < height):
                return False
            idx = y * width + x
            if piece_bits[idx]:
                return False
            piece_bits[idx] = 1
        if count_and(covered, piece_bits):
            return False  # Overlaps an earlier piece
        covered |= piece_bits
    return bool(covered.all())

