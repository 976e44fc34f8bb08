"""Puzzle configurations and the loader for puzzle files."""

from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path

from polytile.errors import ConfigError
from polytile.piece import Piece

PIECE_NAMES = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
"""Identifiers given to pieces, in order, when they are not named explicitly."""

COMMENT = "#"
"""Lines of a puzzle file starting with this character are ignored."""


@dataclass
class PuzzleConfig:
    """A puzzle configuration: board size and the pieces that must tile it."""

    width: int
    """Number of board columns."""

    height: int
    """Number of board rows."""

    pieces: list[Piece]
    """The pieces, in the order the search tries them."""

    name: str = field(default="puzzle")
    """A label for the puzzle, used for log file paths."""

    def __post_init__(self) -> None:
        """Validate the configuration."""
        validate_dims(self.width, self.height)

        if not self.pieces:
            raise ConfigError("A puzzle needs at least one piece.")
        if len(self.pieces) > len(PIECE_NAMES):
            raise ConfigError(
                f"Too many pieces ({len(self.pieces)}); at most {len(PIECE_NAMES)} can be "
                "given unique names."
            )

        names = [p.name for p in self.pieces]
        for name in names:
            if len(name) != 1 or name.isspace():
                raise ConfigError(f"Piece identifier must be a single visible character: {name!r}")
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ConfigError(f"Duplicate piece identifiers: {', '.join(duplicates)}")

        # Every piece index must have been built for this board
        for piece in self.pieces:
            if (piece.board_width, piece.board_height) != (self.width, self.height):
                raise ConfigError(
                    f"Piece {piece.name} was built for a different board size "
                    f"({piece.board_width}x{piece.board_height}) than "
                    f"{self.width}x{self.height}."
                )

        total = sum(p.n_cells for p in self.pieces)
        if total != self.width * self.height:
            pieces_str = " ".join(str(p) for p in self.pieces)
            raise ConfigError(
                f"Pieces occupy a total of {total} cells [{pieces_str}], but the "
                f"{self.width}x{self.height} board has {self.width * self.height} cells."
            )

    def __str__(self) -> str:
        """Return a string representation of the configuration."""
        return f"{self.name} ({self.width}x{self.height}): {len(self.pieces)} pieces"

    @property
    def n_cells(self) -> int:
        """Number of board cells."""
        return self.width * self.height

    def to_dict(self) -> dict:
        """Return a dictionary representation of the configuration.

        Cell sets are emitted as sorted lists of `[x, y]` pairs, so the result can be dumped as
        JSON and read back with `from_dict`.
        """
        return {
            "name": self.name,
            "width": self.width,
            "height": self.height,
            "pieces": [
                {"identifier": p.name, "cells": [list(c) for c in sorted(p.cells())]}
                for p in self.pieces
            ],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PuzzleConfig":
        """Create a configuration from `{width, height, pieces: [{identifier, cells}]}`.

        Raises:
            ConfigError: If the board size or any piece is invalid, or the pieces do not
                cover the board exactly.
        """
        try:
            width, height, piece_data = data["width"], data["height"], data["pieces"]
        except KeyError as e:
            raise ConfigError(f"Puzzle configuration is missing {e}.") from e
        validate_dims(width, height)
        if len(piece_data) > len(PIECE_NAMES):
            raise ConfigError(
                f"Too many pieces ({len(piece_data)}); at most {len(PIECE_NAMES)} can be "
                "given unique names."
            )
        pieces = []
        for piece_no, item in enumerate(piece_data):
            try:
                name, raw_cells = item["identifier"], item["cells"]
                cells = [(int(x), int(y)) for x, y in raw_cells]
            except KeyError as e:
                raise ConfigError(f"Piece {piece_no} is missing {e}.") from e
            except (TypeError, ValueError) as e:
                raise ConfigError(f"Piece {piece_no} has malformed cells: {e}") from e
            pieces.append(Piece.from_cells(name, cells, width, height))
        return cls(width=width, height=height, pieces=pieces, name=data.get("name", "puzzle"))

    @classmethod
    def from_text(
        cls, width: int, height: int, pieces_text: str, *, name: str = "puzzle"
    ) -> "PuzzleConfig":
        """Create a configuration from ASCII pieces separated by blank lines.

        Pieces are named `A`, `B`, ... in the order they appear.
        """
        validate_dims(width, height)
        blocks = split_pieces(pieces_text)
        if len(blocks) > len(PIECE_NAMES):
            raise ConfigError(
                f"Too many pieces ({len(blocks)}); at most {len(PIECE_NAMES)} can be "
                "given unique names."
            )
        pieces = []
        for piece_name, block in zip(PIECE_NAMES, blocks):
            try:
                pieces.append(Piece.from_text(piece_name, block, width, height))
            except ConfigError as e:
                raise ConfigError(f"Cannot parse piece {piece_name}: {e}\n{block}") from e
        return cls(width=width, height=height, pieces=pieces, name=name)


def validate_dims(width: object, height: object) -> None:
    """Ensure the board dimensions are positive integers."""
    for label, value in (("width", width), ("height", height)):
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ConfigError(f"Board {label} must be a positive integer, got {value!r}.")


def split_pieces(pieces_text: str) -> list[str]:
    """Split ASCII piece drawings on whitespace-only lines."""
    blocks: list[str] = []
    current: list[str] = []
    for line in pieces_text.replace("\r", "").split("\n"):
        if line.strip() == "":
            if current:
                blocks.append("\n".join(current))
                current = []
            continue
        current.append(line)
    if current:
        blocks.append("\n".join(current))
    return blocks


def load_config(config_path: PathLike | str) -> PuzzleConfig:
    """Load a puzzle file.

    The first non-comment line holds the board width and height.  The remaining lines are
    piece drawings separated by blank lines.  Lines starting with `#` are ignored.

    Args:
        config_path (PathLike | str): Path to the puzzle file.

    Raises:
        ConfigError: If the dimensions line or any piece is invalid.
    """
    path = Path(config_path).resolve()

    with open(path, "r", encoding="utf-8") as f:
        lines = [line.rstrip("\n") for line in f if not line.lstrip().startswith(COMMENT)]

    # Skip leading blank lines, then read the dimensions
    while lines and not lines[0].strip():
        lines.pop(0)
    if not lines:
        raise ConfigError(f"Puzzle file is empty: {path}")
    first_line = lines[0].strip()
    try:
        width, height = map(int, first_line.split())
    except ValueError:
        # Covers both incorrect number of values and non-integer values
        raise ConfigError(f"Invalid dimensions line: '{first_line}'") from None

    return PuzzleConfig.from_text(width, height, "\n".join(lines[1:]), name=path.stem)
