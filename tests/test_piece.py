import numpy as np
import pytest

from polytile.bitboard import mask_cells
from polytile.errors import ConfigError
from polytile.piece import (
    Piece,
    anchor_templates,
    build_placement_index,
    fitting_orientations,
    normalize,
    orientations,
    parse_shape,
    shape_from_cells,
)

from conftest import DOMINO, L_TROMINO, SINGLE, T_TETROMINO


def grid(*rows: str) -> np.ndarray:
    return np.array([[ch == "*" for ch in row] for row in rows], dtype=bool)


def test_parse_shape():
    assert np.array_equal(parse_shape("**\n*"), grid("**", "* "))


def test_parse_shape_ignores_indentation_and_tabs():
    assert np.array_equal(parse_shape("\t  **\r\n\t  *\n"), grid("**", "* "))
    assert np.array_equal(parse_shape("   *\n  ***"), grid(" * ", "***"))


@pytest.mark.parametrize(
    "text, message",
    [
        ("*x", "Invalid character"),
        ("**\n  \n**", "has no"),
        ("", "has no"),
    ],
)
def test_parse_shape_errors(text, message):
    with pytest.raises(ConfigError, match=message):
        parse_shape(text)


def test_shape_from_cells_is_relative():
    assert np.array_equal(shape_from_cells({(5, 7), (5, 8), (6, 8)}), grid("* ", "**"))


def test_shape_from_cells_errors():
    with pytest.raises(ConfigError, match="no cells"):
        shape_from_cells(set())
    with pytest.raises(ConfigError, match="Row 1"):
        shape_from_cells({(0, 0), (0, 2)})


def test_normalize_trims_empty_border():
    padded = grid("    ", " ** ", "  * ", "    ")
    assert np.array_equal(normalize(padded), grid("**", " *"))
    with pytest.raises(ConfigError, match="no occupied cells"):
        normalize(grid("  ", "  "))


@pytest.mark.parametrize(
    "cells, expected",
    [
        (SINGLE, 1),
        ({(0, 0), (1, 0), (0, 1), (1, 1)}, 1),
        (DOMINO, 2),
        ({(0, 0), (1, 0), (2, 0), (3, 0)}, 2),
        ({(1, 0), (2, 0), (0, 1), (1, 1)}, 2),
        (L_TROMINO, 4),
        (T_TETROMINO, 4),
        ({(1, 0), (0, 1), (1, 1), (2, 1), (1, 2)}, 1),
    ],
)
def test_orientation_count(cells, expected):
    orients = orientations(shape_from_cells(cells))
    assert len(orients) == expected
    for i, a in enumerate(orients):
        assert int(a.sum()) == len(cells)
        for b in orients[i + 1 :]:
            assert not np.array_equal(a, b)


def test_orientations_rotate_by_quarter_turns():
    orients = orientations(grid("***"))
    assert [o.shape for o in orients] == [(1, 3), (3, 1)]


def test_fitting_orientations():
    line = orientations(grid("****"))
    assert [o.shape for o in fitting_orientations(line, 4, 2)] == [(1, 4)]
    assert [o.shape for o in fitting_orientations(line, 1, 4)] == [(4, 1)]
    with pytest.raises(ConfigError, match="too large"):
        fitting_orientations(line, 3, 3)


def test_anchor_templates():
    templates = anchor_templates(grid(" *", "**"))
    assert len(templates) == 2
    top, bottom = templates
    assert (top.rows_above, top.rows_below, top.cols_left, top.cols_right) == (0, 1, 1, 0)
    assert sorted(top.offsets) == [(-1, 1), (0, 0), (0, 1)]
    assert (bottom.rows_above, bottom.rows_below, bottom.cols_left, bottom.cols_right) == (
        1,
        0,
        0,
        1,
    )
    assert sorted(bottom.offsets) == [(0, 0), (1, -1), (1, 0)]


def test_domino_placement_index():
    piece = Piece.from_cells("A", DOMINO, 3, 2)
    assert piece.n_cells == 2
    assert piece.n_orientations == 2
    cells_at = [sorted(mask_cells(m)) for c in range(6) for m in piece.masks_at(c)]
    assert sorted(cells_at) == [[0, 1], [0, 3], [1, 2], [1, 4], [2, 5], [3, 4], [4, 5]]
    assert len(piece.masks_at(0)) == 2
    assert piece.masks_at(5) == ()


@pytest.mark.parametrize("cells", [SINGLE, DOMINO, L_TROMINO, T_TETROMINO])
def test_placement_index_keyed_by_lowest_cell(cells):
    piece = Piece.from_cells("A", cells, 5, 4)
    assert len(piece.placement_index) == 20
    for cell, masks in enumerate(piece.placement_index):
        assert len(set(masks)) == len(masks)
        for mask in masks:
            covered = mask_cells(mask)
            assert min(covered) == cell
            assert len(covered) == len(cells)
            assert max(covered) < 20


def test_l_tromino_placements():
    piece = Piece.from_cells("B", L_TROMINO, 3, 2)
    assert piece.n_orientations == 4
    assert sum(len(masks) for masks in piece.placement_index) == 8


def test_placement_index_is_repeatable():
    first = build_placement_index(orientations(grid("**", " *")), 4, 3)
    second = build_placement_index(orientations(grid("**", " *")), 4, 3)
    unsorted = build_placement_index(orientations(grid("**", " *")), 4, 3, deterministic=False)
    assert first == second
    assert [set(masks) for masks in first] == [set(masks) for masks in unsorted]


def test_piece_too_large():
    with pytest.raises(ConfigError, match="too large"):
        Piece.from_cells("A", {(0, 0), (1, 0), (2, 0)}, 2, 2)


def test_piece_accessors():
    piece = Piece.from_text("C", "  **\n  *", 3, 2)
    assert piece.cells() == frozenset({(0, 0), (1, 0), (0, 1)})
    assert piece.shape_lines() == ["**", "*"]
    assert str(piece) == "{C, 3 cells}"
    assert not piece.shape.flags.writeable
