"""Render tilings as box-drawing diagrams.

Each board cell becomes a 2x2 block of characters in a `(2 * height + 1) x (2 * width + 1)`
canvas: the piece identifier sits at odd/odd positions, borders between different pieces at
the positions in between, and box-drawing junctions at the even/even corners.
"""

from collections.abc import Iterable

from polytile.bitboard import NO_FREE_SPOT
from polytile.solver.state import SearchState

HORIZONTAL = "─"
VERTICAL = "│"
BLANK = " "

LEFT, RIGHT, UP, DOWN = 1, 2, 4, 8
"""Bit flags for the border segments meeting at a corner."""

JUNCTIONS = {
    LEFT | RIGHT | UP | DOWN: "┼",
    LEFT | RIGHT | UP: "┴",
    LEFT | RIGHT | DOWN: "┬",
    LEFT | RIGHT: HORIZONTAL,
    LEFT | UP | DOWN: "┤",
    LEFT | UP: "┘",
    LEFT | DOWN: "┐",
    LEFT: HORIZONTAL,
    RIGHT | UP | DOWN: "├",
    RIGHT | UP: "└",
    RIGHT | DOWN: "┌",
    RIGHT: HORIZONTAL,
    UP | DOWN: VERTICAL,
    UP: VERTICAL,
    DOWN: VERTICAL,
    0: BLANK,
}
"""Corner glyph for each combination of border segments."""


def render_tiling(
    width: int, height: int, tiling: Iterable[tuple[str, Iterable[tuple[int, int]]]]
) -> str:
    """Draw `(identifier, cells)` placements on a `width` x `height` board.

    Cells not covered by any placement are left blank.
    """
    canvas = [[BLANK] * (2 * width + 1) for _ in range(2 * height + 1)]

    def name_at(x: int, y: int) -> str:
        return canvas[2 * y + 1][2 * x + 1]

    placements = [(name, list(cells)) for name, cells in tiling]
    for name, cells in placements:
        for x, y in cells:
            canvas[2 * y + 1][2 * x + 1] = name

    # Borders: drawn wherever the neighbouring cell is off-board or holds another piece
    for _name, cells in placements:
        for x, y in cells:
            for dx, dy, edge in ((-1, 0, VERTICAL), (1, 0, VERTICAL), (0, -1, HORIZONTAL),
                                 (0, 1, HORIZONTAL)):
                nx, ny = x + dx, y + dy
                on_board = 0 <= nx < width and 0 <= ny < height
                draw = not on_board or name_at(nx, ny) != name_at(x, y)
                canvas[2 * y + 1 + dy][2 * x + 1 + dx] = edge if draw else BLANK

    for y in range(height + 1):
        for x in range(width + 1):
            box = 0
            if x > 0 and canvas[2 * y][2 * x - 1] != BLANK:
                box |= LEFT
            if x < width and canvas[2 * y][2 * x + 1] != BLANK:
                box |= RIGHT
            if y > 0 and canvas[2 * y - 1][2 * x] != BLANK:
                box |= UP
            if y < height and canvas[2 * y + 1][2 * x] != BLANK:
                box |= DOWN
            canvas[2 * y][2 * x] = JUNCTIONS[box]

    return "\n".join("".join(row) for row in canvas)


def render_state(state: SearchState) -> str:
    """Draw a (possibly partial) search state.

    Partial states also list the pieces left and the next free cell.
    """
    board = state.board
    lines = [render_tiling(board.width, board.height, state.tiling())]
    if state.remaining:
        lines.append(f"Pieces left: {' '.join(str(p) for p in state.remaining)}")
    if state.first_free != NO_FREE_SPOT:
        x, y = state.first_free % board.width, state.first_free // board.width
        lines.append(f"Free spot: x={x} / y={y}")
    return "\n".join(lines)
