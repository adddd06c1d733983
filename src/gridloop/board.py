"""ASCII boards: one text row per lattice row.

At edge positions `-` and `|` mean LINE, `x` means BLANK and anything else is
undecided. Vertex and cell positions are ignored when reading and written as
`+` and a space.

    +-+ + +
          x
    + + + +
"""

from typing import Iterable, List, Union

from .kernel import Edge, GridLoop
from .pos import is_edge, is_vertex

Board = Union[str, Iterable[str]]

LINE_CHARS = "-|"
BLANK_CHAR = "x"


def board_rows(board: Board) -> List[str]:
    if isinstance(board, str):
        rows = board.split("\n")
    else:
        rows = list(board)
    rows = [r.rstrip("\r") for r in rows]
    while rows and not rows[-1].strip():
        rows.pop()
    while rows and not rows[0].strip():
        rows.pop(0)
    if len(rows) < 3 or len(rows) % 2 == 0:
        raise ValueError(f"A board needs an odd number (>= 3) of rows, got {len(rows)}")
    return rows


def parse_board(board: Board) -> GridLoop:
    """Build a kernel and decide every edge drawn on `board`, one at a time."""
    rows = board_rows(board)
    lattice_width = max(len(r) for r in rows)
    if lattice_width % 2 == 0:
        lattice_width += 1
    grid_loop = GridLoop(len(rows) // 2, lattice_width // 2)

    for y, row in enumerate(rows):
        for x, ch in enumerate(row):
            if x >= grid_loop.lattice_width or not is_edge((y, x)):
                continue
            if ch in LINE_CHARS:
                grid_loop.decide((y, x), Edge.LINE)
            elif ch == BLANK_CHAR:
                grid_loop.decide((y, x), Edge.BLANK)
    return grid_loop


def render_board(grid_loop: GridLoop) -> List[str]:
    rows = []
    for y in range(grid_loop.lattice_height):
        chars = []
        for x in range(grid_loop.lattice_width):
            if is_vertex((y, x)):
                chars.append("+")
            elif is_edge((y, x)):
                status = grid_loop.get_edge((y, x))
                if status == Edge.LINE:
                    chars.append("-" if y % 2 == 0 else "|")
                elif status == Edge.BLANK:
                    chars.append(BLANK_CHAR)
                else:
                    chars.append(" ")
            else:
                chars.append(" ")
        rows.append("".join(chars))
    return rows
