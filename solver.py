"""Top-level solve interface.

Expose `solve_board(board)` that accepts either a pre-built GridLoop or a raw
ASCII board compatible with `src.gridloop.board.parse_board`, and runs the
global sweeps until nothing more can be deduced.
"""

from typing import Any

from src.gridloop.board import parse_board
from src.gridloop.kernel import GridLoop
from src.gridloop.sweeps import apply_inout_rule, check_connectability, check_loop_connection


def solve_board(board: Any, sweeps: bool = True) -> GridLoop:
    """
    Propagate a board to a fixed point and return the kernel.
    Accepts:
      - GridLoop instances (used directly, mutated in place)
      - Raw boards: a string or a list of rows
    """
    if isinstance(board, GridLoop):
        grid_loop = board
    elif isinstance(board, (str, list, tuple)):
        grid_loop = parse_board(board)
    else:
        raise TypeError("solve_board expects a GridLoop instance or an ASCII board")

    if not sweeps:
        return grid_loop

    while not grid_loop.inconsistent() and not grid_loop.fully_solved():
        decided = grid_loop.num_decided_edges()
        apply_inout_rule(grid_loop)
        check_loop_connection(grid_loop)
        check_connectability(grid_loop)
        if grid_loop.num_decided_edges() == decided:
            break
    return grid_loop


def board_status(grid_loop: GridLoop) -> str:
    if grid_loop.inconsistent():
        return "inconsistent"
    if grid_loop.fully_solved():
        return "solved"
    return "partial"


__all__ = ["solve_board", "board_status"]
