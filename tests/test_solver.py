"""Integration-style tests for the board propagation driver."""

import pytest

from solver import board_status, solve_board
from src.gridloop.board import render_board
from src.gridloop.kernel import Edge, GridLoop


def test_solver_finishes_small_board():
    board = "\n".join([
        "+ + + +",
        "       ",
        "+ + +-+",
        "    | |",
        "+ + +-+",
        "       ",
        "+ + + +",
    ])
    grid_loop = solve_board(board)

    assert board_status(grid_loop) == "solved"
    assert grid_loop.num_decided_lines() == 4
    assert render_board(grid_loop)[3] == "x x | |"


def test_solver_uses_sweeps_to_connect_lines():
    board = [
        "+ + +x+ +",
        "         ",
        "+ + + + +",
        "         ",
        "+ + + + +",
        "|        ",
        "+-+ +x+-+",
    ]
    local_only = solve_board(board, sweeps=False)
    swept = solve_board(board)

    assert local_only.get_edge((4, 5)) == Edge.UNDECIDED
    assert swept.get_edge((4, 5)) != Edge.BLANK
    assert swept.num_decided_edges() > local_only.num_decided_edges()
    assert board_status(swept) in ("partial", "solved")


def test_solver_reports_inconsistent_board():
    board = [
        "+-+ + +",
        "| |    ",
        "+-+ + +",
        "       ",
        "+ + +-+",
        "    | |",
        "+ + +-+",
    ]
    grid_loop = solve_board(board)
    assert board_status(grid_loop) == "inconsistent"


def test_solver_accepts_grid_loop_instance():
    grid_loop = GridLoop(3, 3)
    grid_loop.decide((2, 3), Edge.LINE)
    assert solve_board(grid_loop) is grid_loop
    assert board_status(grid_loop) == "partial"


def test_solver_rejects_unknown_input():
    with pytest.raises(TypeError):
        solve_board(42)
