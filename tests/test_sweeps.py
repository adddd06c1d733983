"""Tests for the global sweeps: in/out rule, loop connection, connectability."""

from src.gridloop.board import parse_board, render_board
from src.gridloop.kernel import Edge, GridLoop, batch
from src.gridloop.sweeps import apply_inout_rule, check_connectability, check_loop_connection


def _decide_all(grid_loop, decisions):
    for pos, status in decisions:
        grid_loop.decide(pos, status)


def test_inout_rule_forces_line():
    grid_loop = GridLoop(5, 5)
    _decide_all(grid_loop, [
        ((3, 4), Edge.LINE),
        ((3, 6), Edge.BLANK),
        ((4, 3), Edge.BLANK),
        ((4, 7), Edge.LINE),
        ((6, 3), Edge.BLANK),
        ((6, 7), Edge.BLANK),
        ((7, 6), Edge.LINE),
    ])

    apply_inout_rule(grid_loop)

    assert grid_loop.get_edge((7, 4)) == Edge.LINE
    assert not grid_loop.inconsistent()


def test_inout_rule_detects_contradiction():
    grid_loop = GridLoop(5, 5)
    _decide_all(grid_loop, [
        ((3, 4), Edge.LINE),
        ((3, 6), Edge.BLANK),
        ((4, 3), Edge.BLANK),
        ((4, 7), Edge.LINE),
        ((6, 3), Edge.BLANK),
        ((6, 7), Edge.BLANK),
        ((7, 4), Edge.BLANK),
        ((7, 6), Edge.LINE),
    ])

    apply_inout_rule(grid_loop)

    assert grid_loop.inconsistent()


def test_inout_rule_reaches_the_border():
    grid_loop = GridLoop(5, 5)
    _decide_all(grid_loop, [
        ((5, 0), Edge.LINE),
        ((5, 2), Edge.BLANK),
        ((5, 4), Edge.BLANK),
        ((4, 5), Edge.LINE),
        ((2, 5), Edge.LINE),
    ])

    apply_inout_rule(grid_loop)

    assert grid_loop.get_edge((0, 5)) == Edge.LINE
    assert not grid_loop.inconsistent()


def _run_loop_connection(board, expected):
    grid_loop = parse_board(board)
    check_loop_connection(grid_loop)
    assert render_board(grid_loop) == expected
    assert not grid_loop.inconsistent()
    return grid_loop


def test_loop_connection_small():
    _run_loop_connection(
        [
            "+ + +x+ +",
            "         ",
            "+ + + + +",
            "         ",
            "+ + + + +",
            "|        ",
            "+-+ +x+-+",
        ],
        [
            "+ + +x+ +",
            "         ",
            "+ + +-+ +",
            "      x |",
            "+ + +-+x+",
            "|     | |",
            "+-+ +x+-+",
        ],
    )


def test_loop_connection_across_a_wall():
    _run_loop_connection(
        [
            "+ + + + + + +",
            "             ",
            "+ +-+ + + + +",
            "             ",
            "+ + + + + + +",
            "  x x x x x  ",
            "+ + +x+ + + +",
            "             ",
            "+-+ +x+ + + +",
            "             ",
            "+ + + + + + +",
        ],
        [
            "+ + + + + + +",
            "             ",
            "+ +-+ + + + +",
            "             ",
            "+ + + + + + +",
            "| x x x x x |",
            "+ + +x+ + + +",
            "             ",
            "+-+ +x+ + + +",
            "             ",
            "+ + +-+ + + +",
        ],
    )


def test_loop_connection_needs_lines_on_both_sides():
    board = [
        "+ + + + + + +",
        "             ",
        "+ + + + + + +",
        "             ",
        "+ + + + + + +",
        "  x x x x x  ",
        "+ + +x+ + + +",
        "             ",
        "+-+ +x+ + + +",
        "             ",
        "+ + + + + + +",
    ]
    _run_loop_connection(board, list(board))


def test_loop_connection_through_a_corridor():
    _run_loop_connection(
        [
            "+ + + + + + + + +",
            "    x x   x x    ",
            "+ +x+x+x+x+x+x+ +",
            "    x x   x x    ",
            "+ +x+x+ + +x+x+ +",
            "|   x       x    ",
            "+ +x+x+-+ +x+x+ +",
            "    x       x    ",
            "+ +x+x+ + +x+x+ +",
            "    x x   x x    ",
            "+ +x+x+x+x+x+x+ +",
            "    x x   x x    ",
            "+ + + + + + + + +",
        ],
        [
            "+ +-+-+-+x+x+x+ +",
            "    x x | x x    ",
            "+ +x+x+x+x+x+x+ +",
            "    x x | x x    ",
            "+ +x+x+ + +x+x+ +",
            "|   x       x    ",
            "+ +x+x+-+ +x+x+ +",
            "    x       x    ",
            "+ +x+x+ + +x+x+ +",
            "    x x | x x    ",
            "+ +x+x+x+x+x+x+ +",
            "    x x | x x    ",
            "+ +-+-+-+x+x+x+ +",
        ],
    )


def test_loop_connection_without_inner_line_decides_nothing():
    board = [
        "+ + + + + + + + +",
        "    x x   x x    ",
        "+ +x+x+x+x+x+x+ +",
        "    x x   x x    ",
        "+ +x+x+ + +x+x+ +",
        "|   x       x    ",
        "+ +x+x+ + +x+x+ +",
        "    x       x    ",
        "+ +x+x+ + +x+x+ +",
        "    x x   x x    ",
        "+ +x+x+x+x+x+x+ +",
        "    x x   x x    ",
        "+ + + + + + + + +",
    ]
    _run_loop_connection(board, list(board))


def test_loop_connection_skipped_inside_batch():
    grid_loop = parse_board([
        "+ + +x+ +",
        "         ",
        "+ + + + +",
        "         ",
        "+ + + + +",
        "|        ",
        "+-+ +x+-+",
    ])
    decided = grid_loop.num_decided_edges()
    with batch(grid_loop):
        check_loop_connection(grid_loop)
        assert grid_loop.num_decided_edges() == decided


def test_connectability_accepts_connected_lines():
    grid_loop = GridLoop(3, 3)
    grid_loop.decide((2, 3), Edge.LINE)
    grid_loop.decide((4, 3), Edge.LINE)
    check_connectability(grid_loop)
    assert not grid_loop.inconsistent()


def test_connectability_rejects_walled_off_lines():
    grid_loop = GridLoop(3, 3)
    grid_loop.decide((0, 3), Edge.LINE)
    # cut the vertex graph between the top two and bottom two vertex rows
    for x in (0, 2, 4, 6):
        grid_loop.decide((3, x), Edge.BLANK)
    grid_loop.decide((6, 3), Edge.LINE)
    check_connectability(grid_loop)
    assert grid_loop.inconsistent()
