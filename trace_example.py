"""Example: how to trace a propagation run and save the steps.

Shows the tracer collecting kernel steps while a board is solved.
"""

from pathlib import Path

from solver import board_status, solve_board
from src.gridloop.board import render_board
from src.utils.trace import enable_tracing, get_tracer, reset_tracer


def solve_and_trace(board, output_trace_csv: Path = None):
    """
    Solve a board and log all steps to a trace file.

    Args:
        board: ASCII board (string or list of rows)
        output_trace_csv: Path to write trace CSV (optional)

    Returns:
        The propagated GridLoop
    """
    # Reset tracer for this board
    reset_tracer()
    enable_tracing()
    tracer = get_tracer()

    grid_loop = solve_board(board)

    summary = tracer.summary()
    print(f"\n{'='*50}")
    print(f"Propagation Summary ({board_status(grid_loop)}):")
    print(f"  Total steps: {summary['total_steps']}")
    print(f"  Decisions: {summary['num_decisions']}")
    print(f"  Joins: {summary['num_joins']}")
    print(f"  Time: {summary['elapsed_time_seconds']:.3f}s")
    print(f"  Actions: {summary['action_counts']}")
    print(f"{'='*50}\n")

    if output_trace_csv:
        tracer.to_csv(output_trace_csv)

    return grid_loop


if __name__ == "__main__":
    example_board = [
        "+ + + +",
        "       ",
        "+ + +-+",
        "    | |",
        "+ + +-+",
        "       ",
        "+ + + +",
    ]

    trace_output = Path("traces/example_trace.csv")
    grid_loop = solve_and_trace(example_board, trace_output)
    print("\n".join(render_board(grid_loop)))
