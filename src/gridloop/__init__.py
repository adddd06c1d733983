"""Loop-consistency kernel for single-loop grid puzzles."""

from .kernel import Edge, GridLoop, GridLoopField, PropagationBatch, batch, check, decide_edge
from .queue import PropagationQueue
from .separation import INT_WEIGHTS, GraphSeparation, WeightOps
from .sweeps import apply_inout_rule, check_connectability, check_loop_connection
from .board import parse_board, render_board

__all__ = [
    "Edge",
    "GridLoop",
    "GridLoopField",
    "PropagationBatch",
    "PropagationQueue",
    "GraphSeparation",
    "WeightOps",
    "INT_WEIGHTS",
    "batch",
    "check",
    "decide_edge",
    "apply_inout_rule",
    "check_connectability",
    "check_loop_connection",
    "parse_board",
    "render_board",
]
