"""Lattice coordinates: vertices, edges and cells share one doubled grid."""

from typing import Tuple

# (y, x) on the lattice of a grid, or a plain cell/vertex coordinate.
Pos = Tuple[int, int]
Dir = Tuple[int, int]

FOUR_NEIGHBOURS: Tuple[Dir, ...] = ((-1, 0), (0, -1), (1, 0), (0, 1))


def add(pos: Pos, d: Dir) -> Pos:
    return (pos[0] + d[0], pos[1] + d[1])


def of_cell(cell: Pos) -> Pos:
    """Lattice position of cell `cell`."""
    return (cell[0] * 2 + 1, cell[1] * 2 + 1)


def of_vertex(vertex: Pos) -> Pos:
    """Lattice position of vertex `vertex`."""
    return (vertex[0] * 2, vertex[1] * 2)


def as_vertex(pos: Pos) -> Pos:
    """Vertex coordinate of a lattice position, rounding edges down."""
    return (pos[0] // 2, pos[1] // 2)


def is_vertex(pos: Pos) -> bool:
    return pos[0] % 2 == 0 and pos[1] % 2 == 0


def is_edge(pos: Pos) -> bool:
    return pos[0] % 2 != pos[1] % 2
