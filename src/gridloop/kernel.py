"""Loop-consistency kernel for grid puzzles whose answer is a single closed loop.

Edges of a `height x width` cell grid live on a doubled lattice (see `pos`).
Every edge is UNDECIDED, LINE or BLANK, and belongs to exactly one chain: a run
of edges that must end up in the same state because every vertex strictly
inside the run has exactly one way left to continue. Chains are rings over a
dense arena of edge records; only the records at the two ends of a chain carry
its size, its boundary vertices and the partner end edge.

Contradictions never raise. They set a sticky `inconsistent()` flag that the
caller polls after each mutation.
"""

import copy
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from src.utils.trace import get_tracer

from .pos import FOUR_NEIGHBOURS, Pos, add, is_vertex
from .queue import PropagationQueue


class Edge(Enum):
    UNDECIDED = "undecided"
    LINE = "line"
    BLANK = "blank"


class GridLoopField:
    """
    Base for puzzle fields built on top of a `GridLoop`.

    Subclasses own a kernel and return it from `grid_loop()`. After an edge at
    `pos` changes, `check_neighborhood(pos)` decides which positions to re-queue;
    `inspect(pos)` runs once per dequeued position and may call back into
    `decide_edge` / `check`.
    """

    def grid_loop(self) -> "GridLoop":
        raise NotImplementedError

    def check_neighborhood(self, pos: Pos) -> None:
        y, x = pos
        if y % 2 == 1:
            check(self, (y - 1, x))
            check(self, (y + 1, x))
        else:
            check(self, (y, x - 1))
            check(self, (y, x + 1))

    def inspect(self, pos: Pos) -> None:
        pass


class PropagationBatch:
    """
    Scope during which dirtied positions are queued instead of inspected.

    Only the guard that actually opened the batch drains it, once, on exit.
    Nested guards join the open batch. The drain also runs when the scope exits
    with an exception; the exception propagates afterwards.
    """

    def __init__(self, field: GridLoopField):
        self.field = field
        self.owner = False

    def __enter__(self) -> GridLoopField:
        queue = self.field.grid_loop().queue
        if not queue.is_started():
            queue.start()
            self.owner = True
        return self.field

    def __exit__(self, exc_type, exc, tb) -> bool:
        if not self.owner:
            return False
        self.owner = False
        queue = self.field.grid_loop().queue
        try:
            _drain(self.field)
        finally:
            queue.clear()
            queue.finish()
        return False


def batch(field: GridLoopField) -> PropagationBatch:
    return PropagationBatch(field)


class GridLoop(GridLoopField):
    def __init__(self, height: int, width: int):
        self.height = height
        self.width = width
        self.lattice_height = height * 2 + 1
        self.lattice_width = width * 2 + 1

        n = self.lattice_height * self.lattice_width
        lw = self.lattice_width
        self.status: List[Edge] = [Edge.UNDECIDED] * n
        self.end_points: List[Tuple[int, int]] = [(0, 0)] * n
        self.next: List[int] = list(range(n))
        self.another_end: List[int] = list(range(n))
        self.size: List[int] = [0] * n

        for y in range(self.lattice_height):
            for x in range(self.lattice_width):
                if y % 2 == x % 2:
                    continue
                idx = y * lw + x
                if y % 2 == 0:
                    self.end_points[idx] = (idx - 1, idx + 1)
                else:
                    self.end_points[idx] = (idx - lw, idx + lw)
                self.size[idx] = 1

        self._inconsistent = False
        self._fully_solved = False
        self.decided_line = 0
        self.decided_edge = 0
        self.queue = PropagationQueue(n + 1)

        # a corner vertex has only two edges: they always share their state
        last_y = height * 2
        last_x = width * 2
        with batch(self):
            for e1, e2 in (
                ((0, 1), (1, 0)),
                ((0, last_x - 1), (1, last_x)),
                ((last_y - 1, 0), (last_y, 1)),
                ((last_y - 1, last_x), (last_y, last_x - 1)),
            ):
                _join(self, self.index(e1), self.index(e2))

    def grid_loop(self) -> "GridLoop":
        return self

    def clone(self) -> "GridLoop":
        """Independent copy for what-if trials; discard it to cancel the branch."""
        return copy.deepcopy(self)

    # public accessor
    def inconsistent(self) -> bool:
        return self._inconsistent

    def fully_solved(self) -> bool:
        return self._fully_solved

    def num_decided_edges(self) -> int:
        return self.decided_edge

    def num_decided_lines(self) -> int:
        return self.decided_line

    def index(self, pos: Pos) -> int:
        return pos[0] * self.lattice_width + pos[1]

    def lp(self, idx: int) -> Pos:
        return divmod(idx, self.lattice_width)

    def is_valid_lp(self, pos: Pos) -> bool:
        return 0 <= pos[0] < self.lattice_height and 0 <= pos[1] < self.lattice_width

    def get_edge(self, pos: Pos) -> Edge:
        return self.status[self.index(pos)]

    def get_edge_safe(self, pos: Pos) -> Edge:
        """Like `get_edge`, but positions off the lattice read as BLANK."""
        if self.is_valid_lp(pos):
            return self.get_edge(pos)
        return Edge.BLANK

    def edges(self) -> Iterator[Pos]:
        for y in range(self.lattice_height):
            for x in range((y + 1) % 2, self.lattice_width, 2):
                yield (y, x)

    def neighbor_summary(self, pos: Pos) -> Tuple[int, int]:
        """(number of LINE, number of UNDECIDED) edges around vertex or cell `pos`."""
        n_line = 0
        n_undecided = 0
        for dy, dx in FOUR_NEIGHBOURS:
            e = self.get_edge_safe(add(pos, (dy, dx)))
            if e == Edge.LINE:
                n_line += 1
            elif e == Edge.UNDECIDED:
                n_undecided += 1
        return n_line, n_undecided

    def is_root(self, edge: Pos) -> bool:
        """True for exactly one edge per chain: the end edge with the smaller index."""
        i = self.index(edge)
        j = self.another_end[i]
        return self.another_end[j] == i and i <= j

    def get_root(self, edge: Pos) -> Pos:
        i = self.index(edge)
        while self.another_end[self.another_end[i]] != i:
            i = self.another_end[i]
        j = self.another_end[i]
        return self.lp(min(i, j))

    def chain_members(self, edge: Pos) -> List[Pos]:
        start = self.index(edge)
        members = [edge]
        i = self.next[start]
        while i != start:
            members.append(self.lp(i))
            i = self.next[i]
        return members

    def another_end_id(self, origin: int, edge: int) -> int:
        a, b = self.end_points[edge]
        return a + b - origin

    def is_end_of_chain(self, edge: int) -> bool:
        return self.another_end[self.another_end[edge]] == edge

    def is_end_of_chain_vertex(self, edge: int, vertex: int) -> bool:
        return self.is_end_of_chain(edge) and vertex in self.end_points[edge]

    # public modifier
    def set_inconsistent(self, reason: str = "", pos: Optional[Pos] = None) -> None:
        if not self._inconsistent:
            get_tracer().log_contradiction(reason or "inconsistent", pos)
        self._inconsistent = True

    def decide(self, pos: Pos, status: Edge) -> None:
        decide_edge(self, pos, status)

    def check(self, pos: Pos) -> None:
        check(self, pos)


def decide_edge(field: GridLoopField, pos: Pos, status: Edge) -> None:
    gl = field.grid_loop()
    if not gl.is_valid_lp(pos):
        if status != Edge.BLANK:
            gl.set_inconsistent("line outside the grid", pos)
        return

    idx = gl.index(pos)
    current = gl.status[idx]
    if current == status:
        return
    if current != Edge.UNDECIDED:
        gl.set_inconsistent(f"edge already {current.value}", pos)
        return

    with batch(field):
        _decide_edge_internal(field, idx, status)


def check(field: GridLoopField, pos: Pos) -> None:
    """Queue `pos` for inspection; inspected immediately unless a batch is open."""
    gl = field.grid_loop()
    if not gl.is_valid_lp(pos):
        return
    with batch(field):
        gl.queue.push(gl.index(pos))


def _drain(field: GridLoopField) -> None:
    gl = field.grid_loop()
    queue = gl.queue
    while not queue.empty():
        idx = queue.pop()
        if gl.inconsistent():
            continue
        pos = gl.lp(idx)
        field.inspect(pos)
        if is_vertex(pos):
            _inspect_vertex(field, pos)


def _decide_edge_internal(field: GridLoopField, edge: int, status: Edge) -> None:
    gl = field.grid_loop()
    current = gl.status[edge]
    if current == status:
        return
    if current != Edge.UNDECIDED:
        gl.set_inconsistent(f"edge already {current.value}", gl.lp(edge))
        return

    _decide_chain(gl, edge, status)
    if status == Edge.LINE and _is_closed_ring(gl, edge):
        _close_loop(field, edge)
    _check_chain_neighborhood(field, edge)


def _is_closed_ring(gl: GridLoop, edge: int) -> bool:
    """True if the chain through `edge` was already closed into a cycle while undecided."""
    i = edge
    while True:
        if gl.is_end_of_chain(i):
            a, b = gl.end_points[i]
            return a == b
        i = gl.next[i]
        if i == edge:
            return False


def _close_loop(field: GridLoopField, edge: int) -> None:
    gl = field.grid_loop()
    if gl.decided_line != len(gl.chain_members(gl.lp(edge))):
        gl.set_inconsistent("loop closed before covering every line", gl.lp(edge))
        return
    gl._fully_solved = True
    get_tracer().log_solved(gl.decided_line)
    _fill_blank(field)


def _decide_chain(gl: GridLoop, edge: int, status: Edge) -> None:
    i = edge
    sz = 0
    while True:
        gl.status[i] = status
        i = gl.next[i]
        sz += 1
        if i == edge:
            break
    gl.decided_edge += sz
    if status == Edge.LINE:
        gl.decided_line += sz
    get_tracer().log_decide(gl.lp(edge), status.value, sz, gl.decided_edge, gl.decided_line)


def _check_chain_neighborhood(field: GridLoopField, edge: int) -> None:
    gl = field.grid_loop()
    i = edge
    while True:
        field.check_neighborhood(gl.lp(i))
        i = gl.next[i]
        if i == edge:
            break


def _fill_blank(field: GridLoopField) -> None:
    gl = field.grid_loop()
    for pos in list(gl.edges()):
        if gl.get_edge(pos) == Edge.UNDECIDED:
            decide_edge(field, pos, Edge.BLANK)


def _shared_vertex(gl: GridLoop, edge1: int, edge2: int) -> Optional[int]:
    (a1, b1), (a2, b2) = gl.end_points[edge1], gl.end_points[edge2]
    if a1 == a2 or a1 == b2:
        return a1
    if b1 == a2 or b1 == b2:
        return b1
    return None


def _join(field: GridLoopField, edge1: int, edge2: int) -> None:
    """Merge the chains ending in `edge1` and `edge2` at their common vertex."""
    gl = field.grid_loop()

    while True:
        if not gl.is_end_of_chain(edge1) or not gl.is_end_of_chain(edge2):
            return
        if gl.another_end[edge1] == edge2:
            return
        origin = _shared_vertex(gl, edge1, edge2)
        if origin is None:
            return

        status1 = gl.status[edge1]
        status2 = gl.status[edge2]
        if status1 == status2:
            break
        # give the undecided chain the decided one's state, then merge
        if status1 == Edge.UNDECIDED:
            _decide_chain(gl, edge1, status2)
            _check_chain_neighborhood(field, edge1)
        elif status2 == Edge.UNDECIDED:
            _decide_chain(gl, edge2, status1)
            _check_chain_neighborhood(field, edge2)
        else:
            gl.set_inconsistent("joining a line with a blank", gl.lp(origin))
            return

    status = status1
    end1_vertex = gl.another_end_id(origin, edge1)
    end2_vertex = gl.another_end_id(origin, edge2)
    end1_edge = gl.another_end[edge1]
    end2_edge = gl.another_end[edge2]

    if end1_vertex == end2_vertex:
        if status == Edge.UNDECIDED:
            if gl.decided_line != 0:
                # a closed undecided ring would be a second loop
                _decide_chain(gl, edge1, Edge.BLANK)
                _decide_chain(gl, edge2, Edge.BLANK)
                _check_chain_neighborhood(field, edge1)
                _check_chain_neighborhood(field, edge2)
                return
        elif status == Edge.LINE:
            if gl.decided_line != gl.size[edge1] + gl.size[edge2]:
                gl.set_inconsistent("loop closed before covering every line", gl.lp(origin))
                return
            gl._fully_solved = True
            get_tracer().log_solved(gl.decided_line)
            _fill_blank(field)

    # splice the two rings
    gl.next[end1_edge], gl.next[end2_edge] = gl.next[end2_edge], gl.next[end1_edge]

    new_size = gl.size[end1_edge] + gl.size[end2_edge]
    gl.size[end1_edge] = new_size
    gl.size[end2_edge] = new_size

    gl.end_points[end1_edge] = (end1_vertex, end2_vertex)
    gl.end_points[end2_edge] = (end1_vertex, end2_vertex)

    gl.another_end[end1_edge] = end2_edge
    gl.another_end[end2_edge] = end1_edge

    get_tracer().log_join(gl.lp(origin), status.value, new_size)

    gl.queue.push(end1_vertex)
    gl.queue.push(end2_vertex)


def _inspect_vertex(field: GridLoopField, pos: Pos) -> None:
    gl = field.grid_loop()
    line: List[int] = []
    undecided: List[int] = []

    for dy, dx in FOUR_NEIGHBOURS:
        e = add(pos, (dy, dx))
        if gl.is_valid_lp(e):
            idx = gl.index(e)
            status = gl.status[idx]
            if status == Edge.LINE:
                line.append(idx)
            elif status == Edge.UNDECIDED:
                undecided.append(idx)

    if len(line) >= 3:
        gl.set_inconsistent("three lines meet at a vertex", pos)
        return

    if len(line) == 2:
        for e in undecided:
            _decide_edge_internal(field, e, Edge.BLANK)
        _join(field, line[0], line[1])
        return

    if len(line) == 1:
        eid = line[0]
        vid = gl.index(pos)
        line_size = gl.size[eid]
        another_end = gl.another_end_id(vid, eid)

        cand = None
        ambiguous = False
        for ud in undecided:
            if not gl.is_end_of_chain_vertex(ud, vid):
                continue
            ud_another_end = gl.another_end_id(vid, ud)
            if line_size == gl.decided_line or another_end != ud_another_end:
                if cand is None:
                    cand = ud
                else:
                    ambiguous = True
            else:
                # extending the line into `ud` would close a loop too early
                _decide_edge_internal(field, ud, Edge.BLANK)
                return

        if ambiguous:
            return
        if cand is None:
            gl.set_inconsistent("dead end", pos)
        else:
            _join(field, eid, cand)
        return

    if len(undecided) == 2:
        _join(field, undecided[0], undecided[1])
    elif len(undecided) == 1:
        _decide_edge_internal(field, undecided[0], Edge.BLANK)
