"""Global deductions over a whole `GridLoop`: things no vertex rule can see.

- `apply_inout_rule`: cells on either side of a LINE are on opposite sides of
  the loop, cells across a BLANK on the same side.
- `check_loop_connection`: an undecided piece whose removal would cut the
  decided lines into two groups must be part of the loop.
- `check_connectability`: all decided lines must still be able to reach each
  other.
"""

from typing import List, Tuple

from src.utils.trace import get_tracer

from .kernel import Edge, GridLoopField, batch, decide_edge
from .pos import FOUR_NEIGHBOURS, Pos, add, as_vertex, of_cell, of_vertex
from .separation import GraphSeparation

Labels = List[List[int]]


def apply_inout_rule(field: GridLoopField) -> None:
    gl = field.grid_loop()
    height = gl.height
    width = gl.width
    side: Labels = [[-1] * width for _ in range(height)]
    decided_before = gl.num_decided_edges()

    with batch(field):
        # border cells, seen from the outside (colour 0)
        for cell, edge in _border(height, width):
            status = gl.get_edge(edge)
            if status == Edge.BLANK:
                _inout_flood(field, cell, 0, side)
            elif status == Edge.LINE:
                _inout_flood(field, cell, 1, side)

        for cell, edge in _border(height, width):
            colour = side[cell[0]][cell[1]]
            if colour == 0:
                decide_edge(field, edge, Edge.BLANK)
            elif colour == 1:
                decide_edge(field, edge, Edge.LINE)

        # every other region gets its own pair of colours
        colour = 2
        for y in range(height):
            for x in range(width):
                if side[y][x] == -1:
                    _inout_flood(field, (y, x), colour, side)
                    colour += 2

    get_tracer().log_sweep(
        "inout",
        gl.num_decided_edges(),
        gl.num_decided_lines(),
        f"{gl.num_decided_edges() - decided_before} newly decided",
    )


def _border(height: int, width: int) -> List[Tuple[Pos, Pos]]:
    """(border cell, its edge on the grid boundary) pairs."""
    ret = []
    for x in range(width):
        ret.append(((0, x), (0, 2 * x + 1)))
        ret.append(((height - 1, x), (2 * height, 2 * x + 1)))
    for y in range(height):
        ret.append(((y, 0), (2 * y + 1, 0)))
        ret.append(((y, width - 1), (2 * y + 1, 2 * width)))
    return ret


def _inout_flood(field: GridLoopField, start: Pos, colour: int, side: Labels) -> None:
    gl = field.grid_loop()
    height = len(side)
    width = len(side[0])
    stack = [(start, colour)]
    while stack:
        (y, x), v = stack.pop()
        if side[y][x] != -1:
            continue
        side[y][x] = v

        centre = of_cell((y, x))
        for dy, dx in FOUR_NEIGHBOURS:
            y2, x2 = y + dy, x + dx
            if not (0 <= y2 < height and 0 <= x2 < width):
                continue
            edge = add(centre, (dy, dx))
            v2 = side[y2][x2]
            if v2 == -1:
                status = gl.get_edge(edge)
                if status != Edge.UNDECIDED:
                    stack.append(((y2, x2), v ^ 1 if status == Edge.LINE else v))
            elif (v & ~1) == (v2 & ~1):
                decide_edge(field, edge, Edge.BLANK if v2 == v else Edge.LINE)


def check_connectability(field: GridLoopField) -> None:
    """Mark the instance inconsistent if decided lines fall apart into separate groups."""
    gl = field.grid_loop()
    visited = [[False] * (gl.width + 1) for _ in range(gl.height + 1)]

    for y, x in gl.edges():
        if gl.get_edge((y, x)) != Edge.LINE:
            continue
        n_lines_dbl = 0
        stack = [as_vertex((y, x))]
        while stack:
            vy, vx = stack.pop()
            if visited[vy][vx]:
                continue
            visited[vy][vx] = True
            centre = of_vertex((vy, vx))
            for dy, dx in FOUR_NEIGHBOURS:
                ny, nx = vy + dy, vx + dx
                if not (0 <= ny <= gl.height and 0 <= nx <= gl.width):
                    continue
                status = gl.get_edge(add(centre, (dy, dx)))
                if status == Edge.BLANK:
                    continue
                if status == Edge.LINE:
                    n_lines_dbl += 1
                stack.append((ny, nx))

        if n_lines_dbl != gl.num_decided_lines() * 2:
            gl.set_inconsistent("decided lines cannot be connected")
        get_tracer().log_sweep("connectability", gl.num_decided_edges(), gl.num_decided_lines())
        return


def check_loop_connection(field: GridLoopField) -> None:
    """
    Force LINE on every group of undecided chains the loop has to cross.

    Cells are merged into regions through BLANK edges; the region touching the
    outside of the grid through a BLANK border edge is region 0, as is the
    outside itself. All non-blank chains between the same two regions share one
    fate (they are all LINE if the regions are on different sides of the loop,
    all BLANK otherwise), so when two or more chains separate the same pair of
    regions they become one node of the separation graph. Everything else
    merges vertices into vertex nodes, weighted by the decided lines they hold.
    If removing a chain-group node leaves two or more components with lines in
    them, the loop must pass through that group.

    Must not run on an inconsistent instance or while a batch is open.
    """
    gl = field.grid_loop()
    if gl.inconsistent() or gl.queue.is_started():
        return

    height = gl.height
    width = gl.width

    # assign cell id
    cell_ids: Labels = [[-1] * width for _ in range(height)]
    for cell, edge in _border(height, width):
        if gl.get_edge(edge) == Edge.BLANK:
            _flood_cells(gl, cell, cell_ids, 0)
    n_regions = 1
    for y in range(height):
        for x in range(width):
            if cell_ids[y][x] == -1:
                _flood_cells(gl, (y, x), cell_ids, n_regions)
                n_regions += 1

    def region_of(cell: Pos) -> int:
        if 0 <= cell[0] < height and 0 <= cell[1] < width:
            return cell_ids[cell[0]][cell[1]]
        return 0

    # ((region, region'), chain root) for every non-blank chain
    neighbor_pairs = []
    for pos in gl.edges():
        if gl.get_edge(pos) == Edge.BLANK or not gl.is_root(pos):
            continue
        y, x = pos
        if y % 2 == 0:
            cell1, cell2 = (y // 2 - 1, x // 2), (y // 2, x // 2)
        else:
            cell1, cell2 = (y // 2, x // 2 - 1), (y // 2, x // 2)
        id1 = region_of(cell1)
        id2 = region_of(cell2)
        neighbor_pairs.append(((min(id1, id2), max(id1, id2)), pos))
    neighbor_pairs.sort(key=lambda item: item[0])

    edge_ids = [-1] * (gl.lattice_height * gl.lattice_width)
    edge_count = 0
    next_id = -1
    for i in range(1, len(neighbor_pairs)):
        if neighbor_pairs[i - 1][0] == neighbor_pairs[i][0]:
            if next_id == -1:
                next_id = edge_count
                edge_count += 1
                edge_ids[gl.index(neighbor_pairs[i - 1][1])] = next_id
            edge_ids[gl.index(neighbor_pairs[i][1])] = next_id
        else:
            next_id = -1
    for pos in gl.edges():
        root = gl.get_root(pos)
        if pos != root and edge_ids[gl.index(root)] != -1:
            edge_ids[gl.index(pos)] = edge_ids[gl.index(root)]

    vtx_ids: Labels = [[-1] * (width + 1) for _ in range(height + 1)]
    n_vertex_nodes = 0
    for y in range(height + 1):
        for x in range(width + 1):
            if vtx_ids[y][x] == -1:
                _flood_vertices(gl, (y, x), vtx_ids, edge_ids, n_vertex_nodes)
                n_vertex_nodes += 1

    # build graph
    graph_edges = []
    weight = [0] * n_vertex_nodes
    for y in range(height + 1):
        for x in range(width + 1):
            vpos = of_vertex((y, x))
            vid = gl.index(vpos)
            for dy, dx in FOUR_NEIGHBOURS:
                edge = add(vpos, (dy, dx))
                if not gl.is_valid_lp(edge):
                    continue
                eid = gl.index(edge)
                if edge_ids[eid] != -1 and gl.is_end_of_chain_vertex(eid, vid):
                    ay, ax = as_vertex(gl.lp(gl.another_end_id(vid, eid)))
                    id1 = vtx_ids[y][x]
                    id2 = vtx_ids[ay][ax]
                    graph_edges.append(((min(id1, id2), max(id1, id2)), edge_ids[eid]))

            for edge in ((vpos[0], vpos[1] + 1), (vpos[0] + 1, vpos[1])):
                if gl.get_edge_safe(edge) == Edge.LINE and edge_ids[gl.index(edge)] == -1:
                    weight[vtx_ids[y][x]] += 1
    graph_edges.sort()

    graph = GraphSeparation(edge_count + n_vertex_nodes)
    for i, ((u, v), e) in enumerate(graph_edges):
        if i == 0 or graph_edges[i] != graph_edges[i - 1]:
            graph.add_edge(u + edge_count, e)
            graph.add_edge(v + edge_count, e)
    for i in range(n_vertex_nodes):
        graph.set_weight(i + edge_count, weight[i])
    graph.build()

    critical = [
        sum(1 for w in graph.separate(i) if w > 0) >= 2
        for i in range(edge_count)
    ]

    decided_before = gl.num_decided_edges()
    for pos in gl.edges():
        group = edge_ids[gl.index(pos)]
        if group >= 0 and critical[group]:
            decide_edge(field, pos, Edge.LINE)

    get_tracer().log_sweep(
        "loop_connection",
        gl.num_decided_edges(),
        gl.num_decided_lines(),
        f"{sum(critical)} of {edge_count} chain groups critical, "
        f"{gl.num_decided_edges() - decided_before} newly decided",
    )


def _flood_cells(gl, start: Pos, cell_ids: Labels, region: int) -> None:
    """Label every cell reachable from `start` through BLANK edges."""
    height = len(cell_ids)
    width = len(cell_ids[0])
    stack = [start]
    while stack:
        y, x = stack.pop()
        if not (0 <= y < height and 0 <= x < width) or cell_ids[y][x] != -1:
            continue
        cell_ids[y][x] = region
        centre = of_cell((y, x))
        for dy, dx in FOUR_NEIGHBOURS:
            if gl.get_edge(add(centre, (dy, dx))) == Edge.BLANK:
                stack.append((y + dy, x + dx))


def _flood_vertices(gl, start: Pos, vtx_ids: Labels, edge_ids: List[int], node: int) -> None:
    """Label vertices joined by non-blank edges that belong to no chain group."""
    height = len(vtx_ids)
    width = len(vtx_ids[0])
    stack = [start]
    while stack:
        y, x = stack.pop()
        if not (0 <= y < height and 0 <= x < width) or vtx_ids[y][x] != -1:
            continue
        vtx_ids[y][x] = node
        centre = of_vertex((y, x))
        for dy, dx in FOUR_NEIGHBOURS:
            lp = add(centre, (dy, dx))
            if gl.get_edge_safe(lp) != Edge.BLANK and edge_ids[gl.index(lp)] == -1:
                stack.append((y + dy, x + dx))
