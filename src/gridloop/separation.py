"""Vertex separation queries on a node-weighted undirected multigraph.

After `build()`, `separate(sep)` returns the total weight of every connected
component left behind when `sep` is removed from its component, in time
proportional to the degree of `sep`.
"""

from typing import Generic, List, Protocol, Tuple, TypeVar

W = TypeVar("W")


class WeightOps(Protocol[W]):
    """Identity and invertible addition over node weights."""

    def zero(self) -> W: ...

    def add(self, a: W, b: W) -> W: ...

    def sub(self, a: W, b: W) -> W: ...

    def copy(self, a: W) -> W: ...


class IntWeights:
    def zero(self) -> int:
        return 0

    def add(self, a: int, b: int) -> int:
        return a + b

    def sub(self, a: int, b: int) -> int:
        return a - b

    def copy(self, a: int) -> int:
        return a


INT_WEIGHTS = IntWeights()

UNVISITED = -1


class GraphSeparation(Generic[W]):
    def __init__(self, n: int, weights: WeightOps[W] = INT_WEIGHTS):  # type: ignore[assignment]
        self.n = n
        self.weights = weights

        # adjacency of half-edges: (destination, half-edge id); id ^ 1 is the reverse
        self.adj: List[List[Tuple[int, int]]] = [[] for _ in range(n)]
        self.num_half_edges = 0
        self.value: List[W] = [weights.zero() for _ in range(n)]

        self.ord: List[int] = [UNVISITED] * n
        self.lowlink: List[int] = [UNVISITED] * n
        self.root: List[int] = [UNVISITED] * n
        self.dfs_edge: List[bool] = []

    def add_edge(self, u: int, v: int) -> None:
        h = self.num_half_edges
        self.adj[u].append((v, h))
        self.adj[v].append((u, h + 1))
        self.dfs_edge.extend((False, False))
        self.num_half_edges += 2

    def set_weight(self, i: int, w: W) -> None:
        self.value[i] = self.weights.copy(w)

    def build(self) -> None:
        """Multi-root DFS filling ord, lowlink, root, subtree values and tree-edge marks."""
        ops = self.weights
        counter = 0
        for start in range(self.n):
            if self.ord[start] != UNVISITED:
                continue
            self.ord[start] = self.lowlink[start] = counter
            self.root[start] = start
            counter += 1

            # frames: [node, half-edge used to enter it, next adjacency slot]
            stack = [[start, UNVISITED, 0]]
            while stack:
                frame = stack[-1]
                u, entry, i = frame
                if i < len(self.adj[u]):
                    frame[2] = i + 1
                    v, h = self.adj[u][i]
                    if entry != UNVISITED and h == entry ^ 1:
                        continue
                    if self.ord[v] == UNVISITED:
                        self.ord[v] = self.lowlink[v] = counter
                        self.root[v] = start
                        counter += 1
                        self.dfs_edge[h] = True
                        stack.append([v, h, 0])
                    elif self.ord[v] < self.lowlink[u]:
                        self.lowlink[u] = self.ord[v]
                    continue

                stack.pop()
                if stack:
                    p = stack[-1][0]
                    if self.lowlink[u] < self.lowlink[p]:
                        self.lowlink[p] = self.lowlink[u]
                    self.value[p] = ops.add(self.value[p], self.value[u])

    def root_of(self, u: int) -> int:
        return self.root[u]

    def separate(self, sep: int) -> List[W]:
        ops = self.weights
        ret: List[W] = []

        if self.root[sep] == sep:
            for v, h in self.adj[sep]:
                if self.dfs_edge[h]:
                    ret.append(ops.copy(self.value[v]))
            return ret

        root_side = ops.sub(self.value[self.root[sep]], self.value[sep])
        for v, h in self.adj[sep]:
            if not self.dfs_edge[h]:
                continue
            if self.lowlink[v] < self.ord[sep]:
                root_side = ops.add(root_side, self.value[v])
            else:
                ret.append(ops.copy(self.value[v]))
        ret.append(root_side)
        return ret
