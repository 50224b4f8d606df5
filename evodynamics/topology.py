"""
Spatial Topology (grids and graphs)
===================================

Nodes are 0-based integers. Grid vertices are numbered row-major, so a
(H, W) grid maps coordinate (i, j) to vertex i * W + j.

Functions:
- Topology.single: one isolated node
- Topology.grid: von Neumann (4) or Moore (8) lattice, optionally periodic
- Topology.from_adjacency: arbitrary undirected/directed graph
"""

from typing import List, Optional, Tuple

import numpy as np


_VON_NEUMANN = ((-1, 0), (1, 0), (0, -1), (0, 1))
_MOORE = _VON_NEUMANN + ((-1, -1), (-1, 1), (1, -1), (1, 1))


class Topology:
    """Node set with neighbor lists; grids also carry their shape."""

    def __init__(self, neighbors: List[np.ndarray], shape: Optional[Tuple[int, ...]] = None):
        self._neighbors = [np.asarray(nb, dtype=int) for nb in neighbors]
        self.shape = shape

    @property
    def n_nodes(self) -> int:
        return len(self._neighbors)

    def __len__(self) -> int:
        return self.n_nodes

    def __repr__(self) -> str:
        kind = f"grid{self.shape}" if self.shape is not None else "graph"
        return f"Topology({kind}, n_nodes={self.n_nodes})"

    def neighbors(self, v: int) -> np.ndarray:
        return self._neighbors[v]

    def adjacency(self) -> np.ndarray:
        """Dense 0/1 adjacency matrix (row = node, column = neighbor)."""
        A = np.zeros((self.n_nodes, self.n_nodes), dtype=int)
        for v, nb in enumerate(self._neighbors):
            A[v, nb] = 1
        return A

    # ---- grid coordinates ----
    def coord_to_vertex(self, coord: Tuple[int, ...]) -> int:
        if self.shape is None:
            raise ValueError("coordinates are only defined for grid topologies")
        return int(np.ravel_multi_index(tuple(coord), self.shape))

    def vertex_to_coord(self, v: int) -> Tuple[int, ...]:
        if self.shape is None:
            raise ValueError("coordinates are only defined for grid topologies")
        return tuple(int(c) for c in np.unravel_index(v, self.shape))

    # ---- constructors ----
    @classmethod
    def single(cls) -> "Topology":
        return cls([np.empty(0, dtype=int)], shape=(1,))

    @classmethod
    def grid(cls, dims: Tuple[int, ...], periodic: bool = False, moore: bool = False) -> "Topology":
        """
        Build a 1D or 2D lattice.

        Args:
            dims: (n,) or (H, W)
            periodic: wrap edges (torus)
            moore: include diagonal neighbors (2D only)
        """
        dims = tuple(int(d) for d in dims)
        if len(dims) not in (1, 2) or any(d <= 0 for d in dims):
            raise ValueError(f"grid dims must be 1 or 2 positive ints, got {dims}")
        if len(dims) == 1:
            dims2 = (dims[0], 1)
            offsets = ((-1, 0), (1, 0))
        else:
            dims2 = dims
            offsets = _MOORE if moore else _VON_NEUMANN

        H, W = dims2
        neighbors = []
        for i in range(H):
            for j in range(W):
                nb = []
                for di, dj in offsets:
                    ii, jj = i + di, j + dj
                    if periodic:
                        ii, jj = ii % H, jj % W
                    elif not (0 <= ii < H and 0 <= jj < W):
                        continue
                    u = ii * W + jj
                    if u != i * W + j and u not in nb:
                        nb.append(u)
                neighbors.append(np.array(sorted(nb), dtype=int))
        return cls(neighbors, shape=dims)

    @classmethod
    def from_adjacency(cls, matrix: np.ndarray) -> "Topology":
        """Graph from a square adjacency matrix (nonzero = edge row → column)."""
        A = np.asarray(matrix)
        if A.ndim != 2 or A.shape[0] != A.shape[1]:
            raise ValueError(f"adjacency matrix must be square, got shape {A.shape}")
        neighbors = [np.flatnonzero(A[v]) for v in range(A.shape[0])]
        neighbors = [nb[nb != v] for v, nb in enumerate(neighbors)]
        return cls(neighbors)
