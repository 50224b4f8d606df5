"""
evodynamics/population.py - Individuals and the id-indexed arena that owns them
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Set

import numpy as np


# ========== Data Classes ==========
@dataclass
class Individual:
    """One organism: position, species, cached fitness and genetic state"""
    id: int
    pos: int
    species: int
    W: float
    epistasis: np.ndarray
    pleiotropy: np.ndarray
    q: np.ndarray

    def copy(self, new_id: int) -> "Individual":
        return Individual(
            id=new_id,
            pos=self.pos,
            species=self.species,
            W=self.W,
            epistasis=self.epistasis.copy(),
            pleiotropy=self.pleiotropy.copy(),
            q=self.q.copy(),
        )


# ========== Arena ==========
class Population:
    """
    Store of living individuals keyed by id, plus per-node membership.

    Ids come from a counter that only grows, so they are never reused.
    A dead individual's record is dropped; its id stays retired.
    """

    def __init__(self, n_nodes: int, n_species: int):
        self.n_species = n_species
        self._records: Dict[int, Individual] = {}
        self._nodes: List[Set[int]] = [set() for _ in range(n_nodes)]
        self._next_id = 0

    # ---- identity ----
    @property
    def next_id(self) -> int:
        return self._next_id

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, id_: int) -> bool:
        return id_ in self._records

    def __getitem__(self, id_: int) -> Individual:
        try:
            return self._records[id_]
        except KeyError:
            raise KeyError(f"no living individual with id {id_}") from None

    def __iter__(self) -> Iterator[Individual]:
        return iter(self._records.values())

    def ids(self) -> List[int]:
        return list(self._records)

    # ---- creation / death ----
    def add(self, pos: int, species: int, W: float,
            epistasis: np.ndarray, pleiotropy: np.ndarray, q: np.ndarray) -> Individual:
        ind = Individual(self.next_id, pos, species, float(W), epistasis, pleiotropy, q)
        self._insert(ind)
        return ind

    def clone(self, id_: int) -> Individual:
        """Deep copy with a fresh id, placed on the same node."""
        ind = self[id_].copy(self.next_id)
        self._insert(ind)
        return ind

    def _insert(self, ind: Individual):
        self._records[ind.id] = ind
        self._nodes[ind.pos].add(ind.id)
        self._next_id += 1

    def remove(self, id_: int):
        ind = self[id_]
        self._nodes[ind.pos].discard(id_)
        del self._records[id_]

    def move(self, id_: int, node: int):
        ind = self[id_]
        if node == ind.pos:
            return
        self._nodes[ind.pos].discard(id_)
        self._nodes[node].add(id_)
        ind.pos = node

    # ---- membership queries ----
    def members(self, node: int) -> List[int]:
        """Sorted ids on a node (sorted so draws are reproducible per seed)"""
        return sorted(self._nodes[node])

    def members_of(self, node: int, species: int) -> List[int]:
        return [i for i in self.members(node) if self._records[i].species == species]

    def counts(self, node: int) -> np.ndarray:
        """Population size per species on a node"""
        counter = np.zeros(self.n_species, dtype=int)
        for i in self._nodes[node]:
            counter[self._records[i].species] += 1
        return counter
