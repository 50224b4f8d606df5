"""
Population Regulation: Lotka-Volterra Sizing + Fitness-Weighted Resampling
==========================================================================

Sizing (discrete logistic map with optional competition):

    N' = round(N + r·N·(1 - (N + Σ_{j≠i} C[j, i]·N_j) / K))

Resampling draws N' occupants with replacement, weighted by cached
fitness. Occupants drawn zero times die; occupants drawn k > 1 times
gain k - 1 clones with fresh ids on the same node.

Rounding follows Python's round() (half to even).
"""

from typing import Optional

import numpy as np


def lotka_volterra(model, species: int, node: int,
                   counts: Optional[np.ndarray] = None) -> Optional[int]:
    """
    Next population size of `species` on `node`.

    Args:
        counts: per-species sizes on the node; read live when omitted

    Returns:
        Target size, or None when the species is absent from the node.
    """
    Ns = model.population.counts(node) if counts is None else counts
    N = int(Ns[species])
    if N == 0:
        return None

    r = model.species[species].growth_rate
    K = model.K[node, species]
    cc = model.competition_coeffs
    if cc is None:
        load = 0.0
    else:
        ccs = cc[:, species]
        load = float(ccs @ Ns) - ccs[species] * N
    nextN = N + r * N * (1 - (N + load) / K)
    return int(round(nextN))


def resample(model, species: int, node: int,
             counts: Optional[np.ndarray] = None) -> int:
    """
    Replace the (node, species) occupants by a fitness-weighted sample.

    Returns:
        size of the group after resampling
    """
    pop = model.population
    occupants = pop.members_of(node, species)
    if not occupants:
        return 0

    n = lotka_volterra(model, species, node, counts)
    if n <= 0:
        for id_ in occupants:
            pop.remove(id_)
        return 0

    weights = np.array([pop[i].W for i in occupants], dtype=float)
    total = weights.sum()
    if np.isfinite(total) and total > 0:
        picks = model.rng.choice(len(occupants), size=n, replace=True, p=weights / total)
    else:
        picks = model.rng.choice(len(occupants), size=n, replace=True)

    add_newids(model, occupants, np.bincount(picks, minlength=len(occupants)))
    return n


def add_newids(model, occupants, noccurrences: np.ndarray):
    """Kill undrawn occupants and clone the ones drawn more than once"""
    pop = model.population
    for id_, k in zip(occupants, noccurrences):
        if k == 0:
            pop.remove(id_)
        else:
            for _ in range(int(k) - 1):
                pop.clone(id_)


def selection(model):
    """
    Regulate every (node, species) pair.

    Counts on a node are snapshotted before any species there is
    resampled, so the order of species does not change competition loads.
    """
    for node in range(model.topology.n_nodes):
        counts = model.population.counts(node)
        for species in range(model.nspecies):
            if counts[species] > 0:
                resample(model, species, node, counts)
