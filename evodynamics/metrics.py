"""
Population Metrics
==================

Per-generation summaries for the data-collection layer.

Functions:
- collect_record: one row per species (size, fitness moments, spatial spread)
- node_table: long-form per-node, per-species counts
- occupancy_entropy: Shannon entropy of a species' distribution over nodes

Interpretation:
- occupancy entropy 0 → the whole species sits on one node
- ln(n_nodes) → spread evenly across the topology
"""

from typing import Dict, List

import numpy as np
import pandas as pd
from scipy import stats


def occupancy_entropy(node_counts: np.ndarray) -> float:
    """Shannon entropy (nats) of counts over nodes; NaN for an empty species"""
    node_counts = np.asarray(node_counts, dtype=float)
    if node_counts.sum() <= 0:
        return float("nan")
    return float(stats.entropy(node_counts))


def collect_record(model) -> List[Dict]:
    """
    Snapshot of the current generation.

    Returns:
        list of dicts with keys generation, species, N, mean_W, std_W,
        occupied_nodes, occupancy_entropy
    """
    table = model.count_table()
    W_by_species: List[List[float]] = [[] for _ in range(model.nspecies)]
    for ind in model.population:
        W_by_species[ind.species].append(ind.W)

    rows = []
    for s in range(model.nspecies):
        W = np.asarray(W_by_species[s], dtype=float)
        rows.append(dict(
            generation=model.generation,
            species=s,
            N=int(table[:, s].sum()),
            mean_W=float(W.mean()) if W.size else float("nan"),
            std_W=float(W.std()) if W.size else float("nan"),
            occupied_nodes=int((table[:, s] > 0).sum()),
            occupancy_entropy=occupancy_entropy(table[:, s]),
        ))
    return rows


def node_table(model) -> pd.DataFrame:
    """Long-form (generation, node, species, count) table"""
    table = model.count_table()
    nodes, species = np.indices(table.shape)
    return pd.DataFrame(dict(
        generation=model.generation,
        node=nodes.ravel(),
        species=species.ravel(),
        count=table.ravel(),
    ))
