"""
evodynamics/migration.py - Weighted relocation of individuals between nodes

Migration matrices are per species, shape (n_nodes, n_nodes). Column c
holds the unnormalized weights of moving from origin c to each
destination row.
"""

from typing import List, Tuple


def choose_destination(ind, model) -> int:
    """Draw a destination node for `ind`; returns its current node when it cannot move."""
    rates = model.migration_rates
    if rates is None or rates[ind.species] is None:
        return ind.pos
    column = rates[ind.species][:, ind.pos]
    total = float(column.sum())
    if not total > 0:
        return ind.pos
    return int(model.rng.choice(column.size, p=column / total))


def migrate(ind, model):
    """Move a single individual if its draw lands on another node"""
    dest = choose_destination(ind, model)
    if dest != ind.pos:
        model.population.move(ind.id, dest)


def migration(model) -> int:
    """
    Two-phase migration over the whole population.

    Destinations are drawn for everyone first, then applied, so no draw
    depends on moves made earlier in the same generation.

    Returns:
        number of individuals that moved
    """
    moves: List[Tuple[int, int]] = []
    for ind in model.population:
        dest = choose_destination(ind, model)
        if dest != ind.pos:
            moves.append((ind.id, dest))

    for id_, dest in moves:
        model.population.move(id_, dest)
    return len(moves)
