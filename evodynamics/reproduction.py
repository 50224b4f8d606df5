"""
Sexual Reproduction of Diploids
===============================

Every diploid individual on a node picks a random distinct mate of its
own species on the same node and produces one offspring. Gametes carry
whole loci: a random half of the haploid loci (rounded up) comes from the
focal parent, on both homologous copies, the rest from the mate.

For L genes, nloci = L / 2. Locus j occupies columns j and j + nloci.
"""

from typing import List, Sequence, Tuple

import numpy as np

from .fitness import update_fitness

PROVISIONAL_FITNESS = 0.2


class MatingPoolError(RuntimeError):
    """A diploid species has a single member on a node and cannot mate."""


def diploid_index(loci: Sequence[int], nloci: int) -> np.ndarray:
    """Column indices of `loci` on both homologous halves"""
    loci = np.asarray(loci, dtype=int)
    return np.concatenate([loci, loci + nloci])


def choose_loci(rng: np.random.Generator, nloci: int) -> np.ndarray:
    """ceil(nloci / 2) distinct loci, in random order"""
    return rng.permutation(nloci)[:int(np.ceil(nloci / 2))]


def recombine(parent_k, parent_m, nloci: int,
              loci: Sequence[int]) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Offspring genetic state: mate's data with parent_k's columns at `loci`.

    Returns:
        (epistasis, pleiotropy, q) as fresh arrays
    """
    idx = diploid_index(loci, nloci)
    A = parent_m.epistasis.copy()
    A[:, idx] = parent_k.epistasis[:, idx]
    P = parent_m.pleiotropy.copy()
    P[:, idx] = parent_k.pleiotropy[:, idx]
    q = parent_m.q.copy()
    q[idx] = parent_k.q[idx]
    return A, P, q


def mate(model, node: int) -> List[Tuple[int, int]]:
    """Pairs (k, m) of ids for every diploid on the node"""
    pop = model.population
    rng = model.rng
    mates = []
    for species in model.diploid_species:
        pool = pop.members_of(node, species)
        if len(pool) == 1:
            raise MatingPoolError(
                f"species {species} has a single individual on node {node}"
            )
        for k in pool:
            m = k
            while m == k:
                m = pool[rng.integers(len(pool))]
            mates.append((k, m))
    return mates


def reproduce(model, k: int, m: int):
    """Create one offspring of k and m on k's node"""
    pop = model.population
    parent_k, parent_m = pop[k], pop[m]
    nloci = model.species[parent_k.species].ngenes // 2
    loci = choose_loci(model.rng, nloci)
    A, P, q = recombine(parent_k, parent_m, nloci, loci)
    child = pop.add(parent_k.pos, parent_k.species, PROVISIONAL_FITNESS, A, P, q)
    update_fitness(child, model)
    return child


def sexual_reproduction(model, node: int) -> int:
    """
    Mate all diploids on `node`, then retire the parental generation.

    With `retire_all_occupants` every individual present before mating is
    removed, including haploids. Otherwise only diploid parents go.

    Returns:
        number of offspring
    """
    pop = model.population
    node_content = pop.members(node)
    mates = mate(model, node)
    for k, m in mates:
        reproduce(model, k, m)

    if model.retire_all_occupants:
        retired = node_content
    else:
        retired = [k for k, _ in mates]
    for id_ in retired:
        pop.remove(id_)
    return len(mates)


def sexual_reproduction_all(model) -> int:
    return sum(sexual_reproduction(model, node) for node in range(model.topology.n_nodes))
