import numpy as np
import pytest

from evodynamics.fitness import fitness_value
from evodynamics.reproduction import (
    MatingPoolError, choose_loci, diploid_index, mate, recombine, reproduce,
    sexual_reproduction, sexual_reproduction_all
)


def _distinct_parents(model):
    a, b = list(model.population)[:2]
    a.epistasis[:] = 1.0
    a.pleiotropy[:] = True
    a.q[:] = 1.0
    b.epistasis[:] = 2.0
    b.pleiotropy[:] = False
    b.q[:] = 2.0
    return a, b


def test_diploid_index_mirrors_halves():
    assert diploid_index([2, 0], 5).tolist() == [2, 0, 7, 5]


def test_choose_loci_size_and_uniqueness():
    rng = np.random.default_rng(1)
    for nloci in (1, 2, 5, 7):
        loci = choose_loci(rng, nloci)
        assert len(loci) == int(np.ceil(nloci / 2))
        assert len(set(loci.tolist())) == len(loci)
        assert all(0 <= l < nloci for l in loci)


def test_recombine_exact_columns(make_species, make_model):
    sp = make_species(ngenes=8, nphenotypes=3, ploidy=2)
    model = make_model([sp], N={0: [2]})
    k, m = _distinct_parents(model)
    loci = [1, 3]
    A, P, q = recombine(k, m, 4, loci)

    idx = [1, 3, 5, 7]
    rest = [0, 2, 4, 6]
    assert np.array_equal(A[:, idx], k.epistasis[:, idx])
    assert np.array_equal(A[:, rest], m.epistasis[:, rest])
    assert np.array_equal(P[:, idx], k.pleiotropy[:, idx])
    assert np.array_equal(P[:, rest], m.pleiotropy[:, rest])
    assert np.array_equal(q[idx], k.q[idx])
    assert np.array_equal(q[rest], m.q[rest])
    # parents untouched
    assert (m.epistasis == 2.0).all()


def test_reproduce_offspring_inherits_half_the_loci(make_species, make_model):
    sp = make_species(ngenes=10, nphenotypes=2, ploidy=2)
    model = make_model([sp], N={0: [2]})
    k, m = _distinct_parents(model)
    child = reproduce(model, k.id, m.id)

    from_k = np.flatnonzero(child.q == 1.0)
    assert len(from_k) == 2 * 3
    assert set((from_k % 5).tolist()) == set(from_k[:3] % 5)
    assert child.pos == k.pos
    assert child.species == k.species
    assert child.id == 2
    expected = fitness_value(child.pleiotropy, child.epistasis, child.q,
                             sp.opt_phenotype, np.eye(2), sp.selection_coeff)
    assert child.W == expected


def test_mate_pairs_are_distinct(make_species, make_model):
    sp = make_species(ngenes=4, ploidy=2)
    model = make_model([sp], N={0: [30]})
    pairs = mate(model, 0)
    assert len(pairs) == 30
    assert all(k != m for k, m in pairs)
    assert sorted(k for k, _ in pairs) == model.population.members(0)


def test_single_member_pool_raises(make_species, make_model):
    sp = make_species(ngenes=4, ploidy=2)
    model = make_model([sp], N={0: [1]})
    with pytest.raises(MatingPoolError):
        sexual_reproduction(model, 0)


def test_parents_replaced_by_offspring(make_species, make_model):
    sp = make_species(ngenes=4, ploidy=2)
    model = make_model([sp], N={0: [20]})
    parents = set(model.population.ids())
    assert sexual_reproduction(model, 0) == 20
    assert model.counts(0)[0] == 20
    assert parents.isdisjoint(model.population.ids())


def test_haploids_on_mating_node_are_retired_by_default(make_species, make_model):
    dip = make_species(ngenes=4, ploidy=2)
    hap = make_species(ngenes=3, ploidy=1)
    model = make_model([dip, hap], N={0: [10, 15]})
    sexual_reproduction_all(model)
    assert model.counts(0).tolist() == [10, 0]


def test_haploids_kept_when_only_parents_retire(make_species, make_model):
    dip = make_species(ngenes=4, ploidy=2)
    hap = make_species(ngenes=3, ploidy=1)
    model = make_model([dip, hap], N={0: [10, 15]}, retire_all_occupants=False)
    haploids = set(model.population.members_of(0, 1))
    sexual_reproduction_all(model)
    assert model.counts(0).tolist() == [10, 15]
    assert set(model.population.members_of(0, 1)) == haploids
