import numpy as np

from evodynamics.mutation import bernoulli_mask, mutate, mutation


def _snapshot(ind):
    return ind.epistasis.copy(), ind.pleiotropy.copy(), ind.q.copy()


def test_zero_probabilities_leave_genetics_unchanged(make_species, make_model):
    sp = make_species(noise_sd=1.0, mut_probs=(0.0, 0.0, 0.0), mut_magnitudes=(1.0, 0.5, 1.0))
    model = make_model([sp], N={0: [20]})
    before = {ind.id: _snapshot(ind) for ind in model.population}
    W_before = {ind.id: ind.W for ind in model.population}

    mutation(model)

    for ind in model.population:
        A, P, q = before[ind.id]
        assert np.array_equal(ind.epistasis, A)
        assert np.array_equal(ind.pleiotropy, P)
        assert np.array_equal(ind.q, q)
    # noise is re-drawn on every evaluation
    assert any(ind.W != W_before[ind.id] for ind in model.population)


def test_all_channels_fire_with_probability_one(make_species, make_model):
    sp = make_species(mut_probs=(1.0, 1.0, 1.0), mut_magnitudes=(0.1, 1.0, 0.1))
    model = make_model([sp], N={0: [1]})
    ind = next(iter(model.population))
    A, P, q = _snapshot(ind)

    mutate(ind, model)

    assert not np.array_equal(ind.q, q)
    assert not np.array_equal(ind.epistasis, A)
    # flip probability 1 negates every entry
    assert np.array_equal(ind.pleiotropy, ~P)
    assert ind.pleiotropy.dtype == bool


def test_pleiotropy_flip_only_at_mask(make_species, make_model):
    sp = make_species(ngenes=6, nphenotypes=3, mut_probs=(0.0, 1.0, 0.0),
                      mut_magnitudes=(0.0, 0.3, 0.0))
    model = make_model([sp], N={0: [1]})
    ind = next(iter(model.population))
    P = ind.pleiotropy.copy()

    mutate(ind, model)

    changed = ind.pleiotropy != P
    assert np.array_equal(ind.pleiotropy[changed], ~P[changed])
    assert ind.epistasis.shape == (6, 6)
    assert ind.q.shape == (6,)


def test_bernoulli_mask_rate():
    rng = np.random.default_rng(0)
    mask = bernoulli_mask(rng, 0.25, (200, 200))
    assert mask.shape == (200, 200)
    assert mask.dtype == bool
    assert abs(mask.mean() - 0.25) < 0.01
