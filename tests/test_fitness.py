import numpy as np

from evodynamics.fitness import (
    MAX_FITNESS, clamp_fitness, fitness_value, phenotype, update_all_fitness, update_fitness
)


def test_phenotype_is_pleiotropy_times_epistasis_times_q():
    P = np.array([[1, 0, 1], [0, 1, 0]], dtype=bool)
    A = np.arange(9, dtype=float).reshape(3, 3)
    q = np.array([1.0, 0.5, -1.0])
    z = phenotype(P, A, q, noise=0.25)
    assert np.allclose(z, P.astype(float) @ (A @ q) + 0.25)


def test_fitness_at_optimum_is_one():
    A = np.eye(2)
    P = np.eye(2, dtype=bool)
    q = np.array([0.3, -0.2])
    W = fitness_value(P, A, q, opt_phenotype=q.copy(), cov_inv=np.eye(2), selection_coeff=1.0)
    assert W == 1.0


def test_fitness_quadratic_form():
    A = np.eye(2)
    P = np.eye(2, dtype=bool)
    q = np.array([1.0, -2.0])
    cov_inv = np.array([[2.0, 0.5], [0.5, 1.0]])
    d = np.abs(q - np.array([0.0, 0.0]))
    expected = np.exp(-0.3 * d @ cov_inv @ d)
    W = fitness_value(P, A, q, np.zeros(2), cov_inv, 0.3)
    assert np.isclose(W, expected)


def test_clamp_holds_under_huge_eigenvalues():
    A = np.eye(2)
    P = np.eye(2, dtype=bool)
    q = np.array([3.0, -4.0])
    cov_inv = np.diag([1e300, 1e300])
    # negative selection coefficient turns the exponent positive
    W = fitness_value(P, A, q, np.zeros(2), cov_inv, -1.0)
    assert W == MAX_FITNESS
    W = fitness_value(P, A, q, np.zeros(2), cov_inv, 1.0)
    assert 0.0 <= W <= MAX_FITNESS


def test_clamp_fitness_non_finite():
    assert clamp_fitness(np.inf) == MAX_FITNESS
    assert clamp_fitness(np.nan) == 0.0
    assert clamp_fitness(2e5) == MAX_FITNESS
    assert clamp_fitness(0.5) == 0.5


def test_update_fitness_in_bounds_with_noise(make_species, make_model):
    sp = make_species(noise_sd=5.0, selection_coeff=-2.0)
    model = make_model([sp], N={0: [50]})
    for ind in model.population:
        update_fitness(ind, model)
        assert 0.0 <= ind.W <= MAX_FITNESS


def test_update_all_fitness_is_deterministic_without_noise(make_species, make_model):
    model = make_model([make_species(noise_sd=0.0)], N={0: [5]})
    before = [ind.W for ind in model.population]
    update_all_fitness(model)
    assert [ind.W for ind in model.population] == before
