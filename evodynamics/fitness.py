"""
Fitness Evaluation on a Gaussian Selection Surface
==================================================

Phenotype:
    z = P · (A · q) + ε,   ε ~ Normal(0, σ_E)  (one draw, broadcast over traits)

Fitness:
    d = |z - θ|
    W = exp(-γ · dᵗ Σ⁻¹ d)

W is clamped into [0, MAX_FITNESS]. A near-singular Σ or a negative γ
can push the exponent to overflow; the clamp keeps resampling weights
finite.
"""

import numpy as np

MAX_FITNESS = 1e5


def phenotype(pleiotropy: np.ndarray, epistasis: np.ndarray, q: np.ndarray,
              noise: float = 0.0) -> np.ndarray:
    """z = P · (A · q) + noise"""
    return pleiotropy @ (epistasis @ q) + noise


def fitness_value(
    pleiotropy: np.ndarray,
    epistasis: np.ndarray,
    q: np.ndarray,
    opt_phenotype: np.ndarray,
    cov_inv: np.ndarray,
    selection_coeff: float,
    noise: float = 0.0
) -> float:
    """
    Scalar fitness of one genetic state for one noise draw.

    Args:
        pleiotropy: (P, L) boolean or float matrix
        epistasis: (L, L) matrix
        q: (L,) expression vector
        opt_phenotype: θ, shape (P,)
        cov_inv: Σ⁻¹, shape (P, P)
        selection_coeff: γ
        noise: environmental deviation added to every trait

    Returns:
        W in [0, MAX_FITNESS]
    """
    d = np.abs(phenotype(pleiotropy, epistasis, q, noise) - opt_phenotype)
    with np.errstate(over="ignore", invalid="ignore"):
        W = np.exp(-selection_coeff * float(d @ cov_inv @ d))
    return clamp_fitness(W)


def clamp_fitness(W: float) -> float:
    """+inf → MAX_FITNESS, NaN → 0"""
    W = np.nan_to_num(W, nan=0.0, posinf=MAX_FITNESS, neginf=0.0)
    return float(np.clip(W, 0.0, MAX_FITNESS))


def draw_noise(model, species: int, rng=None) -> float:
    rng = model.rng if rng is None else rng
    return float(rng.normal(0.0, model.species[species].noise_sd))


def evaluate(model, species: int, pleiotropy: np.ndarray, epistasis: np.ndarray,
             q: np.ndarray, rng=None) -> float:
    """Fitness with a fresh noise draw from the species' environment (model.rng unless `rng` is given)."""
    sp = model.species[species]
    return fitness_value(
        pleiotropy, epistasis, q,
        sp.opt_phenotype, model.cov_inv[species], sp.selection_coeff,
        noise=draw_noise(model, species, rng),
    )


def update_fitness(ind, model) -> float:
    """Recalculate and store the fitness of `ind`"""
    ind.W = evaluate(model, ind.species, ind.pleiotropy, ind.epistasis, ind.q)
    return ind.W


def update_all_fitness(model):
    for ind in model.population:
        update_fitness(ind, model)
