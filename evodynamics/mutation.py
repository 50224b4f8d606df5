"""
evodynamics/mutation.py - Three Bernoulli-gated mutation channels per individual
"""

from typing import Tuple

import numpy as np

from .fitness import update_fitness


def bernoulli_mask(rng: np.random.Generator, p: float, shape: Tuple[int, ...]) -> np.ndarray:
    """Boolean array of `shape`, each entry True with probability p"""
    return rng.random(shape) < p


def mutate(ind, model):
    """
    Mutate one individual, then re-evaluate its fitness.

    Channels (independent triggers, species-specific):
    1. expression: q += Normal(0, sd_expr) per gene
    2. pleiotropy: flip entries selected by a Bernoulli(p_flip) mask
    3. epistasis: A += Normal(0, sd_epi) per entry

    Fitness is recomputed even when nothing fired, which re-draws the
    environmental noise.
    """
    rng = model.rng
    sp = model.species[ind.species]
    p_expr, p_pleio, p_epi = sp.mut_probs
    sd_expr, p_flip, sd_epi = sp.mut_magnitudes

    if rng.random() < p_expr:
        ind.q += rng.normal(0.0, sd_expr, size=sp.ngenes)

    if rng.random() < p_pleio:
        flips = bernoulli_mask(rng, p_flip, ind.pleiotropy.shape)
        ind.pleiotropy[flips] = ~ind.pleiotropy[flips]

    if rng.random() < p_epi:
        ind.epistasis += rng.normal(0.0, sd_epi, size=ind.epistasis.shape)

    update_fitness(ind, model)


def mutation(model):
    for ind in model.population:
        mutate(ind, model)
