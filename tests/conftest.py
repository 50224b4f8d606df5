import numpy as np
import pytest

from evodynamics.config import ModelConfig, SpeciesParams
from evodynamics.model import Model


def species(ngenes=4, nphenotypes=2, ploidy=1, **kw):
    rng = np.random.default_rng(7 + ngenes)
    params = dict(
        epistasis=rng.random((ngenes, ngenes)),
        pleiotropy=rng.random((nphenotypes, ngenes)) < 0.5,
        expression=rng.random(ngenes),
        ploidy=ploidy,
        selection_coeff=0.5,
        opt_phenotype=np.zeros(nphenotypes),
        cov_mat=np.eye(nphenotypes),
        noise_sd=0.0,
        growth_rate=0.1,
    )
    params.update(kw)
    return SpeciesParams(ngenes=ngenes, nphenotypes=nphenotypes, **params)


@pytest.fixture
def make_species():
    return species


@pytest.fixture
def make_model():
    def _make(species_list, N, K=None, space=None, seed=123, **kw):
        if K is None:
            K = {v: [1000] * len(species_list) for v in N}
        config = ModelConfig(species=species_list, space=space, N=N, K=K, seed=seed, **kw)
        return Model(config)
    return _make
