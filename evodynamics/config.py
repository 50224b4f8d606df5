"""
Configuration & Species Parameters for the Evolutionary Dynamics Engine
=======================================================================

This module defines all per-species genetic, selective and demographic
parameters, plus the spatial and run-level settings of a model.

Biological Interpretation:
- Genotype: expression vector q combined with an epistasis matrix A
- Phenotype: z = P · (A · q) + environmental noise
- Fitness: Gaussian selection surface around an optimal phenotype θ
- Demography: discrete logistic growth with Lotka-Volterra competition
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from .topology import Topology


class ConfigError(ValueError):
    """Raised when a model is built from an inconsistent configuration."""


# ============================================================================
# Species Parameters
# ============================================================================

@dataclass
class SpeciesParams:
    """
    Parameters describing one species.

    Genetic architecture:
    - ngenes columns in the epistasis and pleiotropy matrices
    - For diploids the columns split into two homologous halves
    """

    ngenes: int
    """Number of genes (L). Must be a multiple of ploidy."""

    nphenotypes: int
    """Number of phenotypic traits (P)."""

    epistasis: np.ndarray
    """Initial epistasis matrix A, shape (L, L)"""

    pleiotropy: np.ndarray
    """Initial pleiotropy matrix, shape (P, L), boolean

    Entry (i, j) is True when gene j affects trait i.
    """

    expression: np.ndarray
    """Initial expression vector q, shape (L,)"""

    ploidy: int = 1
    """1 = haploid (asexual), 2 = diploid (sexual with recombination)"""

    selection_coeff: float = 0.5
    """Selection strength γ

    W = exp(-γ · dᵗ Σ⁻¹ d), d = |z - θ|
    """

    opt_phenotype: Optional[np.ndarray] = None
    """Optimal phenotype θ, shape (P,). Defaults to zeros."""

    cov_mat: Optional[np.ndarray] = None
    """Covariance Σ of the selection surface, shape (P, P). Defaults to identity.

    The model stores its inverse.
    """

    noise_sd: float = 0.0
    """Standard deviation of environmental noise added to every phenotype

    One draw per evaluation, broadcast across traits.
    """

    growth_rate: float = 0.1
    """Intrinsic growth rate r of the logistic map"""

    mut_probs: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    """Per-generation trigger probabilities (expression, pleiotropy, epistasis)"""

    mut_magnitudes: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    """Mutation sizes (expression sd, pleiotropy flip probability, epistasis sd)"""

    def __post_init__(self):
        """Coerce arrays to their canonical dtypes and shapes."""
        self.epistasis = np.atleast_2d(np.asarray(self.epistasis, dtype=float))
        self.pleiotropy = np.atleast_2d(np.asarray(self.pleiotropy)).astype(bool)
        self.expression = np.atleast_1d(np.asarray(self.expression, dtype=float)).ravel()
        if self.opt_phenotype is None:
            self.opt_phenotype = np.zeros(self.nphenotypes)
        self.opt_phenotype = np.atleast_1d(np.asarray(self.opt_phenotype, dtype=float)).ravel()
        if self.cov_mat is None:
            self.cov_mat = np.eye(self.nphenotypes)
        self.cov_mat = np.atleast_2d(np.asarray(self.cov_mat, dtype=float))
        self.mut_probs = tuple(float(p) for p in self.mut_probs)
        self.mut_magnitudes = tuple(float(m) for m in self.mut_magnitudes)


# ============================================================================
# Model Configuration
# ============================================================================

SpaceSpec = Union[None, Tuple[int, ...], np.ndarray, Topology]


@dataclass
class ModelConfig:
    """
    Complete model configuration: species, space, demography and run length.
    """

    species: List[SpeciesParams] = field(default_factory=list)

    # Space
    space: SpaceSpec = None
    """None (single node), grid shape tuple, adjacency matrix or Topology"""
    periodic: bool = False
    moore: bool = False

    # Demography
    N: Dict[int, Sequence[int]] = field(default_factory=dict)
    """Initial counts: node -> per-species sizes"""

    K: Dict[int, Sequence[float]] = field(default_factory=dict)
    """Carrying capacities: node -> per-species K"""

    migration_rates: Optional[List[Optional[np.ndarray]]] = None
    """Per-species (n_nodes, n_nodes) weights; column = origin, row = destination"""

    competition_coeffs: Optional[np.ndarray] = None
    """(S, S) Lotka-Volterra coefficients; column j is the effect on species j"""

    # Run
    generations: int = 10
    seed: int = 0
    """0 draws fresh entropy; any positive value gives reproducible streams"""

    retire_all_occupants: bool = True
    """After mating, remove every prior occupant of the node

    True keeps the historical behavior: haploids sharing a node with
    mating diploids are removed too. False removes only the parents.
    """

    @property
    def nspecies(self) -> int:
        return len(self.species)

    def build_topology(self) -> Topology:
        """Resolve `space` into a Topology."""
        if self.space is None:
            return Topology.single()
        if isinstance(self.space, Topology):
            return self.space
        if isinstance(self.space, tuple):
            return Topology.grid(self.space, periodic=self.periodic, moore=self.moore)
        return Topology.from_adjacency(np.asarray(self.space))


# ============================================================================
# Experimental Presets
# ============================================================================

def config_single_haploid(
    N: int = 1000,
    K: float = 1000,
    growth_rate: float = 0.1,
    seed: int = 913
) -> ModelConfig:
    """
    One node, one haploid species, no mutation, migration or noise.

    At N = K the logistic target equals the current size, so the
    population should stay near K while selection resamples it.
    """
    sp = SpeciesParams(
        ngenes=3,
        nphenotypes=2,
        epistasis=np.eye(3),
        pleiotropy=np.array([[1, 1, 0], [0, 1, 1]], dtype=bool),
        expression=np.full(3, 0.5),
        ploidy=1,
        selection_coeff=0.5,
        opt_phenotype=np.array([1.0, 1.0]),
        cov_mat=np.eye(2),
        noise_sd=0.0,
        growth_rate=growth_rate,
    )
    return ModelConfig(
        species=[sp],
        N={0: [N]},
        K={0: [K]},
        generations=10,
        seed=seed,
    )


def config_two_species_grid(seed: int = 913) -> ModelConfig:
    """
    A diploid and a haploid species on a 2×2 grid.

    Mirrors the classic two-species test setup:
    - 14 diploid genes (7 loci × 2), 8 haploid genes
    - 4 and 5 traits
    - weak competition, low migration, mutation in every channel
    """
    rng = np.random.default_rng(seed)
    ploidy = (2, 1)
    loci = (7, 8)
    ntraits = (4, 5)
    species = []
    for m, nl, P, r in zip(ploidy, loci, ntraits, (0.8, 0.12)):
        L = nl * m
        species.append(SpeciesParams(
            ngenes=L,
            nphenotypes=P,
            epistasis=rng.random((L, L)) / L,
            pleiotropy=rng.random((P, L)) < 0.5,
            expression=rng.random(L),
            ploidy=m,
            selection_coeff=0.5,
            opt_phenotype=rng.standard_normal(P),
            cov_mat=np.eye(P),
            noise_sd=0.8,
            growth_rate=r,
            mut_probs=(0.2, 0.2, 0.2),
            mut_magnitudes=(0.05, 0.01, 0.05),
        ))

    migration = np.array([
        [1.00, 0.02, 0.02, 0.02],
        [0.03, 1.00, 0.03, 0.03],
        [0.01, 0.01, 1.00, 0.01],
        [0.01, 0.01, 0.01, 1.00],
    ])
    return ModelConfig(
        species=species,
        space=(2, 2),
        moore=False,
        N={v: [200, 200] for v in range(4)},
        K={v: [200, 200] for v in range(4)},
        migration_rates=[migration.copy() for _ in species],
        competition_coeffs=np.array([[1.0, 0.05], [-0.05, 1.0]]),
        generations=5,
        seed=seed,
    )


# ============================================================================
# Parameter Validation
# ============================================================================

def validate_config(config: ModelConfig) -> Tuple[bool, str]:
    """
    Check configuration for dimensional and biological consistency.

    Returns:
        (is_valid, error_message)
    """
    errors = []
    S = config.nspecies

    if S == 0:
        errors.append("At least one species is required")

    for i, sp in enumerate(config.species):
        tag = f"species {i}"
        L, P = sp.ngenes, sp.nphenotypes
        if sp.ploidy not in (1, 2):
            errors.append(f"{tag}: ploidy must be 1 or 2 (got {sp.ploidy})")
        elif L % sp.ploidy != 0:
            errors.append(f"{tag}: ngenes must be a multiple of ploidy")
        if sp.epistasis.shape != (L, L):
            errors.append(f"{tag}: epistasis shape {sp.epistasis.shape} != ({L}, {L})")
        if sp.pleiotropy.shape != (P, L):
            errors.append(f"{tag}: pleiotropy shape {sp.pleiotropy.shape} != ({P}, {L})")
        if sp.expression.shape != (L,):
            errors.append(f"{tag}: expression length {sp.expression.size} != {L}")
        if sp.opt_phenotype.shape != (P,):
            errors.append(f"{tag}: optimal phenotype length {sp.opt_phenotype.size} != {P}")
        if sp.cov_mat.shape != (P, P):
            errors.append(f"{tag}: covariance shape {sp.cov_mat.shape} != ({P}, {P})")
        elif not np.isfinite(np.linalg.cond(sp.cov_mat)):
            errors.append(f"{tag}: covariance matrix is singular")
        if sp.noise_sd < 0:
            errors.append(f"{tag}: noise_sd must be non-negative")
        if len(sp.mut_probs) != 3 or len(sp.mut_magnitudes) != 3:
            errors.append(f"{tag}: mut_probs and mut_magnitudes need 3 channels")
        elif not all(0.0 <= p <= 1.0 for p in sp.mut_probs + (sp.mut_magnitudes[1],)):
            errors.append(f"{tag}: mutation probabilities must be in [0, 1]")
        elif sp.mut_magnitudes[0] < 0 or sp.mut_magnitudes[2] < 0:
            errors.append(f"{tag}: mutation sds must be non-negative")

    try:
        topo = config.build_topology()
    except ValueError as e:
        errors.append(f"space: {e}")
        topo = None

    if topo is not None:
        for v in range(topo.n_nodes):
            if v not in config.K:
                errors.append(f"K has no entry for node {v}")
            elif len(config.K[v]) != S:
                errors.append(f"K[{v}] should have {S} values")
            elif any(k <= 0 for k in config.K[v]):
                errors.append(f"K[{v}] must be positive")
        for v in config.K:
            if not 0 <= v < topo.n_nodes:
                errors.append(f"K references missing node {v}")
        for v, ns in config.N.items():
            if not 0 <= v < topo.n_nodes:
                errors.append(f"N references missing node {v}")
            if len(ns) != S:
                errors.append(f"N[{v}] should have {S} values")
            elif any(n < 0 for n in ns):
                errors.append(f"N[{v}] has negative counts")

        if config.migration_rates is not None:
            if len(config.migration_rates) != S:
                errors.append(f"migration_rates should have {S} entries")
            for i, M in enumerate(config.migration_rates):
                if M is None:
                    continue
                M = np.asarray(M)
                if M.shape != (topo.n_nodes, topo.n_nodes):
                    errors.append(
                        f"migration_rates[{i}] shape {M.shape} does not match "
                        f"{topo.n_nodes} nodes"
                    )
                elif (M < 0).any():
                    errors.append(f"migration_rates[{i}] has negative weights")

    if config.competition_coeffs is not None:
        if np.asarray(config.competition_coeffs).shape != (S, S):
            errors.append(f"competition_coeffs should be ({S}, {S})")

    if config.generations < 0:
        errors.append("generations must be non-negative")

    if errors:
        return False, "; ".join(errors)
    return True, "OK"
