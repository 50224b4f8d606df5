"""
evodynamics/model.py - World state and the per-generation scheduler

Generation order:
    reproduction (if any diploid species) → regulation → mutation → migration
"""

from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from .config import ConfigError, ModelConfig, validate_config
from .fitness import evaluate
from .metrics import collect_record
from .migration import migration
from .mutation import mutation
from .population import Population
from .regulation import selection
from .reproduction import sexual_reproduction_all
from .rng_utils import make_rng


class Model:
    """
    Spatial multi-species population evolving under selection.

    Owns the topology, the species parameters, the population arena (and
    with it the id counter), and two RNG streams: one for building the
    initial population and one for the dynamics.
    """

    def __init__(self, config: ModelConfig, verbose: bool = False):
        ok, msg = validate_config(config)
        if not ok:
            raise ConfigError(msg)

        self.config = config
        self.verbose = verbose
        self.species = config.species
        self.nspecies = config.nspecies
        self.topology = config.build_topology()
        self.retire_all_occupants = config.retire_all_occupants

        # Shortcuts
        self.cov_inv = [np.linalg.inv(sp.cov_mat) for sp in self.species]
        self.K = np.array(
            [config.K[v] for v in range(self.topology.n_nodes)], dtype=float
        )
        self.competition_coeffs = (
            None if config.competition_coeffs is None
            else np.asarray(config.competition_coeffs, dtype=float)
        )
        self.migration_rates = (
            None if config.migration_rates is None
            else [None if M is None else np.asarray(M, dtype=float) for M in config.migration_rates]
        )
        self.diploid_species = [i for i, sp in enumerate(self.species) if sp.ploidy == 2]

        self.generation = 0
        self.rng_init = make_rng(config.seed, "init")
        self.rng = make_rng(config.seed, "dynamics")

        self.population = Population(self.topology.n_nodes, self.nspecies)
        self._populate()

    def _populate(self):
        """Add N[node][species] copies of each species' initial genotype"""
        for node, Ns in sorted(self.config.N.items()):
            for species, n in enumerate(Ns):
                sp = self.species[species]
                for _ in range(int(n)):
                    A = sp.epistasis.copy()
                    P = sp.pleiotropy.copy()
                    q = sp.expression.copy()
                    W = evaluate(self, species, P, A, q, rng=self.rng_init)
                    self.population.add(node, species, W, A, P, q)

    # ---- scheduler ----
    def step(self) -> "Model":
        """Advance the world by exactly one generation"""
        if self.diploid_species:
            sexual_reproduction_all(self)
        selection(self)
        mutation(self)
        migration(self)
        self.generation += 1
        return self

    def run(self, generations: Optional[int] = None, record: bool = False,
            log_every: int = 10) -> Optional[pd.DataFrame]:
        """
        Apply `step` repeatedly.

        Args:
            generations: number of steps (config.generations if None)
            record: collect one row per species per generation
            log_every: progress line period when verbose (0 disables it)

        Returns:
            DataFrame of records when `record` is set, else None
        """
        if generations is None:
            generations = self.config.generations
        rows: List[Dict] = collect_record(self) if record else []
        for _ in range(generations):
            self.step()
            if record:
                rows.extend(collect_record(self))
            if self.verbose and log_every > 0 and self.generation % log_every == 0:
                sizes = self.species_counts()
                print(f"[t={self.generation:04d}] N={sizes.tolist()}  "
                      f"total={len(self.population)}")
        if record:
            return pd.DataFrame(rows)
        return None

    # ---- queries ----
    def counts(self, node: int) -> np.ndarray:
        return self.population.counts(node)

    def count_table(self) -> np.ndarray:
        """(n_nodes, n_species) population sizes"""
        return np.array([self.counts(v) for v in range(self.topology.n_nodes)], dtype=int)

    def species_counts(self) -> np.ndarray:
        return self.count_table().sum(axis=0)

    def fitness(self, id_: int) -> float:
        return self.population[id_].W

    def position(self, id_: int) -> int:
        return self.population[id_].pos

    def species_of(self, id_: int) -> int:
        return self.population[id_].species

    @property
    def nindividuals(self) -> int:
        return len(self.population)

    def remove_individuals(self, ids):
        """Kill the individuals whose ids are listed"""
        for id_ in ids:
            self.population.remove(id_)


def advance_generation(model: Model) -> Model:
    return model.step()


def run(model: Model, generations: int) -> Model:
    for _ in range(generations):
        model.step()
    return model
