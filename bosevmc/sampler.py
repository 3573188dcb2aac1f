"""
Metropolis sampling of |Psi|^2 at fixed variational parameters.

One run_mc call = n_cycles sweeps, each sweep proposing a move for every
particle in turn:

  Propose  displace particle k, refresh its cache row/column, evaluate Psi.
  Resolve  accept with probability min(1, G * Psi_new^2 / Psi_old^2);
           on reject, restore the cache and the proposal buffer.

After each resolved move the local energy of the current configuration is
accumulated. The random generator is injected, so a seeded Generator gives a
reproducible run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
from tqdm import tqdm

from .config import ConfigurationError, RunConfig
from .energy import make_local_energy
from .geometry import DistanceCache
from .wavefunction import TrialWaveFunction, VariationalParameters

DIFFUSION = 0.5
MAX_PLACEMENT_ATTEMPTS = 1000


@dataclass
class Results:
    energy: float = float("nan")
    energy_squared: float = float("nan")
    variance: float = float("inf")
    alpha: float = float("nan")
    beta: float = float("nan")
    acceptance_rate: float = 0.0

    def __str__(self) -> str:
        return (
            f"{self.energy:.6g}, {self.energy_squared:.6g}, {self.variance:.6g}, "
            f"{self.alpha:.6g}, {self.beta:.6g}, {self.acceptance_rate:.6g}"
        )


# -----------------------------
# Brute-force Metropolis
# -----------------------------
class VMCSolver:
    def __init__(self, config: RunConfig, rng: Optional[np.random.Generator] = None):
        self.config = config.validate()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.wavefunction = TrialWaveFunction(config)
        self.local_energy = make_local_energy(config, self.wavefunction)
        # Final state of the last run, for inspection only.
        self.positions: Optional[np.ndarray] = None
        self.distances: Optional[DistanceCache] = None

    @property
    def alpha(self) -> float:
        return self.wavefunction.params.alpha

    @property
    def beta(self) -> float:
        return self.wavefunction.params.beta

    def set_parameters(self, alpha: float, beta: float = 1.0) -> None:
        self.wavefunction.params = VariationalParameters(alpha=float(alpha), beta=float(beta))

    def initial_positions(self) -> np.ndarray:
        """
        Uniform draw in [-step_length/2, step_length/2] per coordinate.

        With interaction on, a particle landing inside the hard core of an
        already placed one is redrawn on its own, at most
        MAX_PLACEMENT_ATTEMPTS times.
        """
        cfg = self.config
        R = cfg.step_length * self.rng.uniform(-0.5, 0.5, size=(cfg.dims, cfg.n_particles))
        if not cfg.interaction or cfg.n_particles < 2:
            return R

        for k in range(1, cfg.n_particles):
            for _ in range(MAX_PLACEMENT_ATTEMPTS):
                diff = R[:, :k] - R[:, [k]]
                if np.all(np.sqrt(np.sum(diff * diff, axis=0)) > cfg.a):
                    break
                R[:, k] = cfg.step_length * self.rng.uniform(-0.5, 0.5, size=cfg.dims)
            else:
                raise ConfigurationError(
                    f"cannot place {cfg.n_particles} hard spheres of radius {cfg.a} "
                    f"within step_length={cfg.step_length} in {cfg.dims} dimension(s)"
                )
        return R

    def propose(self, k: int, R_old: np.ndarray, R_new: np.ndarray, cache: DistanceCache) -> None:
        R_new[:, k] = R_old[:, k] + self.config.step_length * self.rng.uniform(-0.5, 0.5, size=self.config.dims)

    def transition_ratio(
        self, k: int, R_old: np.ndarray, R_new: np.ndarray, cache: DistanceCache, psi_new: float
    ) -> float:
        """Ratio of proposal densities G(old<-new)/G(new<-old); 1 for symmetric moves."""
        return 1.0

    def run_mc(self, n_cycles: int, show_progress: bool = False) -> Results:
        if int(n_cycles) < 1:
            raise ValueError(f"n_cycles must be >= 1, got {n_cycles}")

        cfg = self.config
        n = cfg.n_particles
        psi = self.wavefunction.value

        R_old = self.initial_positions()
        R_new = R_old.copy()
        cache = DistanceCache(n)
        cache.rebuild(R_old)

        e_sum = 0.0
        e2_sum = 0.0
        accepted = 0

        it_range = range(int(n_cycles))
        if show_progress:
            it_range = tqdm(it_range, desc=f"MC α={self.alpha:.4f} β={self.beta:.4f}", leave=False)

        psi_old = psi(R_old, cache)
        for _ in it_range:
            for k in range(n):
                self.propose(k, R_old, R_new, cache)
                cache.update(k, R_new)
                psi_new = psi(R_new, cache)

                ratio = self.transition_ratio(k, R_old, R_new, cache, psi_new)
                # u * Psi_old^2 < G * Psi_new^2, so a zero Psi_old never divides.
                if self.rng.random() * psi_old * psi_old < ratio * psi_new * psi_new:
                    accepted += 1
                    psi_old = psi_new
                    R_old[:, k] = R_new[:, k]
                else:
                    cache.update(k, R_old)
                    R_new[:, k] = R_old[:, k]

                e = self.local_energy(R_old, cache)
                e_sum += e
                e2_sum += e * e

        self.positions = R_old
        self.distances = cache

        n_samples = int(n_cycles) * n
        energy = e_sum / n_samples
        energy_squared = e2_sum / n_samples
        return Results(
            energy=energy,
            energy_squared=energy_squared,
            variance=energy_squared - energy * energy,
            alpha=self.alpha,
            beta=self.beta,
            acceptance_rate=accepted / n_samples,
        )


# -----------------------------
# Importance sampling (Langevin drift)
# -----------------------------
class ImportanceSolver(VMCSolver):
    """
    Fokker-Planck proposals: r' = r + D F(r) dt + sqrt(dt) xi, xi ~ N(0, 1),
    accepted with the Green's-function ratio folded into the Metropolis test.
    """

    def __init__(self, config: RunConfig, rng: Optional[np.random.Generator] = None):
        super().__init__(config, rng)
        self._force_old: Optional[np.ndarray] = None

    def propose(self, k: int, R_old: np.ndarray, R_new: np.ndarray, cache: DistanceCache) -> None:
        dt = self.config.time_step
        # cache still matches R_old here.
        self._force_old = self.wavefunction.quantum_force(R_old, cache, k)
        xi = self.rng.normal(0.0, 1.0, size=self.config.dims)
        R_new[:, k] = R_old[:, k] + DIFFUSION * self._force_old * dt + np.sqrt(dt) * xi

    def transition_ratio(
        self, k: int, R_old: np.ndarray, R_new: np.ndarray, cache: DistanceCache, psi_new: float
    ) -> float:
        if psi_new == 0.0:
            return 0.0
        dt = self.config.time_step
        f_old = self._force_old
        f_new = self.wavefunction.quantum_force(R_new, cache, k)
        delta = 0.5 * DIFFUSION * dt * (f_old - f_new) + R_old[:, k] - R_new[:, k]
        return float(np.exp(0.5 * float(np.dot(f_old + f_new, delta))))


def create_solver(config: RunConfig, rng: Optional[np.random.Generator] = None) -> VMCSolver:
    if config.sampling == "importance":
        return ImportanceSolver(config, rng)
    return VMCSolver(config, rng)
