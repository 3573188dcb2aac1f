"""
Trial wave function: Gaussian single-body part times hard-sphere Jastrow pairs.

    Psi(R) = exp(-alpha * sum_k (x_k^2 + y_k^2 + beta z_k^2)) * prod_{i<j} (1 - a/r_ij)

The beta skew only applies to 3-D elliptical traps. Pair factors read their
distances from a DistanceCache passed in by the caller; the cache must match
the positions being evaluated.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .config import RunConfig
from .geometry import DistanceCache


@dataclass(frozen=True)
class VariationalParameters:
    alpha: float = 0.5
    beta: float = 1.0


class TrialWaveFunction:
    def __init__(self, config: RunConfig, params: VariationalParameters = VariationalParameters()):
        self.config = config
        self.params = params

    # -----------------------------
    # Single-body Gaussian
    # -----------------------------
    def axis_weights(self) -> np.ndarray:
        w = np.ones(self.config.dims, dtype=float)
        if self.config.is_elliptical_3d:
            w[2] = self.params.beta
        return w

    def single_body(self, positions: np.ndarray) -> float:
        w = self.axis_weights()
        g = float(np.sum(w[:, np.newaxis] * positions * positions))
        return float(np.exp(-self.params.alpha * g))

    # -----------------------------
    # Pair correlation
    # -----------------------------
    def pair_correlation(self, cache: DistanceCache) -> float:
        if not self.config.interaction:
            return 1.0
        r = cache.pair_distances()
        a = self.config.a
        if np.any(r <= a):
            return 0.0
        return float(np.prod(1.0 - a / r))

    def value(self, positions: np.ndarray, cache: DistanceCache) -> float:
        f = self.pair_correlation(cache)
        if f == 0.0:
            return 0.0
        return self.single_body(positions) * f

    # -----------------------------
    # Drift for importance sampling
    # -----------------------------
    def quantum_force(self, positions: np.ndarray, cache: DistanceCache, k: int) -> np.ndarray:
        """
        F_k = 2 grad_k log Psi, in closed form.

        The configuration must be outside the hard core (Psi > 0).
        """
        w = self.axis_weights()
        grad = -2.0 * self.params.alpha * w * positions[:, k]
        if self.config.interaction and self.config.n_particles > 1:
            a = self.config.a
            others = np.arange(self.config.n_particles) != k
            r = cache.row(k)[others]
            diff = positions[:, [k]] - positions[:, others]
            grad = grad + np.sum(diff * (a / (r * r * (r - a))), axis=1)
        return 2.0 * grad
