"""
Local-energy estimators and potential terms.

Two interchangeable strategies compute E_L = (H Psi)/Psi at a configuration:

  - NumericalLocalEnergy: three-point finite differences of Psi for the
    kinetic term, valid for every trap and dimensionality.
  - AnalyticLocalEnergy: closed form for the Gaussian x hard-sphere Jastrow
    trial function, including the pair and three-body-via-pairs terms.

Both add the external trap potential and the hard-core interaction. A
configuration inside the hard core gets HARD_CORE_PENALTY (the largest float)
as its local energy.
"""

from __future__ import annotations

import numpy as np

from .config import RunConfig
from .geometry import DistanceCache
from .wavefunction import TrialWaveFunction

HARD_CORE_PENALTY = float(np.finfo(float).max)


# -----------------------------
# Potentials
# -----------------------------
def external_potential(config: RunConfig, positions: np.ndarray) -> float:
    if config.is_elliptical_3d:
        pot = config.omega_ho * float(np.sum(positions[:2] ** 2)) + config.omega_z * float(np.sum(positions[2] ** 2))
    else:
        pot = config.omega_ho * float(np.sum(positions ** 2))
    return 0.5 * pot


def interaction_potential(config: RunConfig, cache: DistanceCache) -> float:
    if not config.interaction:
        return 0.0
    if np.any(cache.pair_distances() <= config.a):
        return HARD_CORE_PENALTY
    return 0.0


# -----------------------------
# Estimators
# -----------------------------
class LocalEnergy:
    """Strategy interface: call with (positions, cache) -> local energy."""

    def __init__(self, config: RunConfig, wavefunction: TrialWaveFunction):
        self.config = config
        self.wavefunction = wavefunction

    def __call__(self, positions: np.ndarray, cache: DistanceCache) -> float:
        v_int = interaction_potential(self.config, cache)
        if v_int == HARD_CORE_PENALTY:
            return HARD_CORE_PENALTY
        return self.kinetic(positions, cache) + external_potential(self.config, positions) + v_int

    def kinetic(self, positions: np.ndarray, cache: DistanceCache) -> float:
        raise NotImplementedError


class NumericalLocalEnergy(LocalEnergy):
    def kinetic(self, positions: np.ndarray, cache: DistanceCache) -> float:
        cfg = self.config
        psi = self.wavefunction.value
        interacting = cfg.interaction

        # Work on scratch copies; the caller's configuration and cache stay untouched.
        R = positions.copy()
        dist = cache.copy() if interacting else cache

        psi0 = psi(R, dist)
        if psi0 == 0.0:
            # Gaussian underflow far outside the trap: no finite estimate exists.
            return HARD_CORE_PENALTY
        ek = -2.0 * cfg.n_particles * cfg.dims * psi0

        for i in range(cfg.n_particles):
            for d in range(cfg.dims):
                # Restore from the saved value rather than adding h back.
                temp = R[d, i]

                R[d, i] = temp + cfg.h
                if interacting:
                    dist.update(i, R)
                ek += psi(R, dist)

                R[d, i] = temp - cfg.h
                if interacting:
                    dist.update(i, R)
                ek += psi(R, dist)

                R[d, i] = temp
                if interacting:
                    dist.update(i, R)

        return -0.5 * ek * cfg.h2 / psi0


class AnalyticLocalEnergy(LocalEnergy):
    def kinetic(self, positions: np.ndarray, cache: DistanceCache) -> float:
        cfg = self.config
        alpha = self.wavefunction.params.alpha
        w = self.wavefunction.axis_weights()
        w_sum = float(np.sum(w))
        n = cfg.n_particles
        a = cfg.a
        interacting = cfg.interaction and n > 1

        lap = 0.0
        for k in range(n):
            r_k = positions[:, k]
            r_k_skewed = w * r_k

            lap += 2.0 * alpha * (2.0 * alpha * float(np.dot(r_k_skewed, r_k_skewed)) - w_sum)

            if not interacting:
                continue

            others = np.arange(n) != k
            r = cache.row(k)[others]
            r2 = r * r
            diff = r_k[:, np.newaxis] - positions[:, others]

            # u'(r)/r with u = log(1 - a/r)
            du_over_r = a / (r2 * (r - a))
            term = np.sum(diff * du_over_r, axis=1)

            d2u = a * (a - 2.0 * r) / (r2 * (r - a) ** 2)
            lap += float(np.sum(d2u + (cfg.dims - 1) * du_over_r))
            # sum_i sum_j (r_ki . r_kj) u'(r_ki) u'(r_kj) / (r_ki r_kj)
            lap += float(np.dot(term, term))
            lap -= 4.0 * alpha * float(np.dot(r_k_skewed, term))

        return -0.5 * lap


def make_local_energy(config: RunConfig, wavefunction: TrialWaveFunction) -> LocalEnergy:
    if config.analytic:
        return AnalyticLocalEnergy(config, wavefunction)
    return NumericalLocalEnergy(config, wavefunction)
