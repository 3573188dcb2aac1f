"""
Pairwise distance cache for a particle configuration.

Positions are stored column-wise, shape (dims, n_particles). Only the upper
triangle dist[i, j], i < j, is ever written.
"""

from __future__ import annotations

import numpy as np


class DistanceCache:
    def __init__(self, n_particles: int):
        self.n_particles = int(n_particles)
        self.dist = np.zeros((self.n_particles, self.n_particles), dtype=float)
        self._iu = np.triu_indices(self.n_particles, k=1)

    def rebuild(self, positions: np.ndarray) -> None:
        """Recompute every pair distance from scratch."""
        diff = positions[:, :, np.newaxis] - positions[:, np.newaxis, :]
        full = np.sqrt(np.sum(diff * diff, axis=0))
        self.dist = np.triu(full, k=1)

    def update(self, k: int, positions: np.ndarray) -> None:
        """
        Refresh the distances between particle k and every other particle:
        row k for later indices, column k for earlier ones.
        """
        diff = positions - positions[:, [k]]
        d = np.sqrt(np.sum(diff * diff, axis=0))
        self.dist[k, k + 1:] = d[k + 1:]
        self.dist[:k, k] = d[:k]

    def distance(self, i: int, j: int) -> float:
        return float(self.dist[min(i, j), max(i, j)])

    def pair_distances(self) -> np.ndarray:
        return self.dist[self._iu]

    def row(self, k: int) -> np.ndarray:
        # dist is upper triangular with a zero diagonal, so the symmetric
        # view of row k is row + column.
        return self.dist[k, :] + self.dist[:, k]

    def copy(self) -> "DistanceCache":
        other = DistanceCache(self.n_particles)
        other.dist = self.dist.copy()
        return other
