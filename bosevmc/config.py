"""
Run configuration for the trapped-boson VMC solver.

A RunConfig is built once, validated when a solver is constructed, and never
mutated afterwards. Names (trap, estimator, sampling) are plain strings, the
same way the CLI spells them.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

TRAPS = ("symmetric", "elliptical")
ESTIMATORS = ("numerical", "analytic")
SAMPLINGS = ("metropolis", "importance")


class ConfigurationError(ValueError):
    """Raised for run configurations the solver cannot honour."""


@dataclass(frozen=True)
class RunConfig:
    dims: int = 3
    n_particles: int = 1
    trap: str = "symmetric"
    omega_ho: float = 1.0
    omega_z: float = 1.0
    interaction: bool = False
    a: float = 0.0043
    h: float = 0.001
    step_length: float = 1.0
    estimator: str = "numerical"
    sampling: str = "metropolis"
    time_step: float = 0.01

    @property
    def h2(self) -> float:
        return 1.0 / (self.h * self.h)

    @property
    def is_elliptical_3d(self) -> bool:
        return self.trap == "elliptical" and self.dims == 3

    @property
    def analytic(self) -> bool:
        return self.estimator == "analytic"

    def with_(self, **changes) -> "RunConfig":
        return replace(self, **changes)

    def validate(self) -> "RunConfig":
        if self.dims not in (1, 2, 3):
            raise ConfigurationError(f"dims must be 1, 2 or 3, got {self.dims}")
        if self.n_particles < 1:
            raise ConfigurationError(f"n_particles must be >= 1, got {self.n_particles}")
        if self.trap not in TRAPS:
            raise ConfigurationError(f"trap must be one of {TRAPS}, got {self.trap!r}")
        if self.estimator not in ESTIMATORS:
            raise ConfigurationError(f"estimator must be one of {ESTIMATORS}, got {self.estimator!r}")
        if self.sampling not in SAMPLINGS:
            raise ConfigurationError(f"sampling must be one of {SAMPLINGS}, got {self.sampling!r}")
        if self.h <= 0.0:
            raise ConfigurationError("finite-difference step h must be > 0")
        if self.step_length <= 0.0:
            raise ConfigurationError("step_length must be > 0")
        if self.time_step <= 0.0:
            raise ConfigurationError("time_step must be > 0")
        if self.a < 0.0:
            raise ConfigurationError("hard-sphere radius a must be >= 0")
        # The closed-form energy only knows the beta-skewed Gaussian in 3-D.
        if self.analytic and self.trap == "elliptical" and self.dims != 3:
            raise ConfigurationError(
                f"analytic estimator supports elliptical traps only in 3 dimensions, got dims={self.dims}"
            )
        return self
