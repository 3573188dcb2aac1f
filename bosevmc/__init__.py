"""Variational Monte Carlo for trapped bosons."""

from .config import ConfigurationError, RunConfig
from .energy import (
    HARD_CORE_PENALTY,
    AnalyticLocalEnergy,
    NumericalLocalEnergy,
    external_potential,
    interaction_potential,
    make_local_energy,
)
from .geometry import DistanceCache
from .sampler import ImportanceSolver, Results, VMCSolver, create_solver
from .sweep import SinkError, select_best, vmc
from .wavefunction import TrialWaveFunction, VariationalParameters

__all__ = [
    "ConfigurationError",
    "RunConfig",
    "HARD_CORE_PENALTY",
    "AnalyticLocalEnergy",
    "NumericalLocalEnergy",
    "external_potential",
    "interaction_potential",
    "make_local_energy",
    "DistanceCache",
    "ImportanceSolver",
    "Results",
    "VMCSolver",
    "create_solver",
    "SinkError",
    "select_best",
    "vmc",
    "TrialWaveFunction",
    "VariationalParameters",
]
