"""
Worker bootstrap and independent per-worker sweeps.

Each worker owns its own Generator seeded with base_seed + rank, its own
solver and its own buffers, so workers never share mutable state and never
draw the same random sequence. Results are returned per worker; they are not
combined.
"""

from __future__ import annotations

import io
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .config import RunConfig
from .sampler import Results, create_solver
from .sweep import ParamRange, vmc

BASE_SEED = 12345


@dataclass
class WorkerContext:
    rank: int
    size: int
    seed: int
    rng: np.random.Generator


@dataclass
class WorkerOutput:
    rank: int
    seed: int
    best: Results
    text: str


_context: Optional[WorkerContext] = None


def worker_seed(rank: int, base_seed: int = BASE_SEED) -> int:
    return int(base_seed) + int(rank)


def initialize(rank: Optional[int] = None, size: int = 1, base_seed: int = BASE_SEED) -> WorkerContext:
    """Establish this process's worker identity. Later calls return the same context."""
    global _context
    if _context is None:
        r = 0 if rank is None else int(rank)
        seed = worker_seed(r, base_seed)
        _context = WorkerContext(rank=r, size=int(size), seed=seed, rng=np.random.default_rng(seed))
    return _context


def finalize() -> None:
    global _context
    _context = None


def current_context() -> Optional[WorkerContext]:
    return _context


# -----------------------------
# Independent sweeps on a process pool
# -----------------------------
def _run_worker(
    rank: int,
    config: RunConfig,
    n_cycles: int,
    alpha_range: ParamRange,
    beta_range: ParamRange,
    base_seed: int,
) -> WorkerOutput:
    seed = worker_seed(rank, base_seed)
    solver = create_solver(config, rng=np.random.default_rng(seed))
    buf = io.StringIO()
    best = vmc(solver, n_cycles, buf, alpha_range, beta_range)
    return WorkerOutput(rank=rank, seed=seed, best=best, text=buf.getvalue())


def run_workers(
    config: RunConfig,
    n_workers: int,
    n_cycles: int,
    alpha_range: ParamRange,
    beta_range: ParamRange = (1.0, 1.0, 1),
    base_seed: int = BASE_SEED,
) -> List[WorkerOutput]:
    config.validate()
    outputs: List[WorkerOutput] = []
    with ProcessPoolExecutor(max_workers=int(n_workers)) as executor:
        futures = [
            executor.submit(_run_worker, rank, config, n_cycles, alpha_range, beta_range, base_seed)
            for rank in range(int(n_workers))
        ]
        for future in as_completed(futures):
            outputs.append(future.result())
    outputs.sort(key=lambda o: o.rank)
    return outputs
