"""
Variational sweep: run the sampler over an (alpha, beta) grid and keep the
point with the lowest energy variance.

Output stream format:

    # alpha beta <E> <E^2>
    0.3 1 1.1234 1.4321
    ...
"""

from __future__ import annotations

from typing import Iterable, Optional, TextIO, Tuple

import numpy as np

from .sampler import Results, VMCSolver

HEADER = "# alpha beta <E> <E^2>\n"

ParamRange = Tuple[float, float, int]


class SinkError(OSError):
    """The output stream cannot be written to."""


def parameter_grid(r: ParamRange) -> np.ndarray:
    lo, hi, count = r
    return np.linspace(float(lo), float(hi), int(count))


def select_best(results: Iterable[Results], best: Optional[Results] = None) -> Optional[Results]:
    """First result with the strictly lowest variance; later ties never replace it."""
    for res in results:
        if best is None or res.variance < best.variance:
            best = res
    return best


def format_record(res: Results) -> str:
    return f"{res.alpha:g} {res.beta:g} {res.energy:g} {res.energy_squared:g}\n"


def _write_header(out: TextIO) -> None:
    try:
        out.write(HEADER)
        out.flush()
    except (OSError, ValueError) as exc:
        raise SinkError(f"cannot write to output stream: {exc}") from exc


def vmc(
    solver: VMCSolver,
    n_cycles: int,
    out: TextIO,
    alpha_range: ParamRange,
    beta_range: ParamRange = (1.0, 1.0, 1),
    show_progress: bool = False,
) -> Results:
    """
    For every (alpha, beta) in the Cartesian product of the two linspace
    ranges (alpha outer, beta inner) run one sampling pass, write its record
    and track the minimum-variance Results.
    """
    alphas = parameter_grid(alpha_range)
    betas = parameter_grid(beta_range)

    _write_header(out)

    best = Results()
    for alpha in alphas:
        for beta in betas:
            solver.set_parameters(alpha, beta)
            res = solver.run_mc(n_cycles, show_progress=show_progress)
            out.write(format_record(res))
            best = select_best([res], best)

    out.flush()
    return best
