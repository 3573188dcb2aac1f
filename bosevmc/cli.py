# -*- coding: utf-8 -*-
"""
Batch driver for the trapped-boson VMC solver.

Runs the variational sweep for every combination of dimensionality, particle
count and energy estimator, writes the per-point records to a file and prints
one summary row per sweep.

Usage examples:
  # Non-interacting spherical trap, 1-3 dims, 1/10/100 particles
  bosevmc 10000 0.3 0.7 5 energies.dat --dims 1,2,3 --particles 1,10,100

  # Compare the finite-difference and closed-form estimators
  bosevmc 10000 0.4 0.6 3 energies.dat --estimators numerical,analytic

  # Interacting elliptical trap with a beta scan and importance sampling
  bosevmc 2000 0.45 0.55 3 energies.dat --dims 3 --particles 10 --interaction \
    --elliptical --omega-z 2.82843 --beta 2.5,3.0,3 --importance --time-step 0.01

  # Four independent workers, seeds 12345..12348
  bosevmc 5000 0.3 0.7 5 energies.dat --workers 4
"""

from __future__ import annotations

import argparse
import time
from typing import List, Optional, Sequence

from . import parallel
from .config import ESTIMATORS, ConfigurationError, RunConfig
from .sampler import create_solver
from .sweep import ParamRange, vmc

SUMMARY_HEADER = (
    "Dims, Number of particles, Use analytic expressions, "
    "Energy, Energy^2, Variance, alpha, beta, acceptance rate, time(ms)"
)


# -----------------------------
# Parsing helpers
# -----------------------------
def parse_csv_ints(s: str) -> List[int]:
    return [int(x.strip()) for x in s.split(",") if x.strip() != ""]


def parse_csv_names(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip() != ""]


def parse_range(s: str) -> ParamRange:
    parts = [x.strip() for x in s.split(",")]
    if len(parts) != 3:
        raise argparse.ArgumentTypeError(f"expected MIN,MAX,N, got {s!r}")
    return float(parts[0]), float(parts[1]), int(parts[2])


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Variational Monte Carlo for bosons in a harmonic trap")
    ap.add_argument("n_cycles", type=int, help="Monte Carlo cycles per parameter point")
    ap.add_argument("alpha_min", type=float)
    ap.add_argument("alpha_max", type=float)
    ap.add_argument("alpha_n", type=int, help="Number of alpha values (linspace)")
    ap.add_argument("filename", type=str, help="Output file for the per-point records")

    ap.add_argument("--dims", type=str, default="1,2,3", help="Comma-separated dimensionalities")
    ap.add_argument("--particles", type=str, default="1,10,100", help="Comma-separated particle counts")
    ap.add_argument("--estimators", type=str, default="analytic,numerical",
                    help=f"Comma-separated local-energy estimators from {ESTIMATORS}")
    ap.add_argument("--elliptical", action="store_true", help="Elliptical trap (beta skew on z in 3-D)")
    ap.add_argument("--omega-ho", type=float, default=1.0, help="Trap frequency in the xy-plane")
    ap.add_argument("--omega-z", type=float, default=1.0, help="Trap frequency along z (elliptical)")
    ap.add_argument("--interaction", action="store_true", help="Hard-sphere interaction on")
    ap.add_argument("--a", type=float, default=0.0043, help="Hard-sphere radius")
    ap.add_argument("--fd-step", type=float, default=0.001, help="Finite-difference step h")
    ap.add_argument("--step-length", type=float, default=1.0, help="Metropolis step length")
    ap.add_argument("--importance", action="store_true", help="Use importance (Langevin) sampling")
    ap.add_argument("--time-step", type=float, default=0.01, help="Importance-sampling time step")
    ap.add_argument("--beta", type=parse_range, default=(1.0, 1.0, 1), help="Beta range MIN,MAX,N")
    ap.add_argument("--seed", type=int, default=parallel.BASE_SEED, help="Base seed (seed = base + rank)")
    ap.add_argument("--rank", type=int, default=None, help="Worker rank of this process (default 0)")
    ap.add_argument("--workers", type=int, default=1, help="Independent worker processes per sweep")
    ap.add_argument("--progress", action="store_true", help="Show per-run progress bars")
    return ap


# -----------------------------
# Main
# -----------------------------
def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    dims_list = parse_csv_ints(args.dims)
    particles_list = parse_csv_ints(args.particles)
    estimators = parse_csv_names(args.estimators)
    for name in estimators:
        if name not in ESTIMATORS:
            ap.error(f"--estimators: unknown estimator {name!r}")
    if args.n_cycles < 1:
        ap.error("n_cycles must be >= 1")
    if args.workers < 1:
        ap.error("--workers must be >= 1")

    alpha_range: ParamRange = (args.alpha_min, args.alpha_max, args.alpha_n)

    # Every combination is validated before any file is touched.
    configs: List[RunConfig] = []
    try:
        for dims in dims_list:
            for n_particles in particles_list:
                for estimator in estimators:
                    configs.append(
                        RunConfig(
                            dims=dims,
                            n_particles=n_particles,
                            trap="elliptical" if args.elliptical else "symmetric",
                            omega_ho=args.omega_ho,
                            omega_z=args.omega_z,
                            interaction=args.interaction,
                            a=args.a,
                            h=args.fd_step,
                            step_length=args.step_length,
                            estimator=estimator,
                            sampling="importance" if args.importance else "metropolis",
                            time_step=args.time_step,
                        ).validate()
                    )
    except ConfigurationError as exc:
        ap.error(str(exc))

    try:
        out_file = open(args.filename, "w", encoding="utf-8")
    except OSError:
        print(f"Could not open file '{args.filename}'")
        return 1

    ctx = parallel.initialize(rank=args.rank, size=args.workers, base_seed=args.seed)
    try:
        with out_file:
            print(SUMMARY_HEADER)
            for config in configs:
                _run_one(config, args, alpha_range, ctx, out_file)
    finally:
        parallel.finalize()
    return 0


def _run_one(config: RunConfig, args, alpha_range: ParamRange, ctx: parallel.WorkerContext, out_file) -> None:
    label = "ON" if config.analytic else "OFF"
    start = time.perf_counter()

    if args.workers > 1:
        outputs = parallel.run_workers(
            config, args.workers, args.n_cycles, alpha_range, args.beta, base_seed=args.seed
        )
        milli = int((time.perf_counter() - start) * 1000)
        for o in outputs:
            out_file.write(o.text)
            print(f"{config.dims}, {config.n_particles:3d}, {label:>3s}, {o.best}, {milli}")
        return

    solver = create_solver(config, rng=ctx.rng)
    best = vmc(solver, args.n_cycles, out_file, alpha_range, args.beta, show_progress=args.progress)
    milli = int((time.perf_counter() - start) * 1000)
    print(f"{config.dims}, {config.n_particles:3d}, {label:>3s}, {best}, {milli}", flush=True)


if __name__ == "__main__":
    raise SystemExit(main())
