import io

import numpy as np
import pytest

from bosevmc.config import RunConfig
from bosevmc.sampler import Results, VMCSolver
from bosevmc.sweep import HEADER, SinkError, parameter_grid, select_best, vmc


class ScriptedSolver:
    """Returns pre-baked Results in order and records the parameters it was given."""

    def __init__(self, variances):
        self.variances = list(variances)
        self.calls = []
        self.alpha = None
        self.beta = None

    def set_parameters(self, alpha, beta=1.0):
        self.alpha, self.beta = float(alpha), float(beta)

    def run_mc(self, n_cycles, show_progress=False):
        self.calls.append((self.alpha, self.beta))
        var = self.variances[len(self.calls) - 1]
        return Results(energy=1.0, energy_squared=1.0 + var, variance=var,
                       alpha=self.alpha, beta=self.beta, acceptance_rate=0.5)


class CountingSink(io.StringIO):
    def __init__(self):
        super().__init__()
        self.flushes = 0

    def flush(self):
        self.flushes += 1
        super().flush()


def test_select_best_keeps_first_of_ties():
    results = [Results(variance=v, alpha=float(i)) for i, v in enumerate([5.0, 2.0, 7.0, 2.0])]
    best = select_best(results)
    assert best is results[1]


def test_select_best_empty():
    assert select_best([]) is None


def test_parameter_grid_single_point():
    assert np.allclose(parameter_grid((0.3, 0.9, 1)), [0.3])
    assert np.allclose(parameter_grid((0.3, 0.7, 3)), [0.3, 0.5, 0.7])


def test_sweep_order_records_and_first_minimum():
    solver = ScriptedSolver([5.0, 2.0, 7.0, 2.0])
    sink = CountingSink()
    best = vmc(solver, 10, sink, alpha_range=(0.1, 0.2, 2), beta_range=(1.0, 2.0, 2))

    # alpha outer, beta inner
    assert solver.calls == [(0.1, 1.0), (0.1, 2.0), (0.2, 1.0), (0.2, 2.0)]
    assert best.variance == 2.0
    assert (best.alpha, best.beta) == (0.1, 2.0)

    lines = sink.getvalue().splitlines(keepends=True)
    assert lines[0] == HEADER
    assert len(lines) == 5
    assert lines[1] == "0.1 1 1 6\n"
    assert all(len(line.split()) == 4 for line in lines[1:])
    # once after the header, once at completion
    assert sink.flushes == 2


def test_unwritable_sink_fails_before_sampling():
    solver = ScriptedSolver([1.0])
    sink = io.StringIO()
    sink.close()
    with pytest.raises(SinkError):
        vmc(solver, 10, sink, alpha_range=(0.5, 0.5, 1))
    assert solver.calls == []


def test_two_boson_alpha_scan_picks_exact_minimum():
    config = RunConfig(dims=1, n_particles=2, omega_ho=1.0, interaction=False)
    solver = VMCSolver(config, rng=np.random.default_rng(2024))
    out = io.StringIO()
    best = vmc(solver, 3000, out, alpha_range=(0.3, 0.7, 3))

    assert best.alpha == pytest.approx(0.5)
    assert best.energy == pytest.approx(1.0, rel=1e-5)

    rows = [list(map(float, line.split())) for line in out.getvalue().splitlines()[1:]]
    assert [r[0] for r in rows] == pytest.approx([0.3, 0.5, 0.7])
    variances = {r[0]: r[3] - r[2] ** 2 for r in rows}
    assert variances[0.3] > 1e-3
    assert variances[0.7] > 1e-3
    assert variances[0.3] > best.variance and variances[0.7] > best.variance
