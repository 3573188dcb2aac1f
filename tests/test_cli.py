import pytest

from bosevmc import cli, parallel


def test_parse_range():
    assert cli.parse_range("0.1, 0.5,3") == (0.1, 0.5, 3)


def test_parse_csv_ints():
    assert cli.parse_csv_ints("1,2, 3,") == [1, 2, 3]


def test_main_writes_records_and_summary(tmp_path, capsys):
    out = tmp_path / "energies.dat"
    code = cli.main([
        "50", "0.4", "0.6", "3", str(out),
        "--dims", "1,2", "--particles", "2", "--estimators", "analytic",
    ])
    assert code == 0
    lines = out.read_text().splitlines()
    # one header plus three records per sweep, two sweeps
    assert lines.count("# alpha beta <E> <E^2>") == 2
    assert len(lines) == 8

    printed = capsys.readouterr().out.splitlines()
    assert printed[0] == cli.SUMMARY_HEADER
    assert len(printed) == 3
    assert printed[1].startswith("1,   2,  ON, ")
    assert parallel.current_context() is None


def test_main_unopenable_file(tmp_path, capsys):
    target = tmp_path / "missing" / "energies.dat"
    code = cli.main(["10", "0.5", "0.5", "1", str(target), "--dims", "1", "--particles", "1"])
    assert code == 1
    assert "Could not open file" in capsys.readouterr().out


def test_main_rejects_analytic_elliptical_2d(tmp_path):
    out = tmp_path / "energies.dat"
    with pytest.raises(SystemExit) as exc:
        cli.main([
            "10", "0.5", "0.5", "1", str(out),
            "--dims", "2", "--particles", "1", "--estimators", "analytic", "--elliptical",
        ])
    assert exc.value.code == 2
    assert not out.exists()


def test_main_rejects_unknown_estimator(tmp_path):
    with pytest.raises(SystemExit):
        cli.main(["10", "0.5", "0.5", "1", str(tmp_path / "e.dat"), "--estimators", "exact"])


def test_main_rejects_zero_cycles(tmp_path):
    out = tmp_path / "energies.dat"
    with pytest.raises(SystemExit) as exc:
        cli.main(["0", "0.5", "0.5", "1", str(out)])
    assert exc.value.code == 2
    assert not out.exists()
