"""Tests for qchannel.cli module."""

from qchannel.cli import main


def test_capacity_command(capsys):
    assert main(["capacity", "--kappa", "0.5", "--lambda", "0.3"]) == 0
    out = capsys.readouterr().out
    assert "M/M/1 capacity" in out
    assert "M/D/1 capacity" in out


def test_simulate_command(capsys):
    assert main(["simulate", "HELLO", "--lambda", "0.3", "--kappa", "0.5", "--seed", "1"]) == 0
    assert "Transmission Report" in capsys.readouterr().out


def test_unstable_simulation_exits_with_error(capsys):
    assert main(["simulate", "HELLO", "--lambda", "1.0", "--kappa", "1.0"]) == 2
    assert "unstable queue" in capsys.readouterr().err


def test_invalid_kappa_exits_with_error(capsys):
    assert main(["capacity", "--kappa", "0"]) == 2
    assert "decoherence rate" in capsys.readouterr().err


def test_capacity_table_uses_fixed_spacing(capsys):
    assert main(["capacity", "--kappa", "1.0", "--step", "0.1"]) == 0
    out = capsys.readouterr().out
    assert "Capacity curve for κ=1.00" in out
    assert "  0.91 " in out
    assert "  0.99 " not in out
