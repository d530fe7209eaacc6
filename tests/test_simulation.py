"""Tests for qchannel.simulation module."""

import threading

import numpy as np
import pytest
from qchannel.capacity import capacity_random_service
from qchannel.config import PLACEHOLDER_GLYPH
from qchannel.errors import InvalidParameter, UnstableQueue
from qchannel.simulation import ChannelSimulation, RunState, run


MESSAGE = "The quick brown fox jumps over the lazy dog. " * 5


def test_unstable_queue_aborts():
    sim = ChannelSimulation(arrival_rate=1.0, decoherence_rate=1.0)
    with pytest.raises(UnstableQueue):
        sim.run("HELLO", rng=0)
    assert sim.state == RunState.ABORTED


def test_unstable_queue_aborts_even_for_empty_message():
    with pytest.raises(UnstableQueue):
        run("", 1.0, 1.0)


def test_invalid_parameters_raise():
    with pytest.raises(InvalidParameter):
        run("HELLO", 0.5, 0.0, rng=0)
    with pytest.raises(InvalidParameter):
        run("HELLO", -0.1, 1.0, rng=0)


def test_state_is_done_after_run():
    sim = ChannelSimulation(arrival_rate=0.3, decoherence_rate=1.0)
    assert sim.state == RunState.IDLE
    sim.run("HI", rng=0)
    assert sim.state == RunState.DONE


def test_low_decoherence_scenario():
    result = run("AB", 0.3, 0.01, rng=np.random.default_rng(42))
    assert result.symbols_processed == 2
    assert result.empirical_bit_error_rate <= 0.25
    assert result.estimated_capacity == pytest.approx(
        capacity_random_service(0.3, 0.01), abs=0.1
    )


def test_low_decoherence_long_message_is_mostly_intact():
    result = run(MESSAGE, 0.3, 0.01, rng=7)
    assert result.empirical_bit_error_rate < 0.05
    assert result.estimated_capacity > 0.2


def test_high_decoherence_scenario():
    result = run("AB", 0.3, 50.0, rng=np.random.default_rng(42))
    assert 0.1 <= result.empirical_bit_error_rate <= 0.9
    assert result.estimated_capacity < 0.05


def test_high_decoherence_long_message_is_random():
    result = run(MESSAGE, 0.3, 50.0, rng=7)
    assert result.empirical_bit_error_rate == pytest.approx(0.5, abs=0.1)
    assert result.estimated_capacity < 0.01


def test_placeholder_marks_exactly_the_corrupted_symbols():
    sim = ChannelSimulation(0.5, 0.5, log_head=len(MESSAGE))
    result = sim.run(MESSAGE, rng=3)
    assert len(result.received_text) == len(MESSAGE)
    for record in result.diagnostic_log:
        received = result.received_text[record.index]
        if record.corrupted:
            assert received == PLACEHOLDER_GLYPH
        else:
            assert received == MESSAGE[record.index]
    assert result.received_text.count(PLACEHOLDER_GLYPH) == result.corrupted_symbols


def test_symbol_records_are_consistent():
    result = run(MESSAGE, 0.6, 1.0, rng=11)
    for record in result.diagnostic_log:
        assert record.wait_time >= 0.0
        assert 0.0 <= record.flip_probability <= 0.5
        assert 0 <= record.bit_errors <= 8
        assert record.corrupted == (record.bit_errors > 0)


def test_diagnostic_log_is_bounded():
    sim = ChannelSimulation(0.3, 50.0, log_head=3, log_max_corrupted=10)
    result = sim.run(MESSAGE, rng=0)
    assert len(result.diagnostic_log) <= 13
    assert [r.index for r in result.diagnostic_log[:3]] == [0, 1, 2]
    assert result.dropped_log_entries > 0


def test_empty_message():
    result = run("", 0.4, 1.0, rng=0)
    assert result.received_text == ""
    assert result.symbols_processed == 0
    assert result.average_wait == 0.0
    assert result.empirical_bit_error_rate == 0.0
    assert result.estimated_capacity == 0.4
    assert result.diagnostic_log == []


def test_theoretical_capacity_reported():
    result = run("HELLO", 0.4, 2.0, rng=0)
    assert result.theoretical_capacity == capacity_random_service(0.4, 2.0)


def test_event_chained_mode_runs():
    result = run(MESSAGE, 0.5, 1.0, rng=5, mode="event_chained")
    assert result.symbols_processed == len(MESSAGE)
    assert result.diagnostic_log[0].wait_time == 0.0


def test_deterministic_with_same_seed():
    r1 = run(MESSAGE, 0.5, 1.0, rng=7)
    r2 = run(MESSAGE, 0.5, 1.0, rng=7)
    assert r1.as_dict() == r2.as_dict()


def test_print_report(capsys):
    result = run("HELLO", 0.5, 1.0, rng=1)
    ChannelSimulation.print_report(result)
    out = capsys.readouterr().out
    assert "Estimated capacity" in out
    assert "Q[00]" in out


def test_repeated_runs_do_not_share_totals():
    sim = ChannelSimulation(0.5, 1.0)
    first = sim.run(MESSAGE, rng=3)
    sim.run("XYZ", rng=4)
    again = sim.run(MESSAGE, rng=3)
    assert again.as_dict() == first.as_dict()


def test_concurrent_runs_on_one_instance():
    sim = ChannelSimulation(0.5, 1.0)
    expected = {seed: sim.run(MESSAGE, rng=seed).as_dict() for seed in range(4)}
    results = {}

    def worker(seed):
        results[seed] = sim.run(MESSAGE, rng=seed).as_dict()

    threads = [threading.Thread(target=worker, args=(seed,)) for seed in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert results == expected
