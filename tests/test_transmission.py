"""Tests for qchannel.transmission module."""

import pytest
from qchannel.noise import binary_entropy
from qchannel.transmission import SymbolRecord, TransmissionStatistics


def _sym(index: int, mask: int = 0, wait: float = 1.0, p: float = 0.1) -> SymbolRecord:
    return SymbolRecord(index, "A", wait, p, mask)


def test_symbol_record_counts_bits():
    rec = _sym(0, mask=0b10100001)
    assert rec.bit_errors == 3
    assert rec.corrupted
    assert not _sym(1).corrupted


def test_compute_on_no_data():
    stats = TransmissionStatistics()
    totals = stats.compute(arrival_rate=0.4)
    assert totals["symbols_processed"] == 0
    assert totals["average_wait"] == 0.0
    assert totals["empirical_bit_error_rate"] == 0.0
    assert totals["estimated_capacity"] == 0.4


def test_invalid_log_bounds_raise():
    with pytest.raises(ValueError):
        TransmissionStatistics(log_head=-1)


def test_aggregates():
    stats = TransmissionStatistics()
    stats.record(_sym(0, mask=0b1, wait=1.0, p=0.1))
    stats.record(_sym(1, mask=0b11, wait=3.0, p=0.3))
    totals = stats.compute(arrival_rate=0.5)
    assert totals["average_wait"] == pytest.approx(2.0)
    assert totals["average_flip_probability"] == pytest.approx(0.2)
    assert totals["total_bit_errors"] == 3
    assert totals["empirical_bit_error_rate"] == pytest.approx(3 / 16)
    assert totals["corrupted_symbols"] == 2
    assert totals["estimated_capacity"] == pytest.approx(0.5 * (1 - binary_entropy(0.2)))


def test_log_keeps_head_and_corrupted_only():
    stats = TransmissionStatistics(log_head=3)
    for i in range(10):
        stats.record(_sym(i, mask=1 if i in (1, 6) else 0))
    assert [r.index for r in stats.diagnostic_log] == [0, 1, 2, 6]


def test_log_is_bounded():
    stats = TransmissionStatistics(log_head=3, log_max_corrupted=5)
    for i in range(100):
        stats.record(_sym(i, mask=0xFF))
    assert len(stats.diagnostic_log) == 8
    assert stats.dropped_log_entries == 92


def test_reset_clears_data():
    stats = TransmissionStatistics()
    for i in range(5):
        stats.record(_sym(i, mask=1))
    stats.reset()
    assert stats.symbols == 0
    assert stats.diagnostic_log == []
    assert stats.dropped_log_entries == 0
