"""Per-symbol records and run-level statistics for the channel simulation.

:class:`TransmissionStatistics` accumulates running sums over the symbols of
one transmission and keeps a bounded diagnostic log:

* the first ``log_head`` symbols are always logged;
* after that, only corrupted symbols are logged, at most
  ``log_max_corrupted`` of them.  Further corrupted symbols are counted in
  ``dropped_log_entries`` but not stored.
"""

from typing import List

from qchannel.config import BITS_PER_SYMBOL, LOG_HEAD, LOG_MAX_CORRUPTED
from qchannel.noise import binary_symmetric_capacity


class SymbolRecord:
    """Outcome of transmitting one character through the queue."""

    def __init__(
        self,
        index: int,
        character: str,
        wait_time: float,
        flip_probability: float,
        flip_mask: int,
    ) -> None:
        self.index = index
        self.character = character
        self.wait_time = wait_time
        self.flip_probability = flip_probability
        self.flip_mask = flip_mask

    @property
    def bit_errors(self) -> int:
        return bin(self.flip_mask).count("1")

    @property
    def corrupted(self) -> bool:
        return self.flip_mask != 0

    def as_dict(self) -> dict:
        return {
            "index": self.index,
            "character": self.character,
            "wait_time": self.wait_time,
            "flip_probability": self.flip_probability,
            "bit_errors": self.bit_errors,
            "flip_mask": self.flip_mask,
            "corrupted": self.corrupted,
        }

    def __repr__(self) -> str:
        status = "FLIP" if self.corrupted else "OK"
        return (
            f"SymbolRecord(#{self.index:02d} wait={self.wait_time:.2f} "
            f"p={self.flip_probability:.2f} errors={self.bit_errors} {status})"
        )


class TransmissionStatistics:
    """Accumulates symbol records and computes aggregate channel statistics.

    Parameters
    ----------
    log_head : int
        Number of leading symbols always kept in the diagnostic log
        (default 3).
    log_max_corrupted : int
        Maximum number of corrupted symbols logged after the head
        (default 32).
    bits_per_symbol : int
        Bits carried by one symbol (default 8).
    """

    def __init__(
        self,
        log_head: int = LOG_HEAD,
        log_max_corrupted: int = LOG_MAX_CORRUPTED,
        bits_per_symbol: int = BITS_PER_SYMBOL,
    ) -> None:
        if log_head < 0 or log_max_corrupted < 0:
            raise ValueError("log bounds must be >= 0")
        self.log_head = log_head
        self.log_max_corrupted = log_max_corrupted
        self.bits_per_symbol = bits_per_symbol
        self.reset()

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def record(self, symbol: SymbolRecord) -> None:
        """Add one transmitted symbol to the running totals."""
        self.symbols += 1
        self.total_wait += symbol.wait_time
        self.total_flip_probability += symbol.flip_probability
        self.total_bit_errors += symbol.bit_errors

        if symbol.corrupted:
            self.corrupted_symbols += 1

        if symbol.index < self.log_head:
            self.diagnostic_log.append(symbol)
        elif symbol.corrupted:
            if self._logged_corrupted < self.log_max_corrupted:
                self.diagnostic_log.append(symbol)
                self._logged_corrupted += 1
            else:
                self.dropped_log_entries += 1

    def compute(self, arrival_rate: float) -> dict:
        """Aggregate the recorded symbols.

        An empty transmission reports zero wait, zero error rate and an
        average flip probability of 0, so the estimated capacity is λ.

        Returns
        -------
        dict with keys:
            ``symbols_processed``        – number of symbols recorded
            ``average_wait``             – mean wait time
            ``average_flip_probability`` – mean per-symbol flip probability
            ``total_bit_errors``         – bits flipped over the whole run
            ``empirical_bit_error_rate`` – flipped bits / transmitted bits
            ``corrupted_symbols``        – symbols with at least one flip
            ``estimated_capacity``       – ``λ · (1 - H(mean flip prob))``
        """
        n = self.symbols
        if n == 0:
            average_wait = 0.0
            average_p = 0.0
            ber = 0.0
        else:
            average_wait = self.total_wait / n
            average_p = self.total_flip_probability / n
            ber = self.total_bit_errors / (n * self.bits_per_symbol)

        return {
            "symbols_processed": n,
            "average_wait": average_wait,
            "average_flip_probability": average_p,
            "total_bit_errors": self.total_bit_errors,
            "empirical_bit_error_rate": ber,
            "corrupted_symbols": self.corrupted_symbols,
            "estimated_capacity": arrival_rate * binary_symmetric_capacity(average_p),
        }

    def reset(self) -> None:
        """Clear all recorded data."""
        self.symbols = 0
        self.total_wait = 0.0
        self.total_flip_probability = 0.0
        self.total_bit_errors = 0
        self.corrupted_symbols = 0
        self.diagnostic_log: List[SymbolRecord] = []
        self.dropped_log_entries = 0
        self._logged_corrupted = 0
