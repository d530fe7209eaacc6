"""Message transmission through the queue-decoherence channel.

Ties together :class:`~qchannel.queueing.QueueSimulator`,
:func:`~qchannel.noise.flip_probability` and
:class:`~qchannel.transmission.TransmissionStatistics` into one run over a text
message.  Every character is sent as one 8-bit symbol: it waits in the queue,
decoheres while waiting, and each of its bits is then flipped independently
with the resulting probability.  Characters with at least one flipped bit are
shown as a placeholder glyph in the received text.

Example usage::

    from qchannel.simulation import ChannelSimulation

    sim = ChannelSimulation(arrival_rate=0.3, decoherence_rate=0.5)
    result = sim.run("HELLO", rng=42)
    sim.print_report(result)
"""

from __future__ import annotations

import logging
from typing import List

import numpy as np

from qchannel.capacity import capacity_random_service
from qchannel.config import (
    BITS_PER_SYMBOL,
    DEFAULT_SEED,
    LOG_HEAD,
    LOG_MAX_CORRUPTED,
    PLACEHOLDER_GLYPH,
    SERVICE_RATE,
)
from qchannel.errors import InvalidParameter, UnstableQueue
from qchannel.noise import flip_probability
from qchannel.queueing import QueueSimulator
from qchannel.transmission import SymbolRecord, TransmissionStatistics

logger = logging.getLogger(__name__)


class RunState:
    """Stages of one :meth:`ChannelSimulation.run` call."""

    IDLE = "idle"
    INITIALIZING = "initializing"
    PER_SYMBOL = "per_symbol"
    AGGREGATING = "aggregating"
    DONE = "done"
    ABORTED = "aborted"


class SimulationResult:
    """Aggregated outcome of one transmission."""

    def __init__(
        self,
        received_text: str,
        average_wait: float,
        empirical_bit_error_rate: float,
        estimated_capacity: float,
        diagnostic_log: List[SymbolRecord],
        symbols_processed: int = 0,
        total_bit_errors: int = 0,
        corrupted_symbols: int = 0,
        average_flip_probability: float = 0.0,
        theoretical_capacity: float = 0.0,
        dropped_log_entries: int = 0,
    ) -> None:
        self.received_text = received_text
        self.average_wait = average_wait
        self.empirical_bit_error_rate = empirical_bit_error_rate
        self.estimated_capacity = estimated_capacity
        self.diagnostic_log = diagnostic_log
        self.symbols_processed = symbols_processed
        self.total_bit_errors = total_bit_errors
        self.corrupted_symbols = corrupted_symbols
        self.average_flip_probability = average_flip_probability
        self.theoretical_capacity = theoretical_capacity
        self.dropped_log_entries = dropped_log_entries

    def as_dict(self) -> dict:
        return {
            "received_text": self.received_text,
            "average_wait": self.average_wait,
            "empirical_bit_error_rate": self.empirical_bit_error_rate,
            "estimated_capacity": self.estimated_capacity,
            "diagnostic_log": [r.as_dict() for r in self.diagnostic_log],
            "symbols_processed": self.symbols_processed,
            "total_bit_errors": self.total_bit_errors,
            "corrupted_symbols": self.corrupted_symbols,
            "average_flip_probability": self.average_flip_probability,
            "theoretical_capacity": self.theoretical_capacity,
            "dropped_log_entries": self.dropped_log_entries,
        }

    def __repr__(self) -> str:
        return (
            f"SimulationResult({self.symbols_processed} symbols, "
            f"BER={self.empirical_bit_error_rate:.3f}, "
            f"capacity={self.estimated_capacity:.3f})"
        )


class ChannelSimulation:
    """Sends text messages through a queue-decoherence channel.

    Running totals are local to each :meth:`run` call, so one instance may
    serve concurrent runs as long as each brings its own random generator.
    ``state`` is the exception: it only reports the stage of the most recent
    call on this instance.

    Parameters
    ----------
    arrival_rate : float
        Symbol arrival rate λ (>= 0; must be < ``service_rate`` to run).
    decoherence_rate : float
        Decoherence rate κ (> 0).
    mode : str
        Wait-time model, ``"steady_state"`` (default) or ``"event_chained"``;
        see :mod:`qchannel.queueing`.
    service : str
        Service-time law used in ``"event_chained"`` mode.
    service_rate : float
        Service rate μ (default 1.0).
    log_head, log_max_corrupted : int
        Bounds of the diagnostic log; see
        :class:`~qchannel.transmission.TransmissionStatistics`.
    placeholder : str
        Glyph substituted for corrupted characters.
    """

    def __init__(
        self,
        arrival_rate: float,
        decoherence_rate: float,
        mode: str = "steady_state",
        service: str = "random",
        service_rate: float = SERVICE_RATE,
        log_head: int = LOG_HEAD,
        log_max_corrupted: int = LOG_MAX_CORRUPTED,
        placeholder: str = PLACEHOLDER_GLYPH,
    ) -> None:
        self.arrival_rate = arrival_rate
        self.decoherence_rate = decoherence_rate
        self.mode = mode
        self.service = service
        self.service_rate = service_rate
        self.placeholder = placeholder
        self.log_head = log_head
        self.log_max_corrupted = log_max_corrupted
        self.state = RunState.IDLE

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def run(self, message: str, rng=DEFAULT_SEED) -> SimulationResult:
        """Transmit ``message`` and return the aggregated result.

        Parameters
        ----------
        message : str
            Text to send; one symbol per character.
        rng : numpy.random.Generator, int or None
            Random source, or a seed for a new ``default_rng``.

        Raises
        ------
        InvalidParameter
            κ <= 0 or λ < 0.
        UnstableQueue
            λ >= μ.  No partial result is produced.
        """
        self.state = RunState.INITIALIZING
        try:
            queue = self._validate()
        except (InvalidParameter, UnstableQueue):
            self.state = RunState.ABORTED
            raise
        rng = np.random.default_rng(rng)
        stats = TransmissionStatistics(
            log_head=self.log_head, log_max_corrupted=self.log_max_corrupted
        )

        logger.debug(
            "Transmitting %d symbols (λ=%s, κ=%s, mode=%s)",
            len(message),
            self.arrival_rate,
            self.decoherence_rate,
            self.mode,
        )

        self.state = RunState.PER_SYMBOL
        received: List[str] = []
        for index, char in enumerate(message):
            symbol = self._transmit_symbol(index, char, queue, rng)
            stats.record(symbol)
            received.append(self.placeholder if symbol.corrupted else char)

        self.state = RunState.AGGREGATING
        totals = stats.compute(self.arrival_rate)
        result = SimulationResult(
            received_text="".join(received),
            average_wait=totals["average_wait"],
            empirical_bit_error_rate=totals["empirical_bit_error_rate"],
            estimated_capacity=totals["estimated_capacity"],
            diagnostic_log=list(stats.diagnostic_log),
            symbols_processed=totals["symbols_processed"],
            total_bit_errors=totals["total_bit_errors"],
            corrupted_symbols=totals["corrupted_symbols"],
            average_flip_probability=totals["average_flip_probability"],
            theoretical_capacity=capacity_random_service(
                self.arrival_rate, self.decoherence_rate
            ),
            dropped_log_entries=stats.dropped_log_entries,
        )
        self.state = RunState.DONE

        logger.debug(
            "Transmission complete: %d bit errors in %d symbols",
            result.total_bit_errors,
            result.symbols_processed,
        )
        return result

    # ------------------------------------------------------------------
    # Reporting helpers
    # ------------------------------------------------------------------

    @staticmethod
    def print_report(result: SimulationResult) -> None:
        """Print a human-readable summary of a simulation result."""
        sep = "-" * 52
        print(sep)
        print(" Queue-Decoherence Channel – Transmission Report")
        print(sep)
        for record in result.diagnostic_log:
            status = "FLIP" if record.corrupted else "OK"
            print(
                f"  Q[{record.index:02d}] Wait:{record.wait_time:.2f} | "
                f"ErrProb:{record.flip_probability:.2f} | {status}"
            )
        if result.dropped_log_entries:
            print(f"  ... {result.dropped_log_entries} more corrupted symbols")
        print(sep)
        rows = [
            ("Received text",            result.received_text),
            ("Symbols",                  f"{result.symbols_processed:d}"),
            ("Bit errors",               f"{result.total_bit_errors:d}"),
            ("Average wait",             f"{result.average_wait:.2f}"),
            ("Bit-error rate (%)",       f"{result.empirical_bit_error_rate * 100:.1f}"),
            ("Estimated capacity",       f"{result.estimated_capacity:.3f}"),
            ("Theoretical M/M/1 capacity", f"{result.theoretical_capacity:.3f}"),
        ]
        for label, value in rows:
            print(f"  {label:<30} {value}")
        print(sep)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _validate(self) -> QueueSimulator:
        if self.decoherence_rate <= 0:
            raise InvalidParameter(
                f"decoherence rate must be > 0, got {self.decoherence_rate}"
            )
        if self.arrival_rate < 0:
            raise InvalidParameter(
                f"arrival rate must be >= 0, got {self.arrival_rate}"
            )
        if self.arrival_rate >= self.service_rate:
            raise UnstableQueue(self.arrival_rate, self.service_rate)
        return QueueSimulator(
            self.arrival_rate,
            service_rate=self.service_rate,
            mode=self.mode,
            service=self.service,
        )

    def _transmit_symbol(
        self,
        index: int,
        char: str,
        queue: QueueSimulator,
        rng: np.random.Generator,
    ) -> SymbolRecord:
        wait = queue.sample_wait_time(rng)
        p = flip_probability(wait, self.decoherence_rate)

        # One Bernoulli(p) trial per bit, most significant bit first
        flips = rng.random(BITS_PER_SYMBOL) < p
        mask = 0
        for flipped in flips:
            mask = (mask << 1) | int(flipped)

        return SymbolRecord(index, char, wait, p, mask)


def run(
    message: str,
    arrival_rate: float,
    decoherence_rate: float,
    rng=DEFAULT_SEED,
    mode: str = "steady_state",
) -> SimulationResult:
    """Transmit ``message`` through a channel with the given λ and κ.

    Shorthand for ``ChannelSimulation(arrival_rate, decoherence_rate,
    mode=mode).run(message, rng)``.
    """
    sim = ChannelSimulation(arrival_rate, decoherence_rate, mode=mode)
    return sim.run(message, rng)
