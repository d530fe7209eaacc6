"""Wait-time sampling for symbols entering the channel queue.

The queue is a single FIFO server with Poisson arrivals at rate λ and service
rate μ (1 by default).  Two ways of producing a symbol's wait are offered:

* ``"steady_state"`` – each symbol's sojourn time is an independent draw from
  the stationary M/M/1 sojourn distribution, Exponential(μ - λ).  Consecutive
  symbols do not influence each other.
* ``"event_chained"`` – arrivals and departures are chained explicitly.  A
  symbol arriving while the server is busy waits for the previous departure::

        service_start = max(arrival, previous_departure)
        wait          = service_start - arrival

  Service times are Exponential(μ) (``service="random"``) or exactly 1/μ
  (``service="deterministic"``).

All randomness comes from the ``numpy.random.Generator`` passed in by the
caller.
"""

import math

import numpy as np

from qchannel.config import SERVICE_RATE
from qchannel.errors import InvalidParameter, UnstableQueue


MODES = ("steady_state", "event_chained")
SERVICES = ("random", "deterministic")


def _uniform_open_zero(rng: np.random.Generator) -> float:
    # Generator.random() is in [0, 1); flip it to (0, 1] so log() is finite
    return 1.0 - rng.random()


def sample_wait_time(
    arrival_rate: float,
    rng: np.random.Generator,
    service_rate: float = SERVICE_RATE,
) -> float:
    """Draw one steady-state sojourn time of the M/M/1 queue.

    Parameters
    ----------
    arrival_rate : float
        Poisson arrival rate λ (>= 0, < ``service_rate``).
    rng : numpy.random.Generator
        Random source.
    service_rate : float
        Service rate μ (default 1.0).

    Returns
    -------
    float
        ``-ln(u) / (μ - λ)`` for ``u`` uniform on ``(0, 1]``.
    """
    if arrival_rate < 0:
        raise InvalidParameter(f"arrival rate must be >= 0, got {arrival_rate}")
    if arrival_rate >= service_rate:
        raise UnstableQueue(arrival_rate, service_rate)
    u = _uniform_open_zero(rng)
    return -math.log(u) / (service_rate - arrival_rate)


class QueueSimulator:
    """Produces the wait time of each successive symbol in the queue.

    Parameters
    ----------
    arrival_rate : float
        Poisson arrival rate λ.
    service_rate : float
        Service rate μ (default 1.0).
    mode : str
        ``"steady_state"`` (default) or ``"event_chained"``.
    service : str
        Service-time law for ``"event_chained"`` mode: ``"random"``
        (exponential, default) or ``"deterministic"`` (exactly 1/μ).
    """

    def __init__(
        self,
        arrival_rate: float,
        service_rate: float = SERVICE_RATE,
        mode: str = "steady_state",
        service: str = "random",
    ) -> None:
        if mode not in MODES:
            raise InvalidParameter(f"unknown queue mode {mode!r}; expected {MODES}")
        if service not in SERVICES:
            raise InvalidParameter(
                f"unknown service law {service!r}; expected {SERVICES}"
            )
        if service_rate <= 0:
            raise InvalidParameter(f"service rate must be > 0, got {service_rate}")
        if arrival_rate < 0:
            raise InvalidParameter(f"arrival rate must be >= 0, got {arrival_rate}")
        if arrival_rate >= service_rate:
            raise UnstableQueue(arrival_rate, service_rate)
        if mode == "event_chained" and arrival_rate == 0:
            raise InvalidParameter("event-chained mode needs arrival rate > 0")

        self.arrival_rate = arrival_rate
        self.service_rate = service_rate
        self.mode = mode
        self.service = service

        self._clock = 0.0
        self._departure = 0.0
        self.symbols_served = 0

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def sample_wait_time(self, rng: np.random.Generator) -> float:
        """Return the wait time of the next symbol."""
        self.symbols_served += 1
        if self.mode == "steady_state":
            return sample_wait_time(self.arrival_rate, rng, self.service_rate)
        return self._chained_wait(rng)

    def reset(self) -> None:
        """Empty the queue and restart its clock."""
        self._clock = 0.0
        self._departure = 0.0
        self.symbols_served = 0

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _chained_wait(self, rng: np.random.Generator) -> float:
        self._clock += -math.log(_uniform_open_zero(rng)) / self.arrival_rate
        arrival = self._clock
        service_start = max(arrival, self._departure)

        if self.service == "random":
            service_time = -math.log(_uniform_open_zero(rng)) / self.service_rate
        else:
            service_time = 1.0 / self.service_rate
        self._departure = service_start + service_time

        return service_start - arrival
