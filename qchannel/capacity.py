"""Closed-form channel capacity for the queue-decoherence channel.

Two service disciplines are modelled, both single-server FIFO queues with
Poisson arrivals at rate λ and unit service rate:

* **random service** (M/M/1) – exponential service times.  The decoherence
  discount is the probability that a symbol survives an exponential service
  period, ``α = 1 / (1 + κ)``::

        C(λ, κ) = α · λ(1 - λ) / (1 - αλ)

* **deterministic service** (M/D/1) – every symbol is served in exactly one
  time unit.  The Pollaczek–Khinchin derived discount is
  ``α = (1 - e^(-κ)) / κ`` and the fixed service period costs a further
  ``e^(-κ)``::

        C(λ, κ) = e^(-κ) · λ(1 - λ) / (1 - αλ)

Both formulas blow up where ``1 - αλ`` vanishes; there, and for any λ >= 1,
the capacity is reported as 0 so that plotting callers always get a value.
"""

import math
from collections import namedtuple
from typing import Callable, Dict, Iterator

import numpy as np

from qchannel.config import (
    CURVE_LAMBDA_MAX,
    CURVE_STEP,
    SERVICE_RATE,
    SINGULARITY_EPSILON,
    SMALL_KAPPA,
)
from qchannel.errors import InvalidParameter


class ChannelParameters:
    """Arrival rate λ and decoherence rate κ of one channel configuration.

    λ >= 1 is accepted (the queue is then simply unstable); κ <= 0 and
    λ < 0 are rejected.
    """

    def __init__(self, arrival_rate: float, decoherence_rate: float) -> None:
        _check_rates(arrival_rate, decoherence_rate)
        self.arrival_rate = arrival_rate
        self.decoherence_rate = decoherence_rate

    @property
    def is_stable(self) -> bool:
        return self.arrival_rate < SERVICE_RATE

    @property
    def mean_sojourn_time(self) -> float:
        if not self.is_stable:
            return math.inf
        return 1.0 / (SERVICE_RATE - self.arrival_rate)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ChannelParameters):
            return NotImplemented
        return (self.arrival_rate, self.decoherence_rate) == (
            other.arrival_rate,
            other.decoherence_rate,
        )

    def __hash__(self) -> int:
        return hash((self.arrival_rate, self.decoherence_rate))

    def __repr__(self) -> str:
        return (
            f"ChannelParameters(λ={self.arrival_rate}, "
            f"κ={self.decoherence_rate})"
        )


def _check_rates(arrival_rate: float, decoherence_rate: float) -> None:
    if decoherence_rate <= 0:
        raise InvalidParameter(
            f"decoherence rate must be > 0, got {decoherence_rate}"
        )
    if arrival_rate < 0:
        raise InvalidParameter(f"arrival rate must be >= 0, got {arrival_rate}")


def _queue_throughput(arrival_rate: float, alpha: float, epsilon: float):
    """Return ``λ(1-λ)/(1-αλ)`` or ``None`` when unstable or singular."""
    if arrival_rate >= SERVICE_RATE:
        return None
    denom = 1.0 - alpha * arrival_rate
    if denom <= epsilon:
        return None
    return arrival_rate * (1.0 - arrival_rate) / denom


def capacity_random_service(
    arrival_rate: float,
    kappa: float,
    epsilon: float = SINGULARITY_EPSILON,
) -> float:
    """Capacity of the random-service (M/M/1) channel in bits per unit time."""
    _check_rates(arrival_rate, kappa)
    alpha = 1.0 / (1.0 + kappa)
    throughput = _queue_throughput(arrival_rate, alpha, epsilon)
    if throughput is None:
        return 0.0
    return alpha * throughput


def deterministic_discount(kappa: float) -> float:
    """Return ``(1 - e^(-κ)) / κ``, continuous through κ = 0 where it is 1."""
    if kappa < SMALL_KAPPA:
        return 1.0 - kappa / 2.0 + kappa * kappa / 6.0
    return -math.expm1(-kappa) / kappa


def capacity_deterministic_service(
    arrival_rate: float,
    kappa: float,
    epsilon: float = SINGULARITY_EPSILON,
) -> float:
    """Capacity of the deterministic-service (M/D/1) channel in bits per unit time."""
    _check_rates(arrival_rate, kappa)
    alpha = deterministic_discount(kappa)
    throughput = _queue_throughput(arrival_rate, alpha, epsilon)
    if throughput is None:
        return 0.0
    return math.exp(-kappa) * throughput


# Discipline name -> capacity function
DISCIPLINES: Dict[str, Callable[[float, float], float]] = {
    "random": capacity_random_service,
    "deterministic": capacity_deterministic_service,
}


def capacity(params: ChannelParameters, discipline: str = "random") -> float:
    """Capacity of ``params`` under the named discipline."""
    try:
        func = DISCIPLINES[discipline]
    except KeyError:
        raise InvalidParameter(
            f"unknown discipline {discipline!r}; "
            f"expected one of {sorted(DISCIPLINES)}"
        ) from None
    return func(params.arrival_rate, params.decoherence_rate)


CapacityPoint = namedtuple(
    "CapacityPoint", ["arrival_rate", "random_service", "deterministic_service"]
)


class CapacityCurve:
    """Capacity of both disciplines over a grid of arrival rates.

    The curve holds only its grid definition.  Every iteration recomputes the
    points from :func:`capacity_random_service` and
    :func:`capacity_deterministic_service`, so it can be iterated any number
    of times and always agrees with the scalar functions.

    Parameters
    ----------
    kappa : float
        Decoherence rate κ (> 0).
    step : float
        Grid spacing (> 0, default 0.01).
    lambda_min : float
        First arrival rate on the grid (>= 0, default 0.0).
    lambda_max : float
        Upper bound of the grid (< 1, default 0.99).  It is included only
        when it lies a whole number of steps above ``lambda_min``.
    """

    def __init__(
        self,
        kappa: float,
        step: float = CURVE_STEP,
        lambda_min: float = 0.0,
        lambda_max: float = CURVE_LAMBDA_MAX,
    ) -> None:
        if kappa <= 0:
            raise InvalidParameter(f"decoherence rate must be > 0, got {kappa}")
        if step <= 0:
            raise InvalidParameter(f"step must be > 0, got {step}")
        if lambda_min < 0 or lambda_max >= SERVICE_RATE:
            raise InvalidParameter(
                f"arrival rate grid must lie in [0, {SERVICE_RATE}), "
                f"got [{lambda_min}, {lambda_max}]"
            )
        if lambda_min > lambda_max:
            raise InvalidParameter("lambda_min must be <= lambda_max")
        self._kappa = kappa
        self._lambda_min = lambda_min
        self._lambda_max = lambda_max
        self._step = step
        # Slack for float rounding when lambda_max sits exactly on the grid
        self._size = int(math.floor((lambda_max - lambda_min) / step + 1e-9)) + 1

    @property
    def kappa(self) -> float:
        return self._kappa

    def arrival_rates(self) -> np.ndarray:
        """Grid of arrival rates, computed as ``lambda_min + i * step``."""
        return self._lambda_min + self._step * np.arange(self._size)

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[CapacityPoint]:
        for lam in self.arrival_rates():
            lam = float(lam)
            yield CapacityPoint(
                lam,
                capacity_random_service(lam, self._kappa),
                capacity_deterministic_service(lam, self._kappa),
            )

    def as_arrays(self) -> Dict[str, np.ndarray]:
        """Return the curve as ``arrival_rate`` / per-discipline numpy arrays."""
        points = list(self)
        return {
            "arrival_rate": np.array([p.arrival_rate for p in points]),
            "random_service": np.array([p.random_service for p in points]),
            "deterministic_service": np.array(
                [p.deterministic_service for p in points]
            ),
        }

    def __repr__(self) -> str:
        return (
            f"CapacityCurve(κ={self._kappa}, λ=[{self._lambda_min}, "
            f"{self._lambda_max}], step={self._step})"
        )


def capacity_curve(
    kappa: float,
    step: float = CURVE_STEP,
    lambda_min: float = 0.0,
    lambda_max: float = CURVE_LAMBDA_MAX,
) -> CapacityCurve:
    """Build a :class:`CapacityCurve` for decoherence rate ``kappa``."""
    return CapacityCurve(kappa, step, lambda_min, lambda_max)
