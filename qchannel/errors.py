"""Exceptions raised by the channel model."""


class ChannelError(Exception):
    """Base class for all channel model errors."""


class InvalidParameter(ChannelError, ValueError):
    """A channel parameter is outside its domain (e.g. κ <= 0 or λ < 0)."""


class UnstableQueue(ChannelError, ValueError):
    """The arrival rate reaches the service rate, so the queue never settles.

    Parameters
    ----------
    arrival_rate : float
        Offending arrival rate λ.
    service_rate : float
        Service rate μ the queue was checked against.
    """

    def __init__(self, arrival_rate: float, service_rate: float) -> None:
        self.arrival_rate = arrival_rate
        self.service_rate = service_rate
        super().__init__(
            f"unstable queue: arrival rate {arrival_rate} >= "
            f"service rate {service_rate}"
        )
