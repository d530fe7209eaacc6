"""Delay-induced bit-flip noise for the queue-decoherence channel.

A symbol that waits ``t`` time units in the queue decoheres at rate ``κ``.
Each of its bits is then flipped independently with probability::

    p(t) = 0.5 * (1 - exp(-κ t))

so a symbol served immediately is received intact, and a symbol that waits
forever carries a uniformly random bit (``p -> 0.5``).
"""

import math

from qchannel.errors import InvalidParameter


def flip_probability(wait: float, kappa: float) -> float:
    """Return the per-bit flip probability after waiting ``wait`` time units.

    Parameters
    ----------
    wait : float
        Sojourn time of the symbol (>= 0).
    kappa : float
        Decoherence rate κ (>= 0).

    Returns
    -------
    float
        Flip probability in ``[0, 0.5]``.
    """
    if wait < 0:
        raise InvalidParameter(f"wait time must be >= 0, got {wait}")
    if kappa < 0:
        raise InvalidParameter(f"decoherence rate must be >= 0, got {kappa}")
    # -expm1(-x) == 1 - exp(-x), accurate for small κ·wait
    return -0.5 * math.expm1(-kappa * wait)


def binary_entropy(p: float) -> float:
    """Shannon entropy (bits) of a Bernoulli(p) variable; 0 outside ``(0, 1)``."""
    if p <= 0.0 or p >= 1.0:
        return 0.0
    return -p * math.log2(p) - (1.0 - p) * math.log2(1.0 - p)


def binary_symmetric_capacity(p: float) -> float:
    """Capacity per use of a binary symmetric channel with crossover ``p``."""
    return 1.0 - binary_entropy(p)
