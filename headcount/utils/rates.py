"""Pure rate helpers for the aggregation engine.

Every rate is computed on floats and returned unrounded; rounding happens
only at presentation. A zero (or negative) denominator yields ``None``,
which is the "no data" value throughout the API.
"""

from typing import Iterable, Optional


def safe_rate(numerator: float, denominator: float) -> Optional[float]:
    """numerator / denominator, or None when the denominator is not positive.

    >>> round(safe_rate(10, 310), 4)
    0.0323
    >>> safe_rate(5, 0) is None
    True
    """
    if not denominator or denominator <= 0:
        return None
    return numerator / denominator


def shortage_rate(shortage: float, employees: float) -> Optional[float]:
    """Shortage as a share of desired staffing (employees + shortage).

    >>> round(shortage_rate(10, 300), 4)
    0.0323
    >>> shortage_rate(0, 0) is None
    True
    """
    return safe_rate(shortage, employees + shortage)


def turnover_rate(resigned: float, employees: float) -> Optional[float]:
    """Cumulative resignations over current headcount.

    >>> turnover_rate(15, 300)
    0.05
    """
    return safe_rate(resigned, employees)


def growth_rate(current: float, previous: float) -> Optional[float]:
    """Relative change against *previous*; None when previous is zero.

    >>> growth_rate(115, 100)
    0.15
    >>> growth_rate(100, 0) is None
    True
    """
    if previous == 0:
        return None
    return (current - previous) / abs(previous)


def mean(values: Iterable[float]) -> Optional[float]:
    """Arithmetic mean; None for an empty sequence.

    >>> mean([100, 200])
    150.0
    >>> mean([]) is None
    True
    """
    vals = list(values)
    if not vals:
        return None
    return sum(vals) / len(vals)
