"""
moonephem.ephemeris.chebyshev
-----------------------------
Chebyshev series evaluation for one scalar property of one interval.

The variable `x` is the time normalized to [-1, 1) over the interval. The
velocity returned here is the derivative with respect to `x`; callers convert
it to a rate per day by multiplying with 2 / interval_duration_days.

Recurrences:
    T[0] = 1, T[1] = x, T[n] = 2x*T[n-1] - T[n-2]
    V[0] = 0, V[1] = 1, V[2] = 4x, V[n] = 2x*V[n-1] + 2*T[n-1] - V[n-2]
"""

from __future__ import annotations
from typing import List, Sequence, Tuple

from ..core.errors import LayoutError

MIN_COEFF_COUNT = 2


def chebyshev_terms(x: float, count: int) -> List[float]:
    t = [1.0, x]
    for n in range(2, count):
        t.append(2.0 * x * t[n - 1] - t[n - 2])
    return t[:count]


def chebyshev_derivative_terms(x: float, t: Sequence[float], count: int) -> List[float]:
    v = [0.0, 1.0, 4.0 * x]
    for n in range(3, count):
        v.append(2.0 * x * v[n - 1] + 2.0 * t[n - 1] - v[n - 2])
    return v[:count]


def evaluate(coefficients: Sequence[float], x: float) -> Tuple[float, float]:
    """
    Returns (position, velocity) for the series at normalized time x.
    Both sums run from the highest degree down to keep rounding error small.
    """
    n = len(coefficients)
    if n < MIN_COEFF_COUNT:
        raise LayoutError(f"Chebyshev series needs at least {MIN_COEFF_COUNT} coefficients, got {n}")

    t = chebyshev_terms(x, n)
    position = 0.0
    for i in range(n - 1, -1, -1):
        position += coefficients[i] * t[i]

    v = chebyshev_derivative_terms(x, t, n)
    velocity = 0.0
    for i in range(n - 1, -1, -1):
        velocity += v[i] * coefficients[i]

    return position, velocity
