"""Polynomial root solver.

Closed form up to degree 2, Durand-Kerner simultaneous iteration above.
The solver never raises on numerical trouble: a degenerate leading
coefficient yields no roots, and hitting the iteration cap returns the
current (approximate) estimates.
"""
import logging
import math
from typing import List, Sequence

import numpy as np

from . import settings
from .algebra import complex_divide, complex_magnitude, complex_subtract, evaluate_polynomial, trim_leading_zeros

logger = logging.getLogger(__name__)


def solve_roots(coeffs: Sequence[float]) -> List[complex]:
    """
    Finds all roots of a real polynomial.

    Args:
        coeffs: Coefficients in descending powers; leading zeros are stripped

    Returns:
        List of roots. Empty for constant or empty polynomials. Roots of
        degree >= 3 polynomials are approximate when Durand-Kerner does not
        converge within its iteration cap.

    Example:
        >>> solve_roots([1, 3, 2])
        [(-1+0j), (-2+0j)]
    """
    c = trim_leading_zeros(coeffs)
    if c.size <= 1:
        return []

    if c.size == 2:
        a, b = c
        return [complex(-b / a, 0.0)]

    if c.size == 3:
        a, b, cc = c
        discriminant = b * b - 4 * a * cc
        if discriminant >= 0:
            # q and c/q avoid cancellation between -b and sqrt(d) when |b| >> |a*c|
            q = -0.5 * (b + math.copysign(math.sqrt(discriminant), b))
            if q == 0:
                return [0j, 0j]
            large, small = q / a, cc / q
            if b >= 0:
                return [complex(small, 0.0), complex(large, 0.0)]
            return [complex(large, 0.0), complex(small, 0.0)]
        real = -b / (2 * a)
        imag = math.sqrt(-discriminant) / (2 * a)
        return [complex(real, imag), complex(real, -imag)]

    return durand_kerner(c)


def durand_kerner(
    coeffs: Sequence[float],
    max_iterations: int = settings.DK_MAX_ITERATIONS,
    tol: float = settings.DK_TOLERANCE
) -> List[complex]:
    """
    Durand-Kerner (Weierstrass) iteration for all roots at once.

    Initial guesses sit equally spaced on a circle of radius
    max(1, |a_n / a_0|), rotated by a quarter step so that the ring is never
    symmetric about the real axis. Every sweep computes all corrections
    from the previous estimates, then replaces them together.

    Args:
        coeffs: Coefficients in descending powers, leading term non-zero
        max_iterations: Iteration cap; reaching it is not an error
        tol: Stop once the largest correction magnitude is below this

    Returns:
        List of n root estimates, or an empty list when the leading
        coefficient is below the degeneracy threshold.
    """
    c = np.asarray(coeffs, dtype=float).ravel()
    n = c.size - 1
    if n <= 0:
        return []
    a0 = c[0]
    if abs(a0) < settings.LEADING_COEFF_EPS:
        logger.warning("Leading coefficient %.3e is degenerate, roots not determined", a0)
        return []
    normalized = c / a0

    radius = max(1.0, abs(normalized[-1]))
    offset = math.pi / (2 * n)
    estimates = np.empty(n, dtype=complex)
    for i in range(n):
        angle = 2 * math.pi * i / n + offset
        estimates[i] = complex(radius * math.cos(angle), radius * math.sin(angle))
    updated = np.empty(n, dtype=complex)

    max_change = math.inf
    for _ in range(max_iterations):
        max_change = 0.0
        for i in range(n):
            xi = complex(estimates[i])
            denominator = 1 + 0j
            for j in range(n):
                if i != j:
                    denominator *= complex_subtract(xi, estimates[j])
            correction = complex_divide(evaluate_polynomial(normalized, xi), denominator)
            updated[i] = xi - correction
            max_change = max(max_change, complex_magnitude(correction))
        estimates, updated = updated, estimates
        if max_change < tol:
            break
    else:
        logger.debug("Durand-Kerner hit %d iterations (last correction %.3e), roots are approximate",
                     max_iterations, max_change)

    return [complex(r) for r in estimates]
