"""Complex-number and polynomial algebra.

Complex values are Python ``complex`` numbers. Polynomials are coefficient
sequences in descending powers of the variable, leading term first.
"""
import math
from typing import Sequence, Union

import numpy as np
from numpy.typing import NDArray

from . import settings

Number = Union[int, float, complex]


def complex_add(a: Number, b: Number) -> complex:
    return complex(a) + complex(b)


def complex_subtract(a: Number, b: Number) -> complex:
    return complex(a) - complex(b)


def complex_multiply(a: Number, b: Number) -> complex:
    a, b = complex(a), complex(b)
    return complex(a.real * b.real - a.imag * b.imag,
                   a.real * b.imag + a.imag * b.real)


def complex_divide(a: Number, b: Number, eps: float = settings.DIVISION_EPS) -> complex:
    """
    Divides a by b without ever producing infinities.

    Args:
        a: Dividend
        b: Divisor
        eps: Squared-magnitude threshold below which b counts as zero

    Returns:
        a / b, or 0j when |b|^2 < eps. Callers must read a zero result
        from a singular divisor as a degenerate response.
    """
    a, b = complex(a), complex(b)
    denom = b.real * b.real + b.imag * b.imag
    if abs(denom) < eps:
        return 0j
    return complex((a.real * b.real + a.imag * b.imag) / denom,
                   (a.imag * b.real - a.real * b.imag) / denom)


def complex_magnitude(c: Number) -> float:
    c = complex(c)
    return math.hypot(c.real, c.imag)


def complex_phase(c: Number) -> float:
    """Principal argument of c in (-pi, pi]."""
    c = complex(c)
    phase = math.atan2(c.imag, c.real)
    if phase <= -math.pi:
        phase = math.pi
    return phase


def complex_power(c: Number, n: int) -> complex:
    """Integer power by repeated multiplication (n >= 0)."""
    if n < 0:
        raise ValueError(f"Exponent must be non-negative, got {n}")
    result = 1 + 0j
    for _ in range(n):
        result = complex_multiply(result, c)
    return result


def evaluate_polynomial(coeffs: Sequence[float], x: Number) -> complex:
    """
    Evaluates a polynomial at a complex point (Horner scheme).

    Args:
        coeffs: Coefficients in descending powers
        x: Evaluation point

    Returns:
        p(x); 0j for an empty coefficient sequence
    """
    x = complex(x)
    result = 0j
    for c in coeffs:
        result = complex_add(complex_multiply(result, x), c)
    return result


def trim_leading_zeros(coeffs: Sequence[float], eps: float = settings.LEADING_COEFF_EPS) -> NDArray:
    """Drops leading coefficients whose magnitude is below eps."""
    c = np.asarray(coeffs, dtype=float).ravel()
    nonzero = np.flatnonzero(np.abs(c) >= eps)
    if nonzero.size == 0:
        return np.zeros(0)
    return c[nonzero[0]:]


def align_numerator(num: Sequence[float], length: int) -> NDArray:
    """
    Brings a numerator to a fixed coefficient count.

    Shorter sequences are left-padded with zeros; longer ones lose their
    highest-order terms so only the lowest ``length`` coefficients remain.
    """
    n = np.asarray(num, dtype=float).ravel()
    if length <= 0:
        return np.zeros(0)
    if n.size < length:
        return np.pad(n, (length - n.size, 0))
    return n[n.size - length:]


def format_polynomial(coeffs: Sequence[float], variable: str = 's') -> str:
    """Human-readable form, e.g. ``s^2 + 3.000s - 2.000``."""
    c = np.asarray(coeffs, dtype=float).ravel()
    n = c.size - 1
    terms = []
    for i, coef in enumerate(c):
        if abs(coef) < settings.DISPLAY_EPS:
            continue
        power = n - i
        if coef < 0:
            term = '-' if not terms else ' - '
        else:
            term = '' if not terms else ' + '
        if abs(coef) != 1 or power == 0:
            term += f'{abs(coef):.3f}'
        if power > 1:
            term += f'{variable}^{power}'
        elif power == 1:
            term += variable
        terms.append(term)
    return ''.join(terms) if terms else '0'
