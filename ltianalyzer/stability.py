"""Algebraic stability tests: Routh array and Hurwitz determinants."""
import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from . import settings
from .algebra import trim_leading_zeros
from .plant import FirstOrderPlant, HigherOrderPlant, PlantType, SecondOrderPlant

logger = logging.getLogger(__name__)


def routh_array(coeffs: Sequence[float], eps: float = settings.ROUTH_EPS) -> List[List[float]]:
    """
    Builds the Routh array of a characteristic polynomial.

    Row i belongs to power s^(n-i). A zero pivot is replaced by eps; a row
    of zeros is replaced by the derivative of the auxiliary polynomial
    formed from the row two above it (or by [eps] if that derivative
    vanishes too). Rows computed after a substitution are approximate.

    Args:
        coeffs: Coefficients in descending powers. Leading zeros are
            dropped and a negative leading coefficient flips all signs.
        eps: Threshold for zero pivots and zero rows

    Returns:
        List of n + 1 rows; empty for an empty or all-zero polynomial

    Example:
        >>> routh_array([1, 3, 3, 1])[2]
        [2.6666666666666665]
    """
    c = trim_leading_zeros(coeffs)
    if c.size == 0:
        return []
    if c[0] < 0:
        c = -c

    n = c.size - 1
    rows = [[float(v) for v in c[0::2]]]
    if n >= 1:
        rows.append([float(v) for v in c[1::2]])

    for i in range(2, n + 1):
        prev1 = list(rows[i - 1])
        prev2 = rows[i - 2]

        row_of_zeros = all(abs(v) < eps for v in prev1)
        if row_of_zeros:
            # A(s) from row i-2, which holds powers n-(i-2), n-(i-2)-2, ...
            power = n - (i - 2)
            derivative = [v * (power - 2 * k) for k, v in enumerate(prev2) if power - 2 * k >= 0]
            if derivative and any(abs(v) > eps for v in derivative):
                prev1 = derivative
            else:
                prev1 = [eps]
            logger.debug("Row s^%d of zeros replaced by %s", n - (i - 1), prev1)
            rows[i - 1] = list(prev1)

        pivot = prev1[0]
        if abs(pivot) < eps and not row_of_zeros:
            logger.debug("Zero pivot in row s^%d replaced by %.1e", n - (i - 1), eps)
            pivot = eps
            prev1[0] = eps
            rows[i - 1][0] = eps

        divisor = pivot if abs(pivot) >= eps else eps
        max_len = max(len(prev1), len(prev2))
        new_row = []
        for j in range(max_len - 1):
            b = prev2[j + 1] if j + 1 < len(prev2) else 0.0
            c1 = prev1[j + 1] if j + 1 < len(prev1) else 0.0
            d = prev2[0] if prev2 else 0.0
            value = (pivot * b - d * c1) / divisor
            new_row.append(value if math.isfinite(value) else 0.0)
        if not new_row:
            new_row.append(0.0)
        rows.append(new_row)

    return rows


def count_sign_changes(column: Sequence[float], eps: float = settings.ROUTH_EPS) -> int:
    """Sign changes between consecutive entries, skipping pairs with a zero."""
    changes = 0
    for prev, curr in zip(column[:-1], column[1:]):
        if abs(prev) < eps or abs(curr) < eps:
            continue
        if math.copysign(1, prev) != math.copysign(1, curr):
            changes += 1
    return changes


@dataclass(frozen=True)
class RouthResult:
    array: List[List[float]]
    first_column: List[float]
    sign_changes: int
    stable: bool
    verdict: str


def routh_criterion(coeffs: Sequence[float]) -> RouthResult:
    """
    Routh-Hurwitz verdict for a characteristic polynomial.

    Stable iff the first column has no sign change and every entry is
    strictly positive. An empty or all-zero polynomial is reported as
    undetermined (not stable).
    """
    array = routh_array(coeffs)
    first_column = [row[0] for row in array if row]
    if not first_column:
        return RouthResult(array, first_column, 0, False, 'undetermined')

    sign_changes = count_sign_changes(first_column)
    stable = sign_changes == 0 and all(v > 0 for v in first_column)
    verdict = 'stable' if stable else f'unstable ({sign_changes} sign changes)'
    return RouthResult(array, first_column, sign_changes, stable, verdict)


def hurwitz_matrix(coeffs: Sequence[float]) -> NDArray:
    """
    n x n Hurwitz matrix with H[i, j] = a[2i - j] (1-indexed i, j).

    Coefficients are taken as given, a[0] being the leading one; indices
    outside 0..n give zero.
    """
    a = np.asarray(coeffs, dtype=float).ravel()
    n = a.size - 1
    if n <= 0:
        return np.zeros((0, 0))
    H = np.zeros((n, n))
    for i in range(1, n + 1):
        for j in range(1, n + 1):
            idx = 2 * i - j
            if 0 <= idx <= n:
                H[i - 1, j - 1] = a[idx]
    return H


def determinant(matrix: NDArray) -> float:
    """Determinant by recursive cofactor expansion along the first row."""
    m = np.asarray(matrix, dtype=float)
    size = m.shape[0]
    if size == 0:
        return 1.0
    if size == 1:
        return float(m[0, 0])
    if size == 2:
        return float(m[0, 0] * m[1, 1] - m[0, 1] * m[1, 0])

    det = 0.0
    for j in range(size):
        if m[0, j] == 0:
            continue
        minor = np.delete(m[1:], j, axis=1)
        det += (-1) ** j * m[0, j] * determinant(minor)
    return det


def principal_minors(matrix: NDArray) -> List[float]:
    """Leading principal minors Delta_1 .. Delta_n."""
    m = np.asarray(matrix, dtype=float)
    return [determinant(m[:k, :k]) for k in range(1, m.shape[0] + 1)]


@dataclass(frozen=True)
class HurwitzResult:
    matrix: NDArray
    minors: List[float]
    stable: bool


def hurwitz_criterion(coeffs: Sequence[float]) -> HurwitzResult:
    """
    Hurwitz determinant test: stable iff every leading minor is positive.

    The polynomial is trimmed and sign-normalised (positive leading
    coefficient) first, as for the Routh array.
    """
    c = trim_leading_zeros(coeffs)
    if c.size and c[0] < 0:
        c = -c
    H = hurwitz_matrix(c)
    minors = principal_minors(H)
    stable = c.size > 0 and all(d > 0 for d in minors)
    return HurwitzResult(H, minors, bool(stable))


@dataclass(frozen=True)
class StabilitySummary:
    """
    Stability overview of a plant.

    Attributes:
        stable: Asymptotic stability of the plant
        bibo_stable: Bounded-input bounded-output stability
        poles: Roots of the denominator
        zeros: Roots of the numerator
        method: How the verdict was obtained
        routh: Routh result for higher-order plants
    """
    stable: bool
    bibo_stable: bool
    poles: List[complex]
    zeros: List[complex]
    method: str
    routh: Optional[RouthResult] = None


def stability_summary(plant: PlantType) -> StabilitySummary:
    """
    Decides stability from the descriptor parameters where possible.

    First order: stable iff tau > 0. Second order: stable iff zeta*wn > 0
    (both lower coefficients of s^2 + 2*zeta*wn*s + wn^2 positive).
    Higher order: Routh-Hurwitz on the denominator.
    """
    if not isinstance(plant, (FirstOrderPlant, SecondOrderPlant, HigherOrderPlant)):
        raise TypeError(f"Unsupported plant type: {type(plant).__name__}")
    poles, zeros = plant.poles, plant.zeros

    if isinstance(plant, FirstOrderPlant):
        stable = plant.tau > 0
        return StabilitySummary(stable, stable, poles, zeros, 'time constant')
    elif isinstance(plant, SecondOrderPlant):
        stable = plant.zeta * plant.wn > 0
        return StabilitySummary(stable, stable, poles, zeros, 'damping')
    routh = routh_criterion(plant.den)
    return StabilitySummary(routh.stable, routh.stable, poles, zeros, 'routh-hurwitz', routh)
