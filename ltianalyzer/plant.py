"""Plant descriptors for linear time-invariant SISO systems."""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray
from scipy import signal

from .algebra import align_numerator, complex_divide, evaluate_polynomial, format_polynomial, trim_leading_zeros
from .roots import solve_roots

logger = logging.getLogger(__name__)

STATIC_ERROR_INPUTS = ('step', 'ramp', 'parabolic')


def first_order_polynomials(K: float, tau: float) -> Tuple[NDArray, NDArray]:
    """G(s) = K / (tau*s + 1)."""
    return np.array([K], dtype=float), np.array([tau, 1.0])


def second_order_polynomials(K: float, wn: float, zeta: float) -> Tuple[NDArray, NDArray]:
    """G(s) = K*wn^2 / (s^2 + 2*zeta*wn*s + wn^2)."""
    return np.array([K * wn * wn]), np.array([1.0, 2 * zeta * wn, wn * wn])


def higher_order_polynomials(K: float, num: Sequence[float], den: Sequence[float]) -> Tuple[NDArray, NDArray]:
    """G(s) = K * num(s) / den(s)."""
    return K * np.asarray(num, dtype=float), np.asarray(den, dtype=float)


@dataclass(frozen=True)
class ZPK:
    """Zero-pole-gain summary of a plant."""
    zeros: List[complex]
    poles: List[complex]
    gain: float
    corner_frequencies: List[float]


class Plant(ABC):
    """
    Common behaviour of the three plant variants.

    A plant is an immutable descriptor; every method derives its result
    from the descriptor parameters and never caches state.
    """

    order: str = ''
    K: float

    @abstractmethod
    def polynomials(self) -> Tuple[NDArray, NDArray]:
        """Numerator and denominator of G(s), gain included."""

    @abstractmethod
    def locus_polynomials(self) -> Tuple[NDArray, NDArray]:
        """Gain-free open-loop numerator and denominator for the root locus."""

    def transfer(self, s: complex) -> complex:
        """
        Evaluates G(s) at a complex point.

        Args:
            s: Laplace variable

        Returns:
            G(s); 0j when the denominator vanishes (degenerate response)
        """
        num, den = self.polynomials()
        return complex_divide(evaluate_polynomial(num, s), evaluate_polynomial(den, s))

    def evaluate(self, omega: float) -> complex:
        """Frequency response G(j*omega)."""
        return self.transfer(complex(0.0, omega))

    @property
    def poles(self) -> List[complex]:
        return solve_roots(self.polynomials()[1])

    @property
    def zeros(self) -> List[complex]:
        return solve_roots(self.polynomials()[0])

    def closed_loop(self) -> Tuple[NDArray, NDArray]:
        """
        Unity-feedback closed loop T(s) = K*N(s) / (D(s) + K*N(s)).

        N is aligned to the length of D (left-padded or stripped of its
        highest-order terms) before the coefficient-wise sum.

        Returns:
            Tuple (num, den) of the closed loop
        """
        num, den = self.locus_polynomials()
        num_pad = align_numerator(num, den.size)
        return self.K * num_pad, den + self.K * num_pad

    def zpk(self) -> ZPK:
        num, den = self.polynomials()
        num_t, den_t = trim_leading_zeros(num), trim_leading_zeros(den)
        gain = float(num_t[0] / den_t[0]) if num_t.size and den_t.size else 0.0
        zeros, poles = solve_roots(num_t), solve_roots(den_t)
        return ZPK(zeros=zeros, poles=poles, gain=gain,
                   corner_frequencies=self._corner_frequencies(zeros, poles))

    def _corner_frequencies(self, zeros: List[complex], poles: List[complex]) -> List[float]:
        magnitudes = {round(abs(r), 9) for r in zeros + poles if abs(r) > 1e-12}
        return sorted(magnitudes)

    def static_error(self, input_type: str = 'step') -> float:
        """
        Static error of the unity-feedback loop around this plant.

        Args:
            input_type: Input type ('step', 'ramp', 'parabolic')

        Returns:
            Static error (inf if the loop cannot follow the input)

        Raises:
            ValueError: If the input type is not supported
        """
        input_lower = input_type.lower()
        if input_lower not in STATIC_ERROR_INPUTS:
            raise ValueError(
                f"Input type '{input_type}' not supported. Use 'step', 'ramp', or 'parabolic'"
            )
        power = STATIC_ERROR_INPUTS.index(input_lower)
        constant = self._error_constant(power)

        if input_lower == 'step':
            # Kp = lim(s->0) G(s)
            return float(1 / (1 + constant))
        # Kv = lim(s->0) s*G(s), Ka = lim(s->0) s^2*G(s)
        if constant == 0:
            return np.inf
        return float(1 / constant)

    def _error_constant(self, power: int) -> float:
        """lim(s->0) |s^power * G(s)|, from the low-order coefficients."""
        num, den = (trim_leading_zeros(p) for p in self.polynomials())
        if num.size == 0:
            return 0.0
        if den.size == 0:
            return np.inf
        zn = num.size - 1 - int(np.flatnonzero(num)[-1])
        zd = den.size - 1 - int(np.flatnonzero(den)[-1])
        exponent = power + zn - zd
        if exponent > 0:
            return 0.0
        if exponent < 0:
            return np.inf
        return float(abs(num[num.size - 1 - zn] / den[den.size - 1 - zd]))

    def to_lti(self) -> signal.TransferFunction:
        """Exports the plant as a scipy transfer function."""
        num, den = self.polynomials()
        return signal.TransferFunction(trim_leading_zeros(num), trim_leading_zeros(den))

    def describe(self) -> str:
        num, den = self.polynomials()
        return f"G(s) = ({format_polynomial(num)}) / ({format_polynomial(den)})"


@dataclass(frozen=True)
class FirstOrderPlant(Plant):
    """
    First-order lag G(s) = K / (tau*s + 1).

    Attributes:
        K: Static gain
        tau: Time constant (s), non-zero
    """
    K: float = 1.0
    tau: float = 1.0
    order = 'first'

    def __post_init__(self) -> None:
        if self.tau == 0:
            raise ValueError("tau cannot be zero")

    def polynomials(self) -> Tuple[NDArray, NDArray]:
        return first_order_polynomials(self.K, self.tau)

    def locus_polynomials(self) -> Tuple[NDArray, NDArray]:
        return first_order_polynomials(1.0, self.tau)

    def _corner_frequencies(self, zeros: List[complex], poles: List[complex]) -> List[float]:
        return [1 / abs(self.tau)]


@dataclass(frozen=True)
class SecondOrderPlant(Plant):
    """
    Standard second-order system G(s) = K*wn^2 / (s^2 + 2*zeta*wn*s + wn^2).

    Attributes:
        K: Static gain
        wn: Natural frequency (rad/s), non-zero
        zeta: Damping ratio
    """
    K: float = 1.0
    wn: float = 2.0
    zeta: float = 0.5
    order = 'second'

    def __post_init__(self) -> None:
        if self.wn == 0:
            raise ValueError("wn cannot be zero")

    def polynomials(self) -> Tuple[NDArray, NDArray]:
        return second_order_polynomials(self.K, self.wn, self.zeta)

    def locus_polynomials(self) -> Tuple[NDArray, NDArray]:
        return second_order_polynomials(1.0, self.wn, self.zeta)

    def _corner_frequencies(self, zeros: List[complex], poles: List[complex]) -> List[float]:
        return [abs(self.wn)]


@dataclass(frozen=True)
class HigherOrderPlant(Plant):
    """
    Arbitrary rational plant G(s) = K * num(s) / den(s).

    An empty numerator is read as num(s) = 1. An empty or all-zero
    denominator is accepted; analyses then return empty or zero results.

    Attributes:
        K: Gain
        num: Numerator coefficients (descending powers)
        den: Denominator coefficients (descending powers)
    """
    K: float = 1.0
    num: Tuple[float, ...] = (1.0,)
    den: Tuple[float, ...] = field(default=(1.0, 3.0, 3.0, 1.0))
    order = 'higher'

    def __post_init__(self) -> None:
        num = tuple(float(c) for c in np.asarray(self.num, dtype=float).ravel())
        if not num:
            logger.debug("Empty numerator, using num(s) = 1")
            num = (1.0,)
        object.__setattr__(self, 'num', num)
        object.__setattr__(self, 'den', tuple(float(c) for c in np.asarray(self.den, dtype=float).ravel()))

    def polynomials(self) -> Tuple[NDArray, NDArray]:
        return higher_order_polynomials(self.K, self.num, self.den)

    def locus_polynomials(self) -> Tuple[NDArray, NDArray]:
        return higher_order_polynomials(1.0, self.num, self.den)


PlantType = Union[FirstOrderPlant, SecondOrderPlant, HigherOrderPlant]
