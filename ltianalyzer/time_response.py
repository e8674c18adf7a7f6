"""Time-domain responses of first-, second- and higher-order plants.

First- and second-order plants use closed-form inverse Laplace transforms
evaluated on the time grid. Higher-order plants are simulated in
controllable canonical form with an explicit midpoint (RK2) integrator.
All responses assume zero initial conditions.
"""
import logging
import math
from typing import Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from . import settings
from .algebra import align_numerator, complex_divide
from .plant import FirstOrderPlant, HigherOrderPlant, Plant, PlantType, SecondOrderPlant

logger = logging.getLogger(__name__)

INPUT_TYPES = ('step', 'ramp', 'parabolic', 'impulse', 'sinusoidal')

UNDERDAMPED = 'underdamped'
CRITICAL = 'critical'
OVERDAMPED = 'overdamped'


def create_time_array(end_time: float = settings.DEFAULT_END_TIME,
                      step: float = settings.DEFAULT_TIME_STEP) -> NDArray:
    """
    Uniform time grid starting at zero.

    Args:
        end_time: Horizon (s)
        step: Sample spacing (s)

    Returns:
        Array of ceil(end_time/step) + 1 samples spaced by step
    """
    if not end_time > 0:
        logger.warning("Non-positive end time %r, using %.3f s", end_time, settings.DEFAULT_END_TIME)
        end_time = settings.DEFAULT_END_TIME
    if not step > 0:
        logger.warning("Non-positive time step %r, using %.3f s", step, settings.DEFAULT_TIME_STEP)
        step = settings.DEFAULT_TIME_STEP
    points = math.ceil(end_time / step) + 1
    return np.arange(points) * step


def damping_regime(zeta: float, tol: float = settings.CRITICAL_DAMPING_TOL) -> str:
    """Classifies a damping ratio as underdamped, critical or overdamped."""
    if abs(abs(zeta) - 1) < tol:
        return CRITICAL
    if abs(zeta) < 1:
        return UNDERDAMPED
    return OVERDAMPED


def _check_input_type(input_type: str) -> str:
    input_lower = input_type.lower()
    if input_lower not in INPUT_TYPES:
        raise ValueError(
            f"Input type '{input_type}' not supported. "
            f"Valid types: {', '.join(repr(i) for i in INPUT_TYPES)}"
        )
    return input_lower


def time_response(
    plant: PlantType,
    input_type: str,
    t: Sequence[float],
    frequency: float = settings.DEFAULT_SIN_FREQUENCY,
    amplitude: float = settings.DEFAULT_SIN_AMPLITUDE
) -> NDArray:
    """
    Computes the response of a plant to a canonical input.

    Args:
        plant: First-, second- or higher-order plant
        input_type: 'step', 'ramp', 'parabolic', 'impulse' or 'sinusoidal'
        t: Time grid (s), uniformly spaced
        frequency: Forcing frequency for sinusoidal input (rad/s)
        amplitude: Forcing amplitude for sinusoidal input

    Returns:
        Response samples, one per grid point

    Raises:
        ValueError: If the input type is not supported
        TypeError: If plant is not one of the plant variants

    Example:
        >>> t = create_time_array(5, 0.1)
        >>> y = time_response(FirstOrderPlant(K=1, tau=1), 'step', t)
    """
    input_lower = _check_input_type(input_type)
    t = np.asarray(t, dtype=float)

    if isinstance(plant, FirstOrderPlant):
        return _first_order_response(plant, input_lower, t, frequency, amplitude)
    elif isinstance(plant, SecondOrderPlant):
        return _second_order_response(plant, input_lower, t, frequency, amplitude)
    elif isinstance(plant, HigherOrderPlant):
        return simulate_state_space(plant, input_lower, t, frequency, amplitude)
    raise TypeError(f"Unsupported plant type: {type(plant).__name__}")


# -----------------------------------------------------------------------------
# First order: G(s) = K / (tau*s + 1)
# -----------------------------------------------------------------------------

def _first_order_response(plant: FirstOrderPlant, input_type: str, t: NDArray,
                          frequency: float, amplitude: float) -> NDArray:
    K, tau = plant.K, plant.tau
    decay = np.exp(-t / tau)

    if input_type == 'step':
        return K * (1 - decay)
    elif input_type == 'ramp':
        return K * (t - tau * (1 - decay))
    elif input_type == 'parabolic':
        return K * (0.5 * t * t - tau * t + tau * tau * (1 - decay))
    elif input_type == 'impulse':
        return (K / tau) * decay

    # sinusoidal: steady state plus the decaying homogeneous term
    wt = frequency * tau
    magnitude = K / math.sqrt(1 + wt * wt)
    phase = -math.atan(wt)
    steady_state = magnitude * amplitude * np.sin(frequency * t + phase)
    transient = -magnitude * amplitude * math.sin(phase) * decay
    return steady_state + transient


# -----------------------------------------------------------------------------
# Second order: G(s) = K*wn^2 / (s^2 + 2*zeta*wn*s + wn^2)
# -----------------------------------------------------------------------------

def _second_order_poles(wn: float, zeta: float) -> Tuple[complex, complex]:
    root = wn * np.sqrt(complex(zeta * zeta - 1))
    return complex(-zeta * wn + root), complex(-zeta * wn - root)


def _residue_transient(residues: Sequence[complex], poles: Sequence[complex], t: NDArray) -> NDArray:
    """Real part of sum(R_i * exp(p_i * t)) over simple poles."""
    total = np.zeros(t.shape, dtype=complex)
    for residue, pole in zip(residues, poles):
        total += residue * np.exp(pole * t)
    return total.real


def _second_order_response(plant: SecondOrderPlant, input_type: str, t: NDArray,
                           frequency: float, amplitude: float) -> NDArray:
    K, wn, zeta = plant.K, plant.wn, plant.zeta
    regime = damping_regime(zeta)
    sigma = zeta * wn
    p1, p2 = _second_order_poles(wn, zeta)

    if input_type == 'sinusoidal':
        return _second_order_sinusoid(plant, regime, t, frequency, amplitude)

    if regime == UNDERDAMPED:
        beta = math.sqrt(1 - zeta * zeta)
        wd = wn * beta
        envelope = np.exp(-sigma * t)
        if input_type == 'step':
            phi = math.atan2(beta, zeta)
            return K * (1 - envelope / beta * np.sin(wd * t + phi))
        elif input_type == 'impulse':
            return K * wn / beta * envelope * np.sin(wd * t)
        elif input_type == 'ramp':
            transient = envelope * ((2 * zeta / wn) * np.cos(wd * t)
                                    + ((2 * zeta * zeta - 1) / wd) * np.sin(wd * t))
            return K * (t - 2 * zeta / wn + transient)

    elif regime == CRITICAL:
        envelope = np.exp(-sigma * t)
        a = 2 * zeta / wn
        if input_type == 'step':
            return K * (1 - (1 + sigma * t) * envelope)
        elif input_type == 'impulse':
            return K * wn * wn * t * envelope
        elif input_type == 'ramp':
            return K * (t - a + (t + a) * envelope)
        else:
            c0 = (4 * zeta * zeta - 1) / (wn * wn)
            return K * (0.5 * t * t - a * t + c0 - (t / sigma + c0) * envelope)

    else:
        r1, r2 = p1.real, p2.real
        if input_type == 'step':
            return K * (1 + (r2 * np.exp(r1 * t) - r1 * np.exp(r2 * t)) / (r1 - r2))
        elif input_type == 'impulse':
            return K * wn * wn / (r1 - r2) * (np.exp(r1 * t) - np.exp(r2 * t))
        elif input_type == 'ramp':
            residues = [wn * wn / (r1 * r1 * (r1 - r2)), wn * wn / (r2 * r2 * (r2 - r1))]
            return K * (t - 2 * zeta / wn + _residue_transient(residues, [r1, r2], t))

    # parabolic, distinct poles
    residues = [wn * wn / (p1 ** 3 * (p1 - p2)), wn * wn / (p2 ** 3 * (p2 - p1))]
    polynomial_part = 0.5 * t * t - (2 * zeta / wn) * t + (4 * zeta * zeta - 1) / (wn * wn)
    return K * (polynomial_part + _residue_transient(residues, [p1, p2], t))


def _second_order_sinusoid(plant: SecondOrderPlant, regime: str, t: NDArray,
                           frequency: float, amplitude: float) -> NDArray:
    K, wn, zeta = plant.K, plant.wn, plant.zeta
    sigma = zeta * wn
    response = plant.evaluate(frequency)
    steady_state = amplitude * abs(response) * np.sin(frequency * t + np.angle(response))

    forcing = K * wn * wn * amplitude * frequency
    p1, p2 = _second_order_poles(wn, zeta)
    if regime == CRITICAL:
        q = sigma * sigma + frequency * frequency
        c1 = complex_divide(forcing, q).real
        c2 = complex_divide(2 * sigma * forcing, q * q).real
        transient = (c1 * t + c2) * np.exp(-sigma * t)
    else:
        residues = [complex_divide(forcing, (p1 - p2) * (p1 * p1 + frequency * frequency)),
                    complex_divide(forcing, (p2 - p1) * (p2 * p2 + frequency * frequency))]
        transient = _residue_transient(residues, [p1, p2], t)

    # Slowest pole sets the cutoff; overdamped plants decay much slower than zeta*wn
    decay_rate = min(-p1.real, -p2.real)
    if decay_rate > 0:
        cutoff = settings.TRANSIENT_CUTOFF_TIME_CONSTANTS / decay_rate
        transient = np.where(t < cutoff, transient, 0.0)
    return steady_state + transient


# -----------------------------------------------------------------------------
# Higher order: controllable canonical form + RK2
# -----------------------------------------------------------------------------

def state_space_realization(plant: Plant) -> Optional[Tuple[NDArray, NDArray, NDArray]]:
    """
    Controllable canonical realization of a plant.

    The numerator is made strictly proper by keeping its lowest n
    coefficients, then scaled by 1/den[0] (the gain is already in it).

    Args:
        plant: Any plant variant

    Returns:
        Tuple (A, B, C) with A of size n x n, n = denominator degree, or
        None when the denominator is empty, constant or has a degenerate
        leading coefficient.
    """
    num, den = plant.polynomials()
    n = den.size - 1
    if n <= 0:
        return None
    d0 = den[0]
    if abs(d0) < settings.LEADING_COEFF_EPS:
        logger.warning("Leading denominator coefficient %.3e is degenerate", d0)
        return None

    a = den[1:] / d0
    b = align_numerator(num, n) / d0

    A = np.zeros((n, n))
    A[:-1, 1:] = np.eye(n - 1)
    A[-1, :] = -a[::-1]
    B = np.zeros(n)
    B[-1] = 1.0
    C = b[::-1].copy()
    return A, B, C


def _forcing(input_type: str, time: float, k: int, dt: float, frequency: float, amplitude: float) -> float:
    if input_type == 'step':
        return 1.0
    elif input_type == 'ramp':
        return time
    elif input_type == 'parabolic':
        return 0.5 * time * time
    elif input_type == 'impulse':
        # unit-area pulse over the first sample interval
        return 1 / dt if k == 0 else 0.0
    return amplitude * math.sin(frequency * time)


def simulate_state_space(
    plant: Plant,
    input_type: str,
    t: Sequence[float],
    frequency: float = settings.DEFAULT_SIN_FREQUENCY,
    amplitude: float = settings.DEFAULT_SIN_AMPLITUDE
) -> NDArray:
    """
    Integrates the canonical realization with the explicit midpoint rule.

    The output at t[k] is read before the state advances to t[k+1]. The
    impulse is a pulse of height 1/dt on the first interval, so it is only
    meaningful on grids fine enough for that pulse to stay stable.

    Returns:
        Response samples; zeros when no realization exists
    """
    input_lower = _check_input_type(input_type)
    t = np.asarray(t, dtype=float)
    y = np.zeros(t.size)
    realization = state_space_realization(plant)
    if realization is None or t.size == 0:
        return y
    A, B, C = realization

    dt0 = t[1] - t[0] if t.size > 1 else settings.DEFAULT_TIME_STEP
    x = np.zeros(B.size)
    dx = np.empty(B.size)
    x_mid = np.empty(B.size)

    for k in range(t.size):
        y[k] = C @ x
        if k == t.size - 1:
            break
        h = t[k + 1] - t[k]
        u1 = _forcing(input_lower, t[k], k, dt0, frequency, amplitude)
        u2 = _forcing(input_lower, t[k] + 0.5 * h, k, dt0, frequency, amplitude)

        np.matmul(A, x, out=dx)
        dx += B * u1
        np.multiply(dx, 0.5 * h, out=x_mid)
        x_mid += x
        np.matmul(A, x_mid, out=dx)
        dx += B * u2
        x += h * dx

    return y
