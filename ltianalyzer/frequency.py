"""Frequency response, stability margins and bandwidth."""
import logging
import math
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from . import settings
from .algebra import complex_magnitude, complex_phase, trim_leading_zeros
from .plant import Plant

logger = logging.getLogger(__name__)


def create_frequency_array(
    min_freq: float = settings.DEFAULT_FREQ_MIN,
    max_freq: float = settings.DEFAULT_FREQ_MAX,
    points_per_decade: float = settings.DEFAULT_POINTS_PER_DECADE
) -> NDArray:
    """
    Logarithmically spaced frequency grid.

    Degenerate bounds are replaced rather than rejected: a non-positive
    lower bound becomes 0.1 rad/s, an upper bound not above the lower one
    becomes max(10*min_freq, min_freq + 1).

    Args:
        min_freq: Lower bound (rad/s)
        max_freq: Upper bound (rad/s)
        points_per_decade: Sampling density

    Returns:
        Strictly increasing array of at least 2 frequencies
    """
    if not (min_freq > 0 and math.isfinite(min_freq)):
        logger.warning("Invalid lower frequency bound %r, using %.3f rad/s", min_freq, settings.DEFAULT_FREQ_MIN)
        min_freq = settings.DEFAULT_FREQ_MIN
    if not (max_freq > min_freq and math.isfinite(max_freq)):
        replacement = max(min_freq * 10, min_freq + 1)
        logger.warning("Invalid upper frequency bound %r, using %.3f rad/s", max_freq, replacement)
        max_freq = replacement
    if not points_per_decade > 0:
        points_per_decade = settings.DEFAULT_POINTS_PER_DECADE

    log_min, log_max = math.log10(min_freq), math.log10(max_freq)
    points = max(2, math.ceil((log_max - log_min) * points_per_decade))
    return np.logspace(log_min, log_max, points)


@dataclass(frozen=True)
class FrequencyPoint:
    frequency: float
    magnitude: float
    phase: float
    real: float
    imag: float


@dataclass(frozen=True)
class FrequencyResponse:
    """
    Sampled frequency response G(jw).

    Phase is in degrees and unwrapped along the sweep: it starts on the
    branch of the low-frequency asymptote and is continuous afterwards, so
    lags beyond -180 deg are represented as such.

    Attributes:
        frequency: Frequencies (rad/s)
        magnitude: |G(jw)|
        phase: Unwrapped phase of G(jw) (degrees)
        real: Re G(jw)
        imag: Im G(jw)
    """
    frequency: NDArray
    magnitude: NDArray
    phase: NDArray
    real: NDArray
    imag: NDArray

    def __len__(self) -> int:
        return self.frequency.size

    def __getitem__(self, i: int) -> FrequencyPoint:
        return FrequencyPoint(float(self.frequency[i]), float(self.magnitude[i]),
                              float(self.phase[i]), float(self.real[i]), float(self.imag[i]))

    def __iter__(self) -> Iterator[FrequencyPoint]:
        return (self[i] for i in range(len(self)))

    @property
    def magnitude_db(self) -> NDArray:
        return 20 * np.log10(np.maximum(self.magnitude, settings.MAGNITUDE_FLOOR))


def low_frequency_phase(plant: Plant) -> Optional[float]:
    """
    Asymptotic phase of G(jw) as w -> 0, in degrees.

    With N(s) ~ n*s^zn and D(s) ~ d*s^zd near s = 0 the phase tends to
    90*(zn - zd), minus 180 when n/d is negative. None for an empty or
    all-zero polynomial.
    """
    num, den = (trim_leading_zeros(p) for p in plant.polynomials())
    if num.size == 0 or den.size == 0:
        return None
    n_idx = int(np.flatnonzero(num)[-1])
    d_idx = int(np.flatnonzero(den)[-1])
    type_difference = (num.size - 1 - n_idx) - (den.size - 1 - d_idx)
    phase = 90.0 * type_difference
    if num[n_idx] / den[d_idx] < 0:
        phase -= 180.0
    return phase


def _wrap_degrees(angle: float) -> float:
    """Maps an angle into (-180, 180]."""
    wrapped = (angle + 180.0) % 360.0 - 180.0
    return 180.0 if wrapped == -180.0 else wrapped


def frequency_response(plant: Plant, frequencies: Sequence[float]) -> FrequencyResponse:
    """
    Evaluates a plant at s = jw over a frequency grid.

    The unwrapped phase is shifted by whole turns so that its first sample
    lies on the branch of the low-frequency asymptote: a type-2 plant
    starts near -180 deg rather than +180 deg. The anchor assumes the
    first frequency is low enough that the phase is within 180 deg of
    that asymptote.

    Args:
        plant: Plant to evaluate
        frequencies: Frequencies (rad/s)

    Returns:
        FrequencyResponse with one sample per frequency
    """
    w = np.asarray(frequencies, dtype=float)
    values = [plant.evaluate(float(omega)) for omega in w]
    magnitude = np.array([complex_magnitude(v) for v in values])
    phase = np.degrees(np.unwrap(np.array([complex_phase(v) for v in values])))

    anchor = low_frequency_phase(plant)
    if phase.size and anchor is not None:
        phase += 360.0 * round((anchor - phase[0]) / 360.0)

    return FrequencyResponse(
        frequency=w,
        magnitude=magnitude,
        phase=phase,
        real=np.array([v.real for v in values]),
        imag=np.array([v.imag for v in values]),
    )


@dataclass(frozen=True)
class StabilityMargins:
    """
    Margins read off a frequency sweep.

    None means "not found in the swept range". In particular, when the phase
    never reaches -180 deg inside the sweep, the gain margin is reported as
    infinite and ``phase_crossover`` as None; a wider sweep may still find
    a crossover, so this is not a proof of infinite margin.

    Attributes:
        gain_margin: Gain margin (dB), inf if no phase crossover was found
        phase_margin: Phase margin (degrees), wrapped into (-180, 180]
        gain_crossover: Frequency where |G| crosses 1 from above (rad/s)
        phase_crossover: Frequency where the phase crosses -180 deg (rad/s)
        bandwidth: First frequency where |G| <= |G(first sample)|/sqrt(2)
        resonant_peak: Maximum magnitude over the sweep (dB)
        corner_frequencies: Detected slope breaks (rad/s), at most five
    """
    gain_margin: Optional[float]
    phase_margin: Optional[float]
    gain_crossover: Optional[float]
    phase_crossover: Optional[float]
    bandwidth: Optional[float]
    resonant_peak: Optional[float]
    corner_frequencies: Tuple[float, ...] = ()

    @property
    def phase_crossover_found(self) -> bool:
        return self.phase_crossover is not None


def stability_margins(frequencies: Sequence[float], response: FrequencyResponse) -> StabilityMargins:
    """
    Extracts margins, bandwidth, resonant peak and corners from a sweep.

    Crossings are not interpolated: the frequency of the sample just before
    the crossing is reported.

    Args:
        frequencies: Frequency grid the response was computed on (rad/s)
        response: Frequency response on that grid

    Returns:
        StabilityMargins

    Raises:
        ValueError: If the grid and the response differ in length
    """
    w = np.asarray(frequencies, dtype=float)
    if w.size != len(response):
        raise ValueError(f"Frequency grid and response lengths differ: {w.size} != {len(response)}")
    if w.size == 0:
        return StabilityMargins(np.inf, None, None, None, None, None)

    mag, phase = response.magnitude, response.phase

    # Phase margin at the gain crossover (|G| = 1)
    gain_crossover = phase_margin = None
    for i in range(w.size - 1):
        if mag[i] >= 1 and mag[i + 1] <= 1:
            gain_crossover = float(w[i])
            phase_margin = _wrap_degrees(180 + float(phase[i]))
            break

    # Gain margin at the phase crossover (phase = -180 deg)
    phase_crossover = gain_margin = None
    for i in range(w.size - 1):
        if phase[i] >= -180 and phase[i + 1] <= -180:
            phase_crossover = float(w[i])
            if mag[i] > settings.MAGNITUDE_FLOOR:
                gain_margin = float(20 * math.log10(1 / mag[i]))
            break
    if phase_crossover is None:
        gain_margin = np.inf

    # Bandwidth (-3 dB from the first sample)
    bandwidth = None
    target = mag[0] / math.sqrt(2)
    below = np.flatnonzero(mag <= target)
    if below.size:
        bandwidth = float(w[below[0]])

    resonant_peak = float(20 * math.log10(max(float(np.max(mag)), settings.MAGNITUDE_FLOOR)))

    return StabilityMargins(
        gain_margin=gain_margin,
        phase_margin=phase_margin,
        gain_crossover=gain_crossover,
        phase_crossover=phase_crossover,
        bandwidth=bandwidth,
        resonant_peak=resonant_peak,
        corner_frequencies=tuple(find_corner_frequencies(w, response)),
    )


def find_corner_frequencies(frequencies: Sequence[float], response: FrequencyResponse,
                            threshold: float = settings.CORNER_SLOPE_THRESHOLD,
                            limit: int = settings.MAX_CORNER_FREQUENCIES) -> List[float]:
    """Frequencies where the dB/decade slope changes by more than threshold."""
    w = np.asarray(frequencies, dtype=float)
    mag_db = response.magnitude_db
    log_w = np.log10(w)
    corners = []
    for i in range(1, w.size - 1):
        slope1 = (mag_db[i] - mag_db[i - 1]) / (log_w[i] - log_w[i - 1])
        slope2 = (mag_db[i + 1] - mag_db[i]) / (log_w[i + 1] - log_w[i])
        if abs(slope1 - slope2) > threshold:
            corners.append(float(w[i]))
            if len(corners) == limit:
                break
    return corners
