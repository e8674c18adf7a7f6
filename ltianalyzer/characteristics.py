"""Transient and steady-state characteristics of a time response."""
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Sequence

import numpy as np

from . import settings

METRICS = (
    'delay_time', 'rise_time', 'peak_time', 'overshoot',
    'settling_time', 'steady_state_value', 'steady_state_error',
)


@dataclass(frozen=True)
class ResponseCharacteristics:
    """
    Metrics extracted from a sampled response.

    A field listed in ``not_applicable`` is undefined for the input type.
    A field left at None otherwise means the response never reached the
    corresponding level within the simulated horizon.

    Attributes:
        delay_time: Time to 50% of the final value (s)
        rise_time: 10% to 90% rise time (s)
        peak_time: Time of the maximum (s)
        overshoot: Peak overshoot relative to the final value (%)
        settling_time: Entry into the 2% band for good (s)
        steady_state_value: Last sample of the response
        steady_state_error: Input minus output in the asymptotic sense
        not_applicable: Names of the metrics undefined for this input
    """
    delay_time: Optional[float] = None
    rise_time: Optional[float] = None
    peak_time: Optional[float] = None
    overshoot: Optional[float] = None
    settling_time: Optional[float] = None
    steady_state_value: Optional[float] = None
    steady_state_error: Optional[float] = None
    not_applicable: FrozenSet[str] = field(default_factory=frozenset)

    def is_applicable(self, name: str) -> bool:
        if name not in METRICS:
            raise ValueError(f"Unknown metric '{name}'")
        return name not in self.not_applicable


def _first_crossing(t: np.ndarray, y_norm: np.ndarray, level: float) -> Optional[float]:
    hits = np.flatnonzero(y_norm >= level)
    return float(t[hits[0]]) if hits.size else None


def response_characteristics(
    t: Sequence[float],
    y: Sequence[float],
    input_type: str = 'step'
) -> ResponseCharacteristics:
    """
    Computes response characteristics for a given input type.

    Step inputs get the full set of transient metrics. Ramp and parabolic
    inputs only get the steady-state error, from the asymptotic slope or
    curvature of the last samples. Impulse inputs report the peak time.
    Sinusoidal inputs never settle, so every metric is not applicable.

    Args:
        t: Time grid (s), uniformly spaced
        y: Response samples
        input_type: Input the response was computed for

    Returns:
        ResponseCharacteristics

    Raises:
        ValueError: If t and y differ in length or the input type is unknown
    """
    t = np.asarray(t, dtype=float)
    y = np.asarray(y, dtype=float)
    if t.shape != y.shape:
        raise ValueError(f"Time and response lengths differ: {t.size} != {y.size}")
    input_lower = input_type.lower()

    if t.size == 0:
        return ResponseCharacteristics()

    y_final = float(y[-1])
    dt = float(t[1] - t[0]) if t.size > 1 else 0.0

    if input_lower == 'step':
        return _step_characteristics(t, y, y_final)

    elif input_lower == 'ramp':
        sse = None
        if t.size > 1 and dt > 0:
            # input slope is 1
            sse = 1.0 - float(y[-1] - y[-2]) / dt
        return ResponseCharacteristics(
            steady_state_value=y_final,
            steady_state_error=sse,
            not_applicable=frozenset(('delay_time', 'rise_time', 'peak_time',
                                      'overshoot', 'settling_time')),
        )

    elif input_lower == 'parabolic':
        sse = None
        if t.size > 2 and dt > 0:
            # input curvature is 1
            sse = 1.0 - float(y[-1] - 2 * y[-2] + y[-3]) / (dt * dt)
        return ResponseCharacteristics(
            steady_state_value=y_final,
            steady_state_error=sse,
            not_applicable=frozenset(('delay_time', 'rise_time', 'peak_time',
                                      'overshoot', 'settling_time')),
        )

    elif input_lower == 'impulse':
        return ResponseCharacteristics(
            peak_time=float(t[int(np.argmax(y))]),
            steady_state_value=y_final,
            not_applicable=frozenset(('delay_time', 'rise_time', 'overshoot',
                                      'settling_time', 'steady_state_error')),
        )

    elif input_lower == 'sinusoidal':
        return ResponseCharacteristics(not_applicable=frozenset(METRICS))

    raise ValueError(f"Input type '{input_type}' not supported")


def _step_characteristics(t: np.ndarray, y: np.ndarray, y_final: float) -> ResponseCharacteristics:
    if abs(y_final) <= settings.MIN_FINAL_VALUE:
        # Flat response: only the final value is meaningful
        return ResponseCharacteristics(steady_state_value=y_final,
                                       steady_state_error=1.0 - y_final)

    # Work on the response normalised by its final value so that negative
    # gains behave like positive ones
    y_norm = y / y_final

    delay_time = _first_crossing(t, y_norm, 0.5)
    t10 = _first_crossing(t, y_norm, 0.1)
    t90 = _first_crossing(t, y_norm, 0.9)
    rise_time = t90 - t10 if t10 is not None and t90 is not None else None

    # Overshoot
    idx_max = int(np.argmax(y_norm))
    if y_norm[idx_max] > settings.OVERSHOOT_THRESHOLD:
        peak_time = float(t[idx_max])
        overshoot = float((y_norm[idx_max] - 1) * 100)
    else:
        peak_time = None
        overshoot = 0.0

    # Settling time (2%): first sample after the last excursion outside the band
    outside = np.flatnonzero(np.abs(y_norm - 1) > settings.SETTLING_TOLERANCE)
    if outside.size == 0:
        settling_time = float(t[0])
    else:
        last = outside[-1]
        settling_time = float(t[min(last + 1, t.size - 1)])

    return ResponseCharacteristics(
        delay_time=delay_time,
        rise_time=rise_time,
        peak_time=peak_time,
        overshoot=overshoot,
        settling_time=settling_time,
        steady_state_value=y_final,
        steady_state_error=1.0 - y_final,
    )
