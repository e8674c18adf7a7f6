"""Root locus by gain sweep and nearest-neighbour branch continuation."""
import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from . import settings
from .algebra import align_numerator
from .plant import Plant
from .roots import solve_roots

logger = logging.getLogger(__name__)

# Per branch, per sweep sample: index into that sample's roots, or None for a gap
BranchLinks = Tuple[Optional[int], ...]


@dataclass(frozen=True)
class GainSample:
    """Closed-loop roots of D(s) + K*N(s) at one gain."""
    gain: float
    roots: Tuple[complex, ...]


@dataclass(frozen=True)
class RootLocus:
    """
    Result of a gain sweep.

    Branches do not copy roots: each branch holds, for every sweep sample,
    the index of its root in that sample (or None where tracking lost it).
    Samples therefore stay independent and immutable.

    Attributes:
        samples: One GainSample per sampled gain, in sweep order
        branches: Index links of every tracked branch, aligned with samples
        open_loop_poles: Roots of D(s)
        open_loop_zeros: Roots of the aligned N(s)
        numerator: N(s) aligned to the length of D(s)
        denominator: D(s)
    """
    samples: Tuple[GainSample, ...]
    branches: Tuple[BranchLinks, ...]
    open_loop_poles: Tuple[complex, ...]
    open_loop_zeros: Tuple[complex, ...]
    numerator: NDArray
    denominator: NDArray

    @property
    def gains(self) -> NDArray:
        return np.array([sample.gain for sample in self.samples])

    @property
    def k_min(self) -> float:
        return self.samples[0].gain

    @property
    def k_max(self) -> float:
        return self.samples[-1].gain

    @property
    def steps(self) -> int:
        return len(self.samples) - 1

    def trajectory(self, branch: int) -> List[Optional[complex]]:
        """Roots of one branch along the sweep, None at gaps."""
        return [None if idx is None else sample.roots[idx]
                for idx, sample in zip(self.branches[branch], self.samples)]

    def active_branches(self, index: int) -> int:
        """Number of branches holding a root at sweep sample ``index``."""
        return sum(1 for links in self.branches if links[index] is not None)


def match_threshold(poles: Sequence[complex], zeros: Sequence[complex],
                    fraction: float = settings.LOCUS_MATCH_FRACTION) -> float:
    """Squared match radius scaled to the open-loop pole/zero spread."""
    parts = [abs(c.real) for c in list(poles) + list(zeros)] + [abs(c.imag) for c in list(poles) + list(zeros)]
    scale = max([1.0] + parts)
    return (scale * fraction) ** 2


def track_branches(root_sets: Sequence[Sequence[complex]], threshold: float) -> Tuple[BranchLinks, ...]:
    """
    Links roots across consecutive sweep samples into branches.

    One branch is seeded per root at the first sample that has any. At each
    later sample, branches in order take the nearest unused root to their
    last known root (squared distance), if it is closer than threshold;
    otherwise they record a gap. Unclaimed roots start new branches.

    This is a heuristic: close branches can swap on a coarse gain grid.

    Args:
        root_sets: Roots per sweep sample
        threshold: Squared distance above which a match is rejected

    Returns:
        Tuple of branch links, each of len(root_sets)
    """
    start = next((k for k, roots in enumerate(root_sets) if len(roots) > 0), None)
    if start is None:
        return ()

    links: List[List[Optional[int]]] = [[None] * start + [r] for r in range(len(root_sets[start]))]
    last_known: List[complex] = list(root_sets[start])

    for k in range(start + 1, len(root_sets)):
        roots_now = root_sets[k]
        used = [False] * len(roots_now)

        for b, branch in enumerate(links):
            anchor = last_known[b]
            best_idx, best_dist = -1, math.inf
            for r, candidate in enumerate(roots_now):
                if used[r]:
                    continue
                dist = (candidate.real - anchor.real) ** 2 + (candidate.imag - anchor.imag) ** 2
                if dist < best_dist:
                    best_idx, best_dist = r, dist
            if best_idx >= 0 and best_dist < threshold:
                used[best_idx] = True
                branch.append(best_idx)
                last_known[b] = roots_now[best_idx]
            else:
                branch.append(None)

        for r, candidate in enumerate(roots_now):
            if not used[r]:
                logger.debug("New locus branch born at sample %d (%s)", k, candidate)
                links.append([None] * k + [r])
                last_known.append(candidate)

    return tuple(tuple(branch) for branch in links)


def _sanitize_sweep(k_min: float, k_max: float, steps: int) -> Tuple[float, float, int]:
    if not math.isfinite(k_min):
        k_min = settings.DEFAULT_K_MIN
    if not (math.isfinite(k_max) and k_max > k_min):
        replacement = k_min + max(50.0, abs(k_min) + 50.0)
        logger.warning("Invalid gain range [%r, %r], using K max = %.3f", k_min, k_max, replacement)
        k_max = replacement
    if steps < 1:
        logger.warning("Invalid step count %r, using %d", steps, settings.DEFAULT_LOCUS_STEPS)
        steps = settings.DEFAULT_LOCUS_STEPS
    elif steps > settings.MAX_LOCUS_STEPS:
        logger.warning("Step count %d capped at %d", steps, settings.MAX_LOCUS_STEPS)
        steps = settings.MAX_LOCUS_STEPS
    return float(k_min), float(k_max), int(steps)


def root_locus(
    numerator: Sequence[float],
    denominator: Sequence[float],
    k_min: float = settings.DEFAULT_K_MIN,
    k_max: float = settings.DEFAULT_K_MAX,
    steps: int = settings.DEFAULT_LOCUS_STEPS
) -> RootLocus:
    """
    Sweeps the feedback gain and tracks the closed-loop pole branches.

    The numerator is aligned to the denominator length, then the roots of
    D(s) + K*N(s) are found for K = k_min + i/steps*(k_max - k_min),
    i = 0..steps.

    Args:
        numerator: Open-loop numerator N(s) (descending powers)
        denominator: Open-loop denominator D(s) (descending powers)
        k_min: First gain of the sweep
        k_max: Last gain of the sweep, must exceed k_min
        steps: Number of gain intervals (1..2000)

    Returns:
        RootLocus

    Example:
        >>> locus = root_locus([1], [1, 3, 2], 0, 10, 100)
        >>> locus.active_branches(0)
        2
    """
    den = np.asarray(denominator, dtype=float).ravel()
    num_pad = align_numerator(numerator, den.size)
    k_min, k_max, steps = _sanitize_sweep(k_min, k_max, steps)

    poles = tuple(solve_roots(den))
    zeros = tuple(solve_roots(num_pad))

    samples = []
    for i in range(steps + 1):
        gain = k_min + (i / steps) * (k_max - k_min)
        char_poly = den + gain * num_pad
        if np.all(np.abs(char_poly) < settings.LEADING_COEFF_EPS):
            roots: Tuple[complex, ...] = ()
        else:
            roots = tuple(solve_roots(char_poly))
        samples.append(GainSample(gain=gain, roots=roots))

    branches = track_branches([s.roots for s in samples], match_threshold(poles, zeros))
    return RootLocus(
        samples=tuple(samples),
        branches=branches,
        open_loop_poles=poles,
        open_loop_zeros=zeros,
        numerator=num_pad,
        denominator=den,
    )


def plant_root_locus(plant: Plant, k_min: float = settings.DEFAULT_K_MIN,
                     k_max: float = settings.DEFAULT_K_MAX,
                     steps: int = settings.DEFAULT_LOCUS_STEPS) -> RootLocus:
    """Root locus of a plant's gain-free open loop."""
    num, den = plant.locus_polynomials()
    return root_locus(num, den, k_min, k_max, steps)
