"""
Tests for the frequency grid, frequency response and stability margins.
"""
import math

import numpy as np
import pytest
from numpy.testing import assert_allclose
from scipy import signal

from ltianalyzer import FirstOrderPlant, HigherOrderPlant, SecondOrderPlant
from ltianalyzer.frequency import (
    FrequencyPoint,
    create_frequency_array,
    find_corner_frequencies,
    frequency_response,
    low_frequency_phase,
    stability_margins,
)


def _margins(plant, w):
    return stability_margins(w, frequency_response(plant, w))


class TestFrequencyArray:

    def test_default_sweep(self):
        w = create_frequency_array(0.1, 1000, 50)
        assert w.size >= 2
        assert np.all(np.diff(w) > 0)
        assert w[0] == pytest.approx(0.1)
        assert w[-1] == pytest.approx(1000.0)
        assert w.size == 200

    def test_degenerate_bounds_replaced(self):
        w = create_frequency_array(-1.0, 0.0, 50)
        assert w[0] == pytest.approx(0.1)
        assert w[-1] == pytest.approx(1.1)

    def test_inverted_bounds(self):
        w = create_frequency_array(10.0, 1.0, 20)
        assert w[0] == pytest.approx(10.0)
        assert w[-1] == pytest.approx(100.0)

    def test_at_least_two_points(self):
        assert create_frequency_array(1.0, 1.001, 1).size == 2


class TestFrequencyResponse:

    def test_first_order_analytic(self):
        w = create_frequency_array(0.01, 100, 20)
        response = frequency_response(FirstOrderPlant(K=1.0, tau=1.0), w)
        assert_allclose(response.magnitude, 1 / np.sqrt(1 + w * w))
        assert_allclose(response.phase, -np.degrees(np.arctan(w)))

    def test_matches_scipy_freqs(self):
        plant = HigherOrderPlant(K=3.0, num=[1.0, 2.0], den=[1.0, 4.0, 6.0, 4.0])
        w = create_frequency_array(0.1, 100, 20)
        num, den = plant.polynomials()
        _, h = signal.freqs(num, den, worN=w)
        response = frequency_response(plant, w)
        assert_allclose(response.magnitude, np.abs(h), rtol=1e-10)
        assert_allclose(response.real, h.real, atol=1e-12)
        assert_allclose(response.imag, h.imag, atol=1e-12)

    def test_phase_unwrapped_past_minus_180(self, triple_lag):
        w = create_frequency_array(0.1, 1000, 50)
        response = frequency_response(triple_lag, w)
        assert response.phase[-1] == pytest.approx(-3 * math.degrees(math.atan(1000.0)), abs=1e-6)
        assert np.all(np.diff(response.phase) < 0)

    def test_points(self, first_order):
        w = [1.0, 10.0]
        response = frequency_response(first_order, w)
        assert len(response) == 2
        point = response[0]
        assert isinstance(point, FrequencyPoint)
        assert point.frequency == 1.0
        assert point.magnitude == pytest.approx(1 / math.sqrt(2))
        assert point.phase == pytest.approx(-45.0)
        assert [p.frequency for p in response] == w

    def test_magnitude_db(self, first_order):
        response = frequency_response(first_order, [1.0])
        assert response.magnitude_db[0] == pytest.approx(-3.0103, abs=1e-4)

    def test_double_integrator_starts_below_minus_180(self, double_integrator):
        w = create_frequency_array(0.1, 1000, 50)
        response = frequency_response(double_integrator, w)
        assert response.phase[0] == pytest.approx(-180 - math.degrees(math.atan(0.1)), abs=1e-6)
        assert response.phase[-1] == pytest.approx(-180 - math.degrees(math.atan(1000.0)), abs=1e-6)

    @pytest.mark.parametrize("plant, expected", [
        (HigherOrderPlant(K=1.0, num=[1.0], den=[1.0, 3.0, 3.0, 1.0]), 0.0),
        (HigherOrderPlant(K=1.0, num=[1.0], den=[1.0, 1.0, 0.0, 0.0]), -180.0),
        (HigherOrderPlant(K=1.0, num=[1.0, 0.0], den=[1.0, 1.0]), 90.0),
        (HigherOrderPlant(K=1.0, num=[1.0, -1.0], den=[1.0, 1.0]), -180.0),
        (HigherOrderPlant(K=-2.0, num=[1.0], den=[1.0, 1.0]), -180.0),
    ])
    def test_low_frequency_phase(self, plant, expected):
        assert low_frequency_phase(plant) == expected

    def test_low_frequency_phase_zero_denominator(self):
        assert low_frequency_phase(HigherOrderPlant(K=1.0, num=[1.0], den=[0.0, 0.0])) is None


class TestStabilityMargins:

    def test_triple_lag_margins(self):
        plant = HigherOrderPlant(K=4.0, num=[1.0], den=[1.0, 3.0, 3.0, 1.0])
        m = _margins(plant, create_frequency_array(0.1, 1000, 50))
        assert m.phase_crossover_found
        assert m.phase_crossover == pytest.approx(math.sqrt(3), rel=0.06)
        # |G(j*sqrt(3))| = 4 / 8
        assert m.gain_margin == pytest.approx(20 * math.log10(2), abs=1.0)
        assert m.gain_crossover == pytest.approx(math.sqrt(4 ** (2 / 3) - 1), rel=0.06)
        assert m.phase_margin == pytest.approx(180 - 3 * math.degrees(math.atan(1.2328)), abs=5.0)

    def test_unit_triple_lag_gain_margin(self, triple_lag):
        m = _margins(triple_lag, create_frequency_array(0.1, 1000, 50))
        # |G(j*sqrt(3))| = 1/8, about 18 dB
        assert m.gain_margin == pytest.approx(20 * math.log10(8), abs=1.0)

    def test_double_integrator_negative_phase_margin(self, double_integrator):
        m = _margins(double_integrator, create_frequency_array(0.1, 1000, 50))
        # |G| = 1 where w**4 * (1 + w**2) = 1
        assert m.gain_crossover == pytest.approx(0.869, rel=0.06)
        assert -180 < m.phase_margin <= 180
        assert m.phase_margin == pytest.approx(-math.degrees(math.atan(0.869)), abs=5.0)
        assert not m.phase_crossover_found

    def test_no_phase_crossover(self, first_order):
        m = _margins(first_order, create_frequency_array())
        assert not m.phase_crossover_found
        assert m.gain_margin == np.inf
        assert m.gain_crossover is None
        assert m.phase_margin is None

    def test_first_order_bandwidth(self, first_order):
        m = _margins(first_order, create_frequency_array())
        assert m.bandwidth == pytest.approx(1.0, rel=0.06)

    def test_resonant_peak(self):
        plant = SecondOrderPlant(K=1.0, wn=2.0, zeta=0.2)
        m = _margins(plant, create_frequency_array(0.1, 100, 200))
        expected = 20 * math.log10(1 / (2 * 0.2 * math.sqrt(1 - 0.2 ** 2)))
        assert m.resonant_peak == pytest.approx(expected, abs=0.3)

    def test_length_mismatch(self, first_order):
        response = frequency_response(first_order, [1.0, 2.0])
        with pytest.raises(ValueError):
            stability_margins([1.0, 2.0, 3.0], response)


class TestCornerFrequencies:

    def test_sharp_resonance(self):
        plant = SecondOrderPlant(K=1.0, wn=10.0, zeta=0.02)
        w = create_frequency_array()
        corners = find_corner_frequencies(w, frequency_response(plant, w))
        assert 0 < len(corners) <= 5
        assert all(5.0 <= c <= 20.0 for c in corners)

    def test_margins_carry_corners(self):
        plant = SecondOrderPlant(K=1.0, wn=10.0, zeta=0.02)
        m = _margins(plant, create_frequency_array())
        assert len(m.corner_frequencies) <= 5
