"""
Tests for response characteristics extracted from sampled responses.
"""
import math

import numpy as np
import pytest

from ltianalyzer import FirstOrderPlant, SecondOrderPlant
from ltianalyzer.characteristics import METRICS, ResponseCharacteristics, response_characteristics
from ltianalyzer.time_response import create_time_array, time_response


def _characteristics(plant, input_type, t=None):
    t = create_time_array() if t is None else t
    return response_characteristics(t, time_response(plant, input_type, t), input_type)


class TestStep:

    def test_first_order(self, first_order):
        c = _characteristics(first_order, 'step')
        assert c.delay_time == pytest.approx(math.log(2), abs=0.05)
        assert c.rise_time == pytest.approx(math.log(9), abs=0.1)
        assert c.settling_time == pytest.approx(math.log(50), abs=0.1)
        assert c.overshoot == 0.0
        assert c.peak_time is None
        assert c.steady_state_value == pytest.approx(1.0, abs=1e-6)
        assert c.steady_state_error == pytest.approx(0.0, abs=1e-6)

    def test_underdamped_overshoot(self, underdamped):
        c = _characteristics(underdamped, 'step')
        # 100 * exp(-pi*zeta / sqrt(1 - zeta^2)) = 16.3 %
        assert 15.0 < c.overshoot < 17.5
        assert c.peak_time == pytest.approx(math.pi / math.sqrt(3), abs=0.05)
        assert c.settling_time is not None and math.isfinite(c.settling_time)
        assert c.settling_time > c.peak_time

    def test_overdamped_has_no_overshoot(self, overdamped):
        c = _characteristics(overdamped, 'step')
        assert c.overshoot == 0.0
        assert c.peak_time is None
        assert c.rise_time > 0

    def test_negative_gain_normalised(self):
        positive = _characteristics(FirstOrderPlant(K=1.0, tau=1.0), 'step')
        negative = _characteristics(FirstOrderPlant(K=-2.0, tau=1.0), 'step')
        assert negative.delay_time == positive.delay_time
        assert negative.rise_time == positive.rise_time
        assert negative.steady_state_value == pytest.approx(-2.0, abs=1e-6)

    def test_flat_response(self):
        t = create_time_array(2.0, 0.1)
        c = response_characteristics(t, np.zeros_like(t), 'step')
        assert c.delay_time is None
        assert c.rise_time is None
        assert c.settling_time is None
        assert c.steady_state_error == 1.0

    def test_already_settled(self):
        t = create_time_array(2.0, 0.1)
        c = response_characteristics(t, np.ones_like(t), 'step')
        assert c.settling_time == 0.0
        assert c.delay_time == 0.0


class TestOtherInputs:

    def test_ramp_steady_state_error(self, underdamped):
        c = _characteristics(underdamped, 'ramp')
        assert c.steady_state_error == pytest.approx(0.0, abs=1e-3)
        assert not c.is_applicable('rise_time')
        assert c.is_applicable('steady_state_error')

    def test_ramp_gain_changes_slope(self):
        c = _characteristics(FirstOrderPlant(K=2.0, tau=1.0), 'ramp')
        assert c.steady_state_error == pytest.approx(-1.0, abs=1e-3)

    def test_parabolic_steady_state_error(self, underdamped):
        c = _characteristics(underdamped, 'parabolic')
        assert c.steady_state_error == pytest.approx(0.0, abs=1e-3)
        assert not c.is_applicable('overshoot')

    def test_impulse_peak_time(self, first_order, underdamped):
        assert _characteristics(first_order, 'impulse').peak_time == 0.0
        c = _characteristics(underdamped, 'impulse')
        # atan(sqrt(1 - zeta^2) / zeta) / wd
        assert c.peak_time == pytest.approx(math.atan(math.sqrt(3)) / math.sqrt(3), abs=0.05)
        assert c.is_applicable('peak_time')
        assert not c.is_applicable('settling_time')

    def test_sinusoid_has_no_metrics(self, underdamped):
        c = _characteristics(underdamped, 'sinusoidal')
        assert all(not c.is_applicable(name) for name in METRICS)
        assert c.overshoot is None


class TestErrors:

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            response_characteristics([0.0, 1.0], [0.0], 'step')

    def test_unknown_input(self):
        with pytest.raises(ValueError):
            response_characteristics([0.0, 1.0], [0.0, 1.0], 'triangle')

    def test_empty_response(self):
        assert response_characteristics([], [], 'step') == ResponseCharacteristics()

    def test_unknown_metric(self):
        with pytest.raises(ValueError):
            ResponseCharacteristics().is_applicable('bandwidth')
