"""
Tests for complex and polynomial algebra.

Covers safe complex division, principal phase, integer powers, Horner
evaluation and the coefficient alignment/formatting helpers.
"""
import math

import numpy as np
import pytest
from numpy.testing import assert_allclose

from ltianalyzer.algebra import (
    align_numerator,
    complex_add,
    complex_divide,
    complex_magnitude,
    complex_multiply,
    complex_phase,
    complex_power,
    complex_subtract,
    evaluate_polynomial,
    format_polynomial,
    trim_leading_zeros,
)


class TestComplex:

    def test_add_subtract_multiply(self):
        a, b = 1 + 2j, 3 - 1j
        assert complex_add(a, b) == 4 + 1j
        assert complex_subtract(a, b) == -2 + 3j
        assert complex_multiply(a, b) == a * b

    def test_divide_matches_builtin(self):
        a, b = 1 + 2j, 3 - 1j
        assert_allclose(complex_divide(a, b), a / b)

    @pytest.mark.parametrize("divisor", [0j, 1e-6 + 0j, 1e-7j])
    def test_divide_by_near_zero_returns_zero(self, divisor):
        assert complex_divide(5 + 5j, divisor) == 0j

    def test_magnitude(self):
        assert complex_magnitude(3 + 4j) == 5.0

    def test_phase_principal_range(self):
        assert complex_phase(1j) == pytest.approx(math.pi / 2)
        assert complex_phase(-1 + 0j) == pytest.approx(math.pi)
        # -pi is folded onto +pi
        assert complex_phase(complex(-1.0, -0.0)) == pytest.approx(math.pi)
        assert complex_phase(-1j) == pytest.approx(-math.pi / 2)

    def test_power(self):
        assert complex_power(2 + 0j, 0) == 1
        assert complex_power(1j, 2) == -1
        assert_allclose(complex_power(1 + 1j, 5), (1 + 1j) ** 5)

    def test_negative_power_rejected(self):
        with pytest.raises(ValueError):
            complex_power(1j, -1)


class TestPolynomial:

    def test_evaluate_at_root(self):
        assert evaluate_polynomial([1, 3, 2], -1) == 0
        assert evaluate_polynomial([1, 3, 2], -2) == 0

    def test_evaluate_complex_point(self):
        coeffs = [2.0, -1.0, 0.5, 4.0]
        s = 0.3 + 1.7j
        assert_allclose(evaluate_polynomial(coeffs, s), np.polyval(coeffs, s))

    def test_evaluate_empty(self):
        assert evaluate_polynomial([], 3.0) == 0j

    def test_trim_leading_zeros(self):
        assert_allclose(trim_leading_zeros([0, 0, 1, 2]), [1, 2])
        assert trim_leading_zeros([0, 0]).size == 0
        assert trim_leading_zeros([]).size == 0

    def test_align_pads_left(self):
        assert_allclose(align_numerator([1], 3), [0, 0, 1])

    def test_align_keeps_lowest_terms(self):
        assert_allclose(align_numerator([1, 2, 3, 4], 3), [2, 3, 4])

    def test_align_same_length(self):
        assert_allclose(align_numerator([5, 6], 2), [5, 6])


class TestFormatPolynomial:

    def test_mixed_signs(self):
        assert format_polynomial([1, -3, 2]) == 's^2 - 3.000s + 2.000'

    def test_negative_leading_and_missing_term(self):
        assert format_polynomial([-1, 0, 4]) == '-s^2 + 4.000'

    def test_zero_polynomial(self):
        assert format_polynomial([0, 0]) == '0'
        assert format_polynomial([]) == '0'

    def test_other_variable(self):
        assert format_polynomial([2, 1], variable='z') == '2.000z + 1.000'
