import math

import pytest

from fractalimage.complex_number import ComplexNumber
from fractalimage.escape import IN_SET, escape_count, evaluate, orbit, smooth_escape_count


@pytest.mark.parametrize("max_iterations", [1, 10, 1000])
def test_origin_never_escapes(max_iterations):
    c = ComplexNumber(0.0, 0.0)
    assert escape_count(c, max_iterations) is IN_SET
    assert smooth_escape_count(c, max_iterations) is IN_SET


def test_known_escape_index():
    # 0.5 -> 0.75 -> 1.0625 -> 1.6289 -> 3.1533: escapes on loop index 4
    c = ComplexNumber(0.5, 0.0)
    assert escape_count(c, 100) == 4
    assert smooth_escape_count(c, 100) == pytest.approx(4.2715, abs=1e-3)


def test_escape_outside_budget_is_in_set():
    assert escape_count(ComplexNumber(0.5, 0.0), 4) is IN_SET


def test_boundary_modulus_equal_to_bailout_has_not_escaped():
    # c = -2 sits at |z| == 2 forever.
    assert escape_count(ComplexNumber(-2.0, 0.0), 500) is IN_SET
    # c = 2 reaches |z| == 2 first, then 6.
    assert escape_count(ComplexNumber(2.0, 0.0), 500) == 1


def test_orbit_reports_escape_modulus():
    index, modulus = orbit(ComplexNumber(-2.1, 0.0), 10)
    assert index == 0
    assert modulus == pytest.approx(2.1)


@pytest.mark.parametrize("c", [
    ComplexNumber(0.5, 0.0),
    ComplexNumber(-2.1, 0.0),
    ComplexNumber(0.0, 1.5),
    ComplexNumber(1.0, 1.0),
])
def test_discrete_is_floor_of_continuous(c):
    discrete = escape_count(c, 200)
    smooth = smooth_escape_count(c, 200)
    assert discrete is not None
    assert math.floor(smooth) == discrete


def test_smooth_count_is_fractional():
    smooth = smooth_escape_count(ComplexNumber(-2.1, 0.0), 10)
    assert 0.0 < smooth < 1.0


def test_evaluate_dispatch():
    c = ComplexNumber(0.5, 0.0)
    assert evaluate(c, 100, continuous=False) == 4.0
    assert evaluate(c, 100, continuous=True) == smooth_escape_count(c, 100)
    assert evaluate(ComplexNumber(-0.1, 0.1), 100, continuous=True) is IN_SET


def test_large_first_step_escape_floors_below_discrete():
    # An escape modulus above 4 drives the smoothing term below -1.
    c = ComplexNumber(5.0, 0.0)
    assert escape_count(c, 10) == 0
    smooth = smooth_escape_count(c, 10)
    assert smooth == pytest.approx(-0.2153, abs=1e-3)
    assert math.floor(smooth) == -1


def test_huge_modulus_does_not_overflow():
    smooth = smooth_escape_count(ComplexNumber(1e200, 1e200), 10)
    assert math.isfinite(smooth)
    assert smooth < 0


def test_infinite_escape_modulus_smooths_to_negative_infinity():
    c = ComplexNumber(1.7e308, 1.7e308)
    assert escape_count(c, 10) == 0
    assert smooth_escape_count(c, 10) == -math.inf
