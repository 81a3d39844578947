"""
Tests for the response curve library.
"""
import math

import numpy as np
import pytest

from behavior_engine import ConstructionError
from behavior_engine.curves import (
    binary,
    exponential,
    identity,
    inverted,
    linear,
    linear_map,
    monotone,
    power,
    sample_curve,
    step_after,
    step_before,
)


STEP_POINTS = [(0.0, 0.0), (0.5, 0.3), (1.0, 1.0)]


class TestLinear:
    """Test piecewise-linear curves."""

    def test_midpoint_of_unit_line(self):
        curve = linear([(0, 0), (1, 1)])
        assert curve(0.5) == 0.5

    def test_clamps_to_end_points(self):
        curve = linear([(0.2, 0.1), (0.8, 0.9)])
        assert curve(-3.0) == 0.1
        assert curve(0.2) == 0.1
        assert curve(0.8) == 0.9
        assert curve(5.0) == 0.9

    def test_interpolates_inside_segment(self):
        curve = linear([(0, 0), (0.5, 1), (1, 0)])
        assert curve(0.25) == pytest.approx(0.5)
        assert curve(0.75) == pytest.approx(0.5)
        assert curve(0.5) == 1.0

    def test_points_are_sorted(self):
        curve = linear([(1, 1), (0, 0)])
        assert curve(0.25) == pytest.approx(0.25)


class TestStepCurves:
    """Test step_before and step_after."""

    def test_step_before_takes_right_point(self):
        curve = step_before(STEP_POINTS)
        assert curve(0.25) == 0.3
        assert curve(0.75) == 1.0

    def test_step_before_at_boundaries(self):
        curve = step_before(STEP_POINTS)
        assert curve(0.0) == 0.0
        assert curve(0.5) == 0.3
        assert curve(1.0) == 1.0

    def test_step_after_takes_left_point(self):
        curve = step_after(STEP_POINTS)
        assert curve(0.25) == 0.0
        assert curve(0.75) == 0.3

    def test_step_after_at_boundaries(self):
        curve = step_after(STEP_POINTS)
        assert curve(0.0) == 0.0
        # the step happens just after an interior point
        assert curve(0.5) == 0.0
        assert curve(1.0) == 1.0

    def test_never_interpolates(self):
        for factory in (step_before, step_after):
            curve = factory(STEP_POINTS)
            for x in np.linspace(0, 1, 41):
                assert curve(float(x)) in (0.0, 0.3, 1.0)


class TestMonotone:
    """Test the monotone cubic spline."""

    POINTS = [(0.0, 0.0), (0.2, 0.1), (0.5, 0.6), (0.8, 0.7), (1.0, 1.0)]

    def test_passes_through_knots(self):
        curve = monotone(self.POINTS)
        for x, y in self.POINTS:
            assert curve(x) == y

    def test_increasing_points_give_increasing_curve(self):
        curve = monotone(self.POINTS)
        _, ys = sample_curve(curve, 0.0, 1.0, 501)
        assert np.all(np.diff(ys) >= -1e-12)

    def test_no_overshoot_at_plateau(self):
        curve = monotone([(0, 0), (0.4, 1), (0.6, 1), (1, 0)])
        _, ys = sample_curve(curve, 0.0, 1.0, 501)
        assert ys.max() <= 1.0 + 1e-12
        assert ys.min() >= -1e-12
        # flat segment stays flat
        assert curve(0.5) == pytest.approx(1.0)

    def test_two_points_is_a_line(self):
        curve = monotone([(0, 0), (1, 2)])
        assert curve(0.25) == pytest.approx(0.5)
        assert curve(0.5) == pytest.approx(1.0)

    def test_outside_range_returns_end_points(self):
        curve = monotone(self.POINTS)
        assert curve(-1.0) == 0.0
        assert curve(2.0) == 1.0


class TestConstructionErrors:
    """Degenerate control points must fail immediately."""

    @pytest.mark.parametrize("factory", [linear, step_before, step_after, monotone])
    def test_fewer_than_two_points(self, factory):
        with pytest.raises(ConstructionError):
            factory([(0.5, 0.5)])
        with pytest.raises(ConstructionError):
            factory([])

    @pytest.mark.parametrize("factory", [linear, monotone])
    def test_duplicate_x(self, factory):
        with pytest.raises(ConstructionError):
            factory([(0, 0), (0.5, 0.2), (0.5, 0.8), (1, 1)])

    def test_malformed_point(self):
        with pytest.raises(ConstructionError):
            linear([(0, 0), ("a", 1)])

    def test_bad_parametric_parameters(self):
        with pytest.raises(ConstructionError):
            exponential(1.0)
        with pytest.raises(ConstructionError):
            exponential(-2.0)
        with pytest.raises(ConstructionError):
            power(-1.0)

    def test_construction_error_is_value_error(self):
        with pytest.raises(ValueError):
            linear([(0, 0)])


class TestParametric:
    """Test the parametric shapes."""

    def test_identity_and_inverted(self):
        assert identity()(0.3) == 0.3
        assert inverted()(0.25) == 0.75

    def test_linear_map_clips(self):
        curve = linear_map(2.0, -0.5)
        assert curve(0.5) == pytest.approx(0.5)
        assert curve(0.9) == 1.0
        assert curve(0.1) == 0.0

    def test_power(self):
        assert power(2)(0.5) == 0.25
        assert power(0.5)(0.25) == 0.5
        # input outside [0, 1] is clipped first
        assert power(0.5)(-1.0) == 0.0

    def test_exponential_maps_unit_interval(self):
        curve = exponential(2.0)
        assert curve(0.0) == 0.0
        assert curve(1.0) == 1.0
        assert curve(0.5) == pytest.approx(math.sqrt(2) - 1)

    def test_binary(self):
        curve = binary(0.5)
        assert curve(0.5) == 1.0
        assert curve(0.49) == 0.0


class TestSampleCurve:

    def test_sample_shape(self):
        xs, ys = sample_curve(identity(), 0.0, 1.0, 11)
        assert xs.shape == (11,)
        assert np.allclose(xs, ys)

    def test_needs_two_samples(self):
        with pytest.raises(ConstructionError):
            sample_curve(identity(), num=1)
