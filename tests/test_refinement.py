"""Unit tests for plan-line refinement."""

import numpy as np
import pytest

from restoration import InvalidInput, MeasurementSeries
from restoration.planline import refinement


def ramp_with_spike():
    d = np.arange(401) * 0.25
    values = 0.2 * d
    values[210] += 30.0
    return MeasurementSeries(d, values)


class TestSplineInterpolate:
    @pytest.mark.parametrize("method", ["cubic", "linear"])
    def test_redraws_through_controls(self, method):
        plan = ramp_with_spike()
        out = refinement.spline_interpolate(plan, [10.0, 40.0, 60.0, 90.0], method=method)

        inside = (plan.distance >= 10.0) & (plan.distance <= 90.0)
        np.testing.assert_allclose(out.values[inside], 0.2 * plan.distance[inside], atol=1e-9)
        np.testing.assert_array_equal(out.values[~inside], plan.values[~inside])

    def test_needs_two_controls(self):
        with pytest.raises(InvalidInput):
            refinement.spline_interpolate(ramp_with_spike(), [50.0, 50.0])

    def test_controls_inside(self):
        with pytest.raises(InvalidInput):
            refinement.spline_interpolate(ramp_with_spike(), [0.0, 150.0])

    def test_unknown_method(self):
        with pytest.raises(InvalidInput):
            refinement.spline_interpolate(ramp_with_spike(), [0.0, 50.0], method="akima")


class TestOutliers:
    def test_global_threshold(self):
        values = np.zeros(200)
        values[50] = 100.0
        plan = MeasurementSeries.from_values(values, 0.25)

        cleaned, indices = refinement.remove_outliers(plan, threshold=3.0)
        assert indices == [50]
        assert cleaned.values[50] == pytest.approx(0.5)

    def test_local_window(self):
        values = np.zeros(200)
        values[120] = 1000.0
        plan = MeasurementSeries.from_values(values, 0.25)

        cleaned, indices = refinement.remove_outliers(plan, threshold=3.0, window=11)
        assert indices == [120]
        assert cleaned.values[120] == 0.0

    def test_threshold_checked(self):
        with pytest.raises(InvalidInput):
            refinement.remove_outliers(ramp_with_spike(), threshold=0.0)


class TestSmoothing:
    def test_gaussian_smooth_reduces_spike(self):
        plan = ramp_with_spike()
        out = refinement.gaussian_smooth(plan, sigma=3.0)
        assert out.values[210] < plan.values[210] - 20.0

    def test_iterative_smooth_keeps_ends(self):
        plan = ramp_with_spike()
        out = refinement.iterative_smooth(plan, iterations=50, factor=0.5)

        assert out.values[0] == plan.values[0]
        assert out.values[-1] == plan.values[-1]
        assert out.values[210] < plan.values[210]

    def test_iterative_smooth_leaves_straight_line(self):
        plan = MeasurementSeries.from_values(np.arange(50) * 0.5, 1.0)
        out = refinement.iterative_smooth(plan)
        np.testing.assert_allclose(out.values, plan.values, atol=1e-12)

    def test_iterative_factor_checked(self):
        with pytest.raises(InvalidInput):
            refinement.iterative_smooth(ramp_with_spike(), factor=1.5)

    def test_selective_smooth(self):
        plan = ramp_with_spike()
        mask = np.zeros(len(plan), dtype=bool)
        mask[200:220] = True

        out = refinement.selective_smooth(plan, mask, window_size=9)
        assert out.values[210] < plan.values[210]
        np.testing.assert_array_equal(out.values[~mask], plan.values[~mask])

    def test_rms_error(self):
        plan = ramp_with_spike()
        shifted = plan.with_values(plan.values + 2.0)
        assert refinement.rms_error(plan, shifted) == pytest.approx(2.0)
