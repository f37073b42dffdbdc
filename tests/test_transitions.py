"""Unit tests for the crossing method and straight-to-curve clothoids."""

import numpy as np
import pytest

from restoration import InvalidCurvature, InvalidInput, InvalidRange, MeasurementSeries
from restoration.planline import TransitionKind
from restoration.planline import transitions


def constant(value, start=0.0, end=200.0):
    d = np.arange(start, end + 0.125, 0.25)
    return MeasurementSeries(d, np.full(len(d), value))


class TestTransitionLength:
    def test_equilibrium_cant(self):
        expected = 1067.0**2 / 600.0 / 15.0 / 3.0
        assert transitions.transition_length(600.0, 3.0) == pytest.approx(expected)

    def test_clamped(self):
        assert transitions.transition_length(10000.0, 3.0) == transitions.MIN_TRANSITION_LENGTH
        assert transitions.transition_length(100.0, 1.0) == transitions.MAX_TRANSITION_LENGTH

    def test_invalid_radius(self):
        with pytest.raises(InvalidCurvature):
            transitions.transition_length(0.0)


class TestConnect:
    @pytest.mark.parametrize("kind", [TransitionKind.CUBIC, TransitionKind.SINE])
    def test_blend_between_plans(self, kind):
        joined = transitions.connect(constant(0.0), constant(10.0), 100.0, length=50.0, kind=kind)
        d, v = joined.distance, joined.values

        np.testing.assert_allclose(v[d <= 75.0], 0.0)
        np.testing.assert_allclose(v[d >= 125.0], 10.0)
        assert v[d == 100.0][0] == pytest.approx(5.0)
        assert np.all(np.diff(v) >= 0.0)

    def test_transition_inside_plan(self):
        with pytest.raises(InvalidRange):
            transitions.connect(constant(0.0), constant(1.0), 10.0, length=50.0)

    def test_length_checked(self):
        with pytest.raises(InvalidInput):
            transitions.connect(constant(0.0), constant(1.0), 100.0, length=0.0)

    def test_auto_connect(self):
        joined = transitions.auto_connect([constant(0.0, 0.0, 100.0), constant(4.0, 100.25, 200.0)], length=20.0)

        assert joined.distance[0] == 0.0 and joined.distance[-1] == 200.0
        assert joined.values[0] == 0.0
        assert joined.values[-1] == pytest.approx(4.0)

    def test_auto_connect_needs_plans(self):
        with pytest.raises(InvalidInput):
            transitions.auto_connect([])


class TestStraightToCurve:
    def setup_method(self):
        d = np.arange(0.0, 200.125, 0.25)
        self.plan = MeasurementSeries(d, 0.1 * d)

    def test_entry_leaves_tangent(self):
        out = transitions.straight_to_curve(self.plan, 100.0, radius=600.0, side="entry", cant_gradient=3.0)
        length = transitions.transition_length(600.0, 3.0)
        d = self.plan.distance

        before = d < 100.0 - length
        np.testing.assert_allclose(out.values[before], self.plan.values[before])
        inside = (d > 100.0 - length + 1.0) & (d <= 100.0)
        # bulges the same way as a Circular with sign=+1
        assert np.all(out.values[inside] < self.plan.values[inside])

    @pytest.mark.parametrize("side,joint", [("entry", 100.0), ("exit", 142.0)])
    def test_continuous_where_clothoid_ends(self, side, joint):
        flat = MeasurementSeries(self.plan.distance, np.zeros(len(self.plan)))
        out = transitions.straight_to_curve(flat, 100.0, radius=600.0, side=side, cant_gradient=3.0)
        i = flat.nearest_index(joint)
        v = out.values

        left, right = v[i] - v[i - 1], v[i + 1] - v[i]
        # no step in value, and the slope changes by less than 2 mm/m across the joint
        assert abs(right - left) < 0.5
        assert abs(right - left) / 0.25 < 2.0
        assert abs(v[i]) > 100.0

    def test_blend_returns_to_plan(self):
        out = transitions.straight_to_curve(self.plan, 100.0, radius=600.0, side="entry", cant_gradient=3.0)
        length = transitions.transition_length(600.0, 3.0)
        d = self.plan.distance

        after = d > 100.0 + length
        np.testing.assert_allclose(out.values[after], self.plan.values[after])
        j = int(np.flatnonzero(after)[0])
        assert abs(out.values[j - 1] - self.plan.values[j - 1]) < 0.5

    def test_blend_length_checked(self):
        with pytest.raises(InvalidInput):
            transitions.straight_to_curve(self.plan, 100.0, radius=600.0, blend_length=0.0)

    def test_sign_flips_offset(self):
        up = transitions.straight_to_curve(self.plan, 100.0, radius=600.0, sign=-1)
        down = transitions.straight_to_curve(self.plan, 100.0, radius=600.0, sign=1)
        np.testing.assert_allclose(up.values - self.plan.values, self.plan.values - down.values, atol=1e-9)

    def test_exit_starts_at_connection(self):
        out = transitions.straight_to_curve(self.plan, 100.0, radius=600.0, side="exit", cant_gradient=3.0)
        d = self.plan.distance
        np.testing.assert_allclose(out.values[d <= 100.0], self.plan.values[d <= 100.0], atol=1e-12)

    def test_bad_side(self):
        with pytest.raises(InvalidInput):
            transitions.straight_to_curve(self.plan, 100.0, radius=600.0, side="middle")
