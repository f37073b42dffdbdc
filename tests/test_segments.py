"""Unit tests for plan-line segments and their continuity."""

import numpy as np
import pytest

from restoration import InvalidCurvature, InvalidInput, InvalidRange
from restoration.planline import Circular, SegmentedPlanLine, Straight, Transition, TransitionKind

EPS = 1e-9


def straight_curve_straight(kind):
    return SegmentedPlanLine(
        [
            Straight(0.0, 40.0, 0.0, 4.0),
            Transition(40.0, 60.0, kind),
            Circular(60.0, 110.0, radius=500.0, sign=1, start_value=6.0, end_value=2.0),
            Transition(110.0, 130.0, kind),
            Straight(130.0, 200.0, 1.0, -6.0),
        ]
    )


class TestSegments:
    def test_straight_gradient_in_mm_per_m(self):
        segment = Straight(10.0, 30.0, 2.0, 6.0)

        assert segment.gradient == pytest.approx(0.2)
        assert segment.value_at(20.0) == pytest.approx(4.0)
        np.testing.assert_allclose(segment.value_at([10.0, 30.0]), [2.0, 6.0])

    def test_circular_offset_from_chord(self):
        segment = Circular(0.0, 20.0, radius=1000.0)
        # 1000 * 10 * 10 / (2 * 1000) mm at mid-chord
        assert segment.value_at(10.0) == pytest.approx(50.0)
        assert segment.slope_at(10.0) == pytest.approx(0.0)
        assert segment.value_at(0.0) == segment.value_at(20.0) == 0.0

    def test_circular_sign(self):
        up = Circular(0.0, 20.0, radius=1000.0, sign=1)
        down = Circular(0.0, 20.0, radius=1000.0, sign=-1)
        assert down.value_at(5.0) == pytest.approx(-up.value_at(5.0))

    @pytest.mark.parametrize("radius", [0.0, -250.0])
    def test_non_positive_radius(self, radius):
        with pytest.raises(InvalidCurvature) as exc:
            Circular(0.0, 10.0, radius=radius)
        assert exc.value.parameter == "radius"

    def test_bad_sign(self):
        with pytest.raises(InvalidInput):
            Circular(0.0, 10.0, radius=300.0, sign=2)

    def test_inverted_span(self):
        with pytest.raises(InvalidRange):
            Straight(10.0, 5.0)

    def test_transition_kind_from_string(self):
        assert Transition(0.0, 1.0, "sine").kind is TransitionKind.SINE


class TestSegmentedPlanLine:
    @pytest.mark.parametrize("kind", list(TransitionKind))
    def test_value_and_slope_continuous(self, kind):
        plan = straight_curve_straight(kind)

        for _, boundary, _ in plan.boundaries()[:-1]:
            assert plan.value_at(boundary - EPS) == pytest.approx(plan.value_at(boundary + EPS), abs=1e-6)
            assert plan.slope_at(boundary - EPS) == pytest.approx(plan.slope_at(boundary + EPS), abs=1e-6)

    @pytest.mark.parametrize("kind", list(TransitionKind))
    def test_transition_ends_match_neighbours(self, kind):
        plan = straight_curve_straight(kind)
        straight, curve = plan.segments[0], plan.segments[2]

        assert plan.value_at(40.0 + EPS) == pytest.approx(float(straight.value_at(40.0)), abs=1e-6)
        assert plan.value_at(60.0 - EPS) == pytest.approx(float(curve.value_at(60.0)), abs=1e-6)

    def test_evaluate_matches_value_at(self):
        plan = straight_curve_straight(TransitionKind.CLOTHOID)
        distances = np.linspace(0.0, 200.0, 81)

        expected = [plan.value_at(x) for x in distances]
        np.testing.assert_allclose(plan.evaluate(distances), expected, atol=1e-12)

    def test_materialize(self):
        plan = SegmentedPlanLine([Straight(0.0, 10.0, 0.0, 10.0)])
        series = plan.materialize(np.arange(11.0))
        np.testing.assert_allclose(series.values, np.arange(11.0))

    def test_outside_range(self):
        plan = SegmentedPlanLine([Straight(0.0, 10.0)])
        with pytest.raises(InvalidRange):
            plan.value_at(10.5)
        with pytest.raises(InvalidRange):
            plan.evaluate([-1.0, 5.0])

    def test_gap_rejected(self):
        with pytest.raises(InvalidRange):
            SegmentedPlanLine([Straight(0.0, 10.0), Straight(10.5, 20.0)])

    @pytest.mark.parametrize(
        "segments",
        [
            [Transition(0.0, 10.0), Straight(10.0, 20.0)],
            [Straight(0.0, 10.0), Transition(10.0, 20.0)],
            [Straight(0.0, 10.0), Transition(10.0, 20.0), Transition(20.0, 30.0), Straight(30.0, 40.0)],
        ],
    )
    def test_transition_needs_neighbours(self, segments):
        with pytest.raises(InvalidInput):
            SegmentedPlanLine(segments)

    def test_empty_rejected(self):
        with pytest.raises(InvalidInput):
            SegmentedPlanLine([])
