"""
Plan-line editing session.

The editor holds the current :class:`PlanLine` and an undo/redo history.
Every mutating operation records the state before the edit, so undo and
redo restore exact previous states (states are immutable).
"""

from typing import Callable, Optional

import numpy as np
from loguru import logger

from restoration.config import settings
from restoration.core import DISTANCE_EPS, MeasurementSeries
from restoration.errors import InvalidCurvature, InvalidInput, InvalidRange
from restoration.planline.history import EditHistory
from restoration.planline.segments import (
    Circular,
    PlanLine,
    SegmentedPlanLine,
    Straight,
    Transition,
    TransitionKind,
)
from restoration.smoothing import moving_average


def _annotate(segments, new_segments, start, end):
    """Replace annotations overlapping [start, end] with the new segments."""
    kept = [s for s in segments if s.end <= start + DISTANCE_EPS or s.start >= end - DISTANCE_EPS]
    return tuple(sorted(kept + list(new_segments), key=lambda s: s.start))


class PlanLineEditor:
    """
    Interactive plan-line editing with constraint warnings.

    :param history_limit: undo depth, defaults to ``settings.HISTORY_LIMIT``
    :param max_gradient: gradient (mm/m) above which a warning is logged
    :param min_radius: radius (m) below which a warning is logged
    """

    def __init__(
        self,
        history_limit: Optional[int] = None,
        max_gradient: Optional[float] = None,
        min_radius: Optional[float] = None,
    ):
        self.history = EditHistory(settings.HISTORY_LIMIT if history_limit is None else history_limit)
        self.max_gradient = settings.MAX_GRADIENT if max_gradient is None else max_gradient
        self.min_radius = settings.MIN_CURVE_RADIUS if min_radius is None else min_radius
        self._plan: Optional[PlanLine] = None

    # ------------------------------------------------------------------
    # state
    # ------------------------------------------------------------------
    @property
    def plan(self) -> PlanLine:
        if self._plan is None:
            raise InvalidInput("no plan line yet, call generate_initial or load first", "plan")
        return self._plan

    @property
    def has_plan(self) -> bool:
        return self._plan is not None

    def _commit(self, plan: PlanLine, label: str) -> PlanLine:
        if self._plan is not None:
            self.history.push(self._plan, label)
        self._plan = plan
        logger.debug(f"Plan line edit: {label}")
        return plan

    def _replace(self, i0: int, i1: int, values, new_segments, label: str) -> PlanLine:
        current = self.plan
        updated = np.array(current.values)
        updated[i0 : i1 + 1] = values
        segments = _annotate(current.segments, new_segments, current.distance[i0], current.distance[i1])
        return self._commit(PlanLine(current.series.with_values(updated), segments), label)

    def load(self, plan, label: str = "load") -> PlanLine:
        """Start from an existing plan line (PlanLine or MeasurementSeries)."""
        if isinstance(plan, MeasurementSeries):
            plan = PlanLine(plan)
        return self._commit(plan, label)

    def generate_initial(self, restored: MeasurementSeries, window_size: Optional[int] = None) -> PlanLine:
        """Centred moving average of the restored waveform (truncated at the edges)."""
        window_size = window_size or settings.PLAN_WINDOW
        values = moving_average(restored.values, window_size)
        plan = PlanLine(MeasurementSeries(restored.distance, values))
        return self._commit(plan, f"initial({window_size})")

    # ------------------------------------------------------------------
    # edits
    # ------------------------------------------------------------------
    def set_straight(
        self,
        start: float,
        end: float,
        start_value: Optional[float] = None,
        end_value: Optional[float] = None,
    ) -> PlanLine:
        """Straight line between the samples bounding ``[start, end]``."""
        series = self.plan.series
        i0, i1 = series.index_range(start, end)
        d = series.distance
        segment = Straight(
            float(d[i0]),
            float(d[i1]),
            float(series.values[i0]) if start_value is None else start_value,
            float(series.values[i1]) if end_value is None else end_value,
        )
        if abs(segment.gradient) > self.max_gradient:
            logger.warning(
                f"Gradient {abs(segment.gradient):.2f} mm/m on [{segment.start}, {segment.end}] "
                f"exceeds the maximum {self.max_gradient}"
            )
        return self._replace(i0, i1, segment.value_at(d[i0 : i1 + 1]), [segment], f"straight({start}, {end})")

    def set_circular(self, start: float, end: float, radius: float, sign: int = 1) -> PlanLine:
        """Circular curve on the chord between the current values at both ends."""
        if not radius > 0:
            raise InvalidCurvature(f"radius must be positive, got {radius}", "radius", radius)
        series = self.plan.series
        i0, i1 = series.index_range(start, end)
        d = series.distance
        segment = Circular(
            float(d[i0]),
            float(d[i1]),
            radius,
            sign,
            float(series.values[i0]),
            float(series.values[i1]),
        )
        if radius < self.min_radius:
            logger.warning(f"Radius {radius} m is below the minimum {self.min_radius} m")
        return self._replace(i0, i1, segment.value_at(d[i0 : i1 + 1]), [segment], f"circular({start}, {end}, R={radius})")

    def set_transition(self, start: float, end: float, kind: TransitionKind = TransitionKind.CLOTHOID) -> PlanLine:
        """
        Transition joining the plan line on both sides of ``[start, end]``.
        The neighbours are taken as the tangents through the adjacent samples,
        so value and slope stay continuous at both ends.
        """
        series = self.plan.series
        i0, i1 = series.index_range(start, end)
        if i0 < 1 or i1 > len(series) - 2:
            raise InvalidRange("a transition needs at least one sample on each side", "start", start)
        d, v = series.distance, series.values
        left = Straight(float(d[i0 - 1]), float(d[i0]), float(v[i0 - 1]), float(v[i0]))
        right = Straight(float(d[i1]), float(d[i1 + 1]), float(v[i1]), float(v[i1 + 1]))
        transition = Transition(float(d[i0]), float(d[i1]), TransitionKind(kind))
        line = SegmentedPlanLine([left, transition, right])
        values = line.evaluate(d[i0 : i1 + 1])
        return self._replace(i0, i1, values, [transition], f"transition({start}, {end}, {transition.kind.value})")

    def edit_point(self, distance: float, value: float) -> PlanLine:
        """Set the sample nearest to ``distance``."""
        series = self.plan.series
        half_step = series.interval / 2.0
        if distance < series.distance[0] - half_step or distance > series.distance[-1] + half_step:
            raise InvalidRange(f"distance {distance} is outside the plan line", "distance", distance)
        i = series.nearest_index(distance)
        current = self.plan
        updated = np.array(current.values)
        updated[i] = value
        return self._commit(PlanLine(current.series.with_values(updated), current.segments), f"point({distance})")

    def smooth_section(self, start: float, end: float, window_size: int = 100) -> PlanLine:
        """Moving average inside ``[start, end]``; windows may read samples outside it."""
        series = self.plan.series
        i0, i1 = series.index_range(start, end)
        smoothed = moving_average(series.values, window_size)
        return self._replace(i0, i1, smoothed[i0 : i1 + 1], [], f"smooth({start}, {end})")

    def apply(self, segmented: SegmentedPlanLine, label: str = "segments") -> PlanLine:
        """Overwrite the samples covered by ``segmented`` with its geometry."""
        series = self.plan.series
        i0, i1 = series.index_range(segmented.start, segmented.end)
        d = series.distance
        for segment in segmented.segments:
            if isinstance(segment, Circular) and segment.radius < self.min_radius:
                logger.warning(f"Radius {segment.radius} m is below the minimum {self.min_radius} m")
            if isinstance(segment, Straight) and abs(segment.gradient) > self.max_gradient:
                logger.warning(f"Gradient {abs(segment.gradient):.2f} mm/m exceeds the maximum {self.max_gradient}")
        return self._replace(i0, i1, segmented.evaluate(d[i0 : i1 + 1]), list(segmented.segments), label)

    def refine(self, func: Callable[..., MeasurementSeries], *args, label: Optional[str] = None, **kwargs) -> PlanLine:
        """
        Replace the plan with ``func(plan_series, *args, **kwargs)``, e.g. a
        function from :mod:`restoration.planline.refinement`.
        """
        refined = func(self.plan.series, *args, **kwargs)
        if not isinstance(refined, MeasurementSeries) or len(refined) != len(self.plan):
            raise InvalidInput("refinement must return a series of the same length", "func")
        label = label or getattr(func, "__name__", "refine")
        return self._commit(PlanLine(refined, self.plan.segments), label)

    # ------------------------------------------------------------------
    # history
    # ------------------------------------------------------------------
    def undo(self) -> bool:
        previous = self.history.undo(self._plan)
        if previous is None:
            return False
        self._plan = previous
        return True

    def redo(self) -> bool:
        following = self.history.redo(self._plan)
        if following is None:
            return False
        self._plan = following
        return True

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def segmented(self) -> Optional[SegmentedPlanLine]:
        """Annotated segments as a SegmentedPlanLine, None when they do not form one."""
        segments = self.plan.segments
        try:
            return SegmentedPlanLine(segments) if segments else None
        except (InvalidRange, InvalidInput):
            return None
