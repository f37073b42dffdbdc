"""
Plan-line geometry: straights, circular curves and transitions joining them.

Distances are in m, values in mm, slopes in mm/m. A transition has no
geometry of its own; it is evaluated from its two neighbours so that value
and slope are continuous at both of its ends.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence, Tuple, Union

import numpy as np

from restoration.core import MeasurementSeries
from restoration.errors import InvalidCurvature, InvalidInput, InvalidRange

# tolerance when checking that segments touch (m)
CONTIGUITY_EPS = 1e-6


class TransitionKind(str, Enum):
    CLOTHOID = "clothoid"
    CUBIC = "cubic"
    SINE = "sine"


def blend_weight(t, kind: TransitionKind):
    """Weight of the far side of a blend at relative position ``t`` in [0, 1]."""
    t = np.clip(t, 0.0, 1.0)
    if kind == TransitionKind.SINE:
        return (1.0 - np.cos(np.pi * t)) / 2.0
    return t * t * (3.0 - 2.0 * t)


def blend_weight_derivative(t, kind: TransitionKind):
    t = np.clip(t, 0.0, 1.0)
    if kind == TransitionKind.SINE:
        return np.pi * np.sin(np.pi * t) / 2.0
    return 6.0 * t * (1.0 - t)


def _check_span(start: float, end: float) -> None:
    if not start < end:
        raise InvalidRange(f"segment start ({start}) must be smaller than end ({end})", "start", start)


@dataclass(frozen=True)
class Straight:
    start: float
    end: float
    start_value: float = 0.0
    end_value: float = 0.0

    def __post_init__(self):
        _check_span(self.start, self.end)

    @property
    def length(self) -> float:
        return self.end - self.start

    @property
    def gradient(self) -> float:
        """Slope in mm/m (per mille)."""
        return (self.end_value - self.start_value) / self.length

    def value_at(self, x):
        return self.start_value + self.gradient * (np.asarray(x, dtype=float) - self.start)

    def slope_at(self, x):
        return np.full_like(np.asarray(x, dtype=float), self.gradient)


@dataclass(frozen=True)
class Circular:
    """
    Circular curve of ``radius`` m on the chord from ``start_value`` to ``end_value``.
    The offset from the chord is ``sign·1000·u(L-u)/(2R)`` mm, ``u`` the distance from start.
    """

    start: float
    end: float
    radius: float
    sign: int = 1
    start_value: float = 0.0
    end_value: float = 0.0

    def __post_init__(self):
        _check_span(self.start, self.end)
        if not self.radius > 0:
            raise InvalidCurvature(f"radius must be positive, got {self.radius}", "radius", self.radius)
        if self.sign not in (1, -1):
            raise InvalidInput(f"sign must be 1 or -1, got {self.sign}", "sign", self.sign)

    @property
    def length(self) -> float:
        return self.end - self.start

    def value_at(self, x):
        u = np.asarray(x, dtype=float) - self.start
        chord = self.start_value + (self.end_value - self.start_value) * u / self.length
        return chord + self.sign * 1000.0 * u * (self.length - u) / (2.0 * self.radius)

    def slope_at(self, x):
        u = np.asarray(x, dtype=float) - self.start
        chord = (self.end_value - self.start_value) / self.length
        return chord + self.sign * 1000.0 * (self.length - 2.0 * u) / (2.0 * self.radius)


@dataclass(frozen=True)
class Transition:
    start: float
    end: float
    kind: TransitionKind = TransitionKind.CLOTHOID

    def __post_init__(self):
        _check_span(self.start, self.end)
        object.__setattr__(self, "kind", TransitionKind(self.kind))

    @property
    def length(self) -> float:
        return self.end - self.start


PlanLineSegment = Union[Straight, Circular, Transition]


def _transition_value(segment: Transition, left, right, x):
    x = np.asarray(x, dtype=float)
    length = segment.length
    t = (x - segment.start) / length

    if segment.kind == TransitionKind.CLOTHOID:
        # cubic Hermite: curvature changes linearly along the transition
        y0, m0 = left.value_at(segment.start), left.slope_at(segment.start)
        y1, m1 = right.value_at(segment.end), right.slope_at(segment.end)
        h00 = 2 * t**3 - 3 * t**2 + 1
        h10 = t**3 - 2 * t**2 + t
        h01 = -2 * t**3 + 3 * t**2
        h11 = t**3 - t**2
        return h00 * y0 + h10 * length * m0 + h01 * y1 + h11 * length * m1

    w = blend_weight(t, segment.kind)
    return (1.0 - w) * left.value_at(x) + w * right.value_at(x)


def _transition_slope(segment: Transition, left, right, x):
    x = np.asarray(x, dtype=float)
    length = segment.length
    t = (x - segment.start) / length

    if segment.kind == TransitionKind.CLOTHOID:
        y0, m0 = left.value_at(segment.start), left.slope_at(segment.start)
        y1, m1 = right.value_at(segment.end), right.slope_at(segment.end)
        d00 = 6 * t**2 - 6 * t
        d10 = 3 * t**2 - 4 * t + 1
        d01 = -6 * t**2 + 6 * t
        d11 = 3 * t**2 - 2 * t
        return (d00 * y0 + d01 * y1) / length + d10 * m0 + d11 * m1

    w = blend_weight(t, segment.kind)
    dw = blend_weight_derivative(t, segment.kind) / length
    y_left, y_right = left.value_at(x), right.value_at(x)
    return (1.0 - w) * left.slope_at(x) + w * right.slope_at(x) + dw * (y_right - y_left)


class SegmentedPlanLine:
    """
    Contiguous sequence of plan-line segments.

    Segments must touch end to start; transitions need a straight or
    curve on both sides.
    """

    def __init__(self, segments: Sequence[PlanLineSegment]):
        segments = tuple(segments)
        if not segments:
            raise InvalidInput("a plan line needs at least one segment", "segments")
        for previous, current in zip(segments, segments[1:]):
            if abs(previous.end - current.start) > CONTIGUITY_EPS:
                raise InvalidRange(
                    f"segments are not contiguous at {previous.end} / {current.start}",
                    "start",
                    current.start,
                )
        for index, segment in enumerate(segments):
            if isinstance(segment, Transition):
                if index == 0 or index == len(segments) - 1:
                    raise InvalidInput("a transition cannot start or end a plan line", "segments", index)
                if isinstance(segments[index + 1], Transition):
                    raise InvalidInput("transitions cannot follow each other", "segments", index)
            elif not isinstance(segment, (Straight, Circular)):
                raise InvalidInput(f"unknown segment type: {type(segment).__name__}", "segments", index)
        self.segments: Tuple[PlanLineSegment, ...] = segments
        self._starts = np.array([s.start for s in segments])

    @property
    def start(self) -> float:
        return self.segments[0].start

    @property
    def end(self) -> float:
        return self.segments[-1].end

    def __len__(self) -> int:
        return len(self.segments)

    def boundaries(self) -> List[Tuple[float, float, str]]:
        return [(s.start, s.end, type(s).__name__) for s in self.segments]

    def _locate(self, x: float) -> int:
        if x < self.start - CONTIGUITY_EPS or x > self.end + CONTIGUITY_EPS:
            raise InvalidRange(f"distance {x} is outside the plan line [{self.start}, {self.end}]", "distance", x)
        return int(np.clip(np.searchsorted(self._starts, x, side="right") - 1, 0, len(self.segments) - 1))

    def _evaluate(self, index: int, x, slope: bool):
        segment = self.segments[index]
        if isinstance(segment, Transition):
            left, right = self.segments[index - 1], self.segments[index + 1]
            func = _transition_slope if slope else _transition_value
            return func(segment, left, right, x)
        return segment.slope_at(x) if slope else segment.value_at(x)

    def value_at(self, x: float) -> float:
        return float(self._evaluate(self._locate(x), x, slope=False))

    def slope_at(self, x: float) -> float:
        return float(self._evaluate(self._locate(x), x, slope=True))

    def evaluate(self, distances) -> np.ndarray:
        """Plan-line values at ``distances`` (all inside the plan line)."""
        distances = np.asarray(distances, dtype=float)
        if len(distances) and (
            distances.min() < self.start - CONTIGUITY_EPS or distances.max() > self.end + CONTIGUITY_EPS
        ):
            raise InvalidRange("distances leave the plan line", "distances")
        index = np.clip(np.searchsorted(self._starts, distances, side="right") - 1, 0, len(self.segments) - 1)
        out = np.empty(len(distances))
        for i in np.unique(index):
            selected = index == i
            out[selected] = self._evaluate(int(i), distances[selected], slope=False)
        return out

    def materialize(self, distances) -> MeasurementSeries:
        distances = np.asarray(distances, dtype=float)
        return MeasurementSeries(distances, self.evaluate(distances))


@dataclass(frozen=True, eq=False)
class PlanLine:
    """Dense plan line plus the segments it was built from (may be empty)."""

    series: MeasurementSeries
    segments: Tuple[PlanLineSegment, ...] = ()

    @property
    def distance(self) -> np.ndarray:
        return self.series.distance

    @property
    def values(self) -> np.ndarray:
        return self.series.values

    def __len__(self) -> int:
        return len(self.series)
