"""
Core data structures for track geometry restoration.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional, Tuple

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from restoration.errors import InvalidInput, InvalidRange

# tolerance used when matching a distance to a sample position (m)
DISTANCE_EPS = 1e-9


def _readonly(data: Any, dtype=float) -> np.ndarray:
    arr = np.array(data, dtype=dtype)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class MeasurementPoint:
    distance: float  # m
    value: float  # mm


@dataclass(frozen=True, eq=False)
class MeasurementSeries:
    """
    Ordered irregularity samples. Arrays are copied and made read-only on
    construction; every transform returns a new series.
    """

    distance: np.ndarray  # m, strictly increasing
    values: np.ndarray  # mm
    low_confidence: Optional[np.ndarray] = None  # samples computed from zero-padded data

    def __post_init__(self):
        distance = _readonly(self.distance)
        values = _readonly(self.values)
        if distance.ndim != 1 or values.ndim != 1:
            raise InvalidInput("distance and values must be one-dimensional", "values", values.shape)
        if len(distance) != len(values):
            raise InvalidInput(
                f"distance ({len(distance)}) and values ({len(values)}) differ in length",
                "values",
                len(values),
            )
        if len(distance) > 1 and np.any(np.diff(distance) <= 0):
            raise InvalidInput("distance must be strictly increasing", "distance")
        object.__setattr__(self, "distance", distance)
        object.__setattr__(self, "values", values)

        if self.low_confidence is not None:
            flags = _readonly(self.low_confidence, dtype=bool)
            if flags.shape != values.shape:
                raise InvalidInput("low_confidence must match values", "low_confidence", flags.shape)
            object.__setattr__(self, "low_confidence", flags)

    @classmethod
    def from_points(cls, points: Iterable[Any]) -> "MeasurementSeries":
        """Build from MeasurementPoints, ``(distance, value)`` pairs or dicts."""
        distance, values = [], []
        for point in points:
            if isinstance(point, MeasurementPoint):
                d, v = point.distance, point.value
            elif isinstance(point, dict):
                d, v = point["distance"], point["value"]
            else:
                d, v = point
            distance.append(float(d))
            values.append(float(v))
        return cls(np.asarray(distance), np.asarray(values))

    @classmethod
    def from_values(cls, values: Iterable[float], interval: float, start: float = 0.0) -> "MeasurementSeries":
        if interval <= 0:
            raise InvalidInput("interval must be positive", "interval", interval)
        values = np.asarray(values, dtype=float)
        return cls(start + np.arange(len(values)) * interval, values)

    def to_points(self) -> List[MeasurementPoint]:
        return [MeasurementPoint(float(d), float(v)) for d, v in zip(self.distance, self.values)]

    def __len__(self) -> int:
        return len(self.values)

    @property
    def interval(self) -> float:
        """Median sample spacing (m); 0 for fewer than two samples."""
        if len(self.distance) < 2:
            return 0.0
        return float(np.median(np.diff(self.distance)))

    @property
    def confidence_mask(self) -> np.ndarray:
        """Boolean mask of low-confidence samples (all False when not flagged)."""
        if self.low_confidence is None:
            return np.zeros(len(self), dtype=bool)
        return self.low_confidence

    def is_uniform(self, tolerance: float = 1e-6) -> bool:
        """True when every spacing equals the median spacing within a relative tolerance."""
        if len(self.distance) < 3:
            return True
        step = self.interval
        return bool(np.all(np.abs(np.diff(self.distance) - step) <= tolerance * step))

    def with_values(self, values: Iterable[float], low_confidence: Optional[np.ndarray] = None) -> "MeasurementSeries":
        """New series on the same distance grid."""
        return MeasurementSeries(self.distance, np.asarray(values, dtype=float), low_confidence)

    def index_range(self, start: float, end: float) -> Tuple[int, int]:
        """
        Inclusive index bounds of the samples inside ``[start, end]``.

        Raises InvalidRange when the range is inverted, leaves the series,
        or holds fewer than two samples.
        """
        if start >= end:
            raise InvalidRange(f"start ({start}) must be smaller than end ({end})", "start", start)
        if len(self) == 0 or start < self.distance[0] - DISTANCE_EPS or end > self.distance[-1] + DISTANCE_EPS:
            raise InvalidRange(f"range [{start}, {end}] is outside the series", "end", end)
        i0 = int(np.searchsorted(self.distance, start - DISTANCE_EPS, side="left"))
        i1 = int(np.searchsorted(self.distance, end + DISTANCE_EPS, side="right")) - 1
        if i1 <= i0:
            raise InvalidRange(f"range [{start}, {end}] holds fewer than two samples", "end", end)
        return i0, i1

    def nearest_index(self, distance: float) -> int:
        if len(self) == 0:
            raise InvalidInput("series is empty", "series")
        return int(np.argmin(np.abs(self.distance - distance)))


@dataclass(frozen=True)
class ChordConfig:
    """Chord geometry: forward length ``p`` and backward length ``q`` (m)."""

    p: float
    q: float

    def __post_init__(self):
        if not (self.p > 0 and self.q > 0):
            raise InvalidInput(f"chord lengths must be positive (p={self.p}, q={self.q})", "p", (self.p, self.q))

    @classmethod
    def symmetric(cls, chord_length: float) -> "ChordConfig":
        return cls(chord_length / 2.0, chord_length / 2.0)

    @classmethod
    def parse(cls, label: str) -> "ChordConfig":
        """``"10m"`` -> symmetric 10 m chord."""
        text = label.strip().lower()
        if text.endswith("m"):
            text = text[:-1]
        try:
            length = float(text)
        except ValueError as e:
            raise InvalidInput(f"unknown chord label: {label}", "chord", label) from e
        return cls.symmetric(length)

    @property
    def is_symmetric(self) -> bool:
        return math.isclose(self.p, self.q)

    @property
    def length(self) -> float:
        return self.p + self.q

    @property
    def label(self) -> str:
        if self.is_symmetric:
            return f"{self.length:g}m"
        return f"p={self.p:g},q={self.q:g}"

    def offsets(self, interval: float) -> Tuple[int, int]:
        """Sample offsets ``(backward, forward)`` = ``(q/Δ, p/Δ)`` rounded."""
        if interval <= 0:
            raise InvalidInput("interval must be positive", "interval", interval)
        return int(round(self.q / interval)), int(round(self.p / interval))


class WindowKind(str, Enum):
    HAMMING = "hamming"
    HANNING = "hanning"
    BLACKMAN = "blackman"
    RECTANGULAR = "rectangular"


class FilterParameters(BaseModel):
    """
    Restoration band definition.
    Field constraints are checked here; the odd-order and band-order
    invariants are checked by :func:`restoration.filters.validate_parameters`.
    """

    model_config = ConfigDict(frozen=True)

    min_wavelength: float = Field(..., gt=0, description="Lower band edge (m)")
    max_wavelength: float = Field(..., gt=0, description="Upper band edge (m)")
    sampling_interval: float = Field(..., gt=0, description="Sample spacing (m)")
    filter_order: int = Field(..., description="Kernel length, odd")
    window: WindowKind = WindowKind.HAMMING

    @classmethod
    def from_settings(cls, **overrides) -> "FilterParameters":
        from restoration.config import settings

        values = dict(
            min_wavelength=settings.MIN_WAVELENGTH,
            max_wavelength=settings.MAX_WAVELENGTH,
            sampling_interval=settings.SAMPLING_INTERVAL,
            filter_order=settings.FILTER_ORDER,
            window=settings.WINDOW,
        )
        values.update(overrides)
        return cls(**values)


class MeasurementCharacteristic(BaseModel):
    """Gain and phase of a chord configuration at one wavelength."""

    model_config = ConfigDict(frozen=True)

    wavelength: float
    a: float
    b: float
    amplitude: float
    phase: float  # rad

    @property
    def phase_deg(self) -> float:
        return math.degrees(self.phase)


class Statistics(BaseModel):
    """Read-only summary of a series."""

    model_config = ConfigDict(frozen=True)

    count: int = 0
    mean: float = 0.0
    sigma: float = 0.0
    rms: float = 0.0
    min: float = 0.0
    max: float = 0.0
    peak_to_peak: float = 0.0


@dataclass(frozen=True)
class MovementRecord:
    distance: float  # m
    tamping: float  # vertical, mm
    lining: float  # lateral, mm


@dataclass(frozen=True, eq=False)
class MovementSeries:
    """
    Per-sample correction amounts, ``movement = plan - restored``.
    ``predicted`` is the waveform expected after the correction (equals the plan line).
    """

    distance: np.ndarray
    movement: np.ndarray
    predicted: np.ndarray
    direction: str = "vertical"  # "vertical" -> tamping, "lateral" -> lining

    def __post_init__(self):
        if self.direction not in ("vertical", "lateral"):
            raise InvalidInput(f"unknown direction: {self.direction}", "direction", self.direction)
        for name in ("distance", "movement", "predicted"):
            object.__setattr__(self, name, _readonly(getattr(self, name)))

    def __len__(self) -> int:
        return len(self.movement)

    @property
    def tamping(self) -> np.ndarray:
        return self.movement if self.direction == "vertical" else np.zeros_like(self.movement)

    @property
    def lining(self) -> np.ndarray:
        return self.movement if self.direction == "lateral" else np.zeros_like(self.movement)

    def records(self) -> List[MovementRecord]:
        return [
            MovementRecord(float(d), float(t), float(l))
            for d, t, l in zip(self.distance, self.tamping, self.lining)
        ]

    def as_series(self) -> MeasurementSeries:
        return MeasurementSeries(self.distance, self.movement)
