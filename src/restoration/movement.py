"""
Movement calculation: correction amounts (tamping / lining) from the
restored waveform and the plan line, restriction checks and peak extraction.
"""

from typing import Dict, List, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from restoration import statistics
from restoration.config import settings
from restoration.core import MeasurementSeries, MovementSeries
from restoration.errors import InvalidInput
from restoration.smoothing import moving_average


def calculate_movement(restored: MeasurementSeries, plan, direction: str = "vertical") -> MovementSeries:
    """
    ``movement = plan - restored`` per sample; ``predicted = restored + movement``.

    :param plan: MeasurementSeries, PlanLine or array on the restored grid
    :param direction: ``"vertical"`` (tamping) or ``"lateral"`` (lining)
    """
    plan_values = np.asarray(getattr(plan, "values", plan), dtype=float)
    if plan_values.shape != restored.values.shape:
        raise InvalidInput(
            f"plan line ({len(plan_values)}) and restored waveform ({len(restored)}) differ in length",
            "plan",
            len(plan_values),
        )
    movement = plan_values - restored.values
    return MovementSeries(restored.distance, movement, restored.values + movement, direction)


def improvement_rate(before: float, after: float) -> float:
    """``(before - after) / before · 100``; 0 when ``before`` is 0."""
    if before == 0:
        return 0.0
    return (before - after) / before * 100.0


class MovementRestrictions(BaseModel):
    """Movement limits (mm); ``maximum`` must not be below ``standard``."""

    model_config = ConfigDict(frozen=True)

    standard: float = Field(default_factory=lambda: settings.STANDARD_LIMIT, gt=0)
    maximum: float = Field(default_factory=lambda: settings.MAXIMUM_LIMIT, gt=0)

    @model_validator(mode="after")
    def check_order(self) -> "MovementRestrictions":
        if self.maximum < self.standard:
            raise ValueError(f"maximum ({self.maximum}) must not be below standard ({self.standard})")
        return self


class Violation(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int
    distance: float
    movement: float


class RestrictionReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    standard_exceeded: List[Violation] = []
    maximum_exceeded: List[Violation] = []
    total_count: int = 0

    @computed_field
    @property
    def violation_count(self) -> int:
        return len(self.standard_exceeded) + len(self.maximum_exceeded)

    @property
    def ok(self) -> bool:
        return self.violation_count == 0


def check_restrictions(movement: MovementSeries, restrictions: Optional[MovementRestrictions] = None) -> RestrictionReport:
    """
    Classify samples by ``|movement|``. A sample is in ``maximum_exceeded``
    when above the maximum, otherwise in ``standard_exceeded`` when above the
    standard limit; the two lists never share an index.
    """
    restrictions = restrictions or MovementRestrictions()
    magnitude = np.abs(movement.movement)

    def violations(mask) -> List[Violation]:
        return [
            Violation(index=int(i), distance=float(movement.distance[i]), movement=float(movement.movement[i]))
            for i in np.flatnonzero(mask)
        ]

    over_maximum = magnitude > restrictions.maximum
    over_standard = (magnitude > restrictions.standard) & ~over_maximum
    return RestrictionReport(
        standard_exceeded=violations(over_standard),
        maximum_exceeded=violations(over_maximum),
        total_count=len(movement),
    )


class Peak(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int
    distance: float
    value: float
    abs_value: float


def extract_peaks(series, min_separation: int) -> List[Peak]:
    """
    Local extrema of ``|value|`` over a ``±min_separation`` sample window.

    A candidate must be strictly larger than every earlier sample in its
    window and at least as large as every later one, so equal values
    resolve to the earlier index. Near the series ends the window is
    truncated to the samples that exist. Zero magnitudes are never peaks.
    Accepted peaks are at least ``min_separation`` apart (larger peaks win)
    and returned in index order.
    """
    if min_separation < 1:
        raise InvalidInput("min_separation must be at least 1", "min_separation", min_separation)
    if isinstance(series, MovementSeries):
        series = series.as_series()
    values = np.asarray(series.values, dtype=float)
    magnitude = np.abs(values)
    n = len(values)

    candidates = []
    for i in range(n):
        before = magnitude[max(0, i - min_separation) : i]
        after = magnitude[i + 1 : i + min_separation + 1]
        if magnitude[i] == 0.0:
            continue
        earlier_ok = len(before) == 0 or magnitude[i] > before.max()
        later_ok = len(after) == 0 or magnitude[i] >= after.max()
        if earlier_ok and later_ok:
            candidates.append(i)

    accepted: List[int] = []
    for i in sorted(candidates, key=lambda k: (-magnitude[k], k)):
        if all(abs(i - j) >= min_separation for j in accepted):
            accepted.append(i)

    return [
        Peak(index=i, distance=float(series.distance[i]), value=float(values[i]), abs_value=float(magnitude[i]))
        for i in sorted(accepted)
    ]


def p_value(peaks: List[Peak]) -> float:
    """Largest peak magnitude; 0 without peaks."""
    return max((peak.abs_value for peak in peaks), default=0.0)


def smooth(series: MeasurementSeries, window_size: int) -> MeasurementSeries:
    """Centred moving average with truncated edge windows."""
    return series.with_values(moving_average(series.values, window_size), series.low_confidence)


def cumulative_movement(movement: MovementSeries) -> np.ndarray:
    """Running sum of ``|movement|`` (mm)."""
    return np.cumsum(np.abs(movement.movement))


class WorkSection(BaseModel):
    model_config = ConfigDict(frozen=True)

    start_index: int
    end_index: int
    start_distance: float
    end_distance: float
    max_movement: float
    mean_movement: float


def split_work_sections(movement: MovementSeries, threshold: float, min_gap: int = 1) -> List[WorkSection]:
    """
    Contiguous runs of samples with ``|movement| > threshold``. Runs separated
    by fewer than ``min_gap`` quiet samples are merged.
    """
    active = np.abs(movement.movement) > threshold
    indices = np.flatnonzero(active)
    if len(indices) == 0:
        return []

    runs = []
    start = previous = int(indices[0])
    for i in indices[1:]:
        i = int(i)
        if i - previous - 1 >= min_gap:
            runs.append((start, previous))
            start = i
        previous = i
    runs.append((start, previous))

    sections = []
    for i0, i1 in runs:
        part = np.abs(movement.movement[i0 : i1 + 1])
        sections.append(
            WorkSection(
                start_index=i0,
                end_index=i1,
                start_distance=float(movement.distance[i0]),
                end_distance=float(movement.distance[i1]),
                max_movement=float(part.max()),
                mean_movement=float(part.mean()),
            )
        )
    return sections


def summarize(restored: MeasurementSeries, movement: MovementSeries, mask=None) -> Dict[str, float]:
    """σ of restored, predicted and movement plus the σ improvement rate."""
    before = statistics.sigma(restored.values, mask)
    after = statistics.sigma(movement.predicted, mask)
    return {
        "sigma_restored": before,
        "sigma_predicted": after,
        "sigma_movement": statistics.sigma(movement.movement, mask),
        "max_movement": float(np.max(np.abs(movement.movement))) if len(movement) else 0.0,
        "improvement_rate": improvement_rate(before, after),
    }
