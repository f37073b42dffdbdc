"""
Output container of a restoration run.
"""

from dataclasses import dataclass, field
from typing import Any, Dict

from restoration.core import FilterParameters, MeasurementSeries, MovementSeries, Statistics
from restoration.planline.segments import PlanLine


@dataclass
class RestorationResult:
    """
    Everything a restoration run produces.
    Metrics only need this object to compute their values.
    """

    original: MeasurementSeries  # resampled input
    restored_waveform: MeasurementSeries
    plan_line: PlanLine
    movement: MovementSeries
    versine_data: Dict[str, MeasurementSeries]
    filter_params: FilterParameters
    original_statistics: Statistics
    restored_statistics: Statistics
    predicted_statistics: Statistics
    improvement_rate: float  # %, σ original -> σ restored
    movement_improvement_rate: float  # %, σ restored -> σ predicted
    metrics: Dict[str, Any] = field(default_factory=dict)

    @property
    def statistics(self) -> Dict[str, Any]:
        return {
            "original": self.original_statistics,
            "restored": self.restored_statistics,
            "predicted": self.predicted_statistics,
            "improvement_rate": self.improvement_rate,
            "movement_improvement_rate": self.movement_improvement_rate,
        }

    @property
    def interval(self) -> float:
        return self.restored_waveform.interval
