"""
Quality metrics of a restoration run (σ, peaks, restrictions, work sections).
"""

from typing import Any, Dict

import numpy as np

from restoration import movement as mv
from restoration import statistics
from restoration.metrics.base import MetricStrategy
from restoration.result import RestorationResult


class SigmaMetric(MetricStrategy):
    """σ before and after, optionally ignoring low-confidence edge samples."""

    def calculate(self, result: RestorationResult) -> Dict[str, Any]:
        mask = result.restored_waveform.confidence_mask if self.params.get("exclude_edges", False) else None
        before = statistics.sigma(result.restored_waveform, mask)
        after = statistics.sigma(result.movement.predicted, mask)
        return {
            "Sigma_Original_mm": round(result.original_statistics.sigma, 3),
            "Sigma_Restored_mm": round(before, 3),
            "Sigma_Predicted_mm": round(after, 3),
            "Sigma_Improvement_pct": round(mv.improvement_rate(before, after), 2),
        }


class PeakMetric(MetricStrategy):
    """P value (largest movement peak) and the peak count."""

    def calculate(self, result: RestorationResult) -> Dict[str, Any]:
        # default separation: 5 m
        separation = self.params.get("min_separation") or max(1, int(round(5.0 / result.interval)))
        peaks = mv.extract_peaks(result.movement, separation)
        return {
            "P_Value_mm": round(mv.p_value(peaks), 3),
            "Peak_Count": len(peaks),
        }


class RestrictionMetric(MetricStrategy):
    def calculate(self, result: RestorationResult) -> Dict[str, Any]:
        restrictions = self.params.get("restrictions") or mv.MovementRestrictions()
        report = mv.check_restrictions(result.movement, restrictions)
        return {
            "Standard_Exceeded": len(report.standard_exceeded),
            "Maximum_Exceeded": len(report.maximum_exceeded),
            "Violation_Rate_pct": round(100.0 * report.violation_count / max(report.total_count, 1), 2),
        }


class WorkSectionMetric(MetricStrategy):
    def calculate(self, result: RestorationResult) -> Dict[str, Any]:
        threshold = self.params.get("threshold", 1.0)
        sections = mv.split_work_sections(result.movement, threshold, self.params.get("min_gap", 1))
        length = sum(s.end_distance - s.start_distance for s in sections)
        return {
            "Work_Sections": len(sections),
            "Work_Length_m": round(length, 2),
            "Total_Movement_mm": round(float(np.sum(np.abs(result.movement.movement))), 1),
        }
