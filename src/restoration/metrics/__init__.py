from restoration.metrics.base import MetricStrategy
from restoration.metrics.quality import PeakMetric, RestrictionMetric, SigmaMetric, WorkSectionMetric

__all__ = ["MetricStrategy", "PeakMetric", "RestrictionMetric", "SigmaMetric", "WorkSectionMetric"]
