"""
Restoration Pipeline Manager.
Resampling -> band-pass restoration -> versines -> plan line -> movement -> metrics.
"""

from typing import List, Optional, Sequence, Union

import numpy as np
from loguru import logger

from restoration import filters, statistics
from restoration import movement as mv
from restoration.chunking import CancelCheck, ProgressCallback
from restoration.config import settings
from restoration.core import ChordConfig, FilterParameters, MeasurementSeries
from restoration.errors import InvalidInput
from restoration.metrics.base import MetricStrategy
from restoration.planline.editor import PlanLineEditor
from restoration.planline.segments import PlanLine, SegmentedPlanLine
from restoration.resampling import ensure_uniform
from restoration.result import RestorationResult
from restoration.versine import DEFAULT_CHORDS, versines


class RestorationPipeline:
    """
    :param params: band definition, defaults to the values in ``settings``
    :param chords: chords of the versine views (labels like ``"10m"`` or ChordConfig)
    :param plan_window: moving-average width (samples) of the initial plan line
    :param chunk_size: process local operations in chunks of this size (None = whole series)
    :param direction: ``"vertical"`` (tamping) or ``"lateral"`` (lining)
    """

    def __init__(
        self,
        params: Optional[FilterParameters] = None,
        chords: Sequence[Union[ChordConfig, str]] = DEFAULT_CHORDS,
        plan_window: Optional[int] = None,
        chunk_size: Optional[int] = None,
        direction: str = "vertical",
    ):
        self.params = params or FilterParameters.from_settings()
        self.chords = tuple(chords)
        self.plan_window = plan_window or settings.PLAN_WINDOW
        self.chunk_size = chunk_size
        self.direction = direction
        self.metrics: List[MetricStrategy] = []
        filters.validate_parameters(self.params)

    def add_metric(self, metric: MetricStrategy) -> "RestorationPipeline":
        self.metrics.append(metric)
        return self

    def _plan_line(self, restored: MeasurementSeries, plan_line) -> PlanLine:
        if plan_line is None:
            editor = PlanLineEditor()
            return editor.generate_initial(restored, self.plan_window)
        if isinstance(plan_line, PlanLine):
            return plan_line
        if isinstance(plan_line, SegmentedPlanLine):
            return PlanLine(plan_line.materialize(restored.distance), plan_line.segments)
        if isinstance(plan_line, MeasurementSeries):
            return PlanLine(plan_line)
        values = np.asarray(plan_line, dtype=float)
        if values.shape != restored.values.shape:
            raise InvalidInput("plan line must match the restored waveform", "plan_line", values.shape)
        return PlanLine(restored.with_values(values))

    def run(
        self,
        series: MeasurementSeries,
        plan_line=None,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancelCheck] = None,
    ) -> RestorationResult:
        """
        Restore ``series`` and compute the movement towards ``plan_line``.

        :param plan_line: PlanLine, SegmentedPlanLine, MeasurementSeries or array on the
                          restored grid; None generates the initial moving-average plan line
        :param progress: called after each chunk of the band-pass stage
        :param cancel: polled between chunks; a cancelled run raises ProcessingCancelled
        """
        # 1. Uniform sampling at the filter interval
        original = ensure_uniform(series, self.params.sampling_interval)
        logger.debug(f"Restoration run: {len(original)} samples at {self.params.sampling_interval} m")

        # 2. Band-pass restoration
        restored = filters.restore(original, self.params, self.chunk_size, progress, cancel)

        # 3. Chord views of the restored waveform
        versine_data = versines(restored, self.chords, chunk_size=self.chunk_size, cancel=cancel)

        # 4. Plan line and movement
        plan = self._plan_line(restored, plan_line)
        movement = mv.calculate_movement(restored, plan.series, self.direction)

        # 5. Statistics
        original_stats = statistics.compute(original)
        restored_stats = statistics.compute(restored)
        predicted_stats = statistics.compute(movement.predicted)
        result = RestorationResult(
            original=original,
            restored_waveform=restored,
            plan_line=plan,
            movement=movement,
            versine_data=versine_data,
            filter_params=self.params,
            original_statistics=original_stats,
            restored_statistics=restored_stats,
            predicted_statistics=predicted_stats,
            improvement_rate=mv.improvement_rate(original_stats.sigma, restored_stats.sigma),
            movement_improvement_rate=mv.improvement_rate(restored_stats.sigma, predicted_stats.sigma),
        )

        # 6. Metrics; a failing metric does not stop the others
        for metric in self.metrics:
            try:
                result.metrics.update(metric.calculate(result))
            except Exception as e:
                logger.warning(f"Metric {metric.name} failed: {e}")
                result.metrics[f"Error_{metric.name}"] = str(e)

        logger.debug(
            f"Restoration done: sigma {original_stats.sigma:.3f} -> {restored_stats.sigma:.3f} mm "
            f"({result.improvement_rate:.1f}%)"
        )
        return result
