"""
Plan-line refinement: spline interpolation through control points,
smoothing and outlier removal. All functions return new series.
"""

from typing import List, Optional, Sequence, Tuple

import numpy as np
from loguru import logger
from scipy.interpolate import CubicSpline

from restoration.core import MeasurementSeries
from restoration.errors import InvalidInput
from restoration.smoothing import gaussian_filter, moving_average


def spline_interpolate(
    plan: MeasurementSeries, control_distances: Sequence[float], method: str = "cubic"
) -> MeasurementSeries:
    """
    Re-draw the plan line through its own values at ``control_distances``.
    Samples outside the first/last control point are left unchanged.

    :param method: ``"cubic"`` (natural cubic spline) or ``"linear"``
    """
    controls = np.unique(np.asarray(control_distances, dtype=float))
    if len(controls) < 2:
        raise InvalidInput("at least two distinct control points are required", "control_distances", len(controls))
    if controls[0] < plan.distance[0] or controls[-1] > plan.distance[-1]:
        raise InvalidInput("control points must lie inside the plan line", "control_distances")

    control_values = np.interp(controls, plan.distance, plan.values)
    inside = (plan.distance >= controls[0]) & (plan.distance <= controls[-1])

    if method == "cubic":
        curve = CubicSpline(controls, control_values, bc_type="natural")
        fitted = curve(plan.distance[inside])
    elif method == "linear":
        fitted = np.interp(plan.distance[inside], controls, control_values)
    else:
        raise InvalidInput(f"unknown interpolation method: {method}", "method", method)

    values = np.array(plan.values)
    values[inside] = fitted
    return plan.with_values(values)


def gaussian_smooth(plan: MeasurementSeries, sigma: float = 5.0) -> MeasurementSeries:
    """Gaussian smoothing, ``sigma`` in samples; edge weights are renormalized."""
    return plan.with_values(gaussian_filter(plan.values, sigma))


def remove_outliers(
    plan: MeasurementSeries, threshold: float = 3.0, window: Optional[int] = None
) -> Tuple[MeasurementSeries, List[int]]:
    """
    Replace samples deviating more than ``threshold`` σ.

    With ``window=None`` the deviation is taken from the global mean and
    outliers are replaced by it; otherwise from the median of a centred
    window of ``window`` samples, which also replaces them.

    :return: cleaned series and the indices that were replaced
    """
    if not threshold > 0:
        raise InvalidInput("threshold must be positive", "threshold", threshold)
    values = np.array(plan.values)
    if len(values) == 0:
        return plan, []

    if window is None:
        center = np.full(len(values), values.mean())
        spread = np.full(len(values), values.std())
    else:
        if window < 3:
            raise InvalidInput("window must be at least 3 samples", "window", window)
        half = window // 2
        center = np.empty(len(values))
        spread = np.empty(len(values))
        for i in range(len(values)):
            local = plan.values[max(0, i - half) : i + half + 1]
            center[i] = np.median(local)
            spread[i] = local.std()

    outliers = np.flatnonzero(np.abs(values - center) > threshold * spread)
    values[outliers] = center[outliers]
    if len(outliers):
        logger.debug(f"Replaced {len(outliers)} outliers (threshold {threshold} sigma)")
    return plan.with_values(values), outliers.tolist()


def iterative_smooth(
    plan: MeasurementSeries, iterations: int = 10, factor: float = 0.5, tolerance: float = 1e-3
) -> MeasurementSeries:
    """
    Repeatedly pull each interior sample towards the mean of its neighbours:
    ``v ← (1-f)·v + f·(v[i-1] + v[i+1])/2``. Stops early once the largest
    change drops below ``tolerance``. End samples stay fixed.
    """
    if not 0.0 <= factor <= 1.0:
        raise InvalidInput("factor must be in [0, 1]", "factor", factor)
    values = np.array(plan.values)
    if len(values) < 3:
        return plan.with_values(values)

    for iteration in range(iterations):
        previous = values.copy()
        values[1:-1] = (1.0 - factor) * previous[1:-1] + factor * (previous[:-2] + previous[2:]) / 2.0
        if np.max(np.abs(values - previous)) < tolerance:
            logger.debug(f"Iterative smoothing converged after {iteration + 1} iterations")
            break
    return plan.with_values(values)


def selective_smooth(plan: MeasurementSeries, mask, window_size: int = 20) -> MeasurementSeries:
    """Moving average applied only where ``mask`` is True."""
    mask = np.asarray(mask, dtype=bool)
    if mask.shape != plan.values.shape:
        raise InvalidInput("mask length must match the plan line", "mask", mask.shape)
    smoothed = moving_average(plan.values, window_size)
    return plan.with_values(np.where(mask, smoothed, plan.values))


def rms_error(original: MeasurementSeries, refined: MeasurementSeries) -> float:
    if len(original) != len(refined):
        raise InvalidInput("series lengths differ", "refined", len(refined))
    if len(original) == 0:
        return 0.0
    diff = original.values - refined.values
    return float(np.sqrt(np.mean(diff * diff)))
