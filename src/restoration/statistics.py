"""
Summary statistics of waveforms (σ, RMS, extrema) and before/after comparison.
"""

from typing import Dict, Optional, Tuple

import numpy as np

from restoration.core import MeasurementSeries, Statistics
from restoration.errors import InvalidInput


def _as_array(values, mask=None) -> np.ndarray:
    if isinstance(values, MeasurementSeries):
        values = values.values
    data = np.asarray(values, dtype=float)
    if mask is not None:
        mask = np.asarray(mask, dtype=bool)
        if mask.shape != data.shape:
            raise InvalidInput("mask must match values", "mask", mask.shape)
        data = data[~mask]
    return data


def compute(values, mask=None) -> Statistics:
    """
    Population statistics of ``values``.

    :param values: array or MeasurementSeries
    :param mask: samples to exclude (True = excluded), e.g. low-confidence edges
    """
    data = _as_array(values, mask)
    if len(data) == 0:
        return Statistics()

    lo, hi = float(np.min(data)), float(np.max(data))
    return Statistics(
        count=len(data),
        mean=float(np.mean(data)),
        sigma=float(np.std(data)),
        rms=float(np.sqrt(np.mean(data * data))),
        min=lo,
        max=hi,
        peak_to_peak=hi - lo,
    )


def sigma(values, mask=None) -> float:
    data = _as_array(values, mask)
    return float(np.std(data)) if len(data) else 0.0


def rms(values, mask=None) -> float:
    data = _as_array(values, mask)
    return float(np.sqrt(np.mean(data * data))) if len(data) else 0.0


def peak_values(values, mask=None) -> Tuple[float, float]:
    """``(min, max)``; ``(0, 0)`` for empty input."""
    data = _as_array(values, mask)
    if len(data) == 0:
        return 0.0, 0.0
    return float(np.min(data)), float(np.max(data))


def _rate(before: float, after: float) -> float:
    return (before - after) / before * 100.0 if before != 0 else 0.0


def compare(before, after, mask=None) -> Dict[str, float]:
    """Improvement of σ and RMS from ``before`` to ``after`` (percent)."""
    b = compute(before, mask)
    a = compute(after, mask)
    return {
        "sigma_before": b.sigma,
        "sigma_after": a.sigma,
        "sigma_improvement": _rate(b.sigma, a.sigma),
        "rms_before": b.rms,
        "rms_after": a.rms,
        "rms_improvement": _rate(b.rms, a.rms),
    }
