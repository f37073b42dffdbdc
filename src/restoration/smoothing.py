"""
Smoothing kernels shared by the plan-line generator and the movement calculator.
"""

from typing import Optional

import numpy as np
from scipy import signal

from restoration.chunking import CancelCheck, ProgressCallback, process_chunked
from restoration.errors import InvalidInput


def _truncated_mean(values: np.ndarray, window_size: int) -> np.ndarray:
    # window sums via convolution; edges divide by the number of samples actually covered
    half = window_size // 2
    box = np.ones(2 * half + 1)
    sums = signal.convolve(values, box, mode="same", method="direct")
    counts = signal.convolve(np.ones(len(values)), box, mode="same", method="direct")
    return sums / counts


def moving_average(
    values,
    window_size: int,
    chunk_size: Optional[int] = None,
    progress: Optional[ProgressCallback] = None,
    cancel: Optional[CancelCheck] = None,
) -> np.ndarray:
    """
    Centred moving average over ``window_size // 2`` samples on each side.
    An even ``window_size`` is widened to the next odd width, so 800 averages
    801 samples. Windows are truncated at the series edges (no padding).
    """
    if window_size < 1:
        raise InvalidInput("window size must be at least 1", "window_size", window_size)
    values = np.asarray(values, dtype=float)
    if len(values) == 0 or window_size == 1:
        return values.copy()
    return process_chunked(
        values,
        lambda part: _truncated_mean(part, window_size),
        halo=window_size // 2,
        chunk_size=chunk_size,
        progress=progress,
        cancel=cancel,
        label="moving average",
    )


def gaussian_kernel(sigma: float, radius: Optional[int] = None) -> np.ndarray:
    """Normalized Gaussian of standard deviation ``sigma`` samples, ``±3σ`` wide by default."""
    if not sigma > 0:
        raise InvalidInput("sigma must be positive", "sigma", sigma)
    if radius is None:
        radius = max(1, int(np.ceil(3 * sigma)))
    x = np.arange(-radius, radius + 1, dtype=float)
    kernel = np.exp(-0.5 * (x / sigma) ** 2)
    return kernel / kernel.sum()


def gaussian_filter(values, sigma: float) -> np.ndarray:
    """Gaussian smoothing with the kernel weights renormalized where it overhangs the edges."""
    values = np.asarray(values, dtype=float)
    if len(values) == 0:
        return values.copy()
    kernel = gaussian_kernel(sigma)
    sums = signal.convolve(values, kernel, mode="same", method="direct")
    weights = signal.convolve(np.ones(len(values)), kernel, mode="same", method="direct")
    return sums / weights
