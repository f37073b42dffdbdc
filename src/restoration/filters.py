"""
Inverse band-pass filter: restores the true irregularity waveform inside a
wavelength band from measured (chord-distorted) data.

Kernels are odd-length FIR filters centred on ``(N-1)/2``; application is a
centred convolution with zero padding, so the output keeps the input length
and the half-kernel at each edge is flagged as low confidence.
"""

from typing import Iterable, Optional

import numpy as np
from loguru import logger
from scipy import signal

from restoration import fft
from restoration.chunking import CancelCheck, ProgressCallback, edge_mask, process_chunked
from restoration.core import ChordConfig, FilterParameters, MeasurementSeries
from restoration.errors import InvalidInput
from restoration.versine import ab_coefficients

# chord response below this is treated as a zero of the characteristic
MIN_CHORD_RESPONSE = 1e-3


def validate_parameters(params: FilterParameters) -> None:
    if params.filter_order <= 0 or params.filter_order % 2 == 0:
        raise InvalidInput(
            f"filter order must be a positive odd number, got {params.filter_order}",
            "filter_order",
            params.filter_order,
        )
    if params.min_wavelength >= params.max_wavelength:
        raise InvalidInput(
            f"min_wavelength ({params.min_wavelength}) must be smaller than "
            f"max_wavelength ({params.max_wavelength})",
            "min_wavelength",
            params.min_wavelength,
        )
    if params.min_wavelength <= 2 * params.sampling_interval:
        raise InvalidInput(
            f"min_wavelength ({params.min_wavelength}) must exceed twice the sampling interval",
            "min_wavelength",
            params.min_wavelength,
        )


def _lowpass(cutoff: float, taps: np.ndarray, taper: np.ndarray) -> np.ndarray:
    """Windowed ideal low-pass at ``cutoff`` cycles/sample, unit DC gain."""
    kernel = 2.0 * cutoff * np.sinc(2.0 * cutoff * taps) * taper
    return kernel / kernel.sum()


def design(params: FilterParameters) -> np.ndarray:
    """
    Windowed-sinc band-pass kernel of length ``filter_order``.

    The kernel is the difference of two low-pass kernels at
    ``Δ/λ_min`` and ``Δ/λ_max`` cycles/sample, so it is symmetric, has
    zero DC gain and unit gain in the pass band.
    """
    validate_parameters(params)

    n = params.filter_order
    taps = np.arange(n) - (n - 1) // 2
    taper = fft.window(params.window, n)

    f_high = params.sampling_interval / params.min_wavelength
    f_low = params.sampling_interval / params.max_wavelength
    kernel = _lowpass(f_high, taps, taper) - _lowpass(f_low, taps, taper)

    logger.debug(
        f"Designed band-pass kernel: {n} taps, band {params.min_wavelength}-{params.max_wavelength} m, "
        f"window {params.window.value}"
    )
    return kernel


def frequency_response(kernel, interval: float, wavelengths: Iterable[float]) -> np.ndarray:
    """Gain ``|Σ h[m]·e^(-jωm)|`` of a centred kernel at each wavelength (m)."""
    kernel = np.asarray(kernel, dtype=float)
    taps = np.arange(len(kernel)) - (len(kernel) - 1) // 2
    wavelengths = np.asarray(list(wavelengths), dtype=float)
    omega = 2.0 * np.pi * interval / wavelengths
    response = np.exp(-1j * np.outer(omega, taps)) @ kernel
    return np.abs(response)


def apply(
    series: MeasurementSeries,
    kernel,
    chunk_size: Optional[int] = None,
    progress: Optional[ProgressCallback] = None,
    cancel: Optional[CancelCheck] = None,
) -> MeasurementSeries:
    """
    Centred convolution of ``series`` with ``kernel`` (zero padded).

    :param chunk_size: process in chunks of this many samples (None = whole series)
    :return: series of the same length; ``low_confidence`` marks the
             ``len(kernel)//2`` samples at each edge
    """
    kernel = np.asarray(kernel, dtype=float)
    if kernel.ndim != 1 or len(kernel) % 2 == 0:
        raise InvalidInput("kernel length must be odd", "kernel", kernel.shape)
    if len(series) < 2:
        raise InvalidInput("series is too short to filter", "series", len(series))

    half = len(kernel) // 2
    restored = process_chunked(
        series.values,
        lambda part: signal.convolve(part, kernel, mode="same"),
        halo=half,
        chunk_size=chunk_size,
        progress=progress,
        cancel=cancel,
        label="band-pass",
    )
    return series.with_values(restored, edge_mask(len(series), half))


def restore(
    series: MeasurementSeries,
    params: FilterParameters,
    chunk_size: Optional[int] = None,
    progress: Optional[ProgressCallback] = None,
    cancel: Optional[CancelCheck] = None,
) -> MeasurementSeries:
    """Design the band-pass kernel for ``params`` and apply it to a uniform series."""
    validate_parameters(params)
    if len(series) < 2:
        raise InvalidInput("series is too short to filter", "series", len(series))
    if not series.is_uniform():
        raise InvalidInput("series must be uniformly sampled, resample it first", "series")
    if abs(series.interval - params.sampling_interval) > 1e-6 * params.sampling_interval:
        raise InvalidInput(
            f"series interval ({series.interval}) differs from sampling_interval ({params.sampling_interval})",
            "sampling_interval",
            params.sampling_interval,
        )
    return apply(series, design(params), chunk_size=chunk_size, progress=progress, cancel=cancel)


def _inverse_gain(wavelength, params, chord, transition_width, stopband_gain):
    """Target gain and phase of the chord-inverse filter at one wavelength."""
    lower_stop = params.min_wavelength * (1.0 - transition_width)
    upper_stop = params.max_wavelength * (1.0 + transition_width)
    if not lower_stop <= wavelength <= upper_stop:
        return stopband_gain, 0.0

    def inverse_at(length):
        a, b = ab_coefficients(chord.p, chord.q, length)
        amplitude = np.hypot(a, b)
        if amplitude < MIN_CHORD_RESPONSE:
            return 1.0, 0.0
        return 1.0 / amplitude, float(np.arctan2(b, a))

    if wavelength < params.min_wavelength:
        edge, phase = inverse_at(params.min_wavelength)
        t = (wavelength - lower_stop) / (params.min_wavelength - lower_stop)
        return stopband_gain + (edge - stopband_gain) * (1.0 - np.cos(np.pi * t)) / 2.0, phase
    if wavelength > params.max_wavelength:
        edge, phase = inverse_at(params.max_wavelength)
        t = (wavelength - params.max_wavelength) / (upper_stop - params.max_wavelength)
        return edge + (stopband_gain - edge) * (1.0 - np.cos(np.pi * t)) / 2.0, phase
    return inverse_at(wavelength)


def design_inverse(
    params: FilterParameters,
    chord: ChordConfig,
    transition_width: float = 0.1,
    stopband_gain: float = 0.0,
) -> np.ndarray:
    """
    Frequency-sampled inverse of a chord characteristic inside the band.

    Each bin ``k`` of an ``N``-point grid gets the gain ``1/|H_chord(λ_k)|``
    and phase ``θ_chord(λ_k)`` with ``λ_k = N·Δ/k``; band edges are tapered
    with half cosines over ``transition_width`` of the edge wavelength. The
    kernel is synthesized as a sum of cosines and windowed like :func:`design`.
    """
    validate_parameters(params)
    if not 0 <= transition_width < 1:
        raise InvalidInput("transition_width must be in [0, 1)", "transition_width", transition_width)

    n = params.filter_order
    taps = np.arange(n) - (n - 1) // 2
    bins = np.arange(1, (n - 1) // 2 + 1)

    gains = np.empty(len(bins))
    phases = np.empty(len(bins))
    for i, k in enumerate(bins):
        wavelength = fft.bin_to_wavelength(int(k), n, params.sampling_interval)
        gains[i], phases[i] = _inverse_gain(wavelength, params, chord, transition_width, stopband_gain)

    # DC lies outside every band
    kernel = stopband_gain + 2.0 * np.cos(2.0 * np.pi * np.outer(taps, bins) / n + phases) @ gains
    kernel = kernel / n * fft.window(params.window, n)

    logger.debug(f"Designed inverse kernel for chord {chord.label}: {n} taps")
    return kernel
