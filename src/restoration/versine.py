"""
Versine (chord-offset) measurement and conversion between chord configurations.

A chord with forward length ``p`` and backward length ``q`` measures

    y[n] = x[n] - (p·x[n - q/Δ] + q·x[n + p/Δ]) / (p + q)

and responds to a sinusoid of wavelength ``L`` with ``H(L) = A - jB``:

    A = 1 - (p·cos(ωq) + q·cos(ωp)) / (p + q)
    B = (-p·sin(ωq) + q·sin(ωp)) / (p + q),     ω = 2π/L
"""

import math
from functools import lru_cache
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
from loguru import logger
from pydantic import BaseModel, ConfigDict

from restoration.chunking import CancelCheck, ProgressCallback, edge_mask, process_chunked
from restoration.core import ChordConfig, MeasurementCharacteristic, MeasurementSeries
from restoration.errors import DivisionByZero, InvalidInput

DEFAULT_CHORDS = ("10m", "20m", "40m")
DEFAULT_WAVELENGTHS = tuple(float(w) for w in range(1, 201))

# |H1|² below this makes a conversion degenerate
DEGENERATE_EPS = 1e-12


class ConversionCoefficients(BaseModel):
    """``y2 ≈ α·y1`` (in phase) with ``β`` the quadrature part, at one wavelength."""

    model_config = ConfigDict(frozen=True)

    wavelength: float
    alpha: float
    beta: float


def _chord(chord: Union[ChordConfig, str, float]) -> ChordConfig:
    if isinstance(chord, ChordConfig):
        return chord
    if isinstance(chord, str):
        return ChordConfig.parse(chord)
    return ChordConfig.symmetric(float(chord))


def _shifted_versine(values: np.ndarray, p: float, q: float, back: int, ahead: int) -> np.ndarray:
    out = np.zeros(len(values))
    stop = len(values) - ahead
    if stop > back:
        idx = np.arange(back, stop)
        out[back:stop] = values[idx] - (p * values[idx - back] + q * values[idx + ahead]) / (p + q)
    return out


def eccentric_versine(
    series: Union[MeasurementSeries, np.ndarray],
    p: float,
    q: float,
    interval: Optional[float] = None,
    chunk_size: Optional[int] = None,
    progress: Optional[ProgressCallback] = None,
    cancel: Optional[CancelCheck] = None,
) -> MeasurementSeries:
    """
    Versine of an asymmetric chord.

    Chord ends are rounded to whole samples. Where an end falls outside
    the series the output is 0 and flagged low confidence.

    :param series: uniform MeasurementSeries, or a raw array together with ``interval``
    """
    chord = ChordConfig(p, q)
    if not isinstance(series, MeasurementSeries):
        if interval is None:
            raise InvalidInput("interval is required for raw arrays", "interval")
        series = MeasurementSeries.from_values(series, interval)
    if len(series) < 2:
        raise InvalidInput("series is too short for a versine", "series", len(series))
    step = series.interval if interval is None else interval

    back, ahead = chord.offsets(step)
    values = process_chunked(
        series.values,
        lambda part: _shifted_versine(part, chord.p, chord.q, back, ahead),
        halo=max(back, ahead),
        chunk_size=chunk_size,
        progress=progress,
        cancel=cancel,
        label=f"versine {chord.label}",
    )
    return series.with_values(values, edge_mask(len(series), back, ahead))


def versine(series, chord_length: float, **kwargs) -> MeasurementSeries:
    """Symmetric versine, ``p = q = chord_length / 2``."""
    half = chord_length / 2.0
    return eccentric_versine(series, half, half, **kwargs)


def versines(
    series: MeasurementSeries,
    chords: Sequence[Union[ChordConfig, str, float]] = DEFAULT_CHORDS,
    **kwargs,
) -> Dict[str, MeasurementSeries]:
    """Versines of several chords keyed by chord label (``"10m"``, ...)."""
    out = {}
    for item in chords:
        chord = _chord(item)
        out[chord.label] = eccentric_versine(series, chord.p, chord.q, **kwargs)
    return out


def ab_coefficients(p: float, q: float, wavelength: float) -> Tuple[float, float]:
    """``(A, B)`` of a ``(p, q)`` chord at ``wavelength`` (m)."""
    if not wavelength > 0:
        raise InvalidInput("wavelength must be positive", "wavelength", wavelength)
    omega = 2.0 * math.pi / wavelength
    total = p + q
    a = 1.0 - (p * math.cos(omega * q) + q * math.cos(omega * p)) / total
    b = (-p * math.sin(omega * q) + q * math.sin(omega * p)) / total
    return a, b


@lru_cache(maxsize=64)
def _characteristics(p: float, q: float, wavelengths: Tuple[float, ...]) -> Tuple[MeasurementCharacteristic, ...]:
    logger.debug(f"Computing characteristics for p={p}, q={q} over {len(wavelengths)} wavelengths")
    out = []
    for wavelength in wavelengths:
        a, b = ab_coefficients(p, q, wavelength)
        out.append(
            MeasurementCharacteristic(
                wavelength=wavelength,
                a=a,
                b=b,
                amplitude=math.hypot(a, b),
                phase=math.atan2(b, a),
            )
        )
    return tuple(out)


def characteristics(
    p: float, q: float, wavelengths: Iterable[float] = DEFAULT_WAVELENGTHS
) -> List[MeasurementCharacteristic]:
    """Gain ``sqrt(A²+B²)`` and phase ``atan2(B, A)`` of a chord per wavelength (cached)."""
    ChordConfig(p, q)
    return list(_characteristics(float(p), float(q), tuple(float(w) for w in wavelengths)))


def conversion_coefficients(
    p1: float, q1: float, p2: float, q2: float, wavelength: float, strict: bool = False
) -> ConversionCoefficients:
    """
    Coefficients converting a ``(p1, q1)`` versine into a ``(p2, q2)`` versine at one wavelength:

        α = (A1·A2 + B1·B2) / (A1² + B1²)
        β = (A1·B2 - A2·B1) / (A1² + B1²)

    A vanishing denominator gives ``(0, 0)``, or raises DivisionByZero when ``strict``.
    """
    a1, b1 = ab_coefficients(p1, q1, wavelength)
    a2, b2 = ab_coefficients(p2, q2, wavelength)
    denominator = a1 * a1 + b1 * b1
    if denominator < DEGENERATE_EPS:
        if strict:
            raise DivisionByZero(
                f"chord p={p1}, q={q1} does not respond at wavelength {wavelength} m",
                "wavelength",
                wavelength,
            )
        return ConversionCoefficients(wavelength=wavelength, alpha=0.0, beta=0.0)
    return ConversionCoefficients(
        wavelength=wavelength,
        alpha=(a1 * a2 + b1 * b2) / denominator,
        beta=(a1 * b2 - a2 * b1) / denominator,
    )


def convert(
    series: MeasurementSeries, p1: float, q1: float, p2: float, q2: float, wavelength: float, strict: bool = False
) -> MeasurementSeries:
    """Scale a ``(p1, q1)`` versine by ``α`` at ``wavelength`` to estimate the ``(p2, q2)`` versine."""
    coefficients = conversion_coefficients(p1, q1, p2, q2, wavelength, strict=strict)
    return series.with_values(series.values * coefficients.alpha, series.low_confidence)


def convert_from_symmetric(
    series: MeasurementSeries, chord_length: float, p2: float, q2: float, wavelength: float, strict: bool = False
) -> MeasurementSeries:
    half = chord_length / 2.0
    return convert(series, half, half, p2, q2, wavelength, strict=strict)


def convert_to_symmetric(
    series: MeasurementSeries, p1: float, q1: float, chord_length: float, wavelength: float, strict: bool = False
) -> MeasurementSeries:
    half = chord_length / 2.0
    return convert(series, p1, q1, half, half, wavelength, strict=strict)


def complex_response(p: float, q: float, frequencies: np.ndarray) -> np.ndarray:
    """``H(f) = A - jB`` at signed spatial frequencies ``f`` (cycles/m)."""
    omega = 2.0 * np.pi * np.asarray(frequencies, dtype=float)
    return 1.0 - (p * np.exp(-1j * omega * q) + q * np.exp(1j * omega * p)) / (p + q)


def convert_spectral(
    series: MeasurementSeries, p1: float, q1: float, p2: float, q2: float, floor: float = 1e-3
) -> MeasurementSeries:
    """
    Phase-aware conversion over every FFT bin: ``Y2(k) = H2(k)/H1(k)·Y1(k)``.
    Bins where ``|H1|`` is below ``floor`` are set to 0.
    """
    ChordConfig(p1, q1)
    ChordConfig(p2, q2)
    if len(series) < 2:
        raise InvalidInput("series is too short to convert", "series", len(series))

    frequencies = np.fft.fftfreq(len(series), d=series.interval)
    h1 = complex_response(p1, q1, frequencies)
    h2 = complex_response(p2, q2, frequencies)
    usable = np.abs(h1) >= floor
    ratio = np.zeros(len(series), dtype=complex)
    ratio[usable] = h2[usable] / h1[usable]

    converted = np.fft.ifft(np.fft.fft(series.values) * ratio).real
    return series.with_values(converted, series.low_confidence)
