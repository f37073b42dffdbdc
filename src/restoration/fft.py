"""
Spectral primitives: DFT of any length, spectra, windows and
wavelength <-> bin conversion.
"""

import math
from typing import NamedTuple, Optional, Union

import numpy as np
from scipy import signal

from restoration.core import WindowKind
from restoration.errors import InvalidInput

# scipy.signal names of the supported windows
_SCIPY_WINDOWS = {
    WindowKind.HAMMING: "hamming",
    WindowKind.HANNING: "hann",
    WindowKind.BLACKMAN: "blackman",
    WindowKind.RECTANGULAR: "boxcar",
}


class Spectrum(NamedTuple):
    real: np.ndarray
    imag: np.ndarray


def transform(real, imag=None, inverse: bool = False) -> Spectrum:
    """
    Forward or inverse DFT of ``real + j*imag``. Any length is accepted
    (mixed-radix); the inverse transform is scaled by 1/N.
    """
    real = np.asarray(real, dtype=float)
    if imag is None:
        data = real.astype(complex)
    else:
        imag = np.asarray(imag, dtype=float)
        if imag.shape != real.shape:
            raise InvalidInput("real and imag must have the same length", "imag", imag.shape)
        data = real + 1j * imag
    out = np.fft.ifft(data) if inverse else np.fft.fft(data)
    return Spectrum(out.real.copy(), out.imag.copy())


def power_spectrum(real, imag) -> np.ndarray:
    """``real² + imag²`` per bin."""
    real = np.asarray(real, dtype=float)
    imag = np.asarray(imag, dtype=float)
    return real * real + imag * imag


def amplitude_spectrum(real, imag) -> np.ndarray:
    return np.sqrt(power_spectrum(real, imag))


def phase_spectrum(real, imag) -> np.ndarray:
    return np.arctan2(np.asarray(imag, dtype=float), np.asarray(real, dtype=float))


def window(kind: Union[WindowKind, str], n: int) -> np.ndarray:
    """Symmetric window of length ``n`` (e.g. Hamming ``0.54 - 0.46 cos(2πi/(N-1))``)."""
    try:
        kind = WindowKind(kind)
    except ValueError as e:
        raise InvalidInput(f"unknown window: {kind}", "window", kind) from e
    if n <= 0:
        raise InvalidInput("window length must be positive", "n", n)
    if n == 1:
        return np.ones(1)
    return signal.get_window(_SCIPY_WINDOWS[kind], n, fftbins=False)


def apply_window(data, kind: Union[WindowKind, str] = WindowKind.HANNING) -> np.ndarray:
    """Return ``data`` multiplied by the window; the input is not modified."""
    data = np.asarray(data, dtype=float)
    if len(data) == 0:
        return data.copy()
    return data * window(kind, len(data))


def wavelength_to_bin(wavelength: float, n: int, interval: float) -> int:
    """``round(N·Δ/λ)``; an infinite wavelength maps to bin 0."""
    if math.isinf(wavelength):
        return 0
    if wavelength <= 0:
        raise InvalidInput("wavelength must be positive", "wavelength", wavelength)
    return int(math.floor(n * interval / wavelength + 0.5))


def bin_to_wavelength(index: int, n: int, interval: float) -> float:
    """``N·Δ/bin``; bin 0 (DC) maps to +inf."""
    if index == 0:
        return math.inf
    return n * interval / index


def next_power_of_two(n: int) -> int:
    if n <= 1:
        return 1
    return 1 << (int(n) - 1).bit_length()


def fft_bandpass(values, interval: float, min_wavelength: float, max_wavelength: float) -> np.ndarray:
    """
    Band-pass in the frequency domain: bins outside
    ``[max_wavelength, min_wavelength]`` are zeroed on both spectrum halves.
    """
    if min_wavelength >= max_wavelength:
        raise InvalidInput("min_wavelength must be smaller than max_wavelength", "min_wavelength", min_wavelength)
    values = np.asarray(values, dtype=float)
    n = len(values)
    if n == 0:
        return values.copy()

    spectrum = np.fft.fft(values)
    k_low = max(1, wavelength_to_bin(max_wavelength, n, interval))
    k_high = wavelength_to_bin(min_wavelength, n, interval)

    k = np.arange(n)
    folded = np.minimum(k, n - k)
    spectrum[(folded < k_low) | (folded > k_high)] = 0.0
    return np.fft.ifft(spectrum).real


def fast_convolution(values, kernel) -> np.ndarray:
    """Causal convolution via FFT, truncated to the length of ``values``."""
    values = np.asarray(values, dtype=float)
    kernel = np.asarray(kernel, dtype=float)
    if len(values) == 0 or len(kernel) == 0:
        return np.zeros(len(values))
    return signal.fftconvolve(values, kernel, mode="full")[: len(values)]


def spectrum_wavelengths(n: int, interval: float, bins: Optional[np.ndarray] = None) -> np.ndarray:
    """Wavelength of each bin (folded, so bin k and N-k share a wavelength)."""
    k = np.arange(n) if bins is None else np.asarray(bins)
    folded = np.minimum(k, n - k)
    with np.errstate(divide="ignore"):
        return np.where(folded == 0, np.inf, n * interval / np.maximum(folded, 1))
