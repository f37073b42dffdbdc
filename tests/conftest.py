"""Shared synthetic track data."""

import numpy as np
import pytest
from loguru import logger

from restoration import FilterParameters, MeasurementSeries

INTERVAL = 0.25


def sine_series(wavelength, points=4000, amplitude=1.0, interval=INTERVAL):
    d = np.arange(points) * interval
    return MeasurementSeries(d, amplitude * np.sin(2 * np.pi * d / wavelength))


@pytest.fixture
def band_params():
    return FilterParameters(min_wavelength=6.0, max_wavelength=40.0, sampling_interval=INTERVAL, filter_order=1201)


@pytest.fixture
def concrete_track():
    """1000 points at 0.25 m: 50 m + 10 m + 2 m waves plus noise (mm)."""
    rng = np.random.default_rng(42)
    d = np.arange(1000) * INTERVAL
    values = (
        8 * np.sin(2 * np.pi * d / 50)
        + 5 * np.sin(2 * np.pi * d / 10)
        + 2 * np.sin(2 * np.pi * d / 2)
        + rng.normal(0, 0.5, len(d))
    )
    return MeasurementSeries(d, values)


@pytest.fixture
def noisy_track():
    rng = np.random.default_rng(7)
    d = np.arange(3000) * INTERVAL
    values = 4 * np.sin(2 * np.pi * d / 25) + rng.normal(0, 1.0, len(d))
    return MeasurementSeries(d, values)


@pytest.fixture
def log_messages():
    """Captured loguru records of the restoration package."""
    messages = []
    logger.enable("restoration")
    sink_id = logger.add(lambda message: messages.append(message.record), level="DEBUG")
    yield messages
    logger.remove(sink_id)
    logger.disable("restoration")
