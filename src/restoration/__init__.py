"""
Track geometry restoration engine.

Restores the true irregularity waveform from chord-distorted measurements,
converts between chord configurations, designs plan lines and computes the
correction movements (tamping / lining) towards them.
"""

from loguru import logger

from restoration.chunking import ChunkProgress
from restoration.core import (
    ChordConfig,
    FilterParameters,
    MeasurementCharacteristic,
    MeasurementPoint,
    MeasurementSeries,
    MovementRecord,
    MovementSeries,
    Statistics,
    WindowKind,
)
from restoration.errors import (
    DivisionByZero,
    InvalidCurvature,
    InvalidInput,
    InvalidRange,
    ProcessingCancelled,
    RestorationError,
)
from restoration.pipeline import RestorationPipeline
from restoration.result import RestorationResult

__version__ = "1.0.0"

logger.disable("restoration")

__all__ = [
    "ChordConfig",
    "ChunkProgress",
    "DivisionByZero",
    "FilterParameters",
    "InvalidCurvature",
    "InvalidInput",
    "InvalidRange",
    "MeasurementCharacteristic",
    "MeasurementPoint",
    "MeasurementSeries",
    "MovementRecord",
    "MovementSeries",
    "ProcessingCancelled",
    "RestorationError",
    "RestorationPipeline",
    "RestorationResult",
    "Statistics",
    "WindowKind",
]
