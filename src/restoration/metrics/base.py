"""
Base interface for all restoration metrics.
Strategy Pattern implementation.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

from restoration.result import RestorationResult


class MetricStrategy(ABC):
    """Parent class of every quality metric computed after a run."""

    def __init__(self, **kwargs):
        self.params = kwargs

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    def calculate(self, result: RestorationResult) -> Dict[str, Any]:
        """Take a finished run and return its values as a flat dictionary."""
