"""Unit tests for resampling."""

import numpy as np
import pytest

from restoration import InvalidInput, MeasurementSeries
from restoration.resampling import ensure_uniform, resample


class TestResample:
    def test_linear_interpolation(self):
        series = MeasurementSeries([0.0, 1.0, 3.0], [0.0, 10.0, 30.0])
        out = resample(series, 0.5)

        np.testing.assert_allclose(out.distance, [0.0, 0.5, 1.0, 1.5, 2.0, 2.5, 3.0])
        np.testing.assert_allclose(out.values, [0.0, 5.0, 10.0, 15.0, 20.0, 25.0, 30.0])

    def test_no_extrapolation(self):
        series = MeasurementSeries([0.0, 1.0], [0.0, 1.0])
        out = resample(series, 0.3)

        assert out.distance[-1] <= 1.0
        assert len(out) == 4

    def test_exact_endpoint_kept(self):
        series = MeasurementSeries.from_values(np.arange(11, dtype=float), 0.1)
        out = resample(series, 0.25)
        assert out.distance[-1] == pytest.approx(1.0)

    def test_uniform_input_unchanged(self):
        values = np.sin(np.arange(100) * 0.1)
        series = MeasurementSeries.from_values(values, 0.25)
        np.testing.assert_allclose(resample(series, 0.25).values, values)

    @pytest.mark.parametrize("interval", [0.0, -0.25])
    def test_invalid_interval(self, interval):
        series = MeasurementSeries([0.0, 1.0], [0.0, 1.0])
        with pytest.raises(InvalidInput):
            resample(series, interval)

    def test_too_few_points(self):
        with pytest.raises(InvalidInput):
            resample(MeasurementSeries([0.0], [1.0]), 0.25)


class TestEnsureUniform:
    def test_returns_same_object_when_uniform(self):
        series = MeasurementSeries.from_values(np.zeros(10), 0.25)
        assert ensure_uniform(series, 0.25) is series

    def test_resamples_irregular_series(self):
        series = MeasurementSeries([0.0, 0.2, 0.6, 1.0], [0.0, 2.0, 6.0, 10.0])
        out = ensure_uniform(series, 0.25)
        assert out.is_uniform()
        np.testing.assert_allclose(out.values, [0.0, 2.5, 5.0, 7.5, 10.0])
