"""Unit tests for the inverse band-pass filter."""

import numpy as np
import pytest

from restoration import ChordConfig, FilterParameters, InvalidInput, MeasurementSeries, ProcessingCancelled
from restoration import filters
from restoration.versine import versine

from conftest import INTERVAL, sine_series


def central(series, margin):
    return series.values[margin:-margin]


class TestValidation:
    @pytest.mark.parametrize("order", [0, -3, 100])
    def test_bad_order(self, order):
        params = FilterParameters(min_wavelength=6, max_wavelength=40, sampling_interval=0.25, filter_order=order)
        with pytest.raises(InvalidInput):
            filters.design(params)

    def test_inverted_band(self):
        params = FilterParameters(min_wavelength=40, max_wavelength=6, sampling_interval=0.25, filter_order=101)
        with pytest.raises(InvalidInput) as exc:
            filters.validate_parameters(params)
        assert exc.value.parameter == "min_wavelength"

    def test_equal_band_edges(self):
        params = FilterParameters(min_wavelength=10, max_wavelength=10, sampling_interval=0.25, filter_order=101)
        with pytest.raises(InvalidInput):
            filters.design(params)


class TestDesign:
    def test_kernel_shape(self, band_params):
        kernel = filters.design(band_params)

        assert len(kernel) == band_params.filter_order
        np.testing.assert_allclose(kernel, kernel[::-1], atol=1e-12)
        assert abs(kernel.sum()) < 1e-12

    def test_band_selectivity(self, band_params):
        kernel = filters.design(band_params)
        gain = filters.frequency_response(kernel, INTERVAL, [2.5, 10.0, 20.0, 100.0])

        assert gain[0] < 0.01
        assert gain[1] == pytest.approx(1.0, abs=0.01)
        assert gain[2] == pytest.approx(1.0, abs=0.01)
        assert gain[3] < 0.01


class TestApply:
    def test_length_preserved_and_edges_flagged(self, band_params):
        series = sine_series(20.0, points=3000)
        restored = filters.restore(series, band_params)

        half = band_params.filter_order // 2
        assert len(restored) == len(series)
        np.testing.assert_array_equal(restored.distance, series.distance)
        assert restored.low_confidence[:half].all()
        assert restored.low_confidence[-half:].all()
        assert not restored.low_confidence[half:-half].any()

    def test_in_band_sine_passes(self, band_params):
        series = sine_series(20.0, points=4000)
        restored = filters.restore(series, band_params)

        margin = band_params.filter_order
        np.testing.assert_allclose(central(restored, margin), central(series, margin), atol=0.02)

    def test_out_of_band_sines_removed(self, band_params):
        long_wave = sine_series(100.0, points=4000)
        short_wave = sine_series(2.5, points=4000)

        margin = band_params.filter_order
        assert np.max(np.abs(central(filters.restore(long_wave, band_params), margin))) < 0.02
        assert np.max(np.abs(central(filters.restore(short_wave, band_params), margin))) < 0.02

    def test_chunked_matches_whole(self, band_params, noisy_track):
        whole = filters.restore(noisy_track, band_params)
        chunked = filters.restore(noisy_track, band_params, chunk_size=700)

        np.testing.assert_allclose(chunked.values, whole.values, atol=1e-9)
        np.testing.assert_array_equal(chunked.low_confidence, whole.low_confidence)

    def test_progress_reported(self, band_params, noisy_track):
        seen = []
        filters.restore(noisy_track, band_params, chunk_size=1000, progress=seen.append)

        assert [p.chunk for p in seen] == [1, 2, 3]
        assert seen[-1].percentage == 100

    def test_cancel_between_chunks(self, band_params, noisy_track):
        calls = []

        def cancel():
            calls.append(1)
            return len(calls) > 1

        with pytest.raises(ProcessingCancelled):
            filters.restore(noisy_track, band_params, chunk_size=1000, cancel=cancel)

    def test_even_kernel_rejected(self):
        series = sine_series(20.0, points=100)
        with pytest.raises(InvalidInput):
            filters.apply(series, np.ones(4) / 4)

    def test_interval_mismatch(self, band_params):
        series = MeasurementSeries.from_values(np.zeros(100), 0.5)
        with pytest.raises(InvalidInput):
            filters.restore(series, band_params)

    def test_irregular_series_rejected(self, band_params):
        series = MeasurementSeries([0.0, 0.25, 0.75, 1.0], np.zeros(4))
        with pytest.raises(InvalidInput):
            filters.restore(series, band_params)


class TestDesignInverse:
    def test_symmetric_chord_gives_symmetric_kernel(self):
        params = FilterParameters(min_wavelength=6, max_wavelength=40, sampling_interval=0.25, filter_order=1025)
        kernel = filters.design_inverse(params, ChordConfig.symmetric(10.0))

        assert len(kernel) == 1025
        np.testing.assert_allclose(kernel, kernel[::-1], atol=1e-12)

    def test_inverts_chord_gain_inside_band(self):
        params = FilterParameters(min_wavelength=6, max_wavelength=40, sampling_interval=0.25, filter_order=2049)
        chord = ChordConfig.symmetric(10.0)
        kernel = filters.design_inverse(params, chord)

        # a 10 m chord halves a 30 m wave, the inverse doubles it back
        gain = filters.frequency_response(kernel, 0.25, [30.0])[0]
        assert gain * 0.5 == pytest.approx(1.0, rel=0.2)

    def test_recovers_waveform_from_versine(self):
        params = FilterParameters(min_wavelength=6, max_wavelength=40, sampling_interval=0.25, filter_order=2049)
        series = sine_series(30.0, points=8000, amplitude=3.0)
        measured = versine(series, 10.0)

        recovered = filters.apply(measured, filters.design_inverse(params, ChordConfig.symmetric(10.0)))
        margin = params.filter_order
        amplitude = np.max(np.abs(central(recovered, margin)))
        assert amplitude == pytest.approx(3.0, rel=0.2)

    def test_stopband_outside_band(self):
        params = FilterParameters(min_wavelength=6, max_wavelength=40, sampling_interval=0.25, filter_order=2049)
        kernel = filters.design_inverse(params, ChordConfig.symmetric(10.0))
        gain = filters.frequency_response(kernel, 0.25, [150.0, 3.0])
        assert np.all(gain < 0.1)
