"""Unit tests for settings and logging setup."""

import sys

from loguru import logger

from restoration import FilterParameters, WindowKind
from restoration.chunking import process_chunked
from restoration.config import Settings, settings
from restoration.log import configure_logging


class TestSettings:
    def test_defaults_form_valid_band(self):
        params = FilterParameters.from_settings()

        assert params.filter_order % 2 == 1
        assert params.min_wavelength < params.max_wavelength
        assert params.window is WindowKind.HAMMING

    def test_overrides(self):
        params = FilterParameters.from_settings(filter_order=401, window="blackman")
        assert params.filter_order == 401
        assert params.window is WindowKind.BLACKMAN
        assert params.sampling_interval == settings.SAMPLING_INTERVAL

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("MAX_WAVELENGTH", "70")
        monkeypatch.setenv("HISTORY_LIMIT", "20")

        configured = Settings()
        assert configured.MAX_WAVELENGTH == 70.0
        assert configured.HISTORY_LIMIT == 20


class TestLogging:
    def test_configure_enables_package_logger(self, tmp_path):
        messages = []
        configure_logging(level="DEBUG", log_dir=str(tmp_path))
        sink_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
        try:
            process_chunked([1.0, 2.0, 3.0], lambda v: v, halo=0, chunk_size=1)
            assert any("chunk 1/3" in m for m in messages)
            assert list(tmp_path.glob("restoration_*.log"))
        finally:
            logger.remove()
            logger.add(sys.stderr)
            logger.disable("restoration")
