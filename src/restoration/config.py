# config.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Project-wide defaults (pydantic v2).
    Values are read from environment variables or a .env file and fall back
    to the defaults below. Engine functions always take explicit arguments;
    these settings only feed the pipeline, the plan-line editor and scripts.
    """

    # Project Info
    PROJECT_NAME: str = "Track_Restoration"
    VERSION: str = "1.0.0"

    # Storage / logging (used by scripts only)
    DATA_ROOT: str = "data"
    LOG_DIR: str = "./logs"
    LOG_LEVEL: str = "INFO"

    # Restoration band
    SAMPLING_INTERVAL: float = 0.25  # m
    MIN_WAVELENGTH: float = 6.0  # m
    MAX_WAVELENGTH: float = 40.0  # m
    FILTER_ORDER: int = 1025  # odd
    WINDOW: str = "hamming"

    # Streaming mode
    CHUNK_SIZE: int = 10000

    # Plan line
    HISTORY_LIMIT: int = 100
    PLAN_WINDOW: int = 800  # samples (200 m at 0.25 m), averaged as 801 centred samples
    MIN_CURVE_RADIUS: float = 600.0  # m, advisory
    MAX_GRADIENT: float = 35.0  # per mille, advisory
    CANT_GRADIENT: float = 3.0  # mm/m

    # Movement restrictions
    STANDARD_LIMIT: float = 30.0  # mm
    MAXIMUM_LIMIT: float = 50.0  # mm

    # .env loading
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


# singleton
settings = Settings()
