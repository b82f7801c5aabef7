"""
Configuration management for the shipment intake dialogue engine.
"""
from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Project paths
    BASE_DIR: Path = Path(__file__).parent.parent.parent

    # Dialogue parameters
    MAX_RETRIES: int = 3
    HISTORY_MAX_TURNS: int = 50

    # Defaults applied when the user leaves something implicit
    DEFAULT_CURRENCY: str = "USD"
    DEFAULT_DIMENSION_UNIT: str = "cm"
    DEFAULT_WEIGHT_UNIT: str = "kg"

    # API settings
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    API_RELOAD: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


# Global settings instance
settings = Settings()
