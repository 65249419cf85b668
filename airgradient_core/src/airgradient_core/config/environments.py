from enum import Enum

from pydantic_settings import BaseSettings


class Environment(str, Enum):
    PRODUCTION = "production"
    DEVELOPMENT = "development"
    TESTING = "testing"


class Settings(BaseSettings):
    """Configuration settings for the AirGradient bridge."""

    # Environment
    ENVIRONMENT: Environment = Environment.DEVELOPMENT

    # Devices
    DEVICES_FILE: str = "devices.json"
    DEFAULT_POLLING_INTERVAL_MS: int = 60000

    # Accessory cache (sqlite)
    ACCESSORY_CACHE_DB: str = "accessories.db"

    # Telemetry endpoints
    CLOUD_API_BASE: str = "https://api.airgradient.com/public/api/v1"
    LOCAL_HOST_PREFIX: str = "airgradient"
    HTTP_TIMEOUT_SEC: float = 10.0

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8080

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"


def get_settings() -> Settings:
    """Get settings based on environment."""
    import os

    env = os.getenv("AIRGRADIENT_ENV", "development").lower()

    if env == "production":
        return Settings(ENVIRONMENT=Environment.PRODUCTION, LOG_LEVEL="WARNING")
    elif env == "testing":
        return Settings(
            ENVIRONMENT=Environment.TESTING,
            DEVICES_FILE="test_devices.json",
            ACCESSORY_CACHE_DB=":memory:",
            DEFAULT_POLLING_INTERVAL_MS=1000,
            HTTP_TIMEOUT_SEC=2.0,
            API_PORT=8081,
            LOG_LEVEL="DEBUG",
        )
    else:
        return Settings(ENVIRONMENT=Environment.DEVELOPMENT, LOG_LEVEL="DEBUG")
