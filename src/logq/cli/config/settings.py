"""Configuration settings for logq."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.constants import DEFAULT_API_BASE_URL, DEFAULT_LOG_DIR


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every field is read from ``LOGQ_<FIELD>``, e.g. ``LOGQ_URL`` or
    ``LOGQ_TOKEN``. Command-line options take precedence over these values.
    """

    # API settings
    URL: str = DEFAULT_API_BASE_URL
    TOKEN: str = ""
    ORG_ID: str = ""
    INSECURE: bool = False

    # General settings
    VERBOSE: bool = False
    LOG_DIR: str = DEFAULT_LOG_DIR

    model_config = SettingsConfigDict(env_prefix="LOGQ_", case_sensitive=False)


# Create a singleton settings instance
settings = Settings()
