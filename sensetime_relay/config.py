"""
Configuration Management Module

Configures adaptor parameters via environment variables or .env file.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Adaptor Configuration Class

    All configuration items can be overridden by environment variables, with names matching fields (uppercase).
    """

    # Application Config
    APP_NAME: str = "SenseTime Relay"
    DEBUG: bool = False

    # Upstream Config
    # SenseTime API base URL
    SENSETIME_BASE_URL: str = "https://api.sensenova.cn"
    # Channel key in "<access_key>|<secret_key>" form
    SENSETIME_API_KEY: Optional[str] = None

    # HTTP Client Config
    # Request timeout (seconds)
    HTTP_TIMEOUT: int = 1800

    # Model Config
    # Vendor embedding model, never taken from the client request
    EMBEDDING_MODEL: str = "nova-embedding-stable"
    # Model name reported in normalized chat responses
    RESPONSE_MODEL_NAME: str = "sensechat"

    # Token Signing Config
    # Signed token lifetime (seconds)
    TOKEN_TTL_SECONDS: int = 1800
    # Clock skew tolerance for the "nbf" claim (seconds)
    TOKEN_NOT_BEFORE_SKEW_SECONDS: int = 5

    # Streaming Config
    # Capacity of the reader -> translator hand-off queue
    STREAM_QUEUE_SIZE: int = 1
    # Largest frame buffered while waiting for a boundary (bytes)
    MAX_FRAME_BYTES: int = 64 * 1024

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get adaptor configuration (Singleton)

    Returns:
        Settings: Configuration instance
    """
    return Settings()
