# selfpark/server/config.py
"""Telemetry server configuration with sensible defaults for LAN use."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Server settings, overridable via environment variables."""

    # SSE
    SSE_MAX_CLIENTS: int = 16
    SSE_KEEPALIVE_S: float = 15.0
    SSE_BROADCAST_TIMEOUT_S: float = 1.0

    # Finished-episode summaries kept in memory
    EPISODE_HISTORY_MAX: int = 256

    # Server
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8095

    model_config = SettingsConfigDict(env_prefix="SELFPARK_", env_file=".env", extra="ignore")


settings = Settings()
