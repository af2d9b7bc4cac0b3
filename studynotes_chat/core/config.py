"""
Configuration management for the chat service.
"""

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    host: str = Field(default="0.0.0.0", description="Host to bind the server")
    port: int = Field(default=8000, description="Port to bind the server")
    debug: bool = Field(default=False, description="Enable debug mode")

    # Application
    app_name: str = Field(default="Study Notes Chat API")
    app_version: str = Field(default="0.1.0")

    # Database (MongoDB)
    mongodb_url: str = Field(..., description="MongoDB connection URL")
    db_min_pool_size: int = Field(default=5, description="MongoDB min connection pool size")
    db_max_pool_size: int = Field(default=50, description="MongoDB max connection pool size")
    db_connect_timeout_ms: int = Field(default=10000, description="MongoDB connect timeout")
    db_server_selection_timeout_ms: int = Field(default=5000, description="MongoDB server selection timeout")

    # Authentication (identity lookup shared by REST and the realtime handshake)
    jwt_secret_key: str = Field(..., description="JWT secret key")
    jwt_algorithm: str = Field(default="HS256", description="JWT algorithm")
    jwt_access_token_expire_minutes: int = Field(default=60 * 24 * 7, description="Access token expiry")

    # CORS
    cors_origins: List[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins"
    )
    allowed_hosts: List[str] = Field(
        default=["localhost", "127.0.0.1"],
        description="Allowed hosts"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    # Chat
    default_page_size: int = Field(default=50, ge=1, description="Messages per page when none is given")
    message_sweep_enabled: bool = Field(default=True, description="Run the background expiry sweep")
    message_sweep_interval_seconds: int = Field(
        default=300,
        ge=1,
        description="Seconds between expired-message sweeps"
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
