"""Application configuration using Pydantic settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from lobe_relay.transcode.decoder import DecodeMode


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Frozen: built once at startup and shared read-only by every request.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Upstream chat service
    base_url: str = Field(
        "http://localhost:1234", alias="BASE_URL",
        description="Base URL of the upstream chat service. Requests go to {BASE_URL}/api/chat/openai.",
    )
    access_code: str = Field(
        "", alias="ACCESS_CODE",
        description="Access code embedded in the x-lobe-chat-auth credential sent upstream.",
    )
    upstream_timeout: float = Field(
        60.0, alias="UPSTREAM_TIMEOUT",
        description="HTTP connect/read timeout in seconds for upstream calls.",
    )
    upstream_verify_tls: bool = Field(
        False, alias="UPSTREAM_VERIFY_TLS",
        description="Verify the upstream TLS certificate. Off by default for self-hosted upstreams.",
    )

    # Transcoding
    decode_mode: DecodeMode = Field(
        DecodeMode.JSON, alias="DECODE_MODE",
        description="How upstream fragments are decoded: 'json' (JSON string literals) or 'raw' (verbatim, quotes stripped).",
    )
    stream_sentinel: str = Field(
        "[DONE]", alias="STREAM_SENTINEL",
        description="Payload value that marks the end of the upstream stream. Empty = rely on connection close only.",
    )
    default_model: str = Field(
        "gpt-3.5-turbo", alias="DEFAULT_MODEL",
        description="Model name used when the caller's request omits one.",
    )

    # Inbound auth
    auth_token: str = Field(
        "", alias="AUTH_TOKEN",
        description="Bearer token callers must present on /v1/ routes. Empty = no authentication.",
    )

    # Server
    host: str = Field(
        "0.0.0.0", alias="HOST",
        description="Host address to bind the aiohttp server to.",
    )
    port: int = Field(
        3000, alias="PORT",
        description="Port number for the aiohttp server.",
    )

    # Logging
    log_level: str = Field(
        "INFO", alias="LOG_LEVEL",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL.",
    )
    log_file: str = Field(
        "", alias="LOG_FILE",
        description="Path to log file for file-based logging with rotation. Empty = console only.",
    )
    log_file_max_bytes: int = Field(
        10_485_760, alias="LOG_FILE_MAX_BYTES",
        description="Max size in bytes per log file before rotation. Default: 10 MB.",
    )
    log_file_backup_count: int = Field(
        5, alias="LOG_FILE_BACKUP_COUNT",
        description="Number of rotated backup log files to keep.",
    )

    @property
    def upstream_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/api/chat/openai"


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
