"""Application settings using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="maplepress", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    environment: Literal["development", "staging", "production", "testing"] = Field(
        default="development", description="Environment name"
    )
    debug: bool = Field(default=True, description="Debug mode")

    # API Server
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")

    # LeanCloud (comment and like storage)
    leancloud_app_id: str | None = Field(default=None, description="LeanCloud App ID")
    leancloud_app_key: str | None = Field(
        default=None, description="LeanCloud App Key"
    )
    leancloud_master_key: str | None = Field(
        default=None, description="LeanCloud Master Key (KEEP SECRET!)"
    )
    leancloud_server_url: str | None = Field(
        default=None, description="LeanCloud REST server URL"
    )
    leancloud_timeout: float = Field(
        default=10.0, description="LeanCloud request timeout (seconds)"
    )

    # Admin authentication
    jwt_secret_key: str = Field(
        default="dev-jwt-secret-key-change-in-production-32chars!",
        description="JWT signing key for the admin cookie",
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT algorithm")
    auth_cookie_name: str = Field(default="auth_token", description="Auth cookie name")
    auth_cookie_max_age_seconds: int = Field(
        default=60 * 60 * 24 * 30, description="Auth cookie lifetime (30 days)"
    )
    auth_cookie_samesite: Literal["lax", "strict", "none"] = Field(
        default="lax", description="SameSite cookie policy"
    )
    admin_password: str | None = Field(
        default=None, description="Password required for reserved identities"
    )
    admin_nickname: str = Field(default="admin", description="Admin display name")
    admin_email: str = Field(
        default="admin@example.com", description="Admin email address"
    )
    admin_website: str | None = Field(default=None, description="Admin website")
    admin_avatar: str | None = Field(default=None, description="Admin avatar URL")
    reserved_identities: list[str] = Field(
        default=["admin", "博主"],
        description="Nicknames/emails that require the admin password",
    )

    # Redis (optional - rate limiting and caches)
    redis_url: str | None = Field(default=None, description="Redis connection URL")
    redis_max_connections: int = Field(default=10, description="Max Redis connections")
    redis_socket_timeout: float = Field(default=5.0, description="Redis socket timeout")
    redis_socket_connect_timeout: float = Field(
        default=5.0, description="Redis connect timeout"
    )

    # Sink (short links and visit analytics)
    sink_public_url: str | None = Field(
        default=None, description="Sink deployment base URL"
    )
    sink_api_key: str | None = Field(default=None, description="Sink API key")
    sink_timeout: float = Field(default=10.0, description="Sink request timeout")
    sink_client_timezone: str = Field(
        default="Asia/Shanghai", description="Timezone sent with Sink reports"
    )

    # Telegram channel mirror
    telegram_host: str = Field(default="t.me", description="Telegram preview host")
    telegram_channel: str | None = Field(default=None, description="Channel name")
    telegram_http_proxy: str | None = Field(
        default=None, description="HTTP proxy for Telegram requests"
    )
    telegram_cache_ttl_seconds: int = Field(
        default=300, description="Channel HTML cache lifetime"
    )

    # Blog content
    content_dir: str = Field(
        default="content/blog", description="Directory of Markdown posts"
    )
    site_url: str = Field(
        default="http://localhost:4321", description="Public site URL"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="DEBUG", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", description="Log format"
    )
    log_include_caller_info: bool = Field(
        default=True, description="Include caller info"
    )
    log_dir: str = Field(default="logs", description="Directory for log files")
    log_file_max_bytes: int = Field(
        default=10 * 1024 * 1024, description="Max size per log file (10MB default)"
    )
    log_file_backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )
    log_requests: bool = Field(
        default=True, description="Log HTTP request start/finish"
    )
    log_exclude_paths: list[str] = Field(
        default=["/health", "/health/live", "/health/ready"],
        description="Paths to exclude from request logging",
    )

    # CORS
    cors_origins: list[str] = Field(
        default=["http://localhost:4321"], description="CORS origins"
    )
    cors_allow_credentials: bool = Field(default=True, description="Allow credentials")
    cors_allow_methods: list[str] = Field(default=["*"], description="Allowed methods")
    cors_allow_headers: list[str] = Field(default=["*"], description="Allowed headers")
    cors_max_age: int = Field(default=600, description="CORS max age")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == "testing"

    @property
    def leancloud_configured(self) -> bool:
        """Check if every LeanCloud credential is present."""
        return bool(
            self.leancloud_app_id
            and self.leancloud_app_key
            and self.leancloud_master_key
            and self.leancloud_server_url
        )

    @property
    def sink_configured(self) -> bool:
        """Check if Sink is configured."""
        return bool(self.sink_public_url and self.sink_api_key)

    @property
    def telegram_configured(self) -> bool:
        """Check if a Telegram channel is configured."""
        return bool(self.telegram_channel)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
