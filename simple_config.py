from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """應用程式設定"""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )

    # Application Configuration
    app_port: int = Field(default=5002, alias="PORT")
    app_host: str = Field(default="0.0.0.0")
    flask_env: str = Field(default="production")
    secret_key: str = Field(default="fallback-secret-key-change-in-production")
    app_id: str = Field(default="default-app-id", description="Namespace for stored contacts")

    # Storage Configuration
    storage_backend: str = Field(default="memory", description="Contact storage backend: redis or memory")
    storage_key_prefix: str = Field(default="vcardqr", description="Key prefix for stored contacts")

    # Redis Configuration
    redis_url: Optional[str] = Field(default=None, description="Redis connection URL (redis://host:port/db)")
    redis_host: str = Field(default="localhost", description="Redis host")
    redis_port: int = Field(default=6379, description="Redis port")
    redis_password: Optional[str] = Field(default=None, description="Redis password")
    redis_db: int = Field(default=0, description="Redis database number")
    redis_socket_timeout: int = Field(default=5, description="Redis socket timeout in seconds")
    redis_max_connections: int = Field(default=50, description="Max Redis connection pool size")

    # Identity
    initial_auth_token: Optional[str] = Field(default=None, description="Custom identity token; anonymous if unset")

    # Card / QR Configuration
    public_base_url: Optional[str] = Field(default=None, description="Origin used in QR links, e.g. https://cards.example.com")
    default_template: str = Field(default="A", description="Template used when none is given")
    demo_fallback: bool = Field(default=False, description="Render the sample contact when an ID is not found")
    max_upload_size: int = Field(default=2097152)  # 2MB
    qr_box_size: int = Field(default=4)
    qr_border: int = Field(default=2)

    # Monitoring
    sentry_dsn: Optional[str] = Field(default=None, description="Sentry DSN; monitoring disabled if unset")

    # Development
    debug: bool = Field(default=False)
    verbose_errors: bool = Field(default=False, description="Show detailed technical errors (for debugging)")


# 全域設定實例
settings = Settings()
