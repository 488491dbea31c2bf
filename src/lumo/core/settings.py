"""Runtime configuration for the Lumo API.

Values come from the process environment or a local .env file.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Lumo configuration.

    Every field maps to an upper-case environment variable of the same name.
    """

    # App
    app_name: str = Field(default="Lumo", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Identity tokens issued by the session provider
    secret_key: str = Field(alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Storage
    database_url: str = Field(default="sqlite:///./lumo.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Frontend links used in outbound emails
    frontend_url: str = Field(default="http://localhost:5173", alias="FRONTEND_URL")

    # Invite email delivery; leaving SMTP_HOST unset disables sending
    smtp_host: str | None = Field(default=None, alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_username: str | None = Field(default=None, alias="SMTP_USERNAME")
    smtp_password: str | None = Field(default=None, alias="SMTP_PASSWORD")
    smtp_use_tls: bool = Field(default=True, alias="SMTP_USE_TLS")
    smtp_timeout_seconds: float = Field(default=10.0, alias="SMTP_TIMEOUT_SECONDS")
    email_from: str = Field(default="Lumo Team <no-reply@lumo.local>", alias="EMAIL_FROM")

    # Publishing and notification tuning
    words_per_minute: int = Field(default=200, ge=1, alias="WORDS_PER_MINUTE")
    max_tags_per_post: int = Field(default=5, ge=0, alias="MAX_TAGS_PER_POST")
    notification_page_size: int = Field(default=50, ge=1, alias="NOTIFICATION_PAGE_SIZE")
    excerpt_length: int = Field(default=160, ge=20, alias="EXCERPT_LENGTH")

    # Realtime transport
    socketio_path: str = Field(default="socket.io", alias="SOCKETIO_PATH")

    # Browser clients
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def email_enabled(self) -> bool:
        """Return True when an SMTP relay has been configured."""
        return bool(self.smtp_host)


settings = Settings()  # type: ignore[call-arg]
