"""Application configuration."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_parse_none_str="null",
    )

    # Application
    app_name: str = Field(default="Sober Clinic Intake API", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    api_v1_prefix: str = Field(default="/api/v1", alias="API_V1_PREFIX")

    # Server
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT")
    reload: bool = Field(default=False, alias="RELOAD")

    # Database
    database_url: str = Field(..., alias="DATABASE_URL")

    # Redis
    redis_host: str = Field(..., alias="REDIS_HOST")
    redis_port: int = Field(..., alias="REDIS_PORT")
    redis_username: str = Field(default="default", alias="REDIS_USERNAME")
    redis_password: str = Field(default="", alias="REDIS_PASSWORD")
    redis_decode_responses: bool = Field(default=True, alias="REDIS_DECODE_RESPONSES")

    # JWT
    jwt_secret_key: str = Field(..., alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    # Patients keep a session for a month, matching the intake portal
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 30, alias="ACCESS_TOKEN_EXPIRE_MINUTES"
    )

    # CORS
    cors_origins_str: str = Field(
        default="http://localhost:5173",
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")

    @property
    def cors_origins(self) -> list[str]:
        """Get CORS origins as a list."""
        if isinstance(self.cors_origins_str, str):
            return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]
        return [self.cors_origins_str]

    # Rate Limiting (public verification / check-in endpoints)
    rate_limit_per_minute: int = Field(default=60, alias="RATE_LIMIT_PER_MINUTE")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")

    # Front-end links embedded in emails and slips
    frontend_url: str = Field(default="http://localhost:5173", alias="FRONTEND_URL")

    # Transactional email (Brevo)
    brevo_api_key: str | None = Field(
        default=None,
        alias="BREVO_API_KEY",
        description="Only required when an email is actually sent",
    )
    brevo_api_url: str = Field(
        default="https://api.brevo.com/v3/smtp/email",
        alias="BREVO_API_URL",
    )
    email_from_name: str = Field(default="SOBER Psychiatric Center", alias="FROM_NAME")
    email_from_address: str = Field(
        default="soberhospital.care@gmail.com",
        alias="FROM_EMAIL",
    )
    admin_notification_email: str = Field(
        default="soberhospital.care@gmail.com",
        alias="ADMIN_NOTIFICATION_EMAIL",
        description="Inbox that receives new intake alerts",
    )
    email_timeout_seconds: float = Field(default=30.0, alias="EMAIL_TIMEOUT_SECONDS")

    # Appointment reference IDs
    reference_id_prefix: str = Field(
        default="SOBER",
        alias="REFERENCE_ID_PREFIX",
        pattern=r"^[A-Z]+$",
    )
    clinic_timezone: str = Field(default="Asia/Kolkata", alias="CLINIC_TIMEZONE")

    # Clinic branding used by the slip and email templates
    clinic_name: str = Field(default="SOBER Psychiatric Centre", alias="CLINIC_NAME")
    clinic_address: str = Field(default="26, Nehru Nagar, Madurai, TN", alias="CLINIC_ADDRESS")
    clinic_helpline: str = Field(default="+91 74185 51156", alias="CLINIC_HELPLINE")

    # PDF rendering
    pdf_render_timeout_seconds: float = Field(default=60.0, alias="PDF_RENDER_TIMEOUT_SECONDS")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()  # type: ignore[call-arg]


# Global settings instance
settings = get_settings()
