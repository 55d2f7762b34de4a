from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "Vendor Onboarding API"
    app_env: str = "development"
    app_port: int = 8000
    frontend_url: str = "http://localhost:3000"
    backend_url: str = Field(default="http://localhost:8000", alias="BACKEND_URL")
    vendor_portal_url: str = Field(
        default="http://localhost:3000/vendor-login", alias="VENDOR_PORTAL_URL",
    )

    # Invitations
    invitation_expiry_days: int = Field(default=7, alias="INVITATION_EXPIRY_DAYS")

    # OpenAI (follow-up message generation)
    openai_api_key: str | None = Field(default=None, alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4.1-mini", alias="OPENAI_MODEL")
    openai_max_tokens: int = Field(default=500, alias="OPENAI_MAX_TOKENS")
    openai_timeout: int = Field(default=60, alias="OPENAI_TIMEOUT")
    openai_temperature: float = Field(default=0.7, alias="OPENAI_TEMPERATURE")
    ai_prompt_version: str = Field(default="1", alias="AI_PROMPT_VERSION")

    # Outbound email (disabled when SMTP_HOST is unset)
    smtp_host: str | None = Field(default=None, alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_username: str | None = Field(default=None, alias="SMTP_USERNAME")
    smtp_password: str | None = Field(default=None, alias="SMTP_PASSWORD")
    smtp_use_tls: bool = Field(default=True, alias="SMTP_USE_TLS")
    mail_from: str = Field(default="procurement@example.com", alias="MAIL_FROM")

    # Template variables
    company_name: str = Field(default="Procurement Team", alias="COMPANY_NAME")
    support_email: str = Field(default="procurement@example.com", alias="SUPPORT_EMAIL")

    # Unresponsive-vendor monitor
    unresponsive_threshold_days: int = Field(
        default=3, alias="UNRESPONSIVE_THRESHOLD_DAYS",
    )
    unresponsive_min_follow_ups: int = Field(
        default=2, alias="UNRESPONSIVE_MIN_FOLLOW_UPS",
    )
    unresponsive_check_hour: int = Field(
        default=9, ge=0, le=23, alias="UNRESPONSIVE_CHECK_HOUR",
    )  # UTC wall clock
    unresponsive_check_minute: int = Field(
        default=0, ge=0, le=59, alias="UNRESPONSIVE_CHECK_MINUTE",
    )
    unresponsive_scheduler_enabled: bool = Field(
        default=True, alias="UNRESPONSIVE_SCHEDULER_ENABLED",
    )
    unresponsive_auto_escalate: bool = Field(
        default=False, alias="UNRESPONSIVE_AUTO_ESCALATE",
    )

    seed_default_templates: bool = Field(default=True, alias="SEED_DEFAULT_TEMPLATES")

    # Database (any async SQLAlchemy URL; SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./vendor_onboarding.db",
        alias="DATABASE_URL",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def ai_enabled(self) -> bool:
        """AI message generation is available only when an OpenAI key is configured."""
        return bool(self.openai_api_key)

    @property
    def email_enabled(self) -> bool:
        return bool(self.smtp_host)

settings = Settings()
