"""Application configuration with environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENV: str = "dev"

    # App Version (format: a.bc.de - major.feature.patch)
    VERSION: str = "0.01.00"

    # Database (PostgreSQL in production, SQLite accepted for dev/tests)
    DATABASE_URL: str

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # Public site that serves /feedback/{slug} pages to recipients
    PUBLIC_SITE_URL: str = "http://localhost:3000"

    # Downstream automation notified when a form is completed.
    # Used when a form has no webhook_url of its own.
    FEEDBACK_WEBHOOK_URL: str = "https://hook.eu2.make.com/39qm7lyzms7omhdvuu7dlb211gyg3jir"
    WEBHOOK_TIMEOUT_SECONDS: float = 10.0
    WEBHOOK_MAX_ATTEMPTS: int = 5

    # Error Tracking (optional, set in production)
    SENTRY_DSN: str = ""

    # Rate Limiting (requests per minute)
    RATE_LIMIT_API: int = 60  # General API
    RATE_LIMIT_PUBLIC_READ: int = 120  # Public feedback page reads
    RATE_LIMIT_PUBLIC_SUBMIT: int = 10  # Public feedback submissions

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
