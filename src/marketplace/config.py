"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with MARKETPLACE_ prefix.
No YAML files, no file-based config — just env vars (12-factor app style).

Learn: Settings are built by get_settings() and handed to the app factory
explicitly. Nothing imports a module-level instance, so tests construct
their own Settings(...) with an in-memory database and a temp upload dir.
"""

from pydantic import model_validator
from pydantic_settings import BaseSettings

DEFAULT_JWT_SECRET = "change-me-in-production"

# Environments that may run with the default signing secret.
_DEV_ENVIRONMENTS = {"development", "test"}


class Settings(BaseSettings):
    """All app configuration. Set via MARKETPLACE_* env vars."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./marketplace.db"
    create_tables_on_startup: bool = True

    # Redis (rate limiting only — optional)
    redis_url: str = "redis://localhost:6379/0"

    # Auth
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    token_lifetime_days: int = 7
    bcrypt_rounds: int = 10

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 5000
    public_base_url: str = "http://localhost:5000"

    # CORS
    cors_origins: list[str] = ["*"]

    # Rate limiting
    rate_limit_rpm: int = 100  # requests per minute per IP
    rate_limit_auth_rpm: int = 10  # login/register

    # Image uploads
    upload_dir: str = "uploads"
    max_upload_bytes: int = 1024 * 1024

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = {"env_prefix": "MARKETPLACE_"}

    @model_validator(mode="after")
    def validate_production_settings(self):
        """Refuse the default signing secret outside development."""
        if (
            self.environment not in _DEV_ENVIRONMENTS
            and self.jwt_secret == DEFAULT_JWT_SECRET
        ):
            raise ValueError(
                "MARKETPLACE_JWT_SECRET must be set to a secure value in "
                "non-development environments. Generate one with: "
                'python -c "import secrets; print(secrets.token_urlsafe(32))"'
            )
        return self


def get_settings() -> Settings:
    """Load settings from the environment."""
    return Settings()
