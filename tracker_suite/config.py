from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from functools import lru_cache


def _default_stage_thresholds() -> dict[str, dict[str, int]]:
    return {
        "onboarding": {"min_points": 0, "min_milestones": 0},
        "exploring": {"min_points": 50, "min_milestones": 3},
        "active": {"min_points": 150, "min_milestones": 8},
        "power_user": {"min_points": 300, "min_milestones": 12},
        "expert": {"min_points": 500, "min_milestones": 15},
    }


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = "postgresql+asyncpg://localhost:5432/tracker_suite"

    @field_validator('DATABASE_URL', mode='before')
    @classmethod
    def convert_database_url(cls, v: str) -> str:
        """Convert postgresql:// to postgresql+asyncpg:// for async support."""
        if v and v.startswith('postgresql://'):
            return v.replace('postgresql://', 'postgresql+asyncpg://', 1)
        return v

    # Auth
    SECRET_KEY: str = "development-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # CORS
    FRONTEND_URL: str = "http://localhost:5173"

    # Email (Resend)
    RESEND_API_KEY: str | None = None
    EMAIL_FROM_ADDRESS: str = "noreply@trackersuite.com"
    EMAIL_FROM_NAME: str = "Tracker Suite"

    # Trials
    TRIAL_DURATION_DAYS: int = 7
    TRIAL_WARNING_DAYS: int = 2
    TRIAL_MONITOR_ENABLED: bool = False
    TRIAL_MONITOR_INTERVAL_HOURS: int = 4

    # Follow-up reminders are bucketed by calendar day in this zone
    NOTIFICATION_TIMEZONE: str = "UTC"

    # Journey stage minimums, checked from the highest stage down
    JOURNEY_STAGE_THRESHOLDS: dict[str, dict[str, int]] = Field(
        default_factory=_default_stage_thresholds
    )

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    DOCS_ENABLED: bool = True

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def sqlalchemy_echo(self) -> bool:
        """SQL echo, always off in production."""
        return self.DEBUG and not self.is_production

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
