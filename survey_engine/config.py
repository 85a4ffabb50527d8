"""Application configuration management."""
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from sqlalchemy.engine.url import make_url
import logging

SQLITE_LOCAL_URL = "sqlite+aiosqlite:///./survey_engine.db"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = SQLITE_LOCAL_URL
    db_pool_size: int = 5
    db_max_overflow: int = 10

    # Application
    environment: str = "development"
    allowed_origins: str = "http://localhost:3000"  # Comma-separated list for CORS

    # Insight rules
    low_satisfaction_threshold: float = 3.0  # Rating averages at or below this are flagged
    strong_satisfaction_threshold: float = 4.0  # Rating averages at or above this are praised
    dominant_preference_percent: float = 50.0  # Top option share must exceed this
    low_completion_rate_percent: float = 50.0  # Below this we recommend a shorter survey

    # Net Promoter Score buckets (0-10 scale)
    nps_promoter_min_score: int = 9
    nps_detractor_max_score: int = 6

    # Export
    export_filename_stem: str = "survey-results"

    @property
    def cors_origins(self) -> list[str]:
        """Split the comma-separated origin list."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @model_validator(mode="after")
    def validate_all_config(self):
        """Validate insight thresholds and normalize database URLs to async drivers."""
        logger = logging.getLogger(__name__)

        if self.low_satisfaction_threshold > self.strong_satisfaction_threshold:
            raise ValueError("low_satisfaction_threshold must not exceed strong_satisfaction_threshold")

        if self.nps_detractor_max_score >= self.nps_promoter_min_score:
            raise ValueError("nps_detractor_max_score must be below nps_promoter_min_score")

        url = self.database_url
        if not url:
            logger.warning("Empty DATABASE_URL, using SQLite fallback")
            self.database_url = SQLITE_LOCAL_URL
            return self

        try:
            parsed = make_url(url)
        except Exception as e:  # pragma: no cover - defensive fallback
            logger.error(f"Failed to parse DATABASE_URL: {e}")
            self.database_url = SQLITE_LOCAL_URL
            return self

        drivername = parsed.drivername
        if drivername.startswith("postgres") and "+asyncpg" not in drivername:
            parsed = parsed.set(drivername="postgresql+asyncpg")
            logger.info(f"Driver normalized: {drivername} -> {parsed.drivername}")
        elif drivername == "sqlite":
            parsed = parsed.set(drivername="sqlite+aiosqlite")
            logger.info(f"Driver normalized: {drivername} -> {parsed.drivername}")

        self.database_url = parsed.render_as_string(hide_password=False)
        return self

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
