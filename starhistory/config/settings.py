"""Application settings and configuration"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # GitHub API
    GITHUB_TOKEN: Optional[str] = None
    GITHUB_API_BASE_URL: str = "https://api.github.com"
    USER_AGENT: str = "StarHistory/1.0"

    # GitHub client resilience controls
    GITHUB_TIMEOUT_SECONDS: float = 30.0
    GITHUB_MAX_RETRIES: int = 3
    GITHUB_BACKOFF_BASE_SECONDS: float = 1.0
    GITHUB_BACKOFF_MAX_SECONDS: float = 16.0
    GITHUB_CONCURRENCY: int = 4

    # Event page caps (bounded to stay inside unauthenticated rate limits)
    GITHUB_PER_PAGE: int = 100
    GITHUB_MAX_COMMIT_PAGES: int = 3
    GITHUB_MAX_RELEASE_PAGES: int = 3
    GITHUB_MAX_STARGAZER_PAGES: int = 100

    # Reconstruction
    STAR_HISTORY_ENUMERATION_CUTOFF: int = 10000

    # Estimation model weights
    ESTIMATION_SEED_FRACTION: float = 0.05
    ESTIMATION_GROWTH_EXPONENT: float = 1.75
    ESTIMATION_COMMIT_WEIGHT: float = 0.02
    ESTIMATION_MAX_ACTIVITY_BONUS: float = 0.5
    ESTIMATION_RELEASE_BOOST: float = 0.04
    ESTIMATION_EARLY_BOOST: float = 0.08
    ESTIMATION_EARLY_WINDOW_WEEKS: int = 10
    ESTIMATION_EARLY_DECAY_WEEKS: float = 3.0

    # Metrics and comparison
    COMPARISON_TIE_MARGIN: float = 0.10
    PREDICTION_HORIZON_DAYS: int = 30
    INSIGHT_RECENT_DAYS: int = 30

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env


settings = Settings()
