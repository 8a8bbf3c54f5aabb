"""Application configuration with comprehensive validation."""
from typing import Literal
from functools import lru_cache
from decimal import Decimal
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with production-grade validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Assessment Results Engine"
    APP_VERSION: str = "1.0.0"
    APP_ENV: Literal["development", "staging", "production"] = "development"
    DEBUG: bool = False
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "json"

    # API
    API_V1_PREFIX: str = "/api/v1"

    # Platform data API (invitations, templates, stored snapshots)
    DATA_API_URL: str = "http://localhost:8000"
    DATA_API_TIMEOUT_SECONDS: float = Field(default=5.0, gt=0, le=60)
    DATA_API_RETRIES: int = Field(default=2, ge=0, le=5)

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_ENABLED: bool = True
    CACHE_TTL_RESULTS: int = Field(default=3600, ge=1)  # 1 hour

    # CCI band cut points, as fractions of the scale span (upper-inclusive)
    CCI_BAND_LOW_MAX: float = Field(default=0.25, gt=0, lt=1)
    CCI_BAND_MODERATE_MAX: float = Field(default=0.50, gt=0, lt=1)
    CCI_BAND_HIGH_MAX: float = Field(default=0.75, gt=0, lt=1)
    CCI_DEFAULT_RATER_POPULATION: Literal["all", "self", "others", "others_or_all"] = "others_or_all"

    # Trend / summary parameters
    TREND_STABLE_TOLERANCE: float = Field(default=0.15, ge=0, le=1)
    GAP_CLASSIFICATION_THRESHOLD: float = Field(default=0.50, ge=0, le=2)
    RANKED_ITEMS_LIMIT: int = Field(default=5, ge=1, le=50)

    @model_validator(mode="after")
    def validate_cci_bands(self):
        """Band cut points must be strictly ascending."""
        if not (self.CCI_BAND_LOW_MAX < self.CCI_BAND_MODERATE_MAX < self.CCI_BAND_HIGH_MAX):
            raise ValueError(
                "CCI band cut points must be strictly ascending, got "
                f"{self.CCI_BAND_LOW_MAX}, {self.CCI_BAND_MODERATE_MAX}, {self.CCI_BAND_HIGH_MAX}"
            )
        return self

    @model_validator(mode="after")
    def validate_production_settings(self):
        """Ensure production has safe settings."""
        if self.APP_ENV == "production" and self.DEBUG:
            raise ValueError("DEBUG must be False in production")
        return self

    @property
    def cci_band_cuts(self) -> tuple[Decimal, Decimal, Decimal]:
        """CCI band cut fractions as Decimals."""
        return (
            Decimal(str(self.CCI_BAND_LOW_MAX)),
            Decimal(str(self.CCI_BAND_MODERATE_MAX)),
            Decimal(str(self.CCI_BAND_HIGH_MAX)),
        )

    @property
    def trend_tolerance(self) -> Decimal:
        return Decimal(str(self.TREND_STABLE_TOLERANCE))

    @property
    def gap_threshold(self) -> Decimal:
        return Decimal(str(self.GAP_CLASSIFICATION_THRESHOLD))


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
