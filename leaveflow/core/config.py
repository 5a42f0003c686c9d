"""
Configuration management for LeaveFlow Backend
"""
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import Optional, List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    APP_ENV: str = Field(default="local", description="Application environment: local, staging, prod")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level: DEBUG, INFO, WARNING, ERROR")

    # CORS settings
    ALLOWED_ORIGINS: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins. Use '*' for local only."
    )

    # Display timezone for API datetimes (code stores UTC)
    DISPLAY_TZ: str = Field(default="Asia/Kolkata", description="IANA timezone used when rendering datetimes")

    # Version (can be git SHA or semver)
    VERSION: Optional[str] = Field(default=None, description="Application version (git SHA or semver)")

    # Working calendar: weekday indices excluded from leave days (0=Sunday .. 6=Saturday)
    WEEKEND_DAYS: List[int] = Field(
        default=[5, 6],
        description="Weekday indices treated as weekend (0=Sunday .. 6=Saturday)",
    )
    EXCLUDE_HOLIDAYS_FROM_LEAVE_DAYS: bool = Field(
        default=True,
        description="If True, Public/Company holidays inside a Regular leave range are not counted",
    )

    # Balance ledger
    HOURS_PER_DAY: int = Field(default=8, description="Working hours that make up one leave day")
    DEFAULT_TOTAL_DAYS: float = Field(default=24, description="Annual leave days granted to a new balance")
    DEFAULT_TOTAL_HOURS: float = Field(default=16, description="Annual short-leave hours granted to a new balance")
    DEFAULT_CASUAL_QUOTA: float = Field(default=10, description="Casual leave quota for a new balance")
    DEFAULT_SICK_QUOTA: float = Field(default=14, description="Sick leave quota for a new balance")

    # Workflow behaviour
    STRICT_PRECONDITIONS: bool = Field(
        default=True,
        description="If True, delegation cancel/stop on an entry in the wrong state raises 409; if False it is a logged no-op",
    )
    AUTO_APPROVE_ON_ROUTING_DEAD_END: bool = Field(
        default=False,
        description="If True, an approval with no next approver resolves the request as Approved instead of failing",
    )

    # Demo org chart loaded at startup (local only)
    SEED_DEMO_DATA: bool = Field(default=False, description="Load the demo users and holidays on startup")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

    @field_validator("APP_ENV")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate APP_ENV"""
        allowed = ["local", "staging", "prod"]
        if v not in allowed:
            raise ValueError(f"APP_ENV must be one of {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate LOG_LEVEL"""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}")
        return v.upper()

    @field_validator("DISPLAY_TZ")
    @classmethod
    def validate_display_tz(cls, v: str) -> str:
        """Validate DISPLAY_TZ"""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"DISPLAY_TZ must be an IANA timezone name, got {v!r}")
        return v

    @field_validator("WEEKEND_DAYS")
    @classmethod
    def validate_weekend_days(cls, v: List[int]) -> List[int]:
        """Validate WEEKEND_DAYS"""
        for day in v:
            if day < 0 or day > 6:
                raise ValueError("WEEKEND_DAYS entries must be between 0 (Sunday) and 6 (Saturday)")
        return sorted(set(v))

    @field_validator("HOURS_PER_DAY")
    @classmethod
    def validate_hours_per_day(cls, v: int) -> int:
        """Validate HOURS_PER_DAY"""
        if v <= 0:
            raise ValueError("HOURS_PER_DAY must be positive")
        return v

    def validate_production(self) -> None:
        """
        Validate settings for production environment

        Raises:
            ValueError: If production settings are invalid
        """
        if self.APP_ENV == "prod":
            # ALLOWED_ORIGINS must not be wildcard in production
            if self.ALLOWED_ORIGINS == "*" or not self.ALLOWED_ORIGINS:
                raise ValueError(
                    "ALLOWED_ORIGINS must be explicitly set (not '*') in production environment"
                )
            if self.SEED_DEMO_DATA:
                raise ValueError("SEED_DEMO_DATA must be disabled in production environment")

    def get_allowed_origins_list(self) -> List[str]:
        """
        Get list of allowed CORS origins

        Returns:
            List of allowed origins (or ['*'] for local)
        """
        if self.ALLOWED_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]


# Create settings instance
settings = Settings()

# Validate production settings if in prod
if settings.APP_ENV == "prod":
    settings.validate_production()
