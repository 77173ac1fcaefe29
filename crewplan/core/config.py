from typing import Literal

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from crewplan.domain.scheduling.value_objects import thresholds as limits
from crewplan.domain.scheduling.value_objects.thresholds import SchedulingThresholds


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CREWPLAN_",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )
    PROJECT_NAME: str = "crewplan"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"

    # Observability Configuration
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "json"
    ENABLE_METRICS: bool = True

    # Conflict scan cache
    CACHE_BACKEND: Literal["memory", "redis"] = "memory"
    CACHE_KEY_PREFIX: str = "crewplan:"
    CONFLICT_CACHE_TTL_SECONDS: int = limits.CONFLICT_CACHE_TTL_SECONDS

    # Redis Configuration
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str | None = None
    REDIS_SSL: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def REDIS_URL(self) -> str:
        """Build Redis connection URL."""
        if self.REDIS_PASSWORD:
            auth = f":{self.REDIS_PASSWORD}@"
        else:
            auth = ""

        protocol = "rediss" if self.REDIS_SSL else "redis"
        return f"{protocol}://{auth}{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    # Scheduling thresholds
    MAX_DAILY_HOURS: float = limits.MAX_DAILY_HOURS
    STANDARD_HOURS_PER_DAY: float = limits.STANDARD_HOURS_PER_DAY
    STANDARD_WEEKLY_HOURS: float = limits.STANDARD_WEEKLY_HOURS
    CRITICAL_UTILIZATION_PCT: float = limits.CRITICAL_UTILIZATION_PCT
    OVER_CAPACITY_PCT: float = limits.OVER_CAPACITY_PCT
    CAPACITY_SCAN_WINDOW_DAYS: int = limits.CAPACITY_SCAN_WINDOW_DAYS

    # Cost rates (USD/hour)
    CONTRACTOR_HOURLY_RATE: float = limits.CONTRACTOR_HOURLY_RATE
    OVERTIME_BASE_RATE: float = limits.OVERTIME_BASE_RATE
    OVERTIME_MULTIPLIER: float = limits.OVERTIME_MULTIPLIER
    MAX_OVERTIME_HOURS: float = limits.MAX_OVERTIME_HOURS

    def scheduling_thresholds(self) -> SchedulingThresholds:
        """Thresholds for the detection and resolution rules."""
        return SchedulingThresholds(
            max_daily_hours=self.MAX_DAILY_HOURS,
            standard_hours_per_day=self.STANDARD_HOURS_PER_DAY,
            standard_weekly_hours=self.STANDARD_WEEKLY_HOURS,
            critical_utilization_pct=self.CRITICAL_UTILIZATION_PCT,
            over_capacity_pct=self.OVER_CAPACITY_PCT,
            capacity_scan_window_days=self.CAPACITY_SCAN_WINDOW_DAYS,
            contractor_hourly_rate=self.CONTRACTOR_HOURLY_RATE,
            overtime_base_rate=self.OVERTIME_BASE_RATE,
            overtime_multiplier=self.OVERTIME_MULTIPLIER,
            max_overtime_hours=self.MAX_OVERTIME_HOURS,
        )


settings = Settings()
