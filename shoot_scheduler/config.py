"""
Scheduler settings.

All policy constants of the scene-to-day optimizer live here so a single
engine can run either the dynamic weekly policy or the fixed daily cap.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SchedulerSettings(BaseSettings):
    """Policy and runtime settings, overridable through SHOOT_* env vars"""

    # Duration estimation
    shooting_ratio: int = Field(default=20, ge=1)
    default_nominal_duration: int = Field(default=5, ge=1)

    # Packing policy (minutes)
    scene_break: int = Field(default=30, ge=0)
    fixed_daily_cap: bool = False
    max_daily_duration: int = Field(default=480, ge=1)
    min_day_duration: int = Field(default=8 * 60, ge=1)
    max_day_duration: int = Field(default=12 * 60, ge=1)
    max_weekly_duration: int = Field(default=52 * 60, ge=1)
    rest_day_every: int = Field(default=7, ge=2)
    max_scenes_per_day: int = Field(default=6, ge=1)
    location_continuity_limit: int = Field(default=3, ge=1)

    # Timeline
    meeting_location: str = ""

    # Service
    env: str = "dev"  # dev|prod|test
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="SHOOT_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def work_days_per_week(self) -> int:
        return self.rest_day_every - 1


@lru_cache(maxsize=1)
def get_settings() -> SchedulerSettings:
    """Process-wide settings instance"""
    return SchedulerSettings()
