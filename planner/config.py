"""Engine configuration loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PLANNER_", env_file=".env", extra="ignore"
    )

    # Time grid
    pixels_per_hour: int = 50
    snap_minutes: int = 15
    min_event_height_px: int = 20
    quick_add_minutes: int = 60
    default_event_hour: int = 9

    # Month cells / all-day rows
    month_visible_events: int = 3
    lane_height_px: int = 24

    log_level: str = "INFO"


settings = Settings()
