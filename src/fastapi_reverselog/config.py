"""Reconciliation engine configuration."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ReverseLogConfig(BaseSettings):
    """Runtime config for the reconciliation and retry engine."""

    model_config = SettingsConfigDict(env_prefix="REVERSELOG_")

    max_retries: int = Field(default=3, ge=0)
    page_size: int = Field(default=50, gt=0)

    tracking_language: str = "101"
    tracking_mode: str = "U"
    tracking_callback: str = ""

    notification_timeout_seconds: float = Field(default=10.0, gt=0)
    max_concurrent_tasks: int = Field(default=10, gt=0)
    drain_timeout_seconds: float = Field(default=10.0, ge=0)

    scheduler_enabled: bool = False
    poll_interval_seconds: float = Field(default=6 * 60 * 60, gt=0)
    retry_interval_seconds: float = Field(default=20 * 60, gt=0)
    updates_interval_seconds: float = Field(default=6 * 60 * 60, gt=0)
