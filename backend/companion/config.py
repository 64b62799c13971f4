import os
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    youtube_api_key: Optional[str] = Field(None, alias="COMPANION_YOUTUBE_API_KEY")
    gemini_api_key: Optional[str] = Field(None, alias="COMPANION_GEMINI_API_KEY")
    gemini_model: str = Field("gemini-1.5-pro-002", alias="COMPANION_GEMINI_MODEL")
    youtube_base_url: str = Field("https://www.googleapis.com/youtube/v3", alias="COMPANION_YOUTUBE_BASE_URL")
    http_timeout_seconds: float = Field(15.0, gt=0, alias="COMPANION_HTTP_TIMEOUT_SECONDS")
    default_daily_minutes: float = Field(30.0, gt=0, alias="COMPANION_DEFAULT_DAILY_MINUTES")
    default_topic_days: int = Field(30, ge=1, alias="COMPANION_DEFAULT_TOPIC_DAYS")
    calendar_week_start: Literal["sunday", "monday"] = Field("sunday", alias="COMPANION_CALENDAR_WEEK_START")

    class Config:
        env_file = os.getenv("ENV_FILE", ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache
def get_settings() -> Settings:
    try:
        return Settings()  # type: ignore[arg-type]
    except ValidationError as exc:
        raise RuntimeError(f"Invalid backend configuration: {exc}") from exc
