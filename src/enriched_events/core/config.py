"""Configuration management for enriched-events."""

from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    log_level: str = "WARNING"
    otel_enabled: bool = False
    otel_service_name: str = "enriched-events"

    api_token: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "OPTIMIZELY_API_TOKEN", "ENRICHED_EVENTS_API_TOKEN"
        ),
    )
    credentials_url: str = "https://api.optimizely.com/v2/export/credentials"
    bucket: str = "optimizely-events-data"
    scheme: str = "s3"
    region_name: str = "us-east-1"
    request_timeout: Optional[float] = None

    model_config = {
        "env_prefix": "ENRICHED_EVENTS_",
        "case_sensitive": False,
        "populate_by_name": True,
    }


settings = Settings()
