from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """App configuration (env-friendly).

    Every field can be overridden with an env var of the same name (case-insensitive)
    or through a local .env file.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Amenity Locator API"
    version: str = "0.1.0"

    overpass_base_url: AnyHttpUrl = "https://overpass-api.de/api/interpreter"
    # Popup links open "<map_search_base_url>/<lat>,<lon>"
    map_search_base_url: str = "https://www.google.com/maps/search"

    user_agent: str = "amenity-locator/0.1.0"

    # The Overpass server enforces query_timeout_s itself; the client adds no limit unless set.
    http_timeout_s: Optional[float] = None
    query_timeout_s: int = 120

    toilet_radius_km: float = 20.0
    drinking_water_radius_km: float = 10.0

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
