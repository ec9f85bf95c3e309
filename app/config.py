"""Environment-driven settings."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass
class Settings:
    google_maps_api_key: str = ""
    log_level: str = "INFO"
    reference_data_path: Optional[str] = None
    provider_timeout: float = 10.0
    hotel_radius_km: float = 10.0
    restaurant_radius_km: float = 5.0
    allowed_origins: List[str] = field(default_factory=lambda: ["*"])


def get_settings() -> Settings:
    """Read settings from the environment on every call so tests can monkeypatch env vars."""
    raw_origins = os.getenv("TRIP_PLANNER_ALLOWED_ORIGINS") or "*"
    allowed_origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]
    return Settings(
        google_maps_api_key=os.getenv("GOOGLE_MAPS_API_KEY", ""),
        log_level=os.getenv("TRIP_PLANNER_LOG_LEVEL", "INFO").upper(),
        reference_data_path=os.getenv("TRIP_PLANNER_REFERENCE_DATA") or None,
        provider_timeout=_float_env("TRIP_PLANNER_PROVIDER_TIMEOUT", 10.0),
        hotel_radius_km=_float_env("TRIP_PLANNER_HOTEL_RADIUS_KM", 10.0),
        restaurant_radius_km=_float_env("TRIP_PLANNER_RESTAURANT_RADIUS_KM", 5.0),
        allowed_origins=allowed_origins or ["*"],
    )
