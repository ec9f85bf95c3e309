from dataclasses import dataclass
from typing import Optional

import httpx

from app.config import get_settings
from app.logs import get_logger
from app.schemas import RouteInfo
from app.tools.results import ProviderResult

logger = get_logger(__name__)


@dataclass
class DirectionsClient:
    """Routing provider used by transport ranking."""
    api_key: Optional[str] = None
    timeout: Optional[float] = None
    BASE_URL = "https://maps.googleapis.com/maps/api/directions/json"

    def __post_init__(self) -> None:
        settings = get_settings()
        if self.api_key is None:
            self.api_key = settings.google_maps_api_key
        if self.timeout is None:
            self.timeout = settings.provider_timeout

    async def route(self, origin: str, destination: str, mode: str = "driving") -> ProviderResult[RouteInfo]:
        source = "directions"
        if not self.api_key:
            logger.warning("GOOGLE_MAPS_API_KEY not configured; routing skipped")
            return ProviderResult.failed(source, "missing api key")

        params = {
            "origin": origin,
            "destination": destination,
            "mode": mode,
            "key": self.api_key,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.BASE_URL, params=params)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as exc:
            logger.warning("Directions lookup %s -> %s failed", origin, destination, exc_info=True)
            return ProviderResult.failed(source, str(exc) or exc.__class__.__name__)

        if data.get("status") != "OK":
            logger.warning("Directions API returned status %s", data.get("status"))
            return ProviderResult.failed(source, f"status {data.get('status')}")

        routes = data.get("routes") or []
        legs = (routes[0].get("legs") or []) if routes else []
        if not legs:
            return ProviderResult(source=source, items=[])

        leg = legs[0]
        distance = leg.get("distance") or {}
        duration = leg.get("duration") or {}
        if distance.get("value") is None or duration.get("value") is None:
            logger.warning("Directions leg %s -> %s lacks distance or duration", origin, destination)
            return ProviderResult.failed(source, "incomplete route")
        info = RouteInfo(
            distance_km=distance["value"] / 1000,
            duration_min=duration["value"] / 60,
            distance_text=distance.get("text"),
            duration_text=duration.get("text"),
            start_address=leg.get("start_address"),
            end_address=leg.get("end_address"),
        )
        return ProviderResult(source=source, items=[info])
