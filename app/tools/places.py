from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from app.config import get_settings
from app.logs import get_logger
from app.tools.results import ProviderResult

logger = get_logger(__name__)

# Cuisine keywords accepted by the restaurant search, mapped to place types.
CUISINE_TYPES: Dict[str, str] = {
    "indian": "indian_restaurant",
    "chinese": "chinese_restaurant",
    "italian": "italian_restaurant",
    "mexican": "mexican_restaurant",
    "japanese": "japanese_restaurant",
    "thai": "thai_restaurant",
    "fast food": "fast_food_restaurant",
    "cafe": "cafe",
    "bakery": "bakery",
}


def place_type_for(category: str, cuisine: Optional[str] = None) -> str:
    if category == "hotel":
        return "lodging"
    if category == "restaurant":
        if cuisine:
            return CUISINE_TYPES.get(cuisine.lower(), "restaurant")
        return "restaurant"
    return category


@dataclass
class PlacesClient:
    """
    Geo-search provider backed by the Google Places Nearby Search API.
    """
    api_key: Optional[str] = None
    timeout: Optional[float] = None
    BASE_URL = "https://maps.googleapis.com/maps/api/place"

    def __post_init__(self) -> None:
        settings = get_settings()
        if self.api_key is None:
            self.api_key = settings.google_maps_api_key
        if self.timeout is None:
            self.timeout = settings.provider_timeout

    async def search(
        self,
        lat: float,
        lon: float,
        radius_meters: int,
        category: str,
        *,
        cuisine: Optional[str] = None,
    ) -> ProviderResult[Dict[str, Any]]:
        """Return raw place dicts near ``(lat, lon)``.

        ``ZERO_RESULTS`` is a successful empty answer; any other non-OK status,
        a transport error or a missing key comes back as a failed result.
        """
        source = f"places:{category}"
        if not self.api_key:
            logger.warning("GOOGLE_MAPS_API_KEY not configured; %s search skipped", category)
            return ProviderResult.failed(source, "missing api key")

        params = {
            "location": f"{lat},{lon}",
            "radius": int(radius_meters),
            "type": place_type_for(category, cuisine),
            "key": self.api_key,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(f"{self.BASE_URL}/nearbysearch/json", params=params)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as exc:
            logger.warning("Places %s search failed", category, exc_info=True)
            return ProviderResult.failed(source, str(exc) or exc.__class__.__name__)

        status = data.get("status")
        if status == "ZERO_RESULTS":
            return ProviderResult(source=source, items=[])
        if status != "OK":
            logger.warning("Places API returned status %s for %s search", status, category)
            return ProviderResult.failed(source, f"status {status}")

        results = [r for r in data.get("results", []) if isinstance(r, dict)]
        logger.info("Places %s search near %.4f,%.4f returned %d results", category, lat, lon, len(results))
        return ProviderResult(source=source, items=results)
