"""Local inventory of hotels and restaurants."""
from __future__ import annotations

from typing import List, Optional

from app.reference import CatalogEntry, ReferenceData
from app.tools.results import ProviderResult


class CatalogStore:
    def __init__(self, reference: ReferenceData):
        self._entries = list(reference.catalog)

    def query(
        self,
        kind: str,
        *,
        city: Optional[str] = None,
        min_rating: float = 0.0,
        price_range: Optional[str] = None,
        cuisine: Optional[str] = None,
        limit: int = 20,
    ) -> List[CatalogEntry]:
        """Active entries of ``kind`` ordered by rating (hotels: then nightly price)."""
        matches: List[CatalogEntry] = []
        for entry in self._entries:
            if entry.kind != kind or not entry.is_active:
                continue
            if city and entry.city.lower() != city.lower():
                continue
            if (entry.rating or 0.0) < min_rating:
                continue
            if price_range and entry.price_range != price_range:
                continue
            if cuisine and cuisine.lower() not in {c.lower() for c in entry.cuisine}:
                continue
            matches.append(entry)

        if kind == "hotel":
            matches.sort(key=lambda e: (-(e.rating or 0.0), e.price_per_night or 0.0))
        else:
            matches.sort(key=lambda e: -(e.rating or 0.0))
        return matches[:limit]

    async def fetch(self, kind: str, **filters) -> ProviderResult[CatalogEntry]:
        """Async wrapper so catalog reads join the provider fan-out."""
        return ProviderResult(source=f"catalog:{kind}", items=self.query(kind, **filters))
