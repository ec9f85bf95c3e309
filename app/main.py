from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from fastapi import Body, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from app.config import get_settings
from app.errors import PlannerError
from app.orchestrator import generate_itinerary, search_hotels, search_restaurants, search_transport
from app.schemas import ItineraryRequest

app = FastAPI(title="Trip Planner Itinerary API")

# Allow local development UIs to reach the API without wrestling with browser
# CORS restrictions. Operators can scope this via TRIP_PLANNER_ALLOWED_ORIGINS.
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _planner_http_error(exc: PlannerError) -> HTTPException:
    return HTTPException(status_code=400, detail={"error": exc.kind, "message": str(exc)})


@app.post("/api/itinerary")
async def api_itinerary(payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    """Validate the incoming payload and delegate to the orchestrator."""
    try:
        req = ItineraryRequest.model_validate(payload)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors(include_url=False)) from exc

    try:
        itinerary = await generate_itinerary(
            req.budget,
            req.days,
            req.destination,
            req.start_date,
            req.language,
        )
    except PlannerError as exc:
        raise _planner_http_error(exc) from exc

    return {
        "message": f"Your {req.days}-day {req.destination} itinerary is ready!",
        "itinerary": itinerary.model_dump(mode="json", by_alias=True),
    }


@app.get("/api/hotels")
async def api_hotels(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    budget: Optional[Literal["budget", "mid-range", "luxury"]] = None,
    rating: Optional[float] = Query(None, ge=1, le=5),
    radius: int = Query(10, ge=1, le=50),
) -> Dict[str, Any]:
    try:
        return await search_hotels(lat, lng, budget=budget, min_rating=rating or 0.0, radius_km=radius)
    except PlannerError as exc:
        raise _planner_http_error(exc) from exc


@app.get("/api/restaurants")
async def api_restaurants(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    budget: Optional[Literal["budget", "mid-range", "expensive"]] = None,
    cuisine: Optional[str] = None,
    rating: Optional[float] = Query(None, ge=1, le=5),
    radius: int = Query(5, ge=1, le=20),
) -> Dict[str, Any]:
    try:
        return await search_restaurants(
            lat, lng, budget=budget, cuisine=cuisine, min_rating=rating or 0.0, radius_km=radius
        )
    except PlannerError as exc:
        raise _planner_http_error(exc) from exc


@app.get("/api/transport")
async def api_transport(
    origin: str = Query(..., min_length=1),
    destination: str = Query(..., min_length=1),
    mode: Literal["cab", "auto", "all"] = "all",
) -> Dict[str, Any]:
    result = await search_transport(origin, destination, mode)
    if result is None:
        raise HTTPException(status_code=400, detail="Could not find route between specified locations")
    return result
