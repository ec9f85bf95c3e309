import pytest
from pydantic import ValidationError

from app.schemas import ItineraryRequest, TransportLeg

SAMPLE_PAYLOAD = {
    "budget": 15000,
    "days": 4,
    "destination": "Kerala",
    "startDate": "2025-12-20",
    "language": "Hindi",
}


def test_itinerary_request_accepts_camel_case_start_date():
    req = ItineraryRequest.model_validate(SAMPLE_PAYLOAD)

    assert req.start_date == "2025-12-20"
    assert req.budget == 15000
    assert req.model_dump()["start_date"] == "2025-12-20"


def test_itinerary_request_accepts_legacy_budget_field():
    legacy_payload = {**SAMPLE_PAYLOAD}
    legacy_payload.pop("budget")
    legacy_payload["budget_total"] = 3200

    req = ItineraryRequest.model_validate(legacy_payload)
    assert req.budget == 3200


def test_itinerary_request_defaults_language_to_english():
    payload = {k: v for k, v in SAMPLE_PAYLOAD.items() if k != "language"}

    assert ItineraryRequest.model_validate(payload).language == "English"


@pytest.mark.parametrize("missing", ["budget", "days", "destination", "startDate"])
def test_itinerary_request_requires_core_fields(missing):
    payload = {k: v for k, v in SAMPLE_PAYLOAD.items() if k != missing}

    with pytest.raises(ValidationError):
        ItineraryRequest.model_validate(payload)


def test_transport_leg_serializes_from_alias():
    leg = TransportLeg(id="t1", **{"from": "Hotel"}, to="Fort", mode="Taxi", cost=120)

    assert leg.frm == "Hotel"
    assert leg.model_dump(by_alias=True)["from"] == "Hotel"
