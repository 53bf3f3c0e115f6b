"""Unit tests for the itinerary type-specific data models."""

import pytest

from tripstore.application.schemas import (
    DETAILS_BY_TYPE,
    normalize_itinerary_payload,
    parse_type_specific_data,
)
from tripstore.application.schemas.itinerary import (
    FactoryVisitDetails,
    FlightDetails,
    HotelDetails,
    OtherDetails,
)
from tripstore.domain.entities import ItineraryItemType
from tripstore.domain.exceptions import InvalidFormatError


def test_every_item_type_has_a_details_model():
    assert set(DETAILS_BY_TYPE) == set(ItineraryItemType)


@pytest.mark.parametrize(
    ("item_type", "model"),
    [
        ("Flight", FlightDetails),
        ("Hotel", HotelDetails),
        ("Factory Visit", FactoryVisitDetails),
        ("Something New", OtherDetails),
        (None, OtherDetails),
    ],
)
def test_parse_selects_variant_by_type(item_type, model):
    assert isinstance(parse_type_specific_data(item_type, {}), model)


def test_flight_details_accept_camel_case_and_drop_unknown_keys():
    details = parse_type_specific_data(
        "Flight", {"airline": "Air China", "flightNumber": "CA1234", "seat": "12A"}
    )
    assert details.flight_number == "CA1234"
    assert details.model_dump(by_alias=True, exclude_none=True) == {
        "airline": "Air China",
        "flightNumber": "CA1234",
    }


def test_other_details_keep_arbitrary_keys():
    details = parse_type_specific_data("Other", {"anything": "goes"})
    assert details.model_dump(by_alias=True, exclude_none=True) == {"anything": "goes"}


def test_normalize_reshapes_type_specific_data():
    payload = {
        "id": "i1",
        "type": "Hotel",
        "title": "Check in",
        "type_specific_data": {"hotelName": "Peninsula", "roomType": "Deluxe", "pool": True},
    }

    result = normalize_itinerary_payload(payload)

    assert result["type_specific_data"] == {"hotelName": "Peninsula", "roomType": "Deluxe"}
    assert payload["type_specific_data"]["pool"] is True


def test_normalize_leaves_partial_updates_alone():
    assert normalize_itinerary_payload({"confirmed": True}) == {"confirmed": True}
    assert normalize_itinerary_payload({"type": "Flight", "type_specific_data": None}) == {
        "type": "Flight",
        "type_specific_data": None,
    }


def test_normalize_rejects_invalid_values():
    with pytest.raises(InvalidFormatError):
        normalize_itinerary_payload(
            {"type": "Conference", "type_specific_data": {"registrationRequired": "maybe"}}
        )
