"""Pydantic models for the type-specific part of an itinerary item.

``type_specific_data`` is a tagged union keyed by the item's ``type``. Each
variant lists the fields that make sense for that kind of item; unknown keys
are dropped, except on ``OtherDetails`` which keeps whatever it is given.
Wire keys are camelCase (``flightNumber``), attributes are snake_case.
"""

from typing import Any, Union

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from tripstore.domain.entities import UNSET, ItineraryItemType, Record
from tripstore.domain.exceptions import InvalidFormatError


class _TypeDetails(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )


class FlightDetails(_TypeDetails):
    airline: str | None = None
    flight_number: str | None = None
    departure_time: str | None = None
    arrival_time: str | None = None


class HotelDetails(_TypeDetails):
    hotel_name: str | None = None
    room_type: str | None = None
    check_in_time: str | None = None
    check_out_time: str | None = None


class TaxiDetails(_TypeDetails):
    departure_time: str | None = None
    arrival_time: str | None = None
    contact_phone: str | None = None


class TrainDetails(_TypeDetails):
    train_number: str | None = None
    train_class: str | None = None
    departure_time: str | None = None
    arrival_time: str | None = None
    platform: str | None = None


class BusDetails(_TypeDetails):
    bus_number: str | None = None
    bus_company: str | None = None
    departure_time: str | None = None
    arrival_time: str | None = None
    bus_stop: str | None = None


class BusinessVisitDetails(_TypeDetails):
    contact_name: str | None = None
    contact_phone: str | None = None
    company_name: str | None = None


class SightseeingDetails(_TypeDetails):
    entrance_fee: str | None = None
    opening_hours: str | None = None
    tour_duration: str | None = None
    tour_guide: str | None = None


class MeetingDetails(_TypeDetails):
    meeting_room: str | None = None
    meeting_type: str | None = None
    agenda: str | None = None
    contact_name: str | None = None
    company_name: str | None = None


class ConferenceDetails(_TypeDetails):
    conference_hall: str | None = None
    registration_required: bool | None = None


class TradeShowDetails(_TypeDetails):
    conference_hall: str | None = None
    registration_required: bool | None = None


class FactoryVisitDetails(_TypeDetails):
    factory_type: str | None = None
    safety_requirements: str | None = None
    tour_guide_required: bool | None = None
    contact_name: str | None = None
    company_name: str | None = None


class OtherDetails(_TypeDetails):
    model_config = ConfigDict(extra="allow")


TypeSpecificData = Union[
    FlightDetails,
    HotelDetails,
    TaxiDetails,
    TrainDetails,
    BusDetails,
    BusinessVisitDetails,
    SightseeingDetails,
    MeetingDetails,
    ConferenceDetails,
    TradeShowDetails,
    FactoryVisitDetails,
    OtherDetails,
]

DETAILS_BY_TYPE: dict[ItineraryItemType, type[_TypeDetails]] = {
    ItineraryItemType.FLIGHT: FlightDetails,
    ItineraryItemType.HOTEL: HotelDetails,
    ItineraryItemType.TAXI: TaxiDetails,
    ItineraryItemType.TRAIN: TrainDetails,
    ItineraryItemType.BUS: BusDetails,
    ItineraryItemType.BUSINESS_VISIT: BusinessVisitDetails,
    ItineraryItemType.SIGHTSEEING: SightseeingDetails,
    ItineraryItemType.MEETING: MeetingDetails,
    ItineraryItemType.CONFERENCE: ConferenceDetails,
    ItineraryItemType.TRADE_SHOW: TradeShowDetails,
    ItineraryItemType.FACTORY_VISIT: FactoryVisitDetails,
    ItineraryItemType.OTHER: OtherDetails,
}

_unmapped = set(ItineraryItemType) - set(DETAILS_BY_TYPE)
if _unmapped:
    raise RuntimeError(f"Itinerary types without a details model: {sorted(t.value for t in _unmapped)}")


def parse_type_specific_data(item_type: Any, data: dict[str, Any] | None) -> TypeSpecificData:
    """Validate ``data`` against the variant selected by ``item_type``."""
    model = DETAILS_BY_TYPE[ItineraryItemType.parse(item_type)]
    return model.model_validate(data or {})


def normalize_itinerary_payload(payload: Record) -> Record:
    """Reshape ``type_specific_data`` through its variant model.

    Only applies when the payload carries both ``type`` and a
    ``type_specific_data`` object; anything else passes through untouched so
    partial updates that only flip ``confirmed`` are not affected.
    """
    item_type = payload.get("type")
    data = payload.get("type_specific_data")
    if item_type in (None, UNSET, "") or not isinstance(data, dict):
        return payload

    try:
        details = parse_type_specific_data(item_type, data)
    except ValidationError as exc:
        raise InvalidFormatError(
            "itinerary_items",
            f"type_specific_data does not match type '{item_type}': {exc.error_count()} error(s)",
        ) from exc

    result = dict(payload)
    result["type_specific_data"] = details.model_dump(by_alias=True, exclude_none=True)
    return result
