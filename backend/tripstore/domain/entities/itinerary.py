"""Itinerary item discriminant: selects the shape of ``type_specific_data``."""

from enum import Enum


class ItineraryItemType(str, Enum):
    FLIGHT = "Flight"
    HOTEL = "Hotel"
    TAXI = "Taxi"
    TRADE_SHOW = "TradeShow"
    BUSINESS_VISIT = "BusinessVisit"
    SIGHTSEEING = "Sightseeing"
    TRAIN = "Train"
    BUS = "Bus"
    MEETING = "Meeting"
    CONFERENCE = "Conference"
    FACTORY_VISIT = "Factory Visit"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: object) -> "ItineraryItemType":
        """Map a raw ``type`` value to a member, falling back to ``OTHER``."""
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER
