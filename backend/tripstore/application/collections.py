"""Catalogue of the collections mirrored by the store."""

from tripstore.application.schemas.itinerary import normalize_itinerary_payload
from tripstore.domain.entities import CollectionDefinition
from tripstore.domain.exceptions import UnknownCollectionError

COLLECTIONS: dict[str, CollectionDefinition] = {
    definition.name: definition
    for definition in (
        CollectionDefinition(
            name="destinations",
            label="Destinations",
            required_fields=("name", "description"),
        ),
        CollectionDefinition(
            name="itinerary_items",
            label="Itinerary Items",
            required_fields=("type", "title"),
            # the remote table has no time columns yet
            unsupported_columns=("start_time", "end_time"),
            normalize=normalize_itinerary_payload,
        ),
        CollectionDefinition(
            name="suppliers",
            label="Suppliers",
            required_fields=("company_name", "contact_person"),
        ),
        CollectionDefinition(
            name="business_contacts",
            label="Business Contacts",
            required_fields=("name", "company"),
        ),
        CollectionDefinition(
            name="expenses",
            label="Expenses",
            required_fields=("date", "category", "amount"),
        ),
        CollectionDefinition(
            name="todos",
            label="Todos",
            required_fields=("title",),
        ),
        CollectionDefinition(
            name="appointments",
            label="Appointments",
            required_fields=("title", "start_date"),
        ),
        CollectionDefinition(
            name="trips",
            label="Trips",
            required_fields=("trip_name", "start_date"),
        ),
    )
}

# Foreign-key safe order for loading every sample dataset at once:
# business contacts reference suppliers, appointments reference both.
SEED_ORDER: tuple[str, ...] = (
    "suppliers",
    "destinations",
    "business_contacts",
    "expenses",
    "itinerary_items",
    "todos",
    "appointments",
)


def get_collection_definition(name: str) -> CollectionDefinition:
    try:
        return COLLECTIONS[name]
    except KeyError:
        raise UnknownCollectionError(name) from None
