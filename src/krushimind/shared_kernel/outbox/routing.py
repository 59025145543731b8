"""Route table from record type to local collection and remote endpoint.

Every RecordType member must have exactly one route. The table is checked
when this module is imported, so adding a record type without a route
fails at startup rather than during a sync pass.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from shared_kernel.outbox.value_objects import RecordType
from shared_kernel.storage.value_objects import (
    Collection,
    DomainRecord,
    Identification,
    MarketplaceListing,
)


@dataclass(frozen=True)
class RecordRoute:
    """Where a record type lives locally and where it is pushed.

    Attributes:
        collection: Local store collection holding records of this type
        endpoint: Server path accepting POSTed records of this type
        record_class: Value object class for records of this type
    """

    collection: Collection
    endpoint: str
    record_class: type[DomainRecord]


ROUTES: Mapping[RecordType, RecordRoute] = MappingProxyType(
    {
        RecordType.IDENTIFICATION: RecordRoute(
            collection=Collection.IDENTIFICATIONS,
            endpoint="/api/identifications",
            record_class=Identification,
        ),
        RecordType.MARKETPLACE: RecordRoute(
            collection=Collection.MARKETPLACE,
            endpoint="/api/marketplace",
            record_class=MarketplaceListing,
        ),
    }
)


def _check_routes_exhaustive() -> None:
    missing = set(RecordType) - set(ROUTES)
    if missing:
        raise RuntimeError(
            f"No sync route for record types: {sorted(str(m) for m in missing)}"
        )
    for record_type, route in ROUTES.items():
        if route.record_class.record_type is not record_type:
            raise RuntimeError(
                f"Route for {record_type} points at {route.record_class.__name__}"
            )


_check_routes_exhaustive()


def route_for(record_type: RecordType | str) -> RecordRoute:
    """Look up the route for a record type.

    Args:
        record_type: A RecordType or its string value

    Returns:
        The route for the record type

    Raises:
        ValueError: If the value is not a known record type
    """
    return ROUTES[RecordType(record_type)]
