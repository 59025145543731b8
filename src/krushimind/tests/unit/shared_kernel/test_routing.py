"""Unit tests for the record type route table."""

import pytest

from shared_kernel.outbox.routing import ROUTES, route_for
from shared_kernel.outbox.value_objects import RecordType
from shared_kernel.storage import Collection, Identification, MarketplaceListing


class TestRouteTable:
    def test_every_record_type_has_a_route(self):
        assert set(ROUTES) == set(RecordType)

    def test_identification_route(self):
        route = route_for(RecordType.IDENTIFICATION)

        assert route.collection is Collection.IDENTIFICATIONS
        assert route.endpoint == "/api/identifications"
        assert route.record_class is Identification

    def test_marketplace_route_from_string(self):
        route = route_for("marketplace")

        assert route.collection is Collection.MARKETPLACE
        assert route.endpoint == "/api/marketplace"
        assert route.record_class is MarketplaceListing

    def test_unknown_record_type_raises(self):
        with pytest.raises(ValueError):
            route_for("finance")

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            ROUTES[RecordType.MARKETPLACE] = None
