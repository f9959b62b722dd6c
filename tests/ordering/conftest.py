from decimal import Decimal

import pytest
from ordering.checkout.assembler import CustomerDetails, OrderAssembler
from ordering.checkout.catalog import CatalogSnapshot, set_catalog
from ordering.config import StoreSettings
from payments.gateway import set_gateway
from payments.gateway.fake_adapter import FakeGateway

CATALOG_RECORDS = [
    {
        "id": "netflix",
        "name": "Netflix Premium",
        "pricing": [{"duration": "1 month", "price": 10}, {"duration": "3 months", "price": 27}],
    },
    {"id": "spotify", "name": "Spotify Family", "pricing": [{"duration": "1 month", "price": 7.5}]},
    {"id": "canva", "name": "Canva Pro", "pricing": [{"duration": "1 year", "price": "0.335"}]},
    {"id": "retired", "name": "Retired Product", "pricing": []},
]


@pytest.fixture
def catalog():
    snapshot = CatalogSnapshot.from_records(CATALOG_RECORDS)
    set_catalog(snapshot)
    return snapshot


@pytest.fixture
def settings():
    return StoreSettings(
        _env_file=None,
        usd_to_bdt_rate=Decimal("110"),
        tax_rate=Decimal("0"),
        shipping_fee=Decimal("0"),
        pending_order_ttl_hours=24,
    )


@pytest.fixture
def fake_gateway():
    gateway = FakeGateway()
    set_gateway(gateway)
    return gateway


@pytest.fixture
def customer():
    return CustomerDetails(
        first_name="Nadia",
        last_name="Rahman",
        email="nadia@example.com",
        phone="+8801700000000",
    )


@pytest.fixture
def make_draft(catalog, settings, customer):
    """Build an order draft without touching the ledger."""

    def _make(lines=None, currency="USD", who=None):
        assembler = OrderAssembler.from_settings(catalog, settings)
        return assembler.assemble(lines or {"netflix": 2}, who or customer, currency)

    return _make


@pytest.fixture
def placed_order(make_draft):
    """Place a pending order through the ledger and return its id."""
    from ordering.order.ledger import get_ledger

    def _place(**kwargs):
        return get_ledger().place(make_draft(**kwargs))

    return _place
