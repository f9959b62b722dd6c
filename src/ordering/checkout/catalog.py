"""Read-only view of the product catalog used at checkout.

The catalog itself belongs to another service; checkout only needs to look
products up by id and read their pricing options (USD, first option is the
default). Records come in the catalog's own shape::

    {"id": "p1", "name": "Netflix", "stockOut": false,
     "pricing": [{"duration": "1 month", "price": 10}]}
"""

import json
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path


@dataclass(frozen=True)
class PricingOption:
    duration: str | None
    unit_price: Decimal  # USD


@dataclass(frozen=True)
class CatalogLine:
    product_id: str
    name: str
    pricing_options: tuple[PricingOption, ...] = ()
    stock_out: bool = False

    @property
    def default_option(self) -> PricingOption | None:
        return self.pricing_options[0] if self.pricing_options else None

    @classmethod
    def from_record(cls, record: dict) -> "CatalogLine":
        options = tuple(
            PricingOption(
                duration=option.get("duration"),
                unit_price=Decimal(str(option.get("price", 0))),
            )
            for option in record.get("pricing") or []
        )
        return cls(
            product_id=str(record["id"]),
            name=record.get("name") or "",
            pricing_options=options,
            stock_out=bool(record.get("stockOut", record.get("stock_out", False))),
        )


class CatalogSnapshot:
    """Products by id, frozen at the moment checkout reads them."""

    def __init__(self, lines=()):
        self._lines = {line.product_id: line for line in lines}

    def __len__(self):
        return len(self._lines)

    def __contains__(self, product_id):
        return str(product_id) in self._lines

    def lookup(self, product_id) -> CatalogLine | None:
        return self._lines.get(str(product_id))

    @classmethod
    def from_records(cls, records) -> "CatalogSnapshot":
        return cls(CatalogLine.from_record(record) for record in records)

    @classmethod
    def from_file(cls, path) -> "CatalogSnapshot":
        return cls.from_records(json.loads(Path(path).read_text(encoding="utf-8")))


_current_catalog: CatalogSnapshot | None = None


def get_catalog() -> CatalogSnapshot:
    """Return the active catalog snapshot, loading ``STOREFRONT_CATALOG_PATH`` on first use."""
    global _current_catalog
    if _current_catalog is None:
        from ordering.config import get_settings

        path = get_settings().catalog_path
        _current_catalog = CatalogSnapshot.from_file(path) if path else CatalogSnapshot()
    return _current_catalog


def set_catalog(catalog: CatalogSnapshot) -> None:
    global _current_catalog
    _current_catalog = catalog


def reset_catalog() -> None:
    global _current_catalog
    _current_catalog = None
