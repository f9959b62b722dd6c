"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the checkout validation rules
(non-blank contact fields, email shape, supported currency) and match the
exact field names expected by the API's Pydantic request schemas.

Product ids come from ``loadtests/catalog.json``; start the server with
``STOREFRONT_CATALOG_PATH=loadtests/catalog.json`` so they resolve.
"""

import json
import random
import uuid
from pathlib import Path

from faker import Faker

fake = Faker()

CATALOG_PATH = Path(__file__).with_name("catalog.json")
PRODUCT_IDS = [record["id"] for record in json.loads(CATALOG_PATH.read_text(encoding="utf-8"))]


def session_id() -> str:
    """Generate browser-like session ids like 'sess-lt-a1b2c3d4e5f6'."""
    return f"sess-lt-{uuid.uuid4().hex[:12]}"


def valid_email() -> str:
    local = fake.user_name()[:20]
    domain = fake.free_email_domain()
    return f"{local}.{uuid.uuid4().hex[:4]}@{domain}"


def valid_phone() -> str:
    """Bangladeshi mobile numbers, the storefront's main market."""
    return f"+8801{random.randint(3, 9)}{random.randint(10000000, 99999999)}"


def cart_item_data(product_id: str | None = None) -> dict:
    """Generate AddToCartRequest payload."""
    return {
        "product_id": product_id or random.choice(PRODUCT_IDS),
        "quantity": random.randint(1, 3),
    }


def checkout_data(session: str, currency: str | None = None) -> dict:
    """Generate CheckoutRequest payload for ``session``."""
    return {
        "session_id": session,
        "first_name": fake.first_name()[:100],
        "last_name": fake.last_name()[:100],
        "email": valid_email(),
        "phone": valid_phone(),
        "notes": fake.sentence() if random.random() < 0.3 else None,
        "currency": currency or random.choice(["USD", "BDT"]),
    }


def search_term() -> str:
    return random.choice(["ORD-", "@", fake.first_name()[:3].lower()])
