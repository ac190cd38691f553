"""Create the schema and seed the demo business on first run."""
from __future__ import annotations

import logging
from typing import Optional, Tuple

from biztrack import storage
from biztrack.db import engine
from biztrack.entities import Account, AccountStatus, Product, Role, Tier
from biztrack.security import hash_password
from biztrack.storage import PersistenceGateway

log = logging.getLogger(__name__)

DEMO_BUSINESS = "Lusaka Central Mart"
DEMO_OWNER_EMAIL = "owner@lusakamart.com"
DEMO_OWNER_PASSWORD = "password123"


def _demo_owner() -> Account:
    return Account(
        id="owner-123",
        full_name="Jane Doe",
        phone_number="0970000000",
        email=DEMO_OWNER_EMAIL,
        business_name=DEMO_BUSINESS,
        role=Role.OWNER,
        status=AccountStatus.APPROVED,
        tier=Tier.PAID,
        password_hash=hash_password(DEMO_OWNER_PASSWORD),
    )


def _demo_products():
    return [
        Product(id="1", business_name=DEMO_BUSINESS, name="Mosi Lager 375ml", buy_price=15, sell_price=20, stock_count=48, min_stock=12),
        Product(id="2", business_name=DEMO_BUSINESS, name="Mealie Meal 10kg", buy_price=180, sell_price=210, stock_count=5, min_stock=10),
        Product(id="3", business_name=DEMO_BUSINESS, name="Cooking Oil 2L", buy_price=65, sell_price=85, stock_count=20, min_stock=5),
    ]


def seed_if_empty(gateway: Optional[PersistenceGateway] = None) -> Tuple[bool, bool]:
    """Seed the demo owner and catalogue where their collections are empty.

    Returns ``(seeded_accounts, seeded_products)``.
    """
    gateway = gateway or PersistenceGateway()
    seeded_accounts = seeded_products = False
    if not gateway.load_list(storage.ACCOUNTS):
        gateway.set(storage.ACCOUNTS, [_demo_owner().to_dict()])
        seeded_accounts = True
        log.info("Seeded demo owner %s", DEMO_OWNER_EMAIL)
    if not gateway.load_list(storage.PRODUCTS):
        gateway.set(storage.PRODUCTS, [p.to_dict() for p in _demo_products()])
        seeded_products = True
        log.info("Seeded demo catalogue for %r", DEMO_BUSINESS)
    return seeded_accounts, seeded_products


if __name__ == "__main__":
    gateway = PersistenceGateway()
    seed_if_empty(gateway)
    print(f"Collections ready at -> {engine.url.database}")
