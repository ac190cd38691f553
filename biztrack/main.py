import logging
from typing import Optional

from biztrack import reporting
from biztrack.auth_service import AuthService
from biztrack.core.config import settings
from biztrack.entities import Role
from biztrack.errors import BizTrackError
from biztrack.init_db import DEMO_BUSINESS, DEMO_OWNER_EMAIL, DEMO_OWNER_PASSWORD, seed_if_empty
from biztrack.services.catalog_service import CatalogService
from biztrack.services.ledger_service import LedgerService
from biztrack.storage import PersistenceGateway


def run(gateway: Optional[PersistenceGateway] = None):
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    print(f"BizTrack environment: {settings.ENV}")
    print(f"App Name: {settings.APP_NAME}")
    print(f"Debug: {settings.DEBUG}")

    gateway = gateway or PersistenceGateway()
    seed_if_empty(gateway)
    auth = AuthService(gateway)
    try:
        owner = auth.sign_in(DEMO_BUSINESS, DEMO_OWNER_EMAIL, DEMO_OWNER_PASSWORD, Role.OWNER)
    except BizTrackError as exc:
        print("Demo login failed:", exc)
        return
    try:
        products = CatalogService(owner, gateway).list_products()
        transactions = LedgerService(owner, gateway).list_transactions()
        view = reporting.dashboard_for(owner, transactions, products)
        print(f"{owner.business_name}: {view.headline_label} {reporting.format_amount(view.headline)}")
        print(f"Stock value at cost: {reporting.format_amount(reporting.inventory_value(products))}")
        for product in view.low_stock:
            print(f" - low stock: {product.name} ({product.stock_count} left)")
    finally:
        auth.logout()


if __name__ == "__main__":
    run()
