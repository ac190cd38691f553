"""Product catalogue for a single business."""
from __future__ import annotations

import logging
from typing import List, Optional

from biztrack import storage
from biztrack.access import authorize, find_owner
from biztrack.entities import MANAGEMENT_ROLES, Account, Product
from biztrack.errors import BusinessNotFoundError, PermissionDeniedError
from biztrack.storage import PersistenceGateway

log = logging.getLogger(__name__)


def find_product(products: List[Product], product_id: Optional[str], business: str) -> Optional[Product]:
    """Look up a product by id inside one business (by business key)."""
    if not product_id:
        return None
    for product in products:
        if product.id == product_id and product.business_key == business:
            return product
    return None


class CatalogService:
    """Product CRUD scoped to the acting account's business."""

    def __init__(self, actor: Account, gateway: Optional[PersistenceGateway] = None):
        if actor is None or not actor.business_key:
            raise ValueError("actor with a business name is required for CatalogService")
        self._actor = actor
        self._gateway = gateway or PersistenceGateway()

    # ------------------------------------------------------------------
    # Helpers
    def _all_products(self) -> List[Product]:
        return [Product.from_dict(row) for row in self._gateway.load_list(storage.PRODUCTS)]

    def _save(self, products: List[Product]) -> None:
        self._gateway.set(storage.PRODUCTS, [p.to_dict() for p in products])

    # ------------------------------------------------------------------
    # Public API
    def list_products(self) -> List[Product]:
        actor = authorize(self._gateway, self._actor)
        return [p for p in self._all_products() if p.business_key == actor.business_key]

    def get_product(self, product_id: str) -> Optional[Product]:
        actor = authorize(self._gateway, self._actor)
        return find_product(self._all_products(), product_id, actor.business_key)

    def upsert_product(self, product: Product) -> Product:
        """Insert a new product or replace the stored record with the same id.

        The whole record is written; fields are never merged.
        """
        authorize(self._gateway, self._actor, MANAGEMENT_ROLES, business_name=product.business_name)
        if find_owner(self._gateway, product.business_name) is None:
            raise BusinessNotFoundError(f'Business "{product.business_name}" is not registered.')
        if product.priced_below_cost:
            log.warning(
                "Product %r sells below cost (buy %s, sell %s)",
                product.name,
                product.buy_price,
                product.sell_price,
            )

        products = self._all_products()
        for index, existing in enumerate(products):
            if existing.id == product.id:
                if existing.business_key != product.business_key:
                    raise PermissionDeniedError("This product belongs to another business.")
                products[index] = product
                break
        else:
            products.append(product)
        self._save(products)
        return product

    def remove_product(self, product_id: str) -> bool:
        actor = authorize(self._gateway, self._actor, MANAGEMENT_ROLES)
        products = self._all_products()
        kept = [p for p in products if not (p.id == product_id and p.business_key == actor.business_key)]
        if len(kept) == len(products):
            return False
        self._save(kept)
        log.info("%s removed product %s", actor.id, product_id)
        return True
