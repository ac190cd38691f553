"""Sales and expense ledger for a single business."""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional

from biztrack import storage
from biztrack.access import authorize
from biztrack.entities import Account, Product, Role, Transaction, now_ms
from biztrack.errors import ValidationError
from biztrack.services.catalog_service import find_product
from biztrack.storage import PersistenceGateway

log = logging.getLogger(__name__)


class LedgerService:
    """Record, delete and list transactions for the acting account's business."""

    def __init__(self, actor: Account, gateway: Optional[PersistenceGateway] = None):
        if actor is None or not actor.business_key:
            raise ValueError("actor with a business name is required for LedgerService")
        self._actor = actor
        self._gateway = gateway or PersistenceGateway()

    # ------------------------------------------------------------------
    # Helpers
    def _all_transactions(self) -> List[Transaction]:
        return [Transaction.from_dict(row) for row in self._gateway.load_list(storage.TRANSACTIONS)]

    def _all_products(self) -> List[Product]:
        return [Product.from_dict(row) for row in self._gateway.load_list(storage.PRODUCTS)]

    # ------------------------------------------------------------------
    # Public API
    def record(self, txn: Transaction) -> Transaction:
        """Add a transaction to the front of the ledger.

        A SALE that names an item takes ``quantity`` off that product's stock
        in the same write. If the product is gone the sale is still recorded
        and stock is left alone.
        """
        actor = authorize(self._gateway, self._actor, business_name=txn.business_name)
        if txn.amount is None or not txn.amount > 0:
            raise ValidationError("Amount must be greater than zero.")
        # quantity 0 or None counts as a single unit
        if txn.quantity is not None and txn.quantity < 0:
            raise ValidationError("Quantity cannot be negative.")

        products = self._all_products()
        product = find_product(products, txn.item_id, actor.business_key) if txn.is_sale else None

        txn = replace(
            txn,
            quantity=txn.units,
            timestamp=txn.timestamp or now_ms(),
            recorded_by=actor.id,
            item_name=txn.item_name or (product.name if product else None),
        )

        transactions = self._gateway.load_list(storage.TRANSACTIONS)
        for row in transactions:
            if row.get("id") == txn.id and Transaction.from_dict(row).business_key == actor.business_key:
                raise ValidationError("A transaction with this id is already recorded.")
        transactions.insert(0, txn.to_dict())
        updates = {storage.TRANSACTIONS: transactions}

        if txn.is_sale and txn.item_id:
            if product is None:
                log.info("Sale %s references missing product %s; stock not adjusted", txn.id, txn.item_id)
            else:
                product.stock_count -= txn.units
                if product.stock_count < 0:
                    log.warning("Stock for %r is negative (%s)", product.name, product.stock_count)
                updates[storage.PRODUCTS] = [p.to_dict() for p in products]

        self._gateway.set_many(updates)
        return txn

    def delete(self, txn_id: str) -> bool:
        """Remove a ledger entry. Stock that the sale took off is not restored."""
        actor = authorize(self._gateway, self._actor, {Role.OWNER})
        rows = self._gateway.load_list(storage.TRANSACTIONS)
        kept = [
            row
            for row in rows
            if not (row.get("id") == txn_id and Transaction.from_dict(row).business_key == actor.business_key)
        ]
        if len(kept) == len(rows):
            return False
        self._gateway.set(storage.TRANSACTIONS, kept)
        log.info("%s deleted transaction %s", actor.id, txn_id)
        return True

    def list_transactions(self) -> List[Transaction]:
        """Transactions of the business, most recent first."""
        actor = authorize(self._gateway, self._actor)
        return [t for t in self._all_transactions() if t.business_key == actor.business_key]
