"""Key-value persistence for the named JSON collections."""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict

from sqlalchemy.orm import Session

from biztrack.db import Base, SessionLocal
from biztrack.models import StoredCollection

log = logging.getLogger(__name__)

ACCOUNTS = "accounts"
PRODUCTS = "products"
TRANSACTIONS = "transactions"
SESSION = "session"

COLLECTIONS = (ACCOUNTS, PRODUCTS, TRANSACTIONS, SESSION)


class PersistenceGateway:
    """Get/set access to the stored collections. No business rules live here."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self._session_factory = session_factory
        self._ensure_tables()

    def _session(self) -> Session:
        return self._session_factory()

    def _ensure_tables(self) -> None:
        session = self._session()
        try:
            Base.metadata.create_all(bind=session.get_bind())
        finally:
            session.close()

    @staticmethod
    def _check_key(collection: str) -> str:
        if collection not in COLLECTIONS:
            raise KeyError(f"Unknown collection: {collection!r}")
        return collection

    def get(self, collection: str, default: Any = None) -> Any:
        key = self._check_key(collection)
        session = self._session()
        try:
            row = session.get(StoredCollection, key)
            if row is None:
                return default
            return json.loads(row.payload)
        finally:
            session.close()

    def set(self, collection: str, value: Any) -> None:
        self.set_many({collection: value})

    def set_many(self, values: Dict[str, Any]) -> None:
        """Write several collections in one database transaction."""
        session = self._session()
        try:
            for collection, value in values.items():
                key = self._check_key(collection)
                payload = json.dumps(value, ensure_ascii=False)
                row = session.get(StoredCollection, key)
                if row is None:
                    session.add(StoredCollection(key=key, payload=payload))
                else:
                    row.payload = payload
            session.commit()
            log.debug("Stored collections %s", ", ".join(values))
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def load_list(self, collection: str) -> list:
        return list(self.get(collection, []) or [])
