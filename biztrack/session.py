"""The signed-in account, held as an explicit object instead of a global."""
from __future__ import annotations

import logging
from typing import Optional

from biztrack import storage
from biztrack.entities import Account
from biztrack.storage import PersistenceGateway

log = logging.getLogger(__name__)


class SessionContext:
    """Credential-free projection of the current account, persisted in ``session``."""

    def __init__(self, gateway: PersistenceGateway):
        self._gateway = gateway

    @property
    def account(self) -> Optional[Account]:
        data = self._gateway.get(storage.SESSION)
        return Account.from_dict(data) if data else None

    def is_active_for(self, account_id: str) -> bool:
        current = self.account
        return current is not None and current.id == account_id

    def establish(self, account: Account) -> Account:
        projection = account.without_credential()
        self._gateway.set(storage.SESSION, projection.to_dict(include_credential=False))
        log.debug("Session established for %s", projection.id)
        return projection

    def clear(self) -> None:
        self._gateway.set(storage.SESSION, None)
