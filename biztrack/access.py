"""Capability checks parameterised by the acting account."""
from __future__ import annotations

from typing import Iterable, Optional

from biztrack import storage
from biztrack.entities import Account, AccountStatus, Role, business_key
from biztrack.errors import AccountNotApprovedError, AccountNotFoundError, PermissionDeniedError
from biztrack.storage import PersistenceGateway


def find_account(gateway: PersistenceGateway, account_id: str) -> Optional[Account]:
    for row in gateway.load_list(storage.ACCOUNTS):
        if row.get("id") == account_id:
            return Account.from_dict(row)
    return None


def find_owner(gateway: PersistenceGateway, business_name: str) -> Optional[Account]:
    key = business_key(business_name)
    for row in gateway.load_list(storage.ACCOUNTS):
        if row.get("role") == Role.OWNER.value and business_key(row.get("business_name")) == key:
            return Account.from_dict(row)
    return None


def authorize(
    gateway: PersistenceGateway,
    actor: Account,
    roles: Optional[Iterable[Role]] = None,
    *,
    business_name: Optional[str] = None,
) -> Account:
    """Return the stored copy of ``actor`` if it may act, else raise.

    The actor is re-read from storage so status changes take effect on the
    next call, not the next login.
    """
    if actor is None:
        raise PermissionDeniedError("Please log in first.")
    current = find_account(gateway, actor.id)
    if current is None:
        raise AccountNotFoundError("Account not found. Please register first.")
    if not current.is_approved:
        if current.status == AccountStatus.PENDING:
            raise AccountNotApprovedError(
                f'Your request to join "{current.business_name}" is waiting for the owner\'s approval.'
            )
        raise AccountNotApprovedError(f'Your access to "{current.business_name}" has been denied.')
    if roles is not None and current.role not in set(roles):
        raise PermissionDeniedError(f"This action is not available to the {current.role.label} role.")
    if business_name is not None and business_key(business_name) != current.business_key:
        raise PermissionDeniedError("This record belongs to another business.")
    return current
