# biztrack/auth_service.py
import logging
from typing import Dict, FrozenSet, List, Optional

from biztrack import storage
from biztrack.access import authorize, find_account, find_owner
from biztrack.entities import (
    Account,
    AccountStatus,
    Registration,
    Role,
    business_key,
    normalize_email,
)
from biztrack.errors import (
    AccountNotFoundError,
    BusinessMismatchError,
    BusinessNameTakenError,
    BusinessNotFoundError,
    DuplicateEmailError,
    InvalidCredentialError,
    InvalidStatusTransitionError,
    PermissionDeniedError,
    RoleMismatchError,
    ValidationError,
)
from biztrack.security import hash_password, new_id, verify_password
from biztrack.session import SessionContext
from biztrack.storage import PersistenceGateway

log = logging.getLogger(__name__)

# Account.status state machine. REJECTED is terminal.
STATUS_TRANSITIONS: Dict[AccountStatus, FrozenSet[AccountStatus]] = {
    AccountStatus.PENDING: frozenset({AccountStatus.APPROVED, AccountStatus.REJECTED}),
    AccountStatus.APPROVED: frozenset({AccountStatus.REJECTED}),
    AccountStatus.REJECTED: frozenset(),
}

STAFF_ROLES = frozenset({Role.MANAGER, Role.SALES_PERSON})


class AuthService:
    """Registration, login and the owner approval workflow."""

    def __init__(self, gateway: Optional[PersistenceGateway] = None, session: Optional[SessionContext] = None):
        self._gateway = gateway or PersistenceGateway()
        self.session = session or SessionContext(self._gateway)

    # ------------------------------------------------------------------
    # Helpers
    def _accounts(self) -> List[Account]:
        return [Account.from_dict(row) for row in self._gateway.load_list(storage.ACCOUNTS)]

    def _save_accounts(self, accounts: List[Account]) -> None:
        self._gateway.set(storage.ACCOUNTS, [a.to_dict() for a in accounts])

    @staticmethod
    def _by_email(accounts: List[Account], email: str) -> Optional[Account]:
        email_n = normalize_email(email)
        for account in accounts:
            if normalize_email(account.email) == email_n:
                return account
        return None

    # ------------------------------------------------------------------
    # Registration / login
    def register(self, registration: Registration, joining_existing_business: bool) -> Account:
        """Create an account.

        A new business makes the registrant its OWNER, approved immediately.
        Joining an existing business creates a PENDING MANAGER or SALES_PERSON
        that the owner has to approve.
        """
        accounts = self._accounts()
        email_n = normalize_email(registration.email)
        if self._by_email(accounts, email_n):
            raise DuplicateEmailError("Email already registered. Please Log In.")
        if registration.id and any(a.id == registration.id for a in accounts):
            raise ValidationError("This account id is already in use.")

        business = (registration.business_name or "").strip()
        owner = find_owner(self._gateway, business)

        if joining_existing_business:
            if owner is None:
                raise BusinessNotFoundError(
                    "Business not found. Please register it as a new business first."
                )
            role = Role(registration.role)
            if role not in STAFF_ROLES:
                raise ValidationError("Join an existing business as a Manager or Sales Person.")
            status = AccountStatus.PENDING
            business = owner.business_name
        else:
            if owner is not None:
                raise BusinessNameTakenError(
                    "This business name is already registered. Please 'Join Existing' instead."
                )
            role = Role.OWNER
            status = AccountStatus.APPROVED

        account = Account(
            id=registration.id or new_id(),
            full_name=(registration.full_name or "").strip(),
            phone_number=(registration.phone_number or "").strip(),
            email=email_n,
            business_name=business,
            role=role,
            status=status,
            tier=registration.tier,
            password_hash=hash_password(registration.password),
        )
        accounts.append(account)
        self._save_accounts(accounts)
        log.info("Registered %s as %s of %r (%s)", account.email, role.value, business, status.value)
        return account

    def login(self, business_name: str, email: str, password: str, role: Role) -> Account:
        account = self._by_email(self._accounts(), email)
        if account is None:
            raise AccountNotFoundError("Account not found. Please register first.")
        if account.business_key != business_key(business_name):
            raise BusinessMismatchError(
                f'This email does not belong to "{(business_name or "").strip()}". '
                "Please check your Business Name."
            )
        if not verify_password(password, account.password_hash):
            raise InvalidCredentialError("Incorrect password.")
        if account.role != Role(role):
            raise RoleMismatchError(
                f"Invalid role selected. This account is registered as {account.role.label}."
            )
        return account

    def sign_in(self, business_name: str, email: str, password: str, role: Role) -> Account:
        """Log in and make the account the current session. Returns the projection."""
        return self.session.establish(self.login(business_name, email, password, role))

    def logout(self) -> None:
        self.session.clear()

    def recheck_status(self, account_id: Optional[str] = None) -> Account:
        """Reload an account (default: the session's) and refresh the session with it."""
        if account_id is None:
            current = self.session.account
            if current is None:
                raise AccountNotFoundError("No one is logged in.")
            account_id = current.id
        account = find_account(self._gateway, account_id)
        if account is None:
            raise AccountNotFoundError("Account not found. Please register first.")
        if self.session.is_active_for(account_id):
            return self.session.establish(account)
        return account.without_credential()

    # ------------------------------------------------------------------
    # Staff approvals
    def set_status(self, account_id: str, new_status: AccountStatus, *, actor: Account) -> Account:
        owner = authorize(self._gateway, actor, {Role.OWNER})
        new_status = AccountStatus(new_status)

        accounts = self._accounts()
        target = next((a for a in accounts if a.id == account_id), None)
        if target is None:
            raise AccountNotFoundError("Account not found.")
        if target.business_key != owner.business_key:
            raise PermissionDeniedError("This account belongs to another business.")
        if target.role == Role.OWNER:
            raise PermissionDeniedError("The business owner's access cannot be changed.")

        if target.status == new_status:
            return target.without_credential()
        if new_status not in STATUS_TRANSITIONS[target.status]:
            raise InvalidStatusTransitionError(
                f"Cannot change status from {target.status.value} to {new_status.value}."
            )

        target.status = new_status
        self._save_accounts(accounts)
        log.info("%s set status of %s to %s", owner.id, target.id, new_status.value)
        if self.session.is_active_for(target.id):
            self.session.establish(target)
        return target.without_credential()

    def approve(self, account_id: str, *, actor: Account) -> Account:
        return self.set_status(account_id, AccountStatus.APPROVED, actor=actor)

    def deny(self, account_id: str, *, actor: Account) -> Account:
        return self.set_status(account_id, AccountStatus.REJECTED, actor=actor)

    def revoke(self, account_id: str, *, actor: Account) -> Account:
        return self.set_status(account_id, AccountStatus.REJECTED, actor=actor)

    def list_staff(self, business_name: str, excluding_id: Optional[str] = None, *, actor: Account) -> List[Account]:
        authorize(self._gateway, actor, {Role.OWNER}, business_name=business_name)
        key = business_key(business_name)
        return [
            a.without_credential()
            for a in self._accounts()
            if a.business_key == key and a.id != excluding_id
        ]

    def pending_requests(self, *, actor: Account) -> List[Account]:
        staff = self.list_staff(actor.business_name, actor.id, actor=actor)
        return [a for a in staff if a.status == AccountStatus.PENDING]
