"""Domain records stored in the collections, plus the shared enumerations."""
from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Optional


class Role(str, Enum):
    OWNER = "OWNER"
    MANAGER = "MANAGER"
    SALES_PERSON = "SALES_PERSON"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


class AccountStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Tier(str, Enum):
    FREE = "FREE"
    PAID = "PAID"


class TransactionType(str, Enum):
    SALE = "SALE"
    EXPENSE = "EXPENSE"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    MTN_MOMO = "MTN_MOMO"
    AIRTEL_MONEY = "AIRTEL_MONEY"


MANAGEMENT_ROLES = frozenset({Role.OWNER, Role.MANAGER})


def business_key(name: str | None) -> str:
    """Normalised tenant key: businesses are matched on lowercase, trimmed names."""
    return (name or "").strip().lower()


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def now_ms() -> int:
    return int(time.time() * 1000)


def _enum_values(data: dict) -> dict:
    return {k: (v.value if isinstance(v, Enum) else v) for k, v in data.items()}


@dataclass
class Registration:
    """Sign-up payload as entered on the registration form."""

    full_name: str
    phone_number: str
    email: str
    password: str
    business_name: str
    role: Role = Role.SALES_PERSON
    tier: Tier = Tier.FREE
    id: Optional[str] = None


@dataclass
class Account:
    id: str
    full_name: str
    phone_number: str
    email: str
    business_name: str
    role: Role
    status: AccountStatus = AccountStatus.PENDING
    tier: Tier = Tier.FREE
    password_hash: Optional[str] = field(default=None, repr=False)

    @property
    def business_key(self) -> str:
        return business_key(self.business_name)

    @property
    def is_approved(self) -> bool:
        return self.status == AccountStatus.APPROVED

    @property
    def is_management(self) -> bool:
        return self.role in MANAGEMENT_ROLES

    def without_credential(self) -> "Account":
        return replace(self, password_hash=None)

    def to_dict(self, *, include_credential: bool = True) -> dict:
        data = _enum_values(asdict(self))
        if not include_credential:
            data.pop("password_hash", None)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Account":
        return cls(
            id=data["id"],
            full_name=data.get("full_name", ""),
            phone_number=data.get("phone_number", ""),
            email=data["email"],
            business_name=data["business_name"],
            role=Role(data["role"]),
            status=AccountStatus(data.get("status", AccountStatus.PENDING.value)),
            tier=Tier(data.get("tier", Tier.FREE.value)),
            password_hash=data.get("password_hash"),
        )


@dataclass
class Product:
    id: str
    business_name: str
    name: str
    buy_price: float
    sell_price: float
    stock_count: int
    min_stock: int = 5
    category: Optional[str] = None

    @property
    def business_key(self) -> str:
        return business_key(self.business_name)

    @property
    def unit_margin(self) -> float:
        return self.sell_price - self.buy_price

    @property
    def priced_below_cost(self) -> bool:
        return self.sell_price < self.buy_price

    @property
    def is_low_stock(self) -> bool:
        return self.stock_count <= self.min_stock

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        return cls(
            id=data["id"],
            business_name=data["business_name"],
            name=data["name"],
            buy_price=float(data.get("buy_price", 0)),
            sell_price=float(data.get("sell_price", 0)),
            stock_count=int(data.get("stock_count", 0)),
            min_stock=int(data.get("min_stock", 5)),
            category=data.get("category"),
        )


@dataclass
class Transaction:
    id: str
    business_name: str
    type: TransactionType
    amount: float
    method: PaymentMethod = PaymentMethod.CASH
    quantity: int = 1
    item_id: Optional[str] = None
    item_name: Optional[str] = None
    timestamp: Optional[int] = None  # epoch milliseconds
    note: str = ""
    recorded_by: str = ""

    @property
    def business_key(self) -> str:
        return business_key(self.business_name)

    @property
    def is_sale(self) -> bool:
        return self.type == TransactionType.SALE

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE

    @property
    def units(self) -> int:
        return self.quantity or 1

    def to_dict(self) -> dict:
        return _enum_values(asdict(self))

    @classmethod
    def from_dict(cls, data: dict) -> "Transaction":
        return cls(
            id=data["id"],
            business_name=data["business_name"],
            type=TransactionType(data["type"]),
            amount=float(data["amount"]),
            method=PaymentMethod(data.get("method", PaymentMethod.CASH.value)),
            quantity=int(data.get("quantity") or 1),
            item_id=data.get("item_id"),
            item_name=data.get("item_name"),
            timestamp=data.get("timestamp"),
            note=data.get("note") or "",
            recorded_by=data.get("recorded_by") or "",
        )
