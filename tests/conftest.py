import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from biztrack.auth_service import AuthService
from biztrack.core.config import settings
from biztrack.entities import Registration, Role
from biztrack.storage import PersistenceGateway


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch):
    monkeypatch.setattr(settings, "BCRYPT_ROUNDS", 4)


@pytest.fixture()
def gateway():
    engine = create_engine("sqlite:///:memory:", future=True)
    Session = sessionmaker(bind=engine, future=True)
    try:
        yield PersistenceGateway(session_factory=Session)
    finally:
        engine.dispose()


@pytest.fixture()
def auth(gateway):
    return AuthService(gateway)


def make_registration(email, business="Analytical Diner", role=Role.SALES_PERSON, password="Strong@123", **kw):
    return Registration(
        full_name=kw.pop("full_name", "Ada Lovelace"),
        phone_number=kw.pop("phone_number", "0971234567"),
        email=email,
        password=password,
        business_name=business,
        role=role,
        **kw,
    )


@pytest.fixture()
def owner(auth):
    return auth.register(make_registration("owner@diner.com", role=Role.OWNER), joining_existing_business=False)


@pytest.fixture()
def staff_factory(auth, owner):
    """Register (and by default approve) a staff member of the owner's business."""

    def _make(email, role=Role.SALES_PERSON, approve=True):
        account = auth.register(make_registration(email, business=owner.business_name, role=role), True)
        if approve:
            account = auth.approve(account.id, actor=owner)
        return account

    return _make
