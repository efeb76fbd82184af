import os

# Keep the app's module-level engine off the filesystem during tests.
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from storefront.models import order as _order_models  # noqa: F401
from storefront.models import product as _product_models  # noqa: F401
from storefront.schemas.checkout import PaymentMethod
from storefront.services.cart_store import CartStore

from tests.factories import FakeCatalog


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture
def store() -> CartStore:
    return CartStore(placeholder_image="/placeholder.jpg", currency="Rs.")


@pytest.fixture
def payment_methods() -> list[PaymentMethod]:
    return [
        PaymentMethod(id="cash", name="Cash on Delivery", enabled=True),
        PaymentMethod(id="card", name="Card", enabled=True, fee=0.02, minimum_fee=30),
        PaymentMethod(id="bank", name="Bank Transfer", enabled=False, fee="50"),
    ]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session
