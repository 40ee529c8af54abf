import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PAYMENT_GATEWAY"] = "manual"

import pytest
from decimal import Decimal
from fastapi.testclient import TestClient
from restaurant_ordering.domain.models import Base, Category, MenuItem
from restaurant_ordering.infrastructure.db import make_engine, make_session_factory, get_db
from restaurant_ordering.application.gateway import ManualGateway
from restaurant_ordering.api.routes import get_payment_gateway
from restaurant_ordering.main import app

@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()

@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)

@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()

@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = ManualGateway
    yield TestClient(app)
    app.dependency_overrides.clear()

@pytest.fixture
def menu(db):
    """Mains and desserts with the three reference dishes."""
    mains = Category(name="Mains", description="Main courses")
    desserts = Category(name="Desserts")
    db.add_all([mains, desserts])
    db.flush()
    items = {
        "caesar": MenuItem(name="Caesar Salad", description="Romaine, parmesan, croutons",
                           price=Decimal("12.99"), category_id=mains.id),
        "chicken": MenuItem(name="Grilled Chicken", description="Herb marinated breast",
                            price=Decimal("18.50"), category_id=mains.id),
        "cake": MenuItem(name="Chocolate Cake", description="Dark chocolate layers",
                         price=Decimal("8.99"), category_id=desserts.id, is_available=False),
    }
    db.add_all(items.values())
    db.commit()
    return {"mains": mains, "desserts": desserts, **items}
