"""
Pytest configuration and fixtures for backend tests.
"""

import os

# Settings are read once at import time: point them at SQLite and the
# in-memory event bus before the application is imported.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENV_MODE"] = "development"
os.environ["TIMEZONE"] = "America/Sao_Paulo"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from restaurant_admin.database import Base, get_db
from restaurant_admin.main import app
from restaurant_admin.models import (
    BusinessHour,
    Category,
    DayOfWeek,
    DeliveryRegion,
    Driver,
    DriverStatus,
    PaymentMethod,
    Product,
    ProductAddon,
    ProductAddonRelation,
    Restaurant,
)
from restaurant_admin.services.events import get_event_bus, reset_event_bus


# SQLite in-memory database shared by every session of a test
SQLALCHEMY_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(scope="function")
async def engine():
    """
    Fresh database per test.
    StaticPool keeps the single in-memory connection alive between sessions.
    """
    test_engine = create_async_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Enforce foreign keys the way PostgreSQL does
    @event.listens_for(test_engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture(scope="function")
def session_maker(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture(scope="function")
async def db_session(session_maker):
    """Session for seeding data and calling services directly."""
    async with session_maker() as session:
        yield session


@pytest.fixture(scope="function")
def event_bus():
    """A fresh in-memory bus for every test."""
    reset_event_bus()
    bus = get_event_bus()
    yield bus
    reset_event_bus()


@pytest.fixture(scope="function")
async def client(session_maker, event_bus):
    """
    HTTP client bound to the app with the database dependency overridden.
    Every request gets its own session, as in production.
    """
    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# SEED DATA
# =============================================================================

@pytest.fixture
async def seed_catalog(db_session):
    """Two categories, three products and two addons (one global)."""
    burgers = Category(name="Burgers", display_order=1)
    drinks = Category(name="Drinks", display_order=2)
    db_session.add_all([burgers, drinks])
    await db_session.flush()

    cheese = ProductAddon(name="Extra cheese", price=3.0, is_global=False)
    bacon = ProductAddon(name="Bacon", price=4.5, is_global=True)
    db_session.add_all([cheese, bacon])
    await db_session.flush()

    burger = Product(name="Classic Burger", price=25.0, category_id=burgers.id)
    veggie = Product(name="Veggie Burger", price=22.0, category_id=burgers.id)
    soda = Product(name="Soda", price=6.0, category_id=drinks.id)
    db_session.add_all([burger, veggie, soda])
    await db_session.flush()

    db_session.add(ProductAddonRelation(product_id=burger.id, addon_id=cheese.id))
    await db_session.commit()

    return {
        "categories": {"burgers": burgers, "drinks": drinks},
        "products": {"burger": burger, "veggie": veggie, "soda": soda},
        "addons": {"cheese": cheese, "bacon": bacon},
    }


@pytest.fixture
async def seed_restaurant(db_session):
    restaurant = Restaurant(
        name="Casa Test",
        phone="11987654321",
        address="Rua A, 10",
        delivery_fee=7.0,
        min_order_value=20.0,
    )
    db_session.add(restaurant)
    await db_session.commit()
    return restaurant


@pytest.fixture
async def seed_payment_methods(db_session):
    pix = PaymentMethod(name="PIX", enabled=True, display_order=1)
    card = PaymentMethod(name="Credit card", enabled=True, display_order=2)
    voucher = PaymentMethod(name="Voucher", enabled=False, display_order=3)
    db_session.add_all([pix, card, voucher])
    await db_session.commit()
    return {"pix": pix, "card": card, "voucher": voucher}


@pytest.fixture
async def open_all_day(db_session):
    """Business hours covering every minute of every day."""
    for day in DayOfWeek:
        db_session.add(BusinessHour(day_of_week=day, open_time="00:00", close_time="23:59"))
    await db_session.commit()


@pytest.fixture
async def seed_delivery_setup(db_session):
    region = DeliveryRegion(name="Downtown", fee=8.0)
    driver = Driver(name="Joao", phone="11999990000", vehicle="Motorcycle", status=DriverStatus.ACTIVE)
    db_session.add_all([region, driver])
    await db_session.commit()
    return {"region": region, "driver": driver}


# =============================================================================
# ORDER HELPERS
# =============================================================================

@pytest.fixture
def order_form(seed_catalog):
    """Builder of admin order form payloads (two classic burgers, delivery)."""
    products = seed_catalog["products"]

    def _form(**overrides):
        form = {
            "order_type": "delivery",
            "customer_name": "Maria Silva",
            "customer_phone": "11987654321",
            "payment_method": "pix",
            "delivery_address": "Rua A, 10",
            "items": [{"product_id": products["burger"].id, "quantity": 2}],
        }
        form.update(overrides)
        return form

    return _form


@pytest.fixture
def make_order(client, order_form):
    """Create an order through the API and return the response body."""
    async def _make(**overrides):
        response = await client.post("/api/orders", json=order_form(**overrides))
        assert response.status_code == 201, response.text
        return response.json()

    return _make
