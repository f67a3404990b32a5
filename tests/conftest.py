"""
Pytest fixtures for the SmartCharge API.

Every test gets a fresh in-memory SQLite schema and a TestClient whose
``get_db`` dependency is bound to it.
"""
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from smartcharge.core.database import Base, get_db
from smartcharge.core.dates import utcnow
from smartcharge.models import Badge, Campaign, Station, User
from smartcharge.models.campaign import CAMPAIGN_ACTIVE
from smartcharge.models.user import ROLE_OPERATOR

test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(bind=test_engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=test_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(db):
    from main import app

    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def badges(db):
    night = Badge(name="Night Owl", description="Charge at night", icon="🦉")
    eco = Badge(name="Eco Champion", description="Green stations only", icon="🌱")
    weekend = Badge(name="Weekend Warrior", description="Charge at the weekend", icon="🏖️")
    db.add_all([night, eco, weekend])
    db.commit()
    return {"night": night, "eco": eco, "weekend": weekend}


@pytest.fixture
def operator(db):
    user = User(name="Zorlu Energy", email="info@zorlu.com", role=ROLE_OPERATOR)
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def driver(db, badges):
    user = User(name="Demo Driver", email="driver@test.com", badges=[badges["night"], badges["eco"]])
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def station(db, operator):
    item = Station(name="Muradiye Campus", lat=38.650, lng=27.320, price=5.0, address="Muradiye, Manisa", density=30, owner_id=operator.id)
    db.add(item)
    db.commit()
    return item


@pytest.fixture
def make_campaign(db, operator):
    def _make(**overrides):
        fields = {
            "title": "Bonus",
            "discount": "",
            "status": CAMPAIGN_ACTIVE,
            "coin_reward": 20,
            "owner_id": operator.id,
            "end_date": utcnow() + timedelta(days=7),
        }
        fields.update(overrides)
        campaign = Campaign(**fields)
        db.add(campaign)
        db.commit()
        return campaign
    return _make


@pytest.fixture
def balances(db):
    """Current (coins, xp, co2_saved) straight from the store."""
    def _read(user_id):
        db.expire_all()
        user = db.get(User, user_id)
        return user.coins, user.xp, user.co2_saved
    return _read
