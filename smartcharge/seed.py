"""Load demo data: ``python -m smartcharge.seed``."""

from datetime import timedelta
import random

from loguru import logger
from sqlalchemy.orm import Session

from smartcharge.core.config import settings
from smartcharge.core.dates import utcnow
from smartcharge.core.database import Base, SessionLocal, engine
from smartcharge.models import Badge, Campaign, Reservation, Station, StationDensityForecast, User
from smartcharge.models.badge import campaign_badges, user_badges
from smartcharge.models.campaign import CAMPAIGN_ACTIVE
from smartcharge.models.user import ROLE_DRIVER, ROLE_OPERATOR

BADGES = [
    ("Night Owl", "Five charges on the night tariff", "🦉"),
    ("Eco Champion", "Only pick green-energy stations", "🌱"),
    ("Weekend Warrior", "Charge at the weekend", "🏖️"),
    ("Early Bird", "Charge between 06:00 and 09:00", "🌅"),
    ("Long Hauler", "Charge at intercity stations", "🛣️"),
]

STATIONS = [
    ("Manisa Magnesia AVM", 38.614, 27.405, 7.5, "Laleli, Magnesia AVM, Manisa", 85),
    ("Uncubozkoy Campus", 38.625, 27.420, 6.0, "Uncubozkoy, CBU Campus, Manisa", 40),
    ("Manisa Organised Industry", 38.580, 27.350, 8.5, "MOSB 1st Zone, Manisa", 90),
    ("Manisa Prime AVM", 38.618, 27.412, 7.8, "Guzelyurt, Manisa Prime, Manisa", 65),
    ("Spil Mountain National Park", 38.550, 27.450, 9.5, "Spil Summit Road, Manisa", 10),
    ("Manisa City Hospital", 38.605, 27.380, 6.5, "Adnan Menderes, City Hospital, Manisa", 75),
    ("Muradiye Campus", 38.650, 27.320, 5.5, "Muradiye, CBU Campus, Manisa", 30),
    ("Saruhanli Centre", 38.730, 27.570, 7.0, "Saruhanli Square, Manisa", 20),
    ("Turgutlu Motorway Exit", 38.490, 27.700, 8.0, "Turgutlu E-96, Manisa", 50),
    ("Manisa Train Station", 38.608, 27.432, 6.5, "Istasyon Cad., Manisa", 0),
]


def forecast_load(density: int, hour: int, rng: random.Random) -> int:
    base = density if density > 0 else 50
    if hour >= 22 or hour < 6:
        base *= 0.4
    elif 17 <= hour <= 20:
        base *= 1.3
    return max(0, min(100, int(base + rng.randint(-8, 8))))


def seed(db: Session, rng: random.Random = None):
    rng = rng or random.Random(42)

    db.execute(campaign_badges.delete())
    db.execute(user_badges.delete())
    for model in (Campaign, Reservation, StationDensityForecast, Station, User, Badge):
        db.query(model).delete()
    db.expunge_all()

    badges = [Badge(name=name, description=description, icon=icon) for name, description, icon in BADGES]
    db.add_all(badges)

    operator = User(name="Zorlu Energy", email="info@zorlu.com", role=ROLE_OPERATOR)
    driver = User(name="Demo Driver", email=settings.DEMO_USER_EMAIL, role=ROLE_DRIVER, badges=badges[:4])
    db.add_all([operator, driver])
    db.flush()

    stations = []
    for name, lat, lng, price, address, density in STATIONS:
        station = Station(name=name, lat=lat, lng=lng, price=price, address=address, density=density, owner_id=operator.id)
        station.forecasts = [
            StationDensityForecast(day_of_week=day, hour=hour, predicted_load=forecast_load(density, hour, rng))
            for day in range(7)
            for hour in range(24)
        ]
        stations.append(station)
    db.add_all(stations)

    db.add(Campaign(
        title="Night Charge Bonus",
        description="Extra coins on every booking this month",
        status=CAMPAIGN_ACTIVE,
        discount="%10",
        end_date=utcnow() + timedelta(days=30),
        coin_reward=20,
        owner_id=operator.id,
        target_badges=[badges[0]],
    ))
    db.commit()
    logger.info(f"Seeded {len(badges)} badges, {len(stations)} stations and 2 users")


def main():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
