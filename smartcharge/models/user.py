from sqlalchemy import Column, Integer, String, Float, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from smartcharge.core.database import Base
from smartcharge.models.badge import user_badges

ROLE_DRIVER = "DRIVER"
ROLE_OPERATOR = "OPERATOR"

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String)
    email = Column(String, unique=True, index=True, nullable=False)
    role = Column(String, default=ROLE_DRIVER, nullable=False)
    # ledger fields; only UserLedger writes them
    coins = Column(Integer, default=0, nullable=False)
    xp = Column(Integer, default=0, nullable=False)
    co2_saved = Column(Float, default=0.0, nullable=False)
    created_at = Column(DateTime, default=func.now())

    badges = relationship("Badge", secondary=user_badges, back_populates="users")
    stations = relationship("Station", back_populates="owner")
    reservations = relationship("Reservation", back_populates="user")
    campaigns = relationship("Campaign", back_populates="owner")

    def balances(self):
        return {
            "id": self.id,
            "coins": self.coins,
            "co2Saved": self.co2_saved,
            "xp": self.xp,
        }
