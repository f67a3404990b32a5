from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from smartcharge.core.database import Base

STATUS_PENDING = "PENDING"
STATUS_CONFIRMED = "CONFIRMED"
STATUS_COMPLETED = "COMPLETED"
STATUS_CANCELLED = "CANCELLED"

OPEN_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED)
TERMINAL_STATUSES = (STATUS_COMPLETED, STATUS_CANCELLED)

class Reservation(Base):
    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    station_id = Column(Integer, ForeignKey("stations.id"), index=True, nullable=False)
    date = Column(DateTime, nullable=False)
    hour = Column(String, nullable=False)
    is_green = Column(Boolean, nullable=False)
    # fixed at creation, reused on completion
    earned_coins = Column(Integer, nullable=False)
    status = Column(String, default=STATUS_CONFIRMED, nullable=False, index=True)
    created_at = Column(DateTime, default=func.now())

    user = relationship("User", back_populates="reservations")
    station = relationship("Station", back_populates="reservations")

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "stationId": self.station_id,
            "date": self.date.isoformat() if self.date else None,
            "hour": self.hour,
            "isGreen": self.is_green,
            "earnedCoins": self.earned_coins,
            "status": self.status,
        }
