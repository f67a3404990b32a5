from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from smartcharge.core.database import Base

class Station(Base):
    __tablename__ = "stations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    address = Column(String)
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)
    price = Column(Float, nullable=False)
    # 0 means "no measured load, simulate one"
    density = Column(Integer, default=0, nullable=False)
    density_profile = Column(String, default="NORMAL")
    owner_id = Column(Integer, ForeignKey("users.id"), index=True)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    owner = relationship("User", back_populates="stations")
    reservations = relationship("Reservation", back_populates="station")
    campaigns = relationship("Campaign", back_populates="station")
    forecasts = relationship("StationDensityForecast", back_populates="station", cascade="all, delete-orphan")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "lat": self.lat,
            "lng": self.lng,
            "price": round(self.price, 2),
            "density": self.density,
            "densityProfile": self.density_profile,
            "ownerId": self.owner_id,
        }

class StationDensityForecast(Base):
    __tablename__ = "station_density_forecasts"
    __table_args__ = (UniqueConstraint("station_id", "day_of_week", "hour"),)

    id = Column(Integer, primary_key=True, index=True)
    station_id = Column(Integer, ForeignKey("stations.id", ondelete="CASCADE"), nullable=False)
    day_of_week = Column(Integer, nullable=False)  # Monday = 0
    hour = Column(Integer, nullable=False)
    predicted_load = Column(Integer, nullable=False)

    station = relationship("Station", back_populates="forecasts")
