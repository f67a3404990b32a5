from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from smartcharge.core.database import Base
from smartcharge.models.badge import campaign_badges

CAMPAIGN_ACTIVE = "ACTIVE"
CAMPAIGN_DRAFT = "DRAFT"
CAMPAIGN_ENDED = "ENDED"

CAMPAIGN_STATUSES = (CAMPAIGN_ACTIVE, CAMPAIGN_DRAFT, CAMPAIGN_ENDED)

class Campaign(Base):
    __tablename__ = "campaigns"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(String)
    status = Column(String, default=CAMPAIGN_DRAFT, nullable=False, index=True)
    target = Column(String)
    discount = Column(String, default="")
    end_date = Column(DateTime, nullable=True)
    coin_reward = Column(Integer, default=0, nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    # null targets every station
    station_id = Column(Integer, ForeignKey("stations.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=func.now(), index=True)

    owner = relationship("User", back_populates="campaigns")
    station = relationship("Station", back_populates="campaigns")
    target_badges = relationship("Badge", secondary=campaign_badges, back_populates="campaigns")

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "target": self.target,
            "discount": self.discount,
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "coinReward": self.coin_reward,
            "ownerId": self.owner_id,
            "stationId": self.station_id,
            "stationName": self.station.name if self.station else None,
            "targetBadges": [badge.to_dict() for badge in self.target_badges],
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
