from datetime import datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from loguru import logger

from smartcharge.core.dates import parse_iso_datetime, utcnow
from smartcharge.core.errors import NotFoundError, StoreError, ValidationError
from smartcharge.models.badge import Badge
from smartcharge.models.campaign import Campaign, CAMPAIGN_ACTIVE, CAMPAIGN_DRAFT, CAMPAIGN_STATUSES
from smartcharge.models.user import User


class CampaignService:

    @staticmethod
    def find_active_campaign(db: Session, station_id: Optional[int], now: Optional[datetime] = None) -> Optional[Campaign]:
        """Most recently created ACTIVE, unexpired campaign for ``station_id``
        or for every station. Campaigns without an end date never expire."""
        now = now or utcnow()
        scope = Campaign.station_id.is_(None)
        if station_id is not None:
            scope = or_(Campaign.station_id == station_id, scope)
        campaign = (
            db.query(Campaign)
            .filter(
                Campaign.status == CAMPAIGN_ACTIVE,
                or_(Campaign.end_date.is_(None), Campaign.end_date >= now),
                scope,
            )
            .order_by(Campaign.created_at.desc(), Campaign.id.desc())
            .first()
        )
        if campaign:
            logger.info(f"Campaign {campaign.id} applies to station {station_id}")
        return campaign

    @staticmethod
    def list_by_owner(db: Session, owner_id):
        if not owner_id:
            raise ValidationError("ownerId is required")
        campaigns = (
            db.query(Campaign)
            .options(selectinload(Campaign.station), selectinload(Campaign.target_badges))
            .filter(Campaign.owner_id == owner_id)
            .order_by(Campaign.created_at.desc(), Campaign.id.desc())
            .all()
        )
        return [campaign.to_dict() for campaign in campaigns]

    @staticmethod
    def _apply_fields(db: Session, campaign: Campaign, data: dict):
        status = data.get("status") or CAMPAIGN_DRAFT
        if status not in CAMPAIGN_STATUSES:
            raise ValidationError(f"Unknown campaign status: {status}")
        coin_reward = data.get("coinReward") or 0
        if coin_reward < 0:
            raise ValidationError("coinReward cannot be negative")

        campaign.title = data.get("title") or campaign.title
        campaign.description = data.get("description")
        campaign.status = status
        campaign.target = data.get("target")
        campaign.discount = data.get("discount") or ""
        campaign.end_date = parse_iso_datetime(data.get("endDate"), "Invalid endDate")
        campaign.station_id = data.get("stationId") or None
        campaign.coin_reward = coin_reward

        badge_ids = data.get("targetBadgeIds") or []
        badges = db.query(Badge).filter(Badge.id.in_(badge_ids)).all() if badge_ids else []
        if len(badges) != len(set(badge_ids)):
            raise NotFoundError("Badge")
        campaign.target_badges = badges

    @staticmethod
    def create(db: Session, data: dict):
        if not data.get("title") or not data.get("ownerId"):
            raise ValidationError("title and ownerId are required")
        campaign = Campaign(owner_id=data["ownerId"])
        CampaignService._apply_fields(db, campaign, data)
        try:
            db.add(campaign)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Campaign create failed: {e}")
            raise StoreError("Campaign could not be created")
        db.refresh(campaign)
        logger.info(f"Created campaign {campaign.id} ({campaign.status}) for owner {campaign.owner_id}")
        return campaign.to_dict()

    @staticmethod
    def update(db: Session, campaign_id: int, data: dict):
        campaign = db.get(Campaign, campaign_id)
        if not campaign:
            raise NotFoundError("Campaign")
        CampaignService._apply_fields(db, campaign, data)
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Campaign {campaign_id} update failed: {e}")
            raise StoreError("Update failed")
        db.refresh(campaign)
        return campaign.to_dict()

    @staticmethod
    def delete(db: Session, campaign_id: int):
        campaign = db.get(Campaign, campaign_id)
        if not campaign:
            raise NotFoundError("Campaign")
        try:
            db.delete(campaign)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Campaign {campaign_id} delete failed: {e}")
            raise StoreError("Delete failed")
        logger.info(f"Deleted campaign {campaign_id}")

    @staticmethod
    def for_user(db: Session, user_id):
        """ACTIVE campaigns targeting at least one badge the user holds."""
        if not user_id:
            raise ValidationError("userId is required")
        user = db.query(User).options(selectinload(User.badges)).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User")

        user_badge_ids = {badge.id for badge in user.badges}
        campaigns = []
        if user_badge_ids:
            campaigns = (
                db.query(Campaign)
                .options(selectinload(Campaign.station), selectinload(Campaign.target_badges))
                .filter(
                    Campaign.status == CAMPAIGN_ACTIVE,
                    Campaign.target_badges.any(Badge.id.in_(user_badge_ids)),
                )
                .order_by(Campaign.coin_reward.desc(), Campaign.id.asc())
                .all()
            )

        result = []
        for campaign in campaigns:
            station = None
            if campaign.station:
                station = {
                    "id": campaign.station.id,
                    "name": campaign.station.name,
                    "lat": campaign.station.lat,
                    "lng": campaign.station.lng,
                }
            result.append({
                "id": campaign.id,
                "title": campaign.title,
                "description": campaign.description,
                "discount": campaign.discount,
                "coinReward": campaign.coin_reward,
                "endDate": campaign.end_date.isoformat() if campaign.end_date else None,
                "targetBadges": [badge.to_dict() for badge in campaign.target_badges],
                "station": station,
                "matchedBadges": [badge.to_dict() for badge in campaign.target_badges if badge.id in user_badge_ids],
            })

        return {
            "success": True,
            "userBadges": [badge.to_dict() for badge in user.badges],
            "campaigns": result,
        }
