from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from loguru import logger

from smartcharge.core.dates import parse_iso_datetime
from smartcharge.core.errors import InvalidTransitionError, NotFoundError, StoreError, ValidationError
from smartcharge.models.reservation import (
    Reservation,
    OPEN_STATUSES,
    STATUS_CANCELLED,
    STATUS_COMPLETED,
    STATUS_CONFIRMED,
)
from smartcharge.models.station import Station
from smartcharge.models.user import User
from smartcharge.services import pricing
from smartcharge.services.campaigns import CampaignService
from smartcharge.services.ledger import UserLedger

GREEN_CO2_KG = 2.5
STANDARD_CO2_KG = 0.5

CREATE_XP_GREEN = 150
CREATE_XP_STANDARD = 60
COMPLETE_XP = 100

TRANSITION_TARGETS = (STATUS_COMPLETED, STATUS_CANCELLED)


def co2_delta(is_green: bool) -> float:
    return GREEN_CO2_KG if is_green else STANDARD_CO2_KG


class ReservationService:

    @staticmethod
    def create(db: Session, user_id, station_id, date, hour, is_green, now: Optional[datetime] = None):
        if not user_id or not station_id or not date or not hour or not isinstance(is_green, bool):
            raise ValidationError("Missing reservation details")
        reservation_date = parse_iso_datetime(date)

        if db.get(User, user_id) is None:
            raise NotFoundError("User")
        if db.get(Station, station_id) is None:
            raise NotFoundError("Station")

        earned_coins = pricing.reward(is_green).coins
        campaign = CampaignService.find_active_campaign(db, station_id, now)
        if campaign and campaign.coin_reward:
            earned_coins += campaign.coin_reward

        reservation = Reservation(
            user_id=user_id,
            station_id=station_id,
            date=reservation_date,
            hour=hour,
            is_green=is_green,
            earned_coins=earned_coins,
            status=STATUS_CONFIRMED,
        )
        try:
            db.add(reservation)
            UserLedger(db).credit(
                user_id,
                coins=earned_coins,
                xp=CREATE_XP_GREEN if is_green else CREATE_XP_STANDARD,
                co2=co2_delta(is_green),
            )
            db.commit()
        except NotFoundError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Reservation create failed for user {user_id}: {e}")
            raise StoreError("Reservation could not be saved")

        user = db.get(User, user_id)
        db.refresh(user)
        logger.info(f"Reservation {reservation.id} confirmed: user={user_id}, station={station_id}, green={is_green}, coins={earned_coins}")
        return reservation, user

    @staticmethod
    def transition(db: Session, reservation_id: int, status: Optional[str]) -> Reservation:
        """Move a reservation to COMPLETED or CANCELLED.

        Repeating the current terminal status is a no-op; switching between
        terminal statuses raises InvalidTransitionError.
        """
        if not reservation_id or not status:
            raise ValidationError("Missing parameters")
        if status not in TRANSITION_TARGETS:
            raise ValidationError(f"Unsupported status: {status}")

        reservation = db.get(Reservation, reservation_id)
        if reservation is None:
            raise NotFoundError("Reservation")

        try:
            # the status guard makes check-and-credit a single row update
            result = db.execute(
                update(Reservation)
                .where(Reservation.id == reservation_id, Reservation.status.in_(OPEN_STATUSES))
                .values(status=status)
                .execution_options(synchronize_session=False)
            )
            applied = result.rowcount == 1
            if applied and status == STATUS_COMPLETED:
                UserLedger(db).credit(
                    reservation.user_id,
                    coins=reservation.earned_coins,
                    xp=COMPLETE_XP,
                    co2=co2_delta(reservation.is_green),
                )
            db.commit()
        except NotFoundError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Reservation {reservation_id} transition to {status} failed: {e}")
            raise StoreError("Update failed")

        db.refresh(reservation)
        if not applied:
            if reservation.status != status:
                raise InvalidTransitionError(f"Reservation is already {reservation.status}")
            logger.warning(f"Reservation {reservation_id} already {status}, nothing to do")
        else:
            logger.info(f"Reservation {reservation_id} -> {status}")
        return reservation

    @staticmethod
    def complete(db: Session, reservation_id: int):
        reservation = ReservationService.transition(db, reservation_id, STATUS_COMPLETED)
        user = db.get(User, reservation.user_id)
        db.refresh(user)
        return reservation, user

    @staticmethod
    def list_for_user(db: Session, user_id: int, limit: int = 10):
        reservations = (
            db.query(Reservation)
            .options(selectinload(Reservation.station))
            .filter(Reservation.user_id == user_id)
            .order_by(Reservation.date.desc(), Reservation.id.desc())
            .limit(limit)
            .all()
        )
        result = []
        for reservation in reservations:
            item = reservation.to_dict()
            item["station"] = {
                "id": reservation.station.id,
                "name": reservation.station.name,
                "price": reservation.station.price,
            }
            result.append(item)
        return result
