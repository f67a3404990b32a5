from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from loguru import logger

from smartcharge.core.config import settings
from smartcharge.core.errors import NotFoundError, StoreError, ValidationError
from smartcharge.models.badge import Badge
from smartcharge.models.user import User, ROLE_DRIVER
from smartcharge.services.reservations import ReservationService


def _identity(user: User):
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "coins": user.coins,
        "co2Saved": user.co2_saved,
        "xp": user.xp,
    }


class UserService:

    @staticmethod
    def login(db: Session, email):
        """Resolve a user by email. There is no password check."""
        email = email.strip().lower() if isinstance(email, str) else ""
        if not email:
            raise ValidationError("Email is required")
        user = (
            db.query(User)
            .options(selectinload(User.badges), selectinload(User.stations))
            .filter(User.email == email)
            .first()
        )
        if not user:
            raise NotFoundError("User")
        logger.info(f"User {user.id} signed in")
        payload = _identity(user)
        payload["badges"] = [badge.to_dict() for badge in user.badges]
        payload["stations"] = [{"id": s.id, "name": s.name, "price": s.price} for s in user.stations]
        return {"user": payload}

    @staticmethod
    def demo_user(db: Session):
        user = db.query(User).filter(User.email == settings.DEMO_USER_EMAIL).first()
        if not user:
            raise NotFoundError("Demo user")
        return {"id": user.id, "name": user.name, "email": user.email, "role": user.role}

    @staticmethod
    def get_profile(db: Session, user_id: int):
        user = (
            db.query(User)
            .options(selectinload(User.badges), selectinload(User.stations))
            .filter(User.id == user_id)
            .first()
        )
        if not user:
            raise NotFoundError("User")
        payload = _identity(user)
        payload["badges"] = [badge.to_dict() for badge in user.badges]
        payload["stations"] = [
            {"id": s.id, "name": s.name, "price": s.price, "lat": s.lat, "lng": s.lng} for s in user.stations
        ]
        payload["reservations"] = ReservationService.list_for_user(db, user.id)
        return payload

    @staticmethod
    def update_profile(db: Session, user_id: int, name=None, email=None):
        """Edits name and email only; ledger fields are not reachable from here."""
        user = db.get(User, user_id)
        if not user:
            raise NotFoundError("User")
        if name is not None:
            user.name = name
        if email is not None:
            email = email.strip().lower()
            if not email:
                raise ValidationError("Email cannot be empty")
            user.email = email
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ValidationError("Email is already in use")
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"User {user_id} update failed: {e}")
            raise StoreError("Update failed")
        db.refresh(user)
        return _identity(user)

    @staticmethod
    def leaderboard(db: Session, limit: int = 10):
        users = (
            db.query(User)
            .filter(User.role == ROLE_DRIVER)
            .order_by(User.xp.desc(), User.id.asc())
            .limit(limit)
            .all()
        )
        return [
            {"rank": rank, "id": user.id, "name": user.name, "xp": user.xp, "co2Saved": user.co2_saved}
            for rank, user in enumerate(users, start=1)
        ]

    @staticmethod
    def list_badges(db: Session):
        badges = db.query(Badge).order_by(Badge.name.asc()).all()
        return {"success": True, "badges": [badge.to_dict() for badge in badges]}
