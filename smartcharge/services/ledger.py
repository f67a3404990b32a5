from sqlalchemy import update
from sqlalchemy.orm import Session
from loguru import logger

from smartcharge.core.errors import NotFoundError
from smartcharge.models.user import User


class UserLedger:
    """Increment-only access to a user's coins, XP and CO2 balance.

    Each increment is a single ``col = col + delta`` statement, so concurrent
    credits add up regardless of order. Nothing here commits; the caller's
    transaction decides whether the credit sticks.
    """

    def __init__(self, db: Session):
        self.db = db

    def _increment(self, user_id: int, **deltas):
        values = {name: getattr(User, name) + delta for name, delta in deltas.items()}
        result = self.db.execute(
            update(User).where(User.id == user_id).values(**values).execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundError("User")

    def increment_coins(self, user_id: int, amount: int):
        self._increment(user_id, coins=amount)

    def increment_xp(self, user_id: int, amount: int):
        self._increment(user_id, xp=amount)

    def increment_co2_saved(self, user_id: int, amount: float):
        self._increment(user_id, co2_saved=amount)

    def credit(self, user_id: int, coins: int, xp: int, co2: float):
        logger.info(f"Crediting user {user_id}: coins={coins}, xp={xp}, co2={co2}")
        self._increment(user_id, coins=coins, xp=xp, co2_saved=co2)
