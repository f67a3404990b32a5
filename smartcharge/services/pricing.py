from dataclasses import dataclass
from typing import Optional
import re

GREEN_COINS = 50
GREEN_XP = 25
GREEN_CO2_KG = 1.2

STANDARD_COINS = 10
STANDARD_XP = 5
STANDARD_CO2_KG = 0.0

LOW_LOAD_THRESHOLD = 30
HIGH_LOAD_THRESHOLD = 70
LOW_LOAD_MULTIPLIER = 0.95
HIGH_LOAD_MULTIPLIER = 1.15

# fixed-band green hours are sold at 80% of the station price
GREEN_HOUR_DISCOUNT = 0.8


@dataclass(frozen=True)
class Reward:
    coins: int
    xp: int
    co2: float


def reward(is_green: bool, load: Optional[int] = None) -> Reward:
    """Reward for booking a slot. ``load`` does not change the outcome once
    the slot has been classified."""
    if not is_green:
        return Reward(coins=STANDARD_COINS, xp=STANDARD_XP, co2=STANDARD_CO2_KG)
    return Reward(coins=GREEN_COINS, xp=GREEN_XP, co2=GREEN_CO2_KG)


def price_multiplier(load: int) -> float:
    if load < LOW_LOAD_THRESHOLD:
        return LOW_LOAD_MULTIPLIER
    if load > HIGH_LOAD_THRESHOLD:
        return HIGH_LOAD_MULTIPLIER
    return 1.0


def booking_price(base_price: float, load: int) -> float:
    return round(base_price * price_multiplier(load), 2)


def density_level(load: int) -> str:
    if load < 40:
        return "LOW"
    if load < 70:
        return "MEDIUM"
    return "HIGH"


def load_status(load: int) -> str:
    if load > 65:
        return "RED"
    if load > 45:
        return "YELLOW"
    return "GREEN"


def parse_discount_rate(discount: Optional[str]) -> float:
    """``"%20"`` -> ``0.2``. Anything without a percent sign counts as no discount."""
    if not discount or "%" not in discount:
        return 0.0
    digits = re.sub(r"\D", "", discount)
    if not digits:
        return 0.0
    return int(digits) / 100
