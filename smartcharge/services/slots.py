"""Hourly time-slot generation with swappable green policies and load estimators."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional
import random

from smartcharge.core.config import settings
from smartcharge.core.dates import utcnow
from smartcharge.services import pricing

SLOTS_PER_DAY = 24


@dataclass
class TimeSlot:
    hour: int
    label: str
    start_time: datetime
    is_green: bool
    load: int
    price: float
    coins: int
    xp: int
    co2: float
    status: str
    campaign_applied: Optional[dict] = field(default=None)

    def to_dict(self):
        return {
            "hour": self.hour,
            "label": self.label,
            "startTime": self.start_time.isoformat(),
            "isGreen": self.is_green,
            "load": self.load,
            "price": self.price,
            "coins": self.coins,
            "xp": self.xp,
            "co2": self.co2,
            "status": self.status,
            "campaignApplied": self.campaign_applied,
        }


def slot_label(hour: int) -> str:
    return f"{hour:02d}:00 - {(hour + 1) % 24:02d}:00"


class RollingLoadGreenPolicy:
    threshold = 40

    def is_green(self, hour: int, load: int) -> bool:
        return load < self.threshold


class FixedBandGreenPolicy:
    green_start = 23
    green_end = 6

    def is_green(self, hour: int, load: Optional[int] = None) -> bool:
        return hour >= self.green_start or hour <= self.green_end


class LoadEstimator:
    """Returns a 0-100 load estimate for ``hour`` (optionally for a station)."""

    def estimate(self, hour: int, station=None) -> int:
        raise NotImplementedError


class RollingBandLoadEstimator(LoadEstimator):
    NIGHT_RANGE = (0, 29)
    PEAK_RANGE = (60, 99)
    DAY_RANGE = (20, 79)

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def band(self, hour: int):
        if hour >= 22 or hour < 6:
            return self.NIGHT_RANGE
        if 17 <= hour <= 20:
            return self.PEAK_RANGE
        return self.DAY_RANGE

    def estimate(self, hour: int, station=None) -> int:
        low, high = self.band(hour)
        return self.rng.randint(low, high)


class FixedBandLoadEstimator(LoadEstimator):
    GREEN_RANGE = (12, 38)
    RED_RANGE = (55, 92)

    def __init__(self, rng: Optional[random.Random] = None, policy: Optional[FixedBandGreenPolicy] = None):
        self.rng = rng or random.Random()
        self.policy = policy or FixedBandGreenPolicy()

    def estimate(self, hour: int, station=None) -> int:
        low, high = self.GREEN_RANGE if self.policy.is_green(hour) else self.RED_RANGE
        return self.rng.randint(low, high)


class StationLoadEstimator(LoadEstimator):
    """Prefers stored data: the hourly forecast for the station, then its
    measured density, then ``fallback``."""

    def __init__(self, fallback: LoadEstimator, day_of_week: Optional[int] = None):
        self.fallback = fallback
        self.day_of_week = day_of_week

    def estimate(self, hour: int, station=None) -> int:
        if station is not None:
            if self.day_of_week is not None:
                for forecast in station.forecasts:
                    if forecast.day_of_week == self.day_of_week and forecast.hour == hour:
                        return forecast.predicted_load
            if station.density and station.density > 0:
                return station.density
        return self.fallback.estimate(hour, station)


def generate_dynamic_timeslots(
    now: Optional[datetime] = None,
    base_price: Optional[float] = None,
    estimator: Optional[LoadEstimator] = None,
    station_price: Optional[float] = None,
):
    """Rolling 24 hour preview starting at the current hour.

    Without ``station_price`` every slot costs ``base_price``; with it the
    density-aware booking price is used instead.
    """
    now = now or utcnow()
    if base_price is None:
        base_price = settings.DEFAULT_SLOT_PRICE
    estimator = estimator or RollingBandLoadEstimator()
    policy = RollingLoadGreenPolicy()
    window_start = now.replace(minute=0, second=0, microsecond=0)

    slots = []
    for i in range(SLOTS_PER_DAY):
        hour = (now.hour + i) % 24
        load = estimator.estimate(hour)
        is_green = policy.is_green(hour, load)
        rewards = pricing.reward(is_green, load)
        if station_price is not None:
            price = pricing.booking_price(station_price, load)
        else:
            price = base_price
        slots.append(TimeSlot(
            hour=hour,
            label=slot_label(hour),
            start_time=window_start + timedelta(hours=i),
            is_green=is_green,
            load=load,
            price=price,
            coins=rewards.coins,
            xp=rewards.xp,
            co2=rewards.co2,
            status="AVAILABLE",
        ))
    return slots


def generate_station_slots(station, campaign=None, now: Optional[datetime] = None, estimator: Optional[LoadEstimator] = None):
    """Clock-hour slots (00:00-23:00 of today) for a station detail page."""
    now = now or utcnow()
    policy = FixedBandGreenPolicy()
    estimator = estimator or StationLoadEstimator(FixedBandLoadEstimator(policy=policy), day_of_week=now.weekday())
    day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)

    discount_rate = pricing.parse_discount_rate(campaign.discount) if campaign else 0.0
    bonus_coins = campaign.coin_reward if campaign and campaign.coin_reward else 0
    campaign_applied = {"title": campaign.title, "discount": campaign.discount} if campaign else None

    slots = []
    for hour in range(SLOTS_PER_DAY):
        green = policy.is_green(hour)
        rewards = pricing.reward(green)

        price = station.price
        if green:
            price = price * pricing.GREEN_HOUR_DISCOUNT
        if discount_rate > 0:
            price = price * (1 - discount_rate)

        slots.append(TimeSlot(
            hour=hour,
            label=slot_label(hour),
            start_time=day_start + timedelta(hours=hour),
            is_green=green,
            load=estimator.estimate(hour, station),
            price=round(price, 2),
            coins=rewards.coins + bonus_coins,
            xp=rewards.xp,
            co2=rewards.co2,
            status="GREEN" if green else "RED",
            campaign_applied=campaign_applied,
        ))
    return slots
