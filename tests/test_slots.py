from datetime import datetime, timedelta
import random

import pytest

from smartcharge.models.station import Station, StationDensityForecast
from smartcharge.models.campaign import Campaign
from smartcharge.services.slots import (
    FixedBandGreenPolicy,
    FixedBandLoadEstimator,
    LoadEstimator,
    RollingBandLoadEstimator,
    RollingLoadGreenPolicy,
    StationLoadEstimator,
    generate_dynamic_timeslots,
    generate_station_slots,
    slot_label,
)

NOW = datetime(2024, 5, 1, 21, 37, 12)


class ConstantLoad(LoadEstimator):
    def __init__(self, load):
        self.load = load

    def estimate(self, hour, station=None):
        return self.load


def expected_band(hour):
    if hour >= 22 or hour < 6:
        return 0, 29
    if 17 <= hour <= 20:
        return 60, 99
    return 20, 79


def test_rolling_window_starts_at_current_hour():
    slots = generate_dynamic_timeslots(now=NOW)

    assert len(slots) == 24
    assert [slot.hour for slot in slots] == [(21 + i) % 24 for i in range(24)]
    assert slots[0].start_time == datetime(2024, 5, 1, 21, 0)
    assert slots[3].start_time == datetime(2024, 5, 2, 0, 0)
    assert all(b.start_time - a.start_time == timedelta(hours=1) for a, b in zip(slots, slots[1:]))


@pytest.mark.parametrize("seed", range(25))
def test_rolling_loads_stay_in_their_band(seed):
    slots = generate_dynamic_timeslots(now=NOW, estimator=RollingBandLoadEstimator(random.Random(seed)))

    for slot in slots:
        low, high = expected_band(slot.hour)
        assert isinstance(slot.load, int)
        assert low <= slot.load <= high
        assert slot.is_green == (slot.load < 40)


def test_rolling_rewards_follow_green_flag():
    slots = generate_dynamic_timeslots(now=NOW, estimator=RollingBandLoadEstimator(random.Random(7)))

    for slot in slots:
        if slot.is_green:
            assert (slot.coins, slot.xp, slot.co2) == (50, 25, 1.2)
        else:
            assert (slot.coins, slot.xp, slot.co2) == (10, 5, 0.0)
        assert slot.price == 5.0
        assert slot.status == "AVAILABLE"


def test_night_slots_are_always_green():
    slots = generate_dynamic_timeslots(now=NOW, estimator=RollingBandLoadEstimator(random.Random(3)))
    night = [slot for slot in slots if slot.hour >= 22 or slot.hour < 6]
    assert night and all(slot.is_green for slot in night)


def test_labels_wrap_midnight():
    assert slot_label(23) == "23:00 - 00:00"
    assert slot_label(7) == "07:00 - 08:00"
    slots = generate_dynamic_timeslots(now=NOW)
    assert slots[2].label == "23:00 - 00:00"


@pytest.mark.parametrize("load,price", [(10, 7.12), (50, 7.5), (90, 8.62)])
def test_station_price_uses_density_pricing(load, price):
    slots = generate_dynamic_timeslots(now=NOW, estimator=ConstantLoad(load), station_price=7.5)
    assert {slot.price for slot in slots} == {price}


def test_green_policies_differ():
    rolling = RollingLoadGreenPolicy()
    fixed = FixedBandGreenPolicy()

    assert rolling.is_green(12, 10) is True
    assert fixed.is_green(12, 10) is False
    assert rolling.is_green(2, 80) is False
    assert fixed.is_green(2, 80) is True
    assert [h for h in range(24) if fixed.is_green(h)] == [0, 1, 2, 3, 4, 5, 6, 23]


def test_fixed_band_estimator_ranges():
    estimator = FixedBandLoadEstimator(random.Random(11))
    for _ in range(50):
        assert 12 <= estimator.estimate(3) <= 38
        assert 55 <= estimator.estimate(14) <= 92


def test_station_estimator_prefers_forecast_then_density():
    station = Station(name="S", lat=0, lng=0, price=5.0, density=64)
    station.forecasts = [StationDensityForecast(day_of_week=2, hour=9, predicted_load=17)]
    estimator = StationLoadEstimator(ConstantLoad(99), day_of_week=2)

    assert estimator.estimate(9, station) == 17
    assert estimator.estimate(10, station) == 64

    station.density = 0
    assert estimator.estimate(10, station) == 99
    assert estimator.estimate(10) == 99


def test_station_slots_cover_clock_hours():
    station = Station(name="S", lat=0, lng=0, price=5.0, density=0)
    slots = generate_station_slots(station, now=NOW, estimator=ConstantLoad(44))

    assert [slot.hour for slot in slots] == list(range(24))
    assert slots[0].start_time == datetime(2024, 5, 1, 0, 0)
    for slot in slots:
        green = slot.hour >= 23 or slot.hour <= 6
        assert slot.is_green == green
        assert slot.status == ("GREEN" if green else "RED")
        assert slot.price == (4.0 if green else 5.0)
        assert slot.coins == (50 if green else 10)
        assert slot.load == 44
        assert slot.campaign_applied is None


def test_station_slots_stack_campaign_discount_and_bonus():
    station = Station(name="S", lat=0, lng=0, price=5.0, density=0)
    campaign = Campaign(title="Spring", discount="%20", coin_reward=15)
    slots = generate_station_slots(station, campaign, now=NOW, estimator=ConstantLoad(50))

    night, noon = slots[2], slots[12]
    assert night.price == 3.2
    assert noon.price == 4.0
    assert night.coins == 65
    assert noon.coins == 25
    assert noon.campaign_applied == {"title": "Spring", "discount": "%20"}


def test_station_slots_default_estimator_uses_density():
    station = Station(name="S", lat=0, lng=0, price=5.0, density=72)
    slots = generate_station_slots(station, now=NOW)
    assert {slot.load for slot in slots} == {72}


def test_slot_serialisation_uses_wire_keys():
    payload = generate_dynamic_timeslots(now=NOW)[0].to_dict()
    assert set(payload) == {
        "hour", "label", "startTime", "isGreen", "load", "price",
        "coins", "xp", "co2", "status", "campaignApplied",
    }
    assert payload["startTime"] == "2024-05-01T21:00:00"
