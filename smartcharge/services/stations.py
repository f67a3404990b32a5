from datetime import datetime
from typing import Optional
import random

from geopy.distance import geodesic
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from loguru import logger

from smartcharge.core.dates import utcnow
from smartcharge.core.errors import NotFoundError, StoreError, ValidationError
from smartcharge.models.station import Station, StationDensityForecast
from smartcharge.services import pricing
from smartcharge.services.campaigns import CampaignService
from smartcharge.services.slots import generate_station_slots

NEXT_GREEN_HOUR = "23:00"

# simulated loads for stations without a measured density
MOCK_LOAD_RANGES = {
    "GREEN": (10, 45),
    "YELLOW": (46, 65),
    "RED": (66, 95),
}


def mock_load(rng: Optional[random.Random] = None) -> int:
    rng = rng or random
    low, high = MOCK_LOAD_RANGES[rng.choice(list(MOCK_LOAD_RANGES))]
    return rng.randint(low, high)


def current_load(station: Station, rng: Optional[random.Random] = None) -> int:
    return station.density if station.density and station.density > 0 else mock_load(rng)


class StationService:

    @staticmethod
    def _summary(station: Station, rng: Optional[random.Random] = None):
        load = current_load(station, rng)
        return {
            "id": station.id,
            "name": station.name,
            "address": station.address,
            "lat": station.lat,
            "lng": station.lng,
            "price": round(station.price, 2),
            "ownerId": station.owner_id,
            "ownerName": station.owner.name if station.owner else None,
            "mockLoad": load,
            "mockStatus": pricing.load_status(load),
            "densityLevel": pricing.density_level(load),
            "nextGreenHour": NEXT_GREEN_HOUR,
        }

    @staticmethod
    def list_stations(db: Session, rng: Optional[random.Random] = None):
        stations = db.query(Station).options(selectinload(Station.owner)).order_by(Station.id.asc()).all()
        return [StationService._summary(station, rng) for station in stations]

    @staticmethod
    def get_station_with_slots(db: Session, station_id: int, now: Optional[datetime] = None):
        station = (
            db.query(Station)
            .options(selectinload(Station.forecasts))
            .filter(Station.id == station_id)
            .first()
        )
        if not station:
            raise NotFoundError("Station")

        now = now or utcnow()
        campaign = CampaignService.find_active_campaign(db, station.id, now)
        slots = generate_station_slots(station, campaign, now=now)

        payload = station.to_dict()
        payload["slots"] = [slot.to_dict() for slot in slots]
        payload["activeCampaign"] = campaign.to_dict() if campaign else None
        return payload

    @staticmethod
    def search_stations(
        db: Session,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        distance: int = 10000,
        name: Optional[str] = None,
    ):
        """Stations within ``distance`` metres of a point, nearest first."""
        query = db.query(Station).options(selectinload(Station.owner))
        if name:
            logger.info(f"Searching stations by name: {name}")
            query = query.filter(func.lower(Station.name).contains(name.lower()))
        stations = query.order_by(Station.id.asc()).all()

        if latitude is None or longitude is None:
            return [StationService._summary(station) for station in stations]

        logger.info(f"Searching stations by location: latitude={latitude}, longitude={longitude}, distance={distance}")
        nearby = []
        for station in stations:
            km = geodesic((latitude, longitude), (station.lat, station.lng)).km
            if km <= distance / 1000:
                nearby.append((km, station))
        nearby.sort(key=lambda pair: pair[0])

        result = []
        for km, station in nearby:
            item = StationService._summary(station)
            item["distanceKm"] = round(km, 3)
            result.append(item)
        return result

    @staticmethod
    def forecasts(db: Session, day_of_week: Optional[int] = None, hour: Optional[int] = None, now: Optional[datetime] = None):
        now = now or utcnow()
        day_of_week = now.weekday() if day_of_week is None else day_of_week
        hour = now.hour if hour is None else hour
        if not 0 <= day_of_week <= 6 or not 0 <= hour <= 23:
            raise ValidationError("day must be 0-6 and hour 0-23")

        rows = (
            db.query(StationDensityForecast)
            .options(selectinload(StationDensityForecast.station))
            .filter(StationDensityForecast.day_of_week == day_of_week, StationDensityForecast.hour == hour)
            .order_by(StationDensityForecast.predicted_load.asc())
            .all()
        )
        return {
            "success": True,
            "currentTime": {"dayOfWeek": day_of_week, "hour": hour},
            "forecasts": [
                {
                    "stationId": row.station.id,
                    "stationName": row.station.name,
                    "lat": row.station.lat,
                    "lng": row.station.lng,
                    "price": row.station.price,
                    "address": row.station.address,
                    "densityProfile": row.station.density_profile,
                    "predictedLoad": row.predicted_load,
                    "dayOfWeek": row.day_of_week,
                    "hour": row.hour,
                }
                for row in rows
            ],
        }

    @staticmethod
    def operator_summary(db: Session, owner_id, rng: Optional[random.Random] = None):
        if not owner_id:
            raise ValidationError("ownerId is required")
        stations = (
            db.query(Station)
            .options(selectinload(Station.reservations))
            .filter(Station.owner_id == owner_id)
            .order_by(Station.id.asc())
            .all()
        )

        payload = []
        for station in stations:
            load = current_load(station, rng)
            revenue = sum(
                station.price * (pricing.GREEN_HOUR_DISCOUNT if reservation.is_green else 1)
                for reservation in station.reservations
            )
            payload.append({
                "id": station.id,
                "name": station.name,
                "lat": station.lat,
                "lng": station.lng,
                "address": station.address,
                "price": round(station.price, 2),
                "density": station.density,
                "mockLoad": load,
                "mockStatus": pricing.load_status(load),
                "reservationCount": len(station.reservations),
                "greenReservationCount": sum(1 for r in station.reservations if r.is_green),
                "revenue": round(revenue, 2),
            })

        total_reservations = sum(s["reservationCount"] for s in payload)
        green_reservations = sum(s["greenReservationCount"] for s in payload)
        stats = {
            "totalRevenue": round(sum(s["revenue"] for s in payload), 2),
            "totalReservations": total_reservations,
            "greenShare": round(green_reservations / total_reservations * 100, 1) if total_reservations else 0,
            "avgLoad": round(sum(s["mockLoad"] for s in payload) / len(payload)) if payload else 0,
        }
        return {"stats": stats, "stations": payload}

    @staticmethod
    def _validate(data: dict):
        missing = [key for key in ("name", "lat", "lng", "price") if data.get(key) is None]
        if missing or not data.get("name"):
            raise ValidationError("name, lat, lng and price are required")
        if data["price"] <= 0:
            raise ValidationError("price must be greater than zero")
        density = data.get("density") or 0
        if not 0 <= density <= 100:
            raise ValidationError("density must be between 0 and 100")

    @staticmethod
    def _owned(db: Session, station_id: int, owner_id) -> Station:
        station = db.get(Station, station_id)
        if not station or (owner_id and station.owner_id != owner_id):
            raise NotFoundError("Station")
        return station

    @staticmethod
    def create_station(db: Session, data: dict):
        if not data.get("ownerId"):
            raise ValidationError("ownerId is required")
        StationService._validate(data)
        station = Station(
            name=data["name"],
            lat=data["lat"],
            lng=data["lng"],
            address=data.get("address"),
            price=data["price"],
            density=data.get("density") or 0,
            owner_id=data["ownerId"],
        )
        try:
            db.add(station)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Station create failed: {e}")
            raise StoreError("Station could not be created")
        db.refresh(station)
        logger.info(f"Created station {station.id} for owner {station.owner_id}")
        return station.to_dict()

    @staticmethod
    def update_station(db: Session, station_id: int, data: dict):
        station = StationService._owned(db, station_id, data.get("ownerId"))
        StationService._validate(data)
        station.name = data["name"]
        station.lat = data["lat"]
        station.lng = data["lng"]
        station.address = data.get("address")
        station.price = data["price"]
        if data.get("density") is not None:
            station.density = data["density"]
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Station {station_id} update failed: {e}")
            raise StoreError("Update failed")
        db.refresh(station)
        return station.to_dict()

    @staticmethod
    def delete_station(db: Session, station_id: int, owner_id=None):
        station = StationService._owned(db, station_id, owner_id)
        if station.reservations:
            raise ValidationError("Station has reservations and cannot be deleted")
        try:
            db.delete(station)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Station {station_id} delete failed: {e}")
            raise StoreError("Delete failed")
        logger.info(f"Deleted station {station_id}")
