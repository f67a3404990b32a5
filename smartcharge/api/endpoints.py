from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from smartcharge.core.database import get_db
from smartcharge.schemas import ReservationCreate, ReservationStatusUpdate, StationPayload
from smartcharge.services.reservations import ReservationService
from smartcharge.services.stations import StationService

router = APIRouter()

@router.get("/stations")
def read_stations(db: Session = Depends(get_db)):
    return StationService.list_stations(db)

@router.get("/stations/search")
def search_stations(
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    distance: int = 10000,
    name: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return StationService.search_stations(db, latitude=latitude, longitude=longitude, distance=distance, name=name)

@router.get("/stations/forecast")
def read_forecasts(
    day: Optional[int] = Query(None, ge=0, le=6),
    hour: Optional[int] = Query(None, ge=0, le=23),
    db: Session = Depends(get_db),
):
    return StationService.forecasts(db, day_of_week=day, hour=hour)

@router.get("/stations/{station_id}")
def read_station(station_id: int, db: Session = Depends(get_db)):
    return StationService.get_station_with_slots(db, station_id)

@router.get("/company/my-stations")
def read_my_stations(ownerId: Optional[int] = None, db: Session = Depends(get_db)):
    return StationService.operator_summary(db, ownerId)

@router.post("/company/my-stations")
def create_my_station(payload: StationPayload, db: Session = Depends(get_db)):
    return StationService.create_station(db, payload.model_dump())

@router.put("/company/my-stations/{station_id}")
def update_my_station(station_id: int, payload: StationPayload, db: Session = Depends(get_db)):
    return StationService.update_station(db, station_id, payload.model_dump())

@router.delete("/company/my-stations/{station_id}")
def delete_my_station(station_id: int, ownerId: Optional[int] = None, db: Session = Depends(get_db)):
    StationService.delete_station(db, station_id, ownerId)
    return {"success": True}

@router.post("/reservations")
def create_reservation(payload: ReservationCreate, db: Session = Depends(get_db)):
    reservation, user = ReservationService.create(
        db,
        user_id=payload.userId,
        station_id=payload.stationId,
        date=payload.date,
        hour=payload.hour,
        is_green=payload.isGreen,
    )
    return {
        "success": True,
        "message": "Reservation saved",
        "reservation": reservation.to_dict(),
        "user": user.balances(),
    }

@router.patch("/reservations/{reservation_id}")
def update_reservation_status(reservation_id: int, payload: ReservationStatusUpdate, db: Session = Depends(get_db)):
    ReservationService.transition(db, reservation_id, payload.status)
    return {"success": True}

@router.post("/reservations/{reservation_id}/complete")
def complete_reservation(reservation_id: int, db: Session = Depends(get_db)):
    reservation, user = ReservationService.complete(db, reservation_id)
    return {"success": True, "reservation": reservation.to_dict(), "user": user.balances()}
