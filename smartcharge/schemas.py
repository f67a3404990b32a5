"""Request bodies. Field names are the camelCase keys clients send.

Required-field checks live in the services so that a missing field is a
ValidationError (HTTP 400) whichever way the service is called.
"""

from typing import List, Optional
from pydantic import BaseModel, Field, StrictBool


class ReservationCreate(BaseModel):
    userId: Optional[int] = None
    stationId: Optional[int] = None
    date: Optional[str] = None
    hour: Optional[str] = None
    isGreen: Optional[StrictBool] = None


class ReservationStatusUpdate(BaseModel):
    status: Optional[str] = None


class StationPayload(BaseModel):
    name: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    address: Optional[str] = None
    price: Optional[float] = None
    density: Optional[int] = Field(None, ge=0, le=100)
    ownerId: Optional[int] = None


class CampaignPayload(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    target: Optional[str] = None
    discount: Optional[str] = None
    endDate: Optional[str] = None
    ownerId: Optional[int] = None
    stationId: Optional[int] = None
    coinReward: Optional[int] = None
    targetBadgeIds: List[int] = Field(default_factory=list)


class LoginRequest(BaseModel):
    email: Optional[str] = None


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
