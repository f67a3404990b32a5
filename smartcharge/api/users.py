from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from smartcharge.core.database import get_db
from smartcharge.schemas import LoginRequest, ProfileUpdate
from smartcharge.services.users import UserService

router = APIRouter()

@router.post("/auth/login")
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    return UserService.login(db, payload.email)

@router.get("/demo-user")
def read_demo_user(db: Session = Depends(get_db)):
    return UserService.demo_user(db)

@router.get("/badges")
def read_badges(db: Session = Depends(get_db)):
    return UserService.list_badges(db)

@router.get("/users/leaderboard")
def read_leaderboard(limit: int = Query(10, ge=1, le=100), db: Session = Depends(get_db)):
    return UserService.leaderboard(db, limit)

@router.get("/users/{user_id}")
def read_user(user_id: int, db: Session = Depends(get_db)):
    return UserService.get_profile(db, user_id)

@router.put("/users/{user_id}")
def update_user(user_id: int, payload: ProfileUpdate, db: Session = Depends(get_db)):
    return UserService.update_profile(db, user_id, name=payload.name, email=payload.email)
