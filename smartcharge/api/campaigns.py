from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from smartcharge.core.database import get_db
from smartcharge.schemas import CampaignPayload
from smartcharge.services.campaigns import CampaignService

router = APIRouter()

@router.get("/campaigns")
def read_campaigns(ownerId: Optional[int] = None, db: Session = Depends(get_db)):
    return CampaignService.list_by_owner(db, ownerId)

@router.get("/campaigns/for-user")
def read_campaigns_for_user(userId: Optional[int] = None, db: Session = Depends(get_db)):
    return CampaignService.for_user(db, userId)

@router.post("/campaigns")
def create_campaign(payload: CampaignPayload, db: Session = Depends(get_db)):
    return CampaignService.create(db, payload.model_dump())

@router.put("/campaigns/{campaign_id}")
def update_campaign(campaign_id: int, payload: CampaignPayload, db: Session = Depends(get_db)):
    return CampaignService.update(db, campaign_id, payload.model_dump())

@router.delete("/campaigns/{campaign_id}")
def delete_campaign(campaign_id: int, db: Session = Depends(get_db)):
    CampaignService.delete(db, campaign_id)
    return {"success": True}
