from fastapi import APIRouter
from typing import List
from telemed.core.health_tips import get_health_tips
from pydantic import BaseModel

router = APIRouter(prefix="/api/health-tips", tags=["health-tips"])

class HealthTip(BaseModel):
    title: str
    description: str

class HealthTipsResponse(BaseModel):
    group: str
    tips: List[HealthTip]

@router.get("", response_model=HealthTipsResponse)
async def health_tips(symptoms: str = "", category: str = ""):
    return get_health_tips(symptoms, category)
