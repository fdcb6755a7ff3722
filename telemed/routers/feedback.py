from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Literal, Optional
from datetime import datetime
from telemed.database import get_db
from telemed.models.feedback import Feedback
from telemed.routers.common import commit_or_500
from pydantic import BaseModel, Field
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/feedback", tags=["feedback"])

FeedbackCategory = Literal["general", "technical", "doctor", "platform", "billing", "suggestion"]

class FeedbackCreate(BaseModel):
    category: FeedbackCategory = "general"
    rating: int = Field(..., ge=1, le=5)
    title: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    improvements: Optional[str] = None
    email: Optional[str] = None

class FeedbackResponse(FeedbackCreate):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

@router.post("", response_model=FeedbackResponse, status_code=status.HTTP_201_CREATED)
async def submit_feedback(
    feedback: FeedbackCreate,
    db: Session = Depends(get_db)
):
    db_feedback = Feedback(**feedback.model_dump())
    db.add(db_feedback)
    commit_or_500(db, "submit feedback")
    db.refresh(db_feedback)
    logger.info(f"Feedback {db_feedback.id} received ({db_feedback.category}, {db_feedback.rating}/5)")
    return db_feedback

@router.get("", response_model=List[FeedbackResponse])
async def list_feedback(
    db: Session = Depends(get_db)
):
    return db.query(Feedback).order_by(Feedback.created_at.desc(), Feedback.id.desc()).all()
