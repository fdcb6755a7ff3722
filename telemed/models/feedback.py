from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.sql import func
from telemed.database import Base

class Feedback(Base):
    __tablename__ = "feedback"

    id = Column(Integer, primary_key=True, index=True)
    category = Column(String, nullable=False)  # general, technical, doctor, platform, billing, suggestion
    rating = Column(Integer, nullable=False)  # 1-5
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    improvements = Column(Text, nullable=True)
    email = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
