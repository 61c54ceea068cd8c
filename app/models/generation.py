"""
Model for generated interior-design images. Rows are append-only.
"""
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime, Text
from datetime import datetime
from app.db.base import Base


class Generation(Base):
    __tablename__ = "generations"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    prompt = Column(Text, nullable=False)
    style = Column(String, nullable=False)
    room_type = Column(String, nullable=True)
    image_url = Column(String, nullable=True)
    has_watermark = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<Generation(id={self.id}, user_id={self.user_id}, created_at={self.created_at})>"
