from enum import Enum
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from datetime import datetime
from app.db.base import Base


class Plan(str, Enum):
    """Account tiers. Only FREE is metered."""
    FREE = "FREE"
    PREMIUM_MONTHLY = "PREMIUM_MONTHLY"
    PREMIUM_YEARLY = "PREMIUM_YEARLY"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)  # Always stored lower-cased
    hashed_password = Column(String, nullable=False)
    name = Column(String, nullable=False)
    plan_tier = Column(String, default=Plan.FREE.value, nullable=False)  # Cached from Subscription, see services/billing.py
    generations_used = Column(Integer, default=0, nullable=False)
    stripe_customer_id = Column(String, nullable=True)
    stripe_subscription_id = Column(String, nullable=True, index=True)
    language = Column(String, default="fr", nullable=False)
    theme = Column(String, default="dark", nullable=False)

    # Watermark preferences (customizable on PREMIUM_YEARLY only)
    watermark_enabled = Column(Boolean, default=False, nullable=False)
    watermark_type = Column(String, default="text", nullable=False)  # "logo" or "text"
    watermark_logo_url = Column(String, nullable=True)
    watermark_text = Column(String, nullable=True)
    watermark_language = Column(String, nullable=True)
    watermark_position = Column(String, default="bottom-right", nullable=False)
    watermark_opacity = Column(Integer, default=70, nullable=False)  # 0-100

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    last_login = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, plan_tier={self.plan_tier})>"
