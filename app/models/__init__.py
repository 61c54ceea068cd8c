from app.models.user import User, Plan
from app.models.generation import Generation
from app.models.subscription import Subscription

__all__ = [
    "User",
    "Plan",
    "Generation",
    "Subscription",
]
