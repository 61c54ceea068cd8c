"""
Stripe Checkout Session Routes
Handles Stripe Checkout Session creation for subscription upgrades
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.core.config import Settings, get_settings
from app.db.session import get_db
from app.dependencies.auth import get_current_user_id
from app.schemas.billing import CheckoutRequest
from app.services import billing

router = APIRouter()


@router.post("/create-checkout-session")
def create_checkout_session(
    data: CheckoutRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    user_id: int = Depends(get_current_user_id)
):
    """
    Create a Stripe Checkout Session for a subscription.
    Returns the session id and the URL to redirect the user to.
    """
    return billing.create_checkout_session(db, settings, user_id, data.price_id)
