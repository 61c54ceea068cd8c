"""
Stripe webhook. Register this URL in the Stripe dashboard:
https://your-backend.com/api/webhook
"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from app.core.config import Settings, get_settings
from app.db.session import get_db
from app.services import billing

router = APIRouter()


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Verify the Stripe signature on the raw body, then apply the event.
    Once verified the response is always {"received": true} so Stripe stops retrying,
    whether or not the event matched an account.
    """
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature")

    event = billing.construct_event(payload, sig_header, settings.stripe_webhook_secret)
    billing.handle_event(db, settings, event)

    return {"received": True}
