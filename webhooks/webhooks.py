import json
import logging

import stripe
from fastapi import APIRouter, Depends, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

import config
from payments.checkout import handle_stripe_event
from persistence.db import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhooks"])


@router.post("/webhook/stripe")
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header(None),
    db: Session = Depends(get_db),
):
    payload = await request.body()
    sig_header = stripe_signature or request.headers.get("stripe-signature")
    secret = config.STRIPE_WEBHOOK_SECRET
    if not secret:
        # Local development only: no signature to verify against
        logger.warning("STRIPE_WEBHOOK_SECRET not set, accepting unverified webhook")
        try:
            event = json.loads(payload)
        except ValueError:
            event = None
        if not isinstance(event, dict):
            raise HTTPException(status_code=400, detail="Invalid webhook payload")
    else:
        try:
            event = stripe.Webhook.construct_event(payload, sig_header, secret)
        except (ValueError, stripe.SignatureVerificationError):
            logger.warning("stripe webhook signature verification failed")
            raise HTTPException(status_code=400, detail="Invalid Stripe signature")

    try:
        result = handle_stripe_event(db, event)
    except Exception:
        logger.exception("error processing stripe event %s", event.get("type"))
        return JSONResponse(status_code=500, content={"error": "Webhook handler failed"})

    return JSONResponse(content={"received": True, "result": result})
