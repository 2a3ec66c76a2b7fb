"""
Xendit Webhook Handler
Invoice callbacks for appointment and order payments
"""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from ...database import get_db
from ...webhook_security import verify_xendit_webhook
from .service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Webhooks"])


async def _handle(request: Request, db: Session, expected_type: Optional[str], missing_header_status: int):
    raw_body = await verify_xendit_webhook(request, missing_header_status=missing_header_status)

    try:
        payload = json.loads(raw_body.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.error("❌ Invalid JSON payload on Xendit webhook")
        raise HTTPException(status_code=400, detail="Invalid JSON") from None

    if not isinstance(payload, dict) or not payload.get("external_id"):
        raise HTTPException(status_code=400, detail="Missing external_id")

    try:
        return await PaymentService(db).handle_xendit_callback(payload, expected_type=expected_type)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Xendit webhook processing error: {str(e)}")
        raise HTTPException(status_code=500, detail="Webhook processing failed")


@router.post("/payments/webhook/xendit")
async def xendit_webhook(request: Request, db: Session = Depends(get_db)):
    """Generic invoice callback; the payment type comes from external_id"""
    return await _handle(request, db, expected_type=None, missing_header_status=401)


@router.post("/payments-appointment/xendit-webhook")
async def xendit_appointment_webhook(request: Request, db: Session = Depends(get_db)):
    return await _handle(request, db, expected_type="appointment", missing_header_status=400)


@router.post("/payments-order/xendit-webhook")
async def xendit_order_webhook(request: Request, db: Session = Depends(get_db)):
    return await _handle(request, db, expected_type="order", missing_header_status=400)


__all__ = ["router"]
