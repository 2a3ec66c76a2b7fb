"""
Xendit Invoice Service
Creates hosted invoices for appointment and order payments and interprets webhook payloads
"""
import logging
import time
from decimal import Decimal
from typing import Any, Optional

import httpx
from fastapi import HTTPException

from ..config import (
    XENDIT_API_KEY,
    XENDIT_API_URL,
    XENDIT_CALLBACK_URL,
    XENDIT_INVOICE_DURATION_SECONDS,
    XENDIT_SUCCESS_REDIRECT_URL,
)
from ..models import PAYMENT_TYPES

logger = logging.getLogger(__name__)

# Xendit invoice status -> payments.status
XENDIT_STATUS_MAP = {
    "PAID": "paid",
    "SETTLED": "paid",
    "EXPIRED": "expired",
    "FAILED": "failed",
    "CANCELLED": "failed",
}


def generate_external_id(payment_type: str, target_id: str, timestamp: Optional[int] = None) -> str:
    """Build `{type}-{id}-{millis}`"""
    if timestamp is None:
        timestamp = int(time.time() * 1000)
    return f"{payment_type}-{target_id}-{timestamp}"


def parse_external_id(external_id: str) -> tuple[Optional[str], Optional[str]]:
    """
    Split an external id into (type, target_id).

    The type is the first segment and the timestamp the last; everything in between is
    the target id, which may itself contain dashes (UUIDs). Returns (None, None) when the
    id is malformed or the type is unknown.
    """
    parts = (external_id or "").split("-")
    if len(parts) < 3:
        return None, None

    payment_type = parts[0]
    target_id = "-".join(parts[1:-1])
    if payment_type not in PAYMENT_TYPES or not target_id:
        return None, None
    return payment_type, target_id


def map_xendit_status(xendit_status: Optional[str]) -> str:
    """Map a Xendit status to a payment status; unknown statuses stay pending"""
    return XENDIT_STATUS_MAP.get((xendit_status or "").upper(), "pending")


async def create_invoice(
    external_id: str,
    amount: Decimal,
    description: str,
    payer_email: Optional[str] = None,
    customer_name: Optional[str] = None,
) -> dict[str, Any]:
    """
    Create a Xendit invoice.

    Returns:
        The invoice JSON (id, invoice_url, status, expiry_date, ...)

    Raises:
        HTTPException: 500 when Xendit is not configured, 502 on provider failure
    """
    if not XENDIT_API_KEY:
        logger.error("XENDIT_API_KEY not configured")
        raise HTTPException(status_code=500, detail="Payment provider is not configured")

    payload: dict[str, Any] = {
        "external_id": external_id,
        "amount": float(amount),
        "description": description,
        "currency": "IDR",
        "invoice_duration": XENDIT_INVOICE_DURATION_SECONDS,
    }
    if payer_email:
        payload["payer_email"] = payer_email
    if customer_name:
        payload["customer"] = {"given_names": customer_name}
    if XENDIT_SUCCESS_REDIRECT_URL:
        payload["success_redirect_url"] = XENDIT_SUCCESS_REDIRECT_URL
    if XENDIT_CALLBACK_URL:
        payload["callback_url"] = XENDIT_CALLBACK_URL

    try:
        async with httpx.AsyncClient(timeout=30.0) as http_client:
            response = await http_client.post(
                f"{XENDIT_API_URL}/v2/invoices",
                json=payload,
                auth=(XENDIT_API_KEY, ""),
                headers={"Content-Type": "application/json"},
            )
    except httpx.HTTPError as e:
        logger.error(f"Xendit request failed for {external_id}: {e}")
        raise HTTPException(status_code=502, detail="Failed to reach payment provider") from e

    if response.status_code not in (200, 201):
        logger.error(f"Xendit invoice creation failed ({response.status_code}): {response.text}")
        raise HTTPException(status_code=502, detail="Failed to create payment invoice")

    invoice = response.json()
    logger.info(f"✅ Xendit invoice {invoice.get('id')} created for {external_id}")
    return invoice
