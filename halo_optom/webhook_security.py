"""
Webhook Security Module

Signature verification for Xendit callbacks:
- X-CALLBACK-TOKEN carries the HMAC-SHA256 hex digest of the raw body
- Constant-time comparison
- Verification happens on the raw bytes before any JSON parsing
"""

import hashlib
import hmac
import logging
from typing import Optional

from fastapi import HTTPException, Request

from .config import XENDIT_WEBHOOK_VERIFICATION_TOKEN

logger = logging.getLogger(__name__)

XENDIT_SIGNATURE_HEADER = "x-callback-token"


def constant_time_compare(a: str, b: str) -> bool:
    """Compare two strings in constant time. Empty values never match."""
    if not a or not b:
        return False
    return hmac.compare_digest(a, b)


def compute_hmac_sha256(secret: str, payload: bytes) -> str:
    """Compute HMAC-SHA256 signature of payload"""
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def verify_xendit_signature(raw_body: bytes, signature: str, secret: Optional[str] = None) -> bool:
    secret = secret if secret is not None else XENDIT_WEBHOOK_VERIFICATION_TOKEN
    if not secret:
        logger.warning("XENDIT_WEBHOOK_VERIFICATION_TOKEN is not configured; rejecting webhook")
        return False
    return constant_time_compare(compute_hmac_sha256(secret, raw_body), signature)


async def verify_xendit_webhook(request: Request, missing_header_status: int = 401) -> bytes:
    """
    Verify a Xendit webhook and return its raw body.

    Args:
        request: FastAPI request object
        missing_header_status: status used when the signature header is absent

    Raises:
        HTTPException: missing header (missing_header_status) or bad signature (401)
    """
    raw_body = await request.body()
    signature = request.headers.get(XENDIT_SIGNATURE_HEADER, "")

    if not signature:
        logger.error("Missing X-CALLBACK-TOKEN header on Xendit webhook")
        raise HTTPException(status_code=missing_header_status, detail="Missing X-CALLBACK-TOKEN header")

    if not verify_xendit_signature(raw_body, signature):
        logger.error(f"Invalid Xendit webhook signature ({len(raw_body)} byte body)")
        raise HTTPException(status_code=401, detail="Invalid webhook signature")

    logger.info("Xendit webhook signature verified")
    return raw_body
