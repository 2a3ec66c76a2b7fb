"""
VideoSDK Service
Signs room tokens and creates meeting rooms for video consultations
"""
import logging
import uuid
from datetime import timedelta
from typing import Any, Optional

import httpx
from fastapi import HTTPException
from jose import jwt

from ..config import VIDEOSDK_API_KEY, VIDEOSDK_BASE_URL, VIDEOSDK_REGION, VIDEOSDK_SECRET_KEY
from ..shared.dates import utcnow

logger = logging.getLogger(__name__)

EMPTY_ROOM_TIMEOUT_MS = 5 * 60 * 1000


def _require_credentials():
    if not VIDEOSDK_API_KEY or not VIDEOSDK_SECRET_KEY:
        logger.error("VIDEOSDK_API_KEY / VIDEOSDK_SECRET_KEY not configured")
        raise HTTPException(status_code=500, detail="Video provider is not configured")


def generate_token(
    room_id: Optional[str] = None,
    participant_id: Optional[str] = None,
    permissions: Optional[list[str]] = None,
    roles: Optional[list[str]] = None,
    expires_in: timedelta = timedelta(hours=2),
) -> str:
    """Sign a VideoSDK token (HS256) with the account secret"""
    _require_credentials()

    now = utcnow()
    payload: dict[str, Any] = {
        "apikey": VIDEOSDK_API_KEY,
        "permissions": permissions or ["allow_join"],
        "version": 2,
        "iat": now,
        "exp": now + expires_in,
        "jti": str(uuid.uuid4()),
    }
    if room_id:
        payload["roomId"] = room_id
    if participant_id:
        payload["participantId"] = participant_id
    if roles:
        payload["roles"] = roles

    return jwt.encode(payload, VIDEOSDK_SECRET_KEY, algorithm="HS256")


def generate_join_token(room_id: str, participant_id: Optional[str] = None) -> str:
    return generate_token(room_id=room_id, participant_id=participant_id, permissions=["allow_join"], roles=["rtc"])


async def create_room() -> dict[str, Any]:
    """
    Create a VideoSDK room.

    Returns:
        Room JSON including `roomId`

    Raises:
        HTTPException: 502 when VideoSDK rejects the request or is unreachable
    """
    token = generate_token(permissions=["allow_join", "allow_mod"])

    try:
        async with httpx.AsyncClient(timeout=30.0) as http_client:
            response = await http_client.post(
                f"{VIDEOSDK_BASE_URL}/rooms",
                headers={"Authorization": token, "Content-Type": "application/json"},
                json={
                    "region": VIDEOSDK_REGION,
                    "autoCloseConfig": {"emptyRoomTimeout": EMPTY_ROOM_TIMEOUT_MS},
                },
            )
    except httpx.HTTPError as e:
        logger.error(f"VideoSDK request failed: {e}")
        raise HTTPException(status_code=502, detail="Failed to reach video provider") from e

    if response.status_code not in (200, 201):
        logger.error(f"VideoSDK room creation failed ({response.status_code}): {response.text}")
        raise HTTPException(status_code=502, detail="Failed to create video room")

    room = response.json()
    logger.info(f"✅ VideoSDK room created: {room.get('roomId')}")
    return room
