"""VideoSDK router - rooms and join tokens for video consultations"""

import logging

from fastapi import APIRouter, Depends

from ...auth import get_current_user
from ...models import User
from ...services import videosdk_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/videosdk", tags=["VideoSDK"])


@router.post("/room")
async def create_room(current_user: User = Depends(get_current_user)):
    room = await videosdk_service.create_room()
    logger.info(f"🎥 VideoSDK room {room.get('roomId')} created by {current_user.id}")
    return room


@router.get("/token/{room_id}")
async def get_join_token(room_id: str, current_user: User = Depends(get_current_user)):
    return {
        "token": videosdk_service.generate_join_token(room_id, current_user.id),
        "room_id": room_id,
        "participant_id": current_user.id,
    }


__all__ = ["router"]
