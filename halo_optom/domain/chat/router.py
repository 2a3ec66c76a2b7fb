"""Chat router"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import MessageCreate, MessageResponse, RoomResponse
from .service import ChatService

router = APIRouter(prefix="/chats", tags=["Chat"])


def get_chat_service(db: Session = Depends(get_db)) -> ChatService:
    return ChatService(db)


@router.get("/rooms", response_model=list[RoomResponse])
async def list_rooms(
    current_user: User = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    return service.list_rooms(current_user)


@router.post("/{room_id}/message", response_model=MessageResponse, status_code=201)
async def send_message(
    room_id: str,
    data: MessageCreate,
    current_user: User = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    return service.send_message(room_id, current_user, data)


@router.get("/{room_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    room_id: str,
    current_user: User = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    return service.list_messages(room_id, current_user)


__all__ = ["router"]
