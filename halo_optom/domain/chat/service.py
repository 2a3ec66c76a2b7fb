"""Chat service - REST messaging inside consultation rooms"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import ChatMessage, ChatRoom, User
from ...utils.sanitization import sanitize_text
from ..users.repository import UserRepository
from .repository import ChatRepository
from .schemas import MessageCreate

logger = logging.getLogger(__name__)


class ChatService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ChatRepository()

    def _get_room_for(self, room_id: str, user: User, action: str) -> ChatRoom:
        room = self.repo.get_room(self.db, room_id)
        if not room:
            raise HTTPException(status_code=404, detail="Chat room not found")
        if not any(p.id == user.id for p in room.participants):
            raise HTTPException(status_code=403, detail=f"You are not allowed to {action} in this room")
        return room

    def send_message(self, room_id: str, user: User, data: MessageCreate) -> ChatMessage:
        text = sanitize_text(data.message or "")
        if not text:
            raise HTTPException(status_code=400, detail="Message cannot be empty")

        room = self._get_room_for(room_id, user, "send messages")

        to_user_id = data.to_user_id
        if to_user_id and not UserRepository.get_by_id(self.db, to_user_id):
            raise HTTPException(status_code=404, detail="Recipient not found")
        if not to_user_id:
            # Default recipient is the other participant of a one-to-one room
            others = [p.id for p in room.participants if p.id != user.id]
            to_user_id = others[0] if len(others) == 1 else None

        message = self.repo.add_message(
            self.db,
            room_id=room.id,
            from_user_id=user.id,
            to_user_id=to_user_id,
            message=text,
            attachments=data.attachments,
        )
        logger.debug(f"Message {message.id} posted to room {room.id}")
        return message

    def list_messages(self, room_id: str, user: User) -> list[ChatMessage]:
        room = self._get_room_for(room_id, user, "read messages")
        return self.repo.list_messages(self.db, room.id)

    def list_rooms(self, user: User) -> list[ChatRoom]:
        return self.repo.rooms_for_user(self.db, user.id)
