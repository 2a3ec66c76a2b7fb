"""Chat repository - consultation rooms and their messages"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload, selectinload

from ...models import ChatMessage, ChatRoom, User, chat_room_participants


class ChatRepository:
    @staticmethod
    def create_room(db: Session, appointment_id: Optional[str], participants: list[User]) -> ChatRoom:
        """Add a room without committing; the caller owns the transaction"""
        room = ChatRoom(appointment_id=appointment_id)
        room.participants = [p for p in participants if p is not None]
        db.add(room)
        db.flush()
        return room

    @staticmethod
    def get_room(db: Session, room_id: str) -> Optional[ChatRoom]:
        return (
            db.query(ChatRoom)
            .options(selectinload(ChatRoom.participants))
            .filter(ChatRoom.id == room_id)
            .first()
        )

    @staticmethod
    def rooms_for_user(db: Session, user_id: str) -> list[ChatRoom]:
        return (
            db.query(ChatRoom)
            .join(chat_room_participants, chat_room_participants.c.room_id == ChatRoom.id)
            .filter(chat_room_participants.c.user_id == user_id)
            .options(selectinload(ChatRoom.participants))
            .order_by(ChatRoom.created_at.desc())
            .all()
        )

    @staticmethod
    def list_messages(db: Session, room_id: str) -> list[ChatMessage]:
        return (
            db.query(ChatMessage)
            .options(joinedload(ChatMessage.from_user), joinedload(ChatMessage.to_user))
            .filter(ChatMessage.room_id == room_id)
            .order_by(ChatMessage.created_at.asc())
            .all()
        )

    @staticmethod
    def add_message(db: Session, **data) -> ChatMessage:
        message = ChatMessage(**data)
        db.add(message)
        db.commit()
        db.refresh(message)
        return message
