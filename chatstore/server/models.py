"""Database models for the chat store."""
from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from ..shared.dto import DEFAULT_MESSAGE_TYPE, Image
from .database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    image_thumbnail = Column(String, nullable=False, default="")
    image_original = Column(String, nullable=False, default="")

    @property
    def image(self) -> Image:
        return Image(thumbnail=self.image_thumbnail or "", original=self.image_original or "")


class ChatParticipant(Base):
    __tablename__ = "chat_participants"

    chat_id = Column(Integer, ForeignKey("chats.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True, index=True)
    # Insertion order; only used to pick "the other participant" in direct chats.
    position = Column(Integer, nullable=False, default=0)

    user = relationship("User")


class Chat(Base):
    __tablename__ = "chats"
    __table_args__ = (CheckConstraint("length(title) >= 1", name="ck_chats_title_not_empty"),)

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, index=True, nullable=False)
    image_thumbnail = Column(String, nullable=False)
    image_original = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    is_group_chat = Column(Boolean, nullable=False, default=False)
    admin_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    admin = relationship("User", foreign_keys=[admin_id])
    participant_links = relationship(
        "ChatParticipant",
        order_by="ChatParticipant.position",
        cascade="all, delete-orphan",
    )
    participants = relationship(
        "User",
        secondary="chat_participants",
        order_by="ChatParticipant.position",
        viewonly=True,
    )
    messages = relationship(
        "Message",
        back_populates="chat",
        order_by="Message.id",
        cascade="all, delete-orphan",
    )

    @property
    def image(self) -> Image:
        return Image(thumbnail=self.image_thumbnail, original=self.image_original)

    @property
    def latest_message(self):
        return self.messages[-1] if self.messages else None


class Message(Base):
    __tablename__ = "messages"
    __table_args__ = (CheckConstraint("length(content) >= 1", name="ck_messages_content_not_empty"),)

    id = Column(Integer, primary_key=True, index=True)
    chat_id = Column(Integer, ForeignKey("chats.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(32), nullable=False, default=DEFAULT_MESSAGE_TYPE)
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    content = Column(Text, nullable=False)
    image_thumbnail = Column(String, nullable=False, default="")
    image_original = Column(String, nullable=False, default="")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    chat = relationship("Chat", back_populates="messages")
    sender = relationship("User", foreign_keys=[sender_id])
    is_read_by = relationship(
        "ReadReceipt",
        back_populates="message",
        order_by="ReadReceipt.id",
        cascade="all, delete-orphan",
    )

    @property
    def image(self) -> Image:
        return Image(thumbnail=self.image_thumbnail or "", original=self.image_original or "")


class ReadReceipt(Base):
    __tablename__ = "read_receipts"
    __table_args__ = (UniqueConstraint("message_id", "member_id", name="uq_read_receipts_message_member"),)

    id = Column(Integer, primary_key=True, index=True)
    message_id = Column(Integer, ForeignKey("messages.id", ondelete="CASCADE"), nullable=False, index=True)
    member_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)

    message = relationship("Message", back_populates="is_read_by")
    member = relationship("User")
