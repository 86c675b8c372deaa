"""Persistence and retrieval of chats, messages and read receipts."""
import functools
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from sqlalchemy import case, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, selectinload

from ..shared.dto import DEFAULT_MESSAGE_TYPE, MESSAGE_TYPES, Image
from ..shared.utils import MAX_ID, parse_id
from .config import CHAT_LIST_ORDER, DEFAULT_CHAT_IMAGE
from .errors import InvalidArgument, NotFound, StorageError, Unauthenticated
from .logging_config import configure_logging
from .models import Chat, ChatParticipant, Message, ReadReceipt, User
from .schemas import ChatOut, MessageOut
from .search import SearchFilter

logger = configure_logging()


def _storage_errors(method):
    """Roll back and re-raise engine failures as StorageError."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("STORAGE_ERROR operation=%s error=%s", method.__name__, exc)
            raise StorageError(f"{method.__name__} failed", cause=exc) from exc

    return wrapper


def _parse(value, what: str) -> int:
    try:
        return parse_id(value)
    except ValueError as exc:
        raise InvalidArgument(f"Invalid {what}!", value) from exc


def _unique(ids: Iterable[int]) -> List[int]:
    return list(dict.fromkeys(ids))


class ChatStore:
    """Chat persistence bound to one session.

    Every read returns pydantic snapshots with admin, participants, message
    senders and read-receipt members resolved to the users' current data.
    """

    def __init__(
        self,
        db: Session,
        default_image: Image = DEFAULT_CHAT_IMAGE,
        list_order: str = CHAT_LIST_ORDER,
    ):
        self.db = db
        self.default_image = default_image
        self.list_order = list_order

    def _chat_query(self) -> Query:
        return (
            self.db.query(Chat)
            .options(
                selectinload(Chat.admin),
                selectinload(Chat.participants),
                selectinload(Chat.messages).selectinload(Message.sender),
                selectinload(Chat.messages).selectinload(Message.is_read_by).selectinload(ReadReceipt.member),
            )
            .populate_existing()
        )

    def _require_users(self, user_ids: Sequence[int]) -> None:
        storable = [user_id for user_id in user_ids if user_id <= MAX_ID]
        found = set()
        if storable:
            found = {row.id for row in self.db.query(User.id).filter(User.id.in_(storable))}
        missing = [user_id for user_id in user_ids if user_id not in found]
        if missing:
            raise NotFound("User not found", missing[0])

    # Reads

    @_storage_errors
    def count_chats(self) -> int:
        return self.db.query(func.count(Chat.id)).scalar() or 0

    @_storage_errors
    def list_all_chats(self) -> List[ChatOut]:
        chats = self._chat_query().order_by(Chat.id).all()
        return [ChatOut.model_validate(chat) for chat in chats]

    @_storage_errors
    def get_chat_by_id(self, chat_id) -> Optional[ChatOut]:
        pk = _parse(chat_id, "id")
        if pk > MAX_ID:
            return None
        chat = self._chat_query().filter(Chat.id == pk).first()
        return ChatOut.model_validate(chat) if chat else None

    @_storage_errors
    def find_chat_by_participants(self, participant_ids: Iterable) -> Optional[ChatOut]:
        """Return the oldest chat whose participant set equals ``participant_ids``."""
        if isinstance(participant_ids, (str, bytes)):
            return None
        try:
            wanted = _unique(parse_id(value) for value in participant_ids)
        except ValueError:
            return None
        if not wanted or max(wanted) > MAX_ID:
            return None

        links = ChatParticipant.__table__.c
        matching = (
            select(links.chat_id)
            .group_by(links.chat_id)
            .having(func.count(links.user_id) == len(wanted))
            .having(func.sum(case((links.user_id.in_(wanted), 1), else_=0)) == len(wanted))
        )
        chat = self._chat_query().filter(Chat.id.in_(matching)).order_by(Chat.created_at, Chat.id).first()
        return ChatOut.model_validate(chat) if chat else None

    @_storage_errors
    def list_chats_for_user(self, caller_id, title_filter: Optional[str] = None) -> List[ChatOut]:
        if caller_id is None:
            raise Unauthenticated()
        try:
            caller_pk = parse_id(caller_id)
        except ValueError:
            logger.warning("LIST_CHATS_SKIPPED reason=malformed_caller caller_id=%r", caller_id)
            return []
        if caller_pk > MAX_ID:
            return []
        search = SearchFilter(caller_pk, title_filter, order=self.list_order)
        query = search.apply(self._chat_query(), dialect=self.db.get_bind().dialect.name)
        return [ChatOut.model_validate(chat) for chat in query.all()]

    @_storage_errors
    def chat_title_exists(self, title: str) -> bool:
        return self.db.query(Chat.id).filter(Chat.title == title).first() is not None

    # Writes

    @_storage_errors
    def create_chat(
        self,
        title: str,
        participant_ids: Iterable,
        admin_id=None,
        is_group_chat: bool = False,
        description: str = "",
        image: Optional[Image] = None,
    ) -> ChatOut:
        if not title:
            raise InvalidArgument("Chat title must not be empty", title)
        members = _unique(_parse(value, "participant id") for value in participant_ids)
        admin_pk = _parse(admin_id, "admin id") if admin_id is not None else None
        self._require_users(members + ([admin_pk] if admin_pk is not None else []))

        image = image or self.default_image
        chat = Chat(
            title=title,
            image_thumbnail=image.thumbnail,
            image_original=image.original,
            description=description or "",
            is_group_chat=is_group_chat,
            admin_id=admin_pk,
        )
        chat.participant_links = [
            ChatParticipant(user_id=user_id, position=position) for position, user_id in enumerate(members)
        ]
        self.db.add(chat)
        self.db.commit()
        logger.info(
            "CHAT_CREATED chat_id=%s group=%s participants=%s admin_id=%s",
            chat.id,
            is_group_chat,
            members,
            admin_pk,
        )
        return self.get_chat_by_id(chat.id)

    @_storage_errors
    def append_message(
        self,
        chat_id,
        sender_id,
        content: str,
        message_type: str = DEFAULT_MESSAGE_TYPE,
        image: Optional[Image] = None,
        read_by: Iterable = (),
        created_at: Optional[datetime] = None,
    ) -> MessageOut:
        """Append a message; ``read_by`` lists the members expected to read it."""
        chat_pk = _parse(chat_id, "chat id")
        if not content:
            raise InvalidArgument("Message content must not be empty", content)
        if message_type not in MESSAGE_TYPES:
            raise InvalidArgument("Unknown message type", message_type)
        sender_pk = _parse(sender_id, "sender id") if sender_id is not None else None
        members = _unique(_parse(value, "member id") for value in read_by)

        if chat_pk > MAX_ID or self.db.query(Chat.id).filter(Chat.id == chat_pk).first() is None:
            raise NotFound("Chat not found", chat_id)
        self._require_users(members + ([sender_pk] if sender_pk is not None else []))

        image = image or Image()
        message = Message(
            chat_id=chat_pk,
            type=message_type,
            sender_id=sender_pk,
            content=content,
            image_thumbnail=image.thumbnail,
            image_original=image.original,
            created_at=created_at or datetime.utcnow(),
        )
        message.is_read_by = [ReadReceipt(member_id=member_id) for member_id in members]
        self.db.add(message)
        self.db.commit()
        logger.info("MESSAGE_APPENDED chat_id=%s message_id=%s sender_id=%s", chat_pk, message.id, sender_pk)

        stored = (
            self.db.query(Message)
            .options(
                selectinload(Message.sender),
                selectinload(Message.is_read_by).selectinload(ReadReceipt.member),
            )
            .populate_existing()
            .filter(Message.id == message.id)
            .one()
        )
        return MessageOut.model_validate(stored)

    @_storage_errors
    def mark_message_read(self, chat_id, message_id, member_id) -> None:
        """Set ``is_read`` on the single receipt of ``member_id`` for ``message_id``."""
        chat_pk = _parse(chat_id, "chat id")
        message_pk = _parse(message_id, "message id")
        member_pk = _parse(member_id, "member id")

        if chat_pk > MAX_ID or self.db.query(Chat.id).filter(Chat.id == chat_pk).first() is None:
            raise NotFound("Chat not found", chat_id)
        if message_pk > MAX_ID:
            raise NotFound("Message not found", message_id)
        if member_pk > MAX_ID:
            raise NotFound("Read receipt not found", member_id)
        message_exists = (
            self.db.query(Message.id).filter(Message.id == message_pk, Message.chat_id == chat_pk).first()
        )
        if message_exists is None:
            raise NotFound("Message not found", message_id)

        updated = (
            self.db.query(ReadReceipt)
            .filter(ReadReceipt.message_id == message_pk, ReadReceipt.member_id == member_pk)
            .update({ReadReceipt.is_read: True}, synchronize_session=False)
        )
        if not updated:
            self.db.rollback()
            raise NotFound("Read receipt not found", member_id)
        self.db.commit()
        logger.info("MESSAGE_READ chat_id=%s message_id=%s member_id=%s", chat_pk, message_pk, member_pk)
