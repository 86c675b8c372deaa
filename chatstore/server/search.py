"""Participant and title filtering for per-user chat listings."""
from typing import Optional

from sqlalchemy import String, func, select
from sqlalchemy.orm import Query

from ..shared.utils import escape_like
from .models import Chat, ChatParticipant, Message

FIRST_MESSAGE = "first_message"
LATEST_MESSAGE = "latest_message"
ORDERINGS = (FIRST_MESSAGE, LATEST_MESSAGE)


class SearchFilter:
    """Selects the caller's chats whose title contains ``title_filter``.

    The match is a case-insensitive substring; an empty or missing filter
    matches every chat the caller participates in. Results are ordered by the
    timestamp of each chat's first message (``first_message``) or of its most
    recent one (``latest_message``), newest first, chats without messages last.
    """

    def __init__(self, caller_id: int, title_filter: Optional[str] = None, order: str = FIRST_MESSAGE):
        if order not in ORDERINGS:
            raise ValueError(f"unknown chat ordering: {order!r}")
        self.caller_id = caller_id
        self.title_filter = title_filter or ""
        self.order = order

    def where_clauses(self, dialect: str = "sqlite") -> list:
        membership = select(ChatParticipant.chat_id).where(ChatParticipant.user_id == self.caller_id)
        clauses = [Chat.id.in_(membership)]
        if not self.title_filter:
            return clauses
        if dialect == "sqlite":
            # SQLite lower() only folds ASCII; casefold is registered on connect.
            folded = self.title_filter.casefold()
            clauses.append(func.casefold(Chat.title, type_=String).contains(folded, autoescape=True))
        else:
            pattern = f"%{escape_like(self.title_filter)}%"
            clauses.append(Chat.title.ilike(pattern, escape="\\"))
        return clauses

    def order_key(self):
        if self.order == LATEST_MESSAGE:
            stmt = select(func.max(Message.created_at))
        else:
            stmt = select(Message.created_at).order_by(Message.id).limit(1)
        return stmt.where(Message.chat_id == Chat.id).correlate(Chat).scalar_subquery()

    def order_by_clauses(self) -> list:
        return [
            self.order_key().desc().nulls_last(),
            Chat.created_at.desc(),
            Chat.id.desc(),
        ]

    def apply(self, query: Query, dialect: str = "sqlite") -> Query:
        return query.filter(*self.where_clauses(dialect)).order_by(*self.order_by_clauses())
