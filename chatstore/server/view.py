"""Caller-relative presentation of chats."""
from typing import Optional

from ..shared.dto import Image
from .errors import Forbidden, OtherParticipantNotFound, Unauthenticated
from .logging_config import configure_logging
from .schemas import ChatDisplayOut, ChatOut, ImageOut, UserOut

logger = configure_logging()


def _same_user(user_id, caller_id) -> bool:
    return str(user_id) == str(caller_id)


class ChatView:
    """Resolves what a given caller sees for a chat.

    Group chats show their stored title and image. Direct chats show the
    name and image of the participant who is not the caller.
    """

    def other_participant(self, chat: ChatOut, caller_id) -> UserOut:
        if caller_id is None:
            raise Unauthenticated()
        for participant in chat.participants:
            if not _same_user(participant.id, caller_id):
                return participant
        raise OtherParticipantNotFound("Chat has no participant besides the caller", chat.id)

    def display_title(self, chat: ChatOut, caller_id) -> str:
        if chat.is_group_chat:
            return chat.title
        return self.other_participant(chat, caller_id).name

    def display_image(self, chat: ChatOut, caller_id) -> Image:
        if chat.is_group_chat:
            return chat.image.to_image()
        return self.other_participant(chat, caller_id).image.to_image()

    def is_participant(self, chat: ChatOut, caller_id) -> bool:
        return caller_id is not None and any(_same_user(p.id, caller_id) for p in chat.participants)

    def ensure_participant(self, chat: ChatOut, caller_id) -> None:
        if caller_id is None:
            raise Unauthenticated()
        if not self.is_participant(chat, caller_id):
            logger.warning("FORBIDDEN_CHAT_ACCESS chat_id=%s user_id=%s", chat.id, caller_id)
            raise Forbidden("Not a participant of this chat", chat.id)

    def render(self, chat: ChatOut, caller_id: Optional[int]) -> ChatDisplayOut:
        """Attach display fields; a direct chat missing its peer falls back to stored values."""
        out = ChatDisplayOut(**chat.model_dump())
        if caller_id is None:
            return out
        try:
            out.display_title = self.display_title(chat, caller_id)
            image = self.display_image(chat, caller_id)
        except OtherParticipantNotFound:
            logger.warning("DISPLAY_FALLBACK chat_id=%s user_id=%s reason=no_other_participant", chat.id, caller_id)
            out.display_title = chat.title
            image = chat.image.to_image()
        out.display_image = ImageOut(thumbnail=image.thumbnail, original=image.original)
        return out
