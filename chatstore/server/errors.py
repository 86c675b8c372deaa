"""Error taxonomy shared by the chat service and its routes."""
from typing import Any, Optional


class ChatError(Exception):
    """Base class for chat service errors."""

    code = "CHAT_ERROR"
    status_code = 500

    def __init__(self, message: str, value: Any = None):
        super().__init__(message)
        self.message = message
        self.value = value

    def to_detail(self) -> dict:
        detail = {"code": self.code, "message": self.message}
        if self.value is not None:
            detail["value"] = self.value
        return detail


class InvalidArgument(ChatError):
    code = "INVALID_ARGUMENT"
    status_code = 400


class NotFound(ChatError):
    code = "NOT_FOUND"
    status_code = 404


class OtherParticipantNotFound(NotFound):
    """A direct chat has no participant besides the caller."""

    code = "NO_OTHER_PARTICIPANT"


class Unauthenticated(ChatError):
    code = "NOT_AUTHENTICATED"
    status_code = 401

    def __init__(self, message: str = "Not logged in!", value: Any = None):
        super().__init__(message, value)


class Forbidden(ChatError):
    code = "FORBIDDEN"
    status_code = 403


class StorageError(ChatError):
    code = "STORAGE_ERROR"
    status_code = 500

    def __init__(self, message: str, value: Any = None, cause: Optional[BaseException] = None):
        super().__init__(message, value)
        self.cause = cause
