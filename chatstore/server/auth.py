"""Bearer-token identity resolution for incoming requests."""
import secrets
from datetime import datetime, timedelta
from typing import Dict, Optional

from fastapi import Header, HTTPException, status

from .config import TOKEN_EXPIRY_MINUTES
from .logging_config import configure_logging

logger = configure_logging()

# In-memory token store: token -> {"user_id": int, "expires": datetime}
TOKEN_STORE: Dict[str, Dict[str, datetime | int]] = {}


def issue_token(user_id: int, expiry_minutes: int = TOKEN_EXPIRY_MINUTES) -> str:
    """Register a session token for a user authenticated by the identity provider."""
    token = secrets.token_urlsafe(32)
    TOKEN_STORE[token] = {"user_id": user_id, "expires": datetime.utcnow() + timedelta(minutes=expiry_minutes)}
    logger.info("TOKEN_ISSUED user_id=%s", user_id)
    return token


def _validate_token(header: str | None) -> int:
    if not header or not header.startswith("Bearer "):
        logger.warning("UNAUTHORIZED_ACCESS reason=missing_token")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")
    token = header.split(" ", 1)[1]
    token_data = TOKEN_STORE.get(token)
    if not token_data:
        logger.warning("UNAUTHORIZED_ACCESS reason=unknown_token")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    if token_data["expires"] < datetime.utcnow():
        logger.warning("UNAUTHORIZED_ACCESS reason=expired_token")
        TOKEN_STORE.pop(token, None)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    return int(token_data["user_id"])


def get_current_user_id(authorization: str | None = Header(default=None)) -> int:
    """FastAPI dependency returning authenticated user's id."""
    return _validate_token(authorization)


def get_optional_user_id(authorization: str | None = Header(default=None)) -> Optional[int]:
    """Like get_current_user_id, but anonymous requests resolve to None."""
    if authorization is None:
        return None
    return _validate_token(authorization)
