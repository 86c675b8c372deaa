"""Chat query and read-receipt routes."""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..shared.dto import Image
from . import schemas
from .auth import get_current_user_id, get_optional_user_id
from .database import get_db
from .errors import ChatError
from .logging_config import configure_logging
from .store import ChatStore
from .view import ChatView

router = APIRouter(prefix="/chats", tags=["chats"])
logger = configure_logging()
view = ChatView()


def get_store(db: Session = Depends(get_db)) -> ChatStore:
    return ChatStore(db)


def _http_error(exc: ChatError) -> HTTPException:
    if exc.status_code >= 500:
        logger.error("REQUEST_FAILED code=%s detail=%s", exc.code, exc.message)
    return HTTPException(status_code=exc.status_code, detail=exc.to_detail())


def _image(payload: Optional[schemas.ImageIn]) -> Optional[Image]:
    if payload is None:
        return None
    return Image(thumbnail=payload.thumbnail, original=payload.original)


@router.get("/count", response_model=schemas.CountOut)
def count_chats(store: ChatStore = Depends(get_store)):
    try:
        return schemas.CountOut(count=store.count_chats())
    except ChatError as exc:
        raise _http_error(exc) from exc


@router.get("", response_model=List[schemas.ChatDisplayOut])
def list_all_chats(
    store: ChatStore = Depends(get_store),
    caller_id: Optional[int] = Depends(get_optional_user_id),
):
    try:
        return [view.render(chat, caller_id) for chat in store.list_all_chats()]
    except ChatError as exc:
        raise _http_error(exc) from exc


@router.get("/mine", response_model=List[schemas.ChatDisplayOut])
def list_my_chats(
    search: Optional[str] = None,
    store: ChatStore = Depends(get_store),
    caller_id: Optional[int] = Depends(get_optional_user_id),
):
    try:
        return [view.render(chat, caller_id) for chat in store.list_chats_for_user(caller_id, search)]
    except ChatError as exc:
        raise _http_error(exc) from exc


@router.get("/by-participants", response_model=Optional[schemas.ChatDisplayOut])
def find_chat_by_participants(
    participants: List[str] = Query(...),
    store: ChatStore = Depends(get_store),
    caller_id: Optional[int] = Depends(get_optional_user_id),
):
    try:
        chat = store.find_chat_by_participants(participants)
    except ChatError as exc:
        raise _http_error(exc) from exc
    return view.render(chat, caller_id) if chat else None


@router.get("/exists", response_model=schemas.ExistsOut)
def chat_title_exists(title: str = Query(..., min_length=1), store: ChatStore = Depends(get_store)):
    try:
        return schemas.ExistsOut(exists=store.chat_title_exists(title))
    except ChatError as exc:
        raise _http_error(exc) from exc


@router.get("/{chat_id}", response_model=Optional[schemas.ChatDisplayOut])
def get_chat(
    chat_id: str,
    store: ChatStore = Depends(get_store),
    caller_id: Optional[int] = Depends(get_optional_user_id),
):
    try:
        chat = store.get_chat_by_id(chat_id)
    except ChatError as exc:
        raise _http_error(exc) from exc
    return view.render(chat, caller_id) if chat else None


@router.post("", response_model=schemas.ChatDisplayOut, status_code=201)
def create_chat(
    payload: schemas.ChatCreate,
    store: ChatStore = Depends(get_store),
    caller_id: int = Depends(get_current_user_id),
):
    try:
        chat = store.create_chat(
            title=payload.title,
            participant_ids=[caller_id, *payload.participant_ids],
            admin_id=caller_id,
            is_group_chat=payload.is_group_chat,
            description=payload.description,
            image=_image(payload.image),
        )
    except ChatError as exc:
        raise _http_error(exc) from exc
    return view.render(chat, caller_id)


@router.post("/{chat_id}/messages", response_model=schemas.MessageOut, status_code=201)
def post_message(
    chat_id: str,
    payload: schemas.MessageCreate,
    store: ChatStore = Depends(get_store),
    caller_id: int = Depends(get_current_user_id),
):
    try:
        chat = store.get_chat_by_id(chat_id)
        if chat is None:
            raise HTTPException(status_code=404, detail="Chat not found")
        view.ensure_participant(chat, caller_id)
        recipients = [p.id for p in chat.participants if p.id != caller_id]
        return store.append_message(
            chat.id,
            sender_id=caller_id,
            content=payload.content,
            message_type=payload.type,
            image=_image(payload.image),
            read_by=recipients,
        )
    except ChatError as exc:
        raise _http_error(exc) from exc


@router.post("/{chat_id}/messages/{message_id}/read", status_code=204)
def mark_message_read(
    chat_id: str,
    message_id: str,
    store: ChatStore = Depends(get_store),
    caller_id: int = Depends(get_current_user_id),
):
    try:
        store.mark_message_read(chat_id, message_id, caller_id)
    except ChatError as exc:
        raise _http_error(exc) from exc
