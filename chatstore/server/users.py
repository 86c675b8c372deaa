"""User directory routes."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..shared.utils import escape_like
from . import schemas
from .auth import get_current_user_id
from .database import get_db
from .models import User

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=List[schemas.UserOut])
def list_users(name: str | None = None, db: Session = Depends(get_db), _: int = Depends(get_current_user_id)):
    query = db.query(User)
    if name:
        query = query.filter(User.name.ilike(f"%{escape_like(name)}%", escape="\\"))
    return query.order_by(User.id).all()


@router.get("/{user_id}", response_model=schemas.UserOut)
def get_user(user_id: int, db: Session = Depends(get_db), _: int = Depends(get_current_user_id)):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
