"""Pydantic schemas for request and response bodies."""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from ..shared.dto import Image


class ImageOut(BaseModel):
    thumbnail: str = ""
    original: str = ""

    class Config:
        from_attributes = True

    def to_image(self) -> Image:
        return Image(thumbnail=self.thumbnail, original=self.original)


class ImageIn(BaseModel):
    thumbnail: str = ""
    original: str = ""


class UserOut(BaseModel):
    id: int
    name: str
    image: ImageOut

    class Config:
        from_attributes = True


class ReadReceiptOut(BaseModel):
    member: Optional[UserOut] = None
    is_read: bool = False

    class Config:
        from_attributes = True


class MessageOut(BaseModel):
    id: int
    type: str
    sender: Optional[UserOut] = None
    content: str
    image: ImageOut
    is_read_by: List[ReadReceiptOut] = Field(default_factory=list)
    created_at: datetime

    class Config:
        from_attributes = True


class ChatOut(BaseModel):
    id: int
    title: str
    image: ImageOut
    description: str = ""
    is_group_chat: bool = False
    admin: Optional[UserOut] = None
    participants: List[UserOut] = Field(default_factory=list)
    messages: List[MessageOut] = Field(default_factory=list)
    latest_message: Optional[MessageOut] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ChatDisplayOut(ChatOut):
    display_title: Optional[str] = None
    display_image: Optional[ImageOut] = None


class ChatCreate(BaseModel):
    title: str = Field(..., min_length=1)
    participant_ids: List[int] = Field(..., min_length=1, description="Users to add besides the caller")
    is_group_chat: bool = False
    description: str = ""
    image: Optional[ImageIn] = None


class MessageCreate(BaseModel):
    content: str = Field(..., min_length=1)
    type: Literal["notification", "message", "singleEmoji"] = "message"
    image: Optional[ImageIn] = None


class CountOut(BaseModel):
    count: int


class ExistsOut(BaseModel):
    exists: bool
