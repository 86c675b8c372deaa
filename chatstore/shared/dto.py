"""Shared data transfer object helpers."""
from dataclasses import dataclass


@dataclass(frozen=True)
class Image:
    """Pair of image URLs; an absent image is two empty strings."""

    thumbnail: str = ""
    original: str = ""


MESSAGE_TYPES = ("notification", "message", "singleEmoji")
DEFAULT_MESSAGE_TYPE = "message"
