"""Shared utility functions."""
import re
from typing import Union

ID_PATTERN = re.compile(r"[1-9]\d*")
# Largest id a signed 64-bit INTEGER column can hold.
MAX_ID = 2**63 - 1


def parse_id(value: Union[int, str, None]) -> int:
    """Return ``value`` as a positive integer id or raise ValueError."""
    if isinstance(value, bool):
        raise ValueError(f"malformed id: {value!r}")
    if isinstance(value, int):
        if value < 1:
            raise ValueError(f"malformed id: {value!r}")
        return value
    if isinstance(value, str) and ID_PATTERN.fullmatch(value.strip()):
        return int(value.strip())
    raise ValueError(f"malformed id: {value!r}")


def escape_like(text: str, escape: str = "\\") -> str:
    """Escape LIKE wildcards so ``text`` matches literally."""
    return (
        text.replace(escape, escape * 2)
        .replace("%", f"{escape}%")
        .replace("_", f"{escape}_")
    )
