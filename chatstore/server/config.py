"""Server configuration values."""
import os
from pathlib import Path

from ..shared.dto import Image

BASE_DIR = Path(__file__).resolve().parent
DATABASE_URL = os.getenv("CHATSTORE_DATABASE_URL", f"sqlite:///{BASE_DIR / 'chatstore.db'}")
TOKEN_EXPIRY_MINUTES = int(os.getenv("CHATSTORE_TOKEN_EXPIRY_MINUTES", 60 * 24))
LOG_FILE = Path(os.getenv("CHATSTORE_LOG_FILE", BASE_DIR / "server.log"))

# "first_message" keeps the historical ordering of per-user listings;
# "latest_message" orders by the most recent message instead.
CHAT_LIST_ORDER = os.getenv("CHATSTORE_CHAT_LIST_ORDER", "first_message")

DEFAULT_CHAT_IMAGE = Image(
    thumbnail=os.getenv("CHATSTORE_CHAT_THUMBNAIL", "https://i.ibb.co/bRb0SYw/chat-placeholder.png"),
    original=os.getenv("CHATSTORE_CHAT_ORIGINAL", "https://i.ibb.co/FqHrScZ/chat-placeholder.png"),
)
