"""client package"""

from client.chat_session import ChatSession
from client.chat_store import ChatStore

__all__ = ["ChatSession", "ChatStore"]
