"""Per-contact conversation buckets fed by history fetches and the live channel."""
from typing import Any, Dict, List, Optional
import logging
import uuid

logger = logging.getLogger(__name__)

LOCAL_ID_PREFIX = "local-"


class ChatStore:
    """Client-side state for one signed-in user.

    ``conversations`` maps a counterpart id to that conversation's messages,
    oldest first. A message id never appears twice in a bucket, whichever
    inflow (history, live push, optimistic send) delivered it first.
    """

    def __init__(self, user_id: str):
        self.user_id = user_id
        self.contacts: List[Dict[str, Any]] = []
        self.conversations: Dict[str, List[Dict[str, Any]]] = {}
        self.error: Optional[str] = None
        # local id -> counterpart id
        self._pending: Dict[str, str] = {}

    def bucket(self, counterpart_id: str) -> List[Dict[str, Any]]:
        return list(self.conversations.get(counterpart_id, []))

    def set_contacts(self, contacts: List[Dict[str, Any]]):
        self.contacts = list(contacts)
        self.error = None

    def counterpart_of(self, message: Dict[str, Any]) -> str:
        if message.get("sender_id") == self.user_id:
            return message.get("receiver_id")
        return message.get("sender_id")

    def apply_history(self, counterpart_id: str, messages: List[Dict[str, Any]]):
        """Replace a bucket with a fetched page, keeping unconfirmed sends at the tail."""
        fetched = []
        seen = set()
        for m in messages:
            message_id = m.get("message_id") if isinstance(m, dict) else None
            if not message_id or message_id in seen:
                continue
            seen.add(message_id)
            fetched.append(m)
        pending = [
            m for m in self.conversations.get(counterpart_id, [])
            if m.get("message_id") in self._pending
        ]
        self.conversations[counterpart_id] = fetched + pending
        self.error = None

    def apply_live(self, message: Dict[str, Any]) -> bool:
        """Append a pushed message to the other participant's bucket, once."""
        if not isinstance(message, dict) or not message.get("message_id"):
            logger.warning("Ignoring live message without an id: %r", message)
            return False
        counterpart_id = self.counterpart_of(message)
        if not counterpart_id:
            logger.debug("Ignoring live message without participants: %r", message)
            return False
        bucket = self.conversations.setdefault(counterpart_id, [])
        if any(m.get("message_id") == message["message_id"] for m in bucket):
            return False
        bucket.append(message)
        return True

    def add_pending(self, receiver_id: str, receiver_role: str, content: Optional[str] = None,
                    attachment_name: Optional[str] = None) -> str:
        local_id = f"{LOCAL_ID_PREFIX}{uuid.uuid4().hex}"
        self._pending[local_id] = receiver_id
        self.conversations.setdefault(receiver_id, []).append({
            "message_id": local_id,
            "sender_id": self.user_id,
            "receiver_id": receiver_id,
            "receiver_role": receiver_role,
            "content": content,
            "attachment": {"name": attachment_name} if attachment_name else None,
            "read": False,
            "pending": True,
        })
        return local_id

    def confirm_pending(self, local_id: str, message: Dict[str, Any]):
        """Swap an optimistic entry for the stored message."""
        counterpart_id = self._pending.pop(local_id, None) or self.counterpart_of(message)
        bucket = self.conversations.setdefault(counterpart_id, [])
        idx = next((i for i, m in enumerate(bucket) if m.get("message_id") == local_id), None)
        already_there = any(m.get("message_id") == message["message_id"] for m in bucket)
        if idx is None:
            if not already_there:
                bucket.append(message)
        elif already_there:
            del bucket[idx]
        else:
            bucket[idx] = message
        self.error = None

    def fail_pending(self, local_id: str, error: str):
        counterpart_id = self._pending.pop(local_id, None)
        if counterpart_id is not None:
            self.conversations[counterpart_id] = [
                m for m in self.conversations.get(counterpart_id, []) if m.get("message_id") != local_id
            ]
        self.error = error
