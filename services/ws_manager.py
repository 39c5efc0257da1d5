"""Live delivery of direct messages.

Every user id owns a room holding all of that user's open connections
(several tabs or devices). The bus only relays payloads that were already
persisted; it does no authorization and no persistence, and a push that fails
on one connection is dropped without affecting the others.
"""
from typing import Any, Dict, List, Optional, Set
import asyncio
import enum
import logging
import uuid

logger = logging.getLogger(__name__)


class ConnectionState(enum.Enum):
    connecting = "connecting"
    joined = "joined"
    active = "active"
    disconnected = "disconnected"


class Connection:
    def __init__(self, websocket: Any, identity: Optional[str] = None):
        self.websocket = websocket
        # identity supplied by the transport (query param), if any
        self.identity = identity
        self.user_id: Optional[str] = None
        self.state = ConnectionState.connecting
        self.connection_id = uuid.uuid4().hex

    async def send(self, event: str, data: Any):
        await self.websocket.send_json({"event": event, "data": data})

    def __repr__(self):
        return f"<Connection(id={self.connection_id}, user_id={self.user_id}, state={self.state.value})>"


class Room:
    def __init__(self, user_id: str):
        self.user_id = user_id
        self.connections: Set[Connection] = set()
        self.lock = asyncio.Lock()


class ConnectionManager:
    def __init__(self):
        # user_id -> Room
        self._rooms: Dict[str, Room] = {}

    async def join(self, conn: Connection, user_id: str) -> Room:
        if conn.user_id is not None and conn.user_id != user_id:
            await self.leave(conn)
        while True:
            room = self._rooms.setdefault(user_id, Room(user_id))
            async with room.lock:
                # the room may have been dropped while we waited for its lock
                if self._rooms.get(user_id) is not room:
                    continue
                room.connections.add(conn)
                count = len(room.connections)
            break
        conn.user_id = user_id
        conn.state = ConnectionState.joined
        logger.info("User %s joined room (connections: %d)", user_id, count)
        return room

    async def leave(self, conn: Connection):
        user_id = conn.user_id
        conn.state = ConnectionState.disconnected
        if user_id is None:
            return
        room = self._rooms.get(user_id)
        if room is None:
            return
        async with room.lock:
            room.connections.discard(conn)
            remaining = len(room.connections)
            if not remaining and self._rooms.get(user_id) is room:
                del self._rooms[user_id]
        logger.info("User %s left room (remaining: %d)", user_id, remaining)

    async def send_to_room(self, user_id: str, event: str, data: Any) -> int:
        """Push an event to every connection in a room. Returns how many got it."""
        room = self._rooms.get(user_id)
        if room is None:
            return 0
        async with room.lock:
            conns = list(room.connections)
        delivered = 0
        for c in conns:
            try:
                await c.send(event, data)
                delivered += 1
            except Exception as e:
                # connection is closing; persisted messages stay retrievable
                logger.debug("Dropped %s to %r: %s", event, c, e)
        return delivered

    async def send_error(self, conn: Connection, detail: str):
        logger.debug("Error event to %r: %s", conn, detail)
        try:
            await conn.send("error", {"message": detail})
        except Exception as e:
            logger.debug("Could not deliver error to %r: %s", conn, e)

    async def relay(self, conn: Connection, message: Dict[str, Any]) -> int:
        """Relay a persisted message to the receiver's room and confirm to the sender's room."""
        if conn.state not in (ConnectionState.joined, ConnectionState.active):
            await self.send_error(conn, "Join before sending messages")
            return 0
        receiver_id = message.get("receiver_id") if isinstance(message, dict) else None
        if not receiver_id:
            await self.send_error(conn, "Message payload must include receiver_id")
            return 0

        conn.state = ConnectionState.active
        try:
            delivered = await self.send_to_room(receiver_id, "receiveMessage", message)
            await self.send_to_room(conn.user_id, "messageSent", message)
        finally:
            if conn.state is ConnectionState.active:
                conn.state = ConnectionState.joined
        logger.debug("Relayed %s to %s (%d connections)", message.get("message_id"), receiver_id, delivered)
        return delivered

    def room_size(self, user_id: str) -> int:
        room = self._rooms.get(user_id)
        return len(room.connections) if room else 0

    def rooms(self) -> List[str]:
        return list(self._rooms.keys())


manager = ConnectionManager()
