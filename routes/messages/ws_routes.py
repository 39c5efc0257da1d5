from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Query
from typing import Optional
import json
import logging
from services.ws_manager import Connection, manager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws/messages")
async def messages_ws(websocket: WebSocket, user_id: Optional[str] = Query(None)):
    """Live channel for direct messages.

    Frames are JSON objects ``{"event": ..., "data": ...}``. A client first
    sends ``join`` with its own user id, then ``sendMessage`` with each message
    it has already persisted through ``POST /api/messages/send``. The bus
    answers with ``receiveMessage`` (to the receiver's room), ``messageSent``
    (to the sender's room) and ``error``.
    """
    await websocket.accept()
    conn = Connection(websocket, identity=user_id)

    try:
        while True:
            data = await websocket.receive_text()
            try:
                payload = json.loads(data)
            except ValueError:
                await manager.send_error(conn, "Invalid JSON")
                continue
            if not isinstance(payload, dict):
                await manager.send_error(conn, "Invalid frame")
                continue

            event = payload.get("event")
            body = payload.get("data")
            if event == "join":
                if not body or not isinstance(body, str):
                    await manager.send_error(conn, "join requires a user id")
                    continue
                if conn.identity and body != conn.identity:
                    await manager.send_error(conn, "Cannot join another user's room")
                    continue
                await manager.join(conn, body)
                await conn.send("joined", {"user_id": body})

            elif event == "sendMessage":
                await manager.relay(conn, body)

            else:
                await manager.send_error(conn, f"Unknown event: {event}")

    except WebSocketDisconnect:
        logger.debug("Connection %s closed", conn.connection_id)
    finally:
        await manager.leave(conn)
