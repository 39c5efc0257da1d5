"""Client connection manager for the messaging backend.

A ``ChatSession`` is created when a user signs in and closed when they sign
out; it owns both the HTTP client and the live socket and feeds everything
it receives into a ``ChatStore``.
"""
from typing import Any, Callable, Dict, List, Optional, Tuple
import asyncio
import json
import logging
import httpx
import websockets
from websockets.exceptions import ConnectionClosed
from client.chat_store import ChatStore

logger = logging.getLogger(__name__)


def _ws_url(base_url: str, user_id: str) -> str:
    if base_url.startswith("https://"):
        root = "wss://" + base_url[len("https://"):]
    elif base_url.startswith("http://"):
        root = "ws://" + base_url[len("http://"):]
    else:
        root = base_url
    return f"{root.rstrip('/')}/ws/messages?user_id={user_id}"


def _error_detail(err: httpx.HTTPError, fallback: str) -> str:
    if isinstance(err, httpx.HTTPStatusError):
        try:
            return err.response.json().get("detail") or fallback
        except ValueError:
            return fallback
    return fallback


class ChatSession:
    def __init__(
        self,
        base_url: str,
        user_id: str,
        role: str,
        store: Optional[ChatStore] = None,
        http: Optional[httpx.AsyncClient] = None,
        connect: Optional[Callable[[str], Any]] = None,
        ws_url: Optional[str] = None,
    ):
        self.base_url = base_url
        self.user_id = user_id
        self.role = role
        self.store = store or ChatStore(user_id)
        self.ws_url = ws_url or _ws_url(base_url, user_id)
        self._http = http
        self._owns_http = http is None
        self._connect = connect or websockets.connect
        self._ws = None
        self._listener: Optional[asyncio.Task] = None
        # counterpart id -> (page, limit) of the last history fetch
        self._loaded: Dict[str, Tuple[int, int]] = {}

    @property
    def headers(self) -> Dict[str, str]:
        return {"X-User-Id": self.user_id, "X-User-Role": self.role}

    @property
    def connected(self) -> bool:
        return self._ws is not None

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def start(self):
        if self._http is None:
            self._http = httpx.AsyncClient(base_url=self.base_url)
        try:
            await self._open_live()
        except Exception:
            await self.close()
            raise
        logger.debug("Chat session started for %s", self.user_id)

    async def reconnect(self):
        """Reopen the live channel, re-join and reload every loaded conversation.

        Pushes that arrived while the channel was down are recovered from the
        conversation history.
        """
        await self._close_live()
        await self._open_live()
        for counterpart_id in list(self.store.conversations):
            page, limit = self._loaded.get(counterpart_id, (1, 20))
            await self.load_conversation(counterpart_id, page=page, limit=limit)
        logger.debug("Chat session reconnected for %s", self.user_id)

    async def close(self):
        try:
            await self._close_live()
        finally:
            if self._http is not None and self._owns_http:
                await self._http.aclose()
                self._http = None
        logger.debug("Chat session closed for %s", self.user_id)

    async def _open_live(self):
        ws = await self._connect(self.ws_url)
        try:
            await ws.send(json.dumps({"event": "join", "data": self.user_id}))
        except Exception:
            await ws.close()
            raise
        self._ws = ws
        self._listener = asyncio.create_task(self._listen(ws))

    async def _close_live(self):
        listener, self._listener = self._listener, None
        ws, self._ws = self._ws, None
        try:
            if listener is not None:
                listener.cancel()
                try:
                    await listener
                except asyncio.CancelledError:
                    pass
                except Exception:
                    logger.exception("Live listener for %s failed", self.user_id)
        finally:
            if ws is not None:
                try:
                    await ws.close()
                except ConnectionClosed:
                    pass

    async def _emit(self, event: str, data: Any) -> bool:
        if self._ws is None:
            return False
        try:
            await self._ws.send(json.dumps({"event": event, "data": data}))
        except ConnectionClosed as e:
            # the message is already stored; a reconnect reloads it
            logger.info("Live channel closed before %s for %s: %s", event, self.user_id, e)
            self._ws = None
            return False
        return True

    async def _listen(self, ws):
        try:
            async for raw in ws:
                try:
                    frame = json.loads(raw)
                    if not isinstance(frame, dict):
                        logger.warning("Ignoring non-object frame: %r", raw)
                        continue
                    self.handle_event(frame.get("event"), frame.get("data"))
                except ValueError:
                    logger.warning("Ignoring malformed frame: %r", raw)
                except Exception:
                    logger.exception("Failed to apply live frame for %s", self.user_id)
        except ConnectionClosed as e:
            logger.info("Live channel closed for %s: %s", self.user_id, e)
        finally:
            if self._ws is ws:
                self._ws = None

    def handle_event(self, event: str, data: Any):
        logger.debug("Live event %s for %s", event, self.user_id)
        if event in ("receiveMessage", "messageSent"):
            if not isinstance(data, dict):
                logger.warning("Ignoring %s without a message payload", event)
                return
            self.store.apply_live(data)
        elif event == "error":
            detail = data.get("message") if isinstance(data, dict) else None
            self.store.error = detail or "Live channel error"

    async def load_contacts(self) -> List[Dict[str, Any]]:
        try:
            resp = await self._http.get("/api/messages/contacts", headers=self.headers)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            self.store.error = _error_detail(e, "Failed to fetch contacts")
            logger.warning("Fetching contacts failed: %s", self.store.error)
            return []
        contacts = resp.json()
        self.store.set_contacts(contacts)
        return contacts

    async def load_conversation(self, counterpart_id: str, page: int = 1, limit: int = 20) -> List[Dict[str, Any]]:
        try:
            resp = await self._http.get(
                f"/api/messages/{counterpart_id}",
                params={"page": page, "limit": limit},
                headers=self.headers,
            )
            resp.raise_for_status()
        except httpx.HTTPError as e:
            self.store.error = _error_detail(e, "Failed to fetch conversation")
            logger.warning("Fetching conversation with %s failed: %s", counterpart_id, self.store.error)
            return []
        messages = resp.json()
        self.store.apply_history(counterpart_id, messages)
        self._loaded[counterpart_id] = (page, limit)
        return messages

    async def send_message(
        self,
        receiver_id: str,
        receiver_role: str,
        content: Optional[str] = None,
        file: Optional[tuple] = None,
    ) -> Optional[Dict[str, Any]]:
        """Send a message; ``file`` is an httpx upload tuple ``(name, data, mime)``."""
        local_id = self.store.add_pending(
            receiver_id, receiver_role, content, attachment_name=file[0] if file else None
        )
        data = {"receiver_id": receiver_id, "receiver_role": receiver_role}
        if content:
            data["content"] = content
        try:
            resp = await self._http.post(
                "/api/messages/send",
                data=data,
                files={"file": file} if file else None,
                headers=self.headers,
            )
            resp.raise_for_status()
        except httpx.HTTPError as e:
            self.store.fail_pending(local_id, _error_detail(e, "Failed to send message"))
            logger.warning("Sending to %s failed: %s", receiver_id, self.store.error)
            return None

        message = resp.json()["data"]
        self.store.confirm_pending(local_id, message)
        await self._emit("sendMessage", message)
        return message
