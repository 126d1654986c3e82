"""
ChainStream WebSocket client.

Subscribes to a ChainStream JSON-RPC stream (transactions, blocks or slot
updates) and yields notification payloads as they arrive.

Flow:
  1. Connect with the X-Syndica-Api-Token header and a heartbeat ping
  2. Send <method>Subscribe with the request's params
  3. Read the confirmation → subscription id (SubscriptionError if rejected)
  4. Yield params.result of every notification for that id
  5. On disconnect, reconnect with exponential backoff and resubscribe

Uses raw WebSocket via aiohttp.
"""
import asyncio
import json
import logging
from contextlib import aclosing

import aiohttp

from chainstream.types import TransactionMetadata

logger = logging.getLogger("chainstream")

DEFAULT_URL = "wss://chainstream.api.syndica.io"
TOKEN_HEADER = "X-Syndica-Api-Token"


class ChainStreamError(Exception):
    pass


class SubscriptionError(ChainStreamError):
    """Server rejected the subscribe request."""

    def __init__(self, method: str, error):
        self.method = method
        self.error = error
        super().__init__(f"{method} rejected: {error}")


def notification_result(message: dict, subscription_id) -> object | None:
    """params.result of a notification for `subscription_id`, else None."""
    if not isinstance(message, dict):
        return None
    if not str(message.get("method", "")).endswith("Notification"):
        return None
    params = message.get("params") or {}
    if params.get("subscription") != subscription_id:
        return None
    return params.get("result")


class ChainStreamClient:
    """Persistent subscription client. One session, one socket per subscribe()."""

    def __init__(
        self,
        token: str,
        url: str = DEFAULT_URL,
        ping_interval: float | None = 30,
        max_msg_size: int = 0,
        max_backoff: float = 30,
        confirm_timeout: float = 10,
    ):
        if not token:
            raise ChainStreamError("ChainStream API token is required")
        self.url = url
        self.token = token
        self.ping_interval = ping_interval
        self.max_msg_size = max_msg_size   # 0 = no limit
        self.max_backoff = max_backoff
        self.confirm_timeout = confirm_timeout
        self._session: aiohttp.ClientSession | None = None
        self._running = True
        self._request_id = 0
        # Stats
        self.notifications: int = 0
        self.reconnects: int = 0

    async def _ensure_session(self):
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={TOKEN_HEADER: self.token},
            )

    async def close(self):
        self._running = False
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, *exc):
        await self.close()

    def stats(self) -> str:
        return f"{self.notifications} notifications, {self.reconnects} reconnects"

    def _next_id(self) -> int:
        self._request_id += 1
        return self._request_id

    async def subscribe(self, request):
        """
        Async generator of notification results for `request`.

        Reconnects forever when the socket drops or misbehaves (closed
        before confirming, garbage confirmation); SubscriptionError (bad
        params, bad token) is raised to the caller since retrying won't help.
        """
        await self._ensure_session()
        backoff = 1
        while self._running:
            try:
                async with aclosing(self._subscribe_once(request)) as stream:
                    async for result in stream:
                        backoff = 1
                        yield result
                if not self._running:
                    break
                logger.warning("ChainStream socket closed, reconnecting...")
            except SubscriptionError:
                raise
            except Exception as e:
                logger.error(f"ChainStream connection error: {e!r}")

            self.reconnects += 1
            await asyncio.sleep(min(backoff, self.max_backoff))
            backoff = min(backoff * 2, self.max_backoff)

    async def _subscribe_once(self, request):
        """Single WebSocket connection lifecycle."""
        logger.info(f"Connecting to {self.url} ({request.subscribe_method})")
        async with self._session.ws_connect(
            self.url,
            heartbeat=self.ping_interval,
            max_msg_size=self.max_msg_size,
        ) as ws:
            await ws.send_json({
                "jsonrpc": "2.0",
                "id": self._next_id(),
                "method": request.subscribe_method,
                "params": request.params(),
            })

            msg = await ws.receive(timeout=self.confirm_timeout)
            if msg.type != aiohttp.WSMsgType.TEXT:
                logger.warning(f"Socket closed before {request.subscribe_method} was confirmed")
                return
            resp = json.loads(msg.data)
            if not isinstance(resp, dict):
                raise ValueError(f"unexpected subscribe response: {resp!r}")
            sub_id = resp.get("result")
            if sub_id is None:
                raise SubscriptionError(request.subscribe_method, resp.get("error", resp))
            logger.info(f"{request.subscribe_method} active (id={sub_id})")

            async for msg in ws:
                if not self._running:
                    break
                if msg.type == aiohttp.WSMsgType.TEXT:
                    try:
                        data = json.loads(msg.data)
                    except ValueError as e:
                        logger.debug(f"Message parse error: {e}")
                        continue
                    result = notification_result(data, sub_id)
                    if result is not None:
                        self.notifications += 1
                        yield result
                elif msg.type in (
                    aiohttp.WSMsgType.CLOSED,
                    aiohttp.WSMsgType.ERROR,
                ):
                    break

    async def transactions(self, request):
        """Async generator of TransactionMetadata; malformed ones are skipped."""
        async for result in self.subscribe(request):
            value = result.get("value", result) if isinstance(result, dict) else result
            try:
                yield TransactionMetadata.from_json(value)
            except ValueError as e:
                logger.debug(f"Error parsing transaction: {e}")
