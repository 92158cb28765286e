import logging

import httpx

from leetsync.domain.constants import HOST_TIMEOUT
from leetsync.domain.interfaces import HostBridge


class StaticHostBridge(HostBridge):
    """Answers `setUsername` with a fixed username (or nobody)."""

    def __init__(self, username: str | None = None):
        self.username = username or None

    async def request_username(self) -> str | None:
        return self.username


class HttpHostBridge(HostBridge):
    """Asks the hosting page for the active username over HTTP.

    The host answers a `{"action": "setUsername"}` message with either a
    bare JSON string, `{"username": ...}`, or null when nobody is signed in.
    """

    def __init__(
        self,
        url: str,
        timeout: float = HOST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.logger = logging.getLogger(__name__)
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def request_username(self) -> str | None:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                resp = await client.post(self.url, json={"action": "setUsername"})
                resp.raise_for_status()
                data = resp.json() if resp.content else None
            except (httpx.HTTPError, ValueError) as e:
                # An unreachable host page means no known user.
                self.logger.warning(f"Host did not answer setUsername: {e}")
                return None

        if isinstance(data, dict):
            data = data.get("username")
        username = data if isinstance(data, str) and data else None
        self.logger.debug(f"Received username: {username}")
        return username
