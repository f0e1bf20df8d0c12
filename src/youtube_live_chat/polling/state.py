"""
Connection and polling state for the live chat client.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..exceptions import LiveChatError
from ..models import LiveChatMessageListResponse

DEFAULT_POLLING_INTERVAL_MS = 1000


class ConnectionState(str, Enum):
    """Lifecycle states of the client."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTING = "disconnecting"


@dataclass
class Session:
    """
    Per-client session populated by the first successful initialization.

    The feed id is written once and never changes afterwards. The authorized
    client is owned by the session and released by ``release_client``.
    """

    feed_id: str | None = None
    authorized_client: Any = None
    initialized: bool = False

    @property
    def has_feed(self) -> bool:
        return bool(self.feed_id and self.feed_id.strip())

    def complete(self, authorized_client: Any, feed_id: str | None) -> None:
        """Record the outcome of initialization."""
        if self.initialized:
            raise LiveChatError("Session is already initialized")
        self.authorized_client = authorized_client
        self.feed_id = feed_id
        self.initialized = True

    async def release_client(self) -> None:
        """Close the authorized client if it holds resources."""
        client, self.authorized_client = self.authorized_client, None
        if client is not None and hasattr(client, "aclose"):
            await client.aclose()


@dataclass
class PollCursor:
    """Position in the chat and the server-suggested delay before the next poll."""

    next_page_token: str = ""
    polling_interval_ms: int = 0

    def advance(
        self,
        response: LiveChatMessageListResponse,
        default_interval_ms: int = DEFAULT_POLLING_INTERVAL_MS,
    ) -> None:
        """Move past a successfully fetched batch."""
        self.next_page_token = response.next_page_token or ""
        if response.polling_interval_millis is None:
            self.polling_interval_ms = default_interval_ms
        else:
            self.polling_interval_ms = max(0, response.polling_interval_millis)
