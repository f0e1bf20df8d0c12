"""
Feed resolution for the YouTube Live Chat client.
"""

import structlog

from .client import YouTubeClient
from .exceptions import InitializationError, LiveChatError

logger = structlog.get_logger(__name__)


class FeedResolver:
    """Finds the live chat id of the channel's eligible broadcast."""

    def __init__(self, broadcast_status: str = "all", broadcast_type: str = "all"):
        self.broadcast_status = broadcast_status
        self.broadcast_type = broadcast_type

    async def resolve_feed_id(self, client: YouTubeClient) -> str | None:
        """
        Resolve the live chat id to poll.

        Args:
            client: Authorized YouTube client

        Returns:
            The first broadcast's live chat id, or None when no broadcast has one
        """
        try:
            response = await client.list_broadcasts(
                broadcast_status=self.broadcast_status,
                broadcast_type=self.broadcast_type,
            )
        except LiveChatError as e:
            raise InitializationError(
                f"Failed to list broadcasts: {e}",
                context={"broadcast_status": self.broadcast_status},
            ) from e

        for broadcast in response.items:
            if broadcast.snippet and broadcast.snippet.live_chat_id:
                logger.info(
                    "Resolved live chat",
                    live_chat_id=broadcast.snippet.live_chat_id,
                    broadcast_id=broadcast.id,
                )
                return broadcast.snippet.live_chat_id

        logger.info(
            "No broadcast with a live chat found",
            broadcasts=len(response.items),
            broadcast_status=self.broadcast_status,
        )
        return None
