"""
Message gateway for the YouTube Live Chat client.

Maps the two chat operations onto the API client and classifies their
failures: request timeouts are transient and may be retried by the polling
loop, everything else is fatal.
"""

import structlog

from .client import YouTubeClient
from .exceptions import (
    FatalFetchError,
    LiveChatError,
    RequestTimeoutError,
    SendError,
    TransientFetchError,
)
from .models import LiveChatMessage, LiveChatMessageListResponse, build_text_message

logger = structlog.get_logger(__name__)

_INSERT_FIELDS = {"snippet": {"type", "live_chat_id", "text_message_details"}}


class MessageGateway:
    """Fetches and posts live chat messages."""

    def __init__(self, client: YouTubeClient):
        self.client = client

    async def fetch_batch(
        self, feed_id: str, page_token: str = ""
    ) -> LiveChatMessageListResponse:
        """
        Fetch the messages after ``page_token``.

        Raises:
            TransientFetchError: The request timed out
            FatalFetchError: Any other failure
        """
        try:
            return await self.client.list_chat_messages(feed_id, page_token)
        except RequestTimeoutError as e:
            raise TransientFetchError(
                f"Fetching messages timed out: {e}", live_chat_id=feed_id
            ) from e
        except LiveChatError as e:
            raise FatalFetchError(
                f"Fetching messages failed: {e}",
                live_chat_id=feed_id,
                context={"page_token": page_token},
            ) from e

    async def post_message(self, feed_id: str, text: str) -> LiveChatMessage:
        """
        Post one text message to the chat.

        Raises:
            SendError: The message could not be posted
        """
        message = build_text_message(feed_id, text)
        body = message.model_dump(
            by_alias=True, exclude_none=True, include=_INSERT_FIELDS
        )

        try:
            created = await self.client.insert_chat_message(body)
        except LiveChatError as e:
            raise SendError(
                f"Failed to send message: {e}", live_chat_id=feed_id
            ) from e

        logger.debug("Chat message posted", live_chat_id=feed_id, message_id=created.id)
        return created
