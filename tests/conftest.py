"""
Pytest configuration and fixtures for YouTube Live Chat client tests.
"""

from collections.abc import Callable, Iterable
from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest

from youtube_live_chat.config import Settings
from youtube_live_chat.models import (
    AuthorDetails,
    LiveChatMessage,
    LiveChatMessageListResponse,
    LiveChatMessageSnippet,
)
from youtube_live_chat.polling.engine import LiveChatClient


@pytest.fixture
def mock_settings() -> Settings:
    """Settings for testing."""
    return Settings(
        youtube_access_token="test-token",
        default_polling_interval_ms=1000,
        max_retry_attempts=5,
        retry_backoff_ms=1000,
        polling_double_wait=True,
        disconnect_timeout_seconds=1.0,
        log_level="DEBUG",
    )


@pytest.fixture
def mock_youtube_client() -> Mock:
    """Mock authorized YouTube client."""
    client = Mock()
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def mock_credential_provider(mock_youtube_client: Mock) -> Mock:
    """Mock credential provider returning the mock client."""
    provider = Mock()
    provider.get_authorized_client = AsyncMock(return_value=mock_youtube_client)
    return provider


@pytest.fixture
def mock_feed_resolver() -> Mock:
    """Mock feed resolver with an active live chat."""
    resolver = Mock()
    resolver.resolve_feed_id = AsyncMock(return_value="live-chat-123")
    return resolver


@pytest.fixture
def make_chat_client(
    mock_settings: Settings,
    mock_credential_provider: Mock,
    mock_feed_resolver: Mock,
) -> Callable[..., LiveChatClient]:
    """Factory for live chat clients wired to a given gateway."""

    def _make(gateway: Any, settings: Settings | None = None) -> LiveChatClient:
        return LiveChatClient(
            mock_credential_provider,
            settings=settings or mock_settings,
            feed_resolver=mock_feed_resolver,
            gateway_factory=lambda client: gateway,
        )

    return _make


@pytest.fixture
def make_batch() -> Callable[..., LiveChatMessageListResponse]:
    """Factory for message batches."""

    def _make(
        next_page_token: str | None,
        polling_interval_millis: int | None = 0,
        texts: Iterable[str] = (),
    ) -> LiveChatMessageListResponse:
        return LiveChatMessageListResponse(
            next_page_token=next_page_token,
            polling_interval_millis=polling_interval_millis,
            items=[
                LiveChatMessage(
                    id=f"msg-{text}",
                    snippet=LiveChatMessageSnippet(display_message=text),
                    author_details=AuthorDetails(display_name="viewer"),
                )
                for text in texts
            ],
        )

    return _make


@pytest.fixture
def sample_message_list() -> dict[str, Any]:
    """Sample liveChatMessages.list response body."""
    return {
        "kind": "youtube#liveChatMessageListResponse",
        "etag": "etag-1",
        "nextPageToken": "token-2",
        "pollingIntervalMillis": 2500,
        "pageInfo": {"totalResults": 1, "resultsPerPage": 1},
        "items": [
            {
                "kind": "youtube#liveChatMessage",
                "id": "msg-1",
                "snippet": {
                    "type": "textMessageEvent",
                    "liveChatId": "live-chat-123",
                    "authorChannelId": "channel-9",
                    "publishedAt": "2024-01-15T10:00:00Z",
                    "hasDisplayContent": True,
                    "displayMessage": "hello stream",
                    "textMessageDetails": {"messageText": "hello stream"},
                },
                "authorDetails": {
                    "channelId": "channel-9",
                    "displayName": "Viewer Nine",
                    "isChatModerator": True,
                },
            }
        ],
    }
