"""
Tests for the YouTube API client, message gateway and feed resolver.

HTTP traffic is served by ``httpx.MockTransport`` so request shapes and error
translation can be checked without network access.
"""

import json
from datetime import datetime

import httpx
import pytest

from youtube_live_chat.client import YouTubeClient
from youtube_live_chat.exceptions import (
    FatalFetchError,
    InitializationError,
    RequestTimeoutError,
    SendError,
    TransientFetchError,
    YouTubeAPIError,
)
from youtube_live_chat.gateway import MessageGateway
from youtube_live_chat.resolver import FeedResolver

API_URL = "https://youtube.test/youtube/v3"


def make_client(handler) -> tuple[YouTubeClient, list[httpx.Request]]:
    """Build a client whose requests are answered by ``handler``."""
    requests: list[httpx.Request] = []

    def _record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(_record))
    client = YouTubeClient(
        "test-token", api_url=API_URL, application_name="test-app", http_client=http_client
    )
    return client, requests


def api_error(status_code: int, message: str) -> httpx.Response:
    return httpx.Response(
        status_code, json={"error": {"code": status_code, "message": message}}
    )


def raise_timeout(request: httpx.Request) -> httpx.Response:
    raise httpx.ReadTimeout("read timed out", request=request)


class TestYouTubeClient:
    """Test request construction and response decoding."""

    @pytest.mark.asyncio
    async def test_list_chat_messages_decodes_response(self, sample_message_list):
        """Test that camelCase API fields are decoded into the models."""
        client, requests = make_client(
            lambda request: httpx.Response(200, json=sample_message_list)
        )

        batch = await client.list_chat_messages("live-chat-123", "token-1")

        assert batch.next_page_token == "token-2"
        assert batch.polling_interval_millis == 2500
        assert batch.page_info.total_results == 1
        message = batch.items[0]
        assert message.id == "msg-1"
        assert message.text == "hello stream"
        assert message.snippet.live_chat_id == "live-chat-123"
        assert isinstance(message.snippet.published_at, datetime)
        assert message.author_details.display_name == "Viewer Nine"
        assert message.author_details.is_chat_moderator is True
        assert message.author_details.is_chat_owner is False

        request = requests[0]
        assert request.method == "GET"
        assert request.url.path == "/youtube/v3/liveChat/messages"
        assert request.url.params["liveChatId"] == "live-chat-123"
        assert request.url.params["part"] == "snippet,authorDetails"
        assert request.url.params["pageToken"] == "token-1"
        assert request.headers["Authorization"] == "Bearer test-token"
        assert request.headers["User-Agent"] == "test-app"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_empty_page_token_is_omitted(self):
        """Test that the first poll starts from the beginning of the chat."""
        client, requests = make_client(lambda request: httpx.Response(200, json={}))

        batch = await client.list_chat_messages("live-chat-123")

        assert "pageToken" not in requests[0].url.params
        assert batch.items == []
        assert batch.next_page_token is None
        await client.aclose()

    @pytest.mark.asyncio
    async def test_timeout_raises_request_timeout(self):
        client, _ = make_client(raise_timeout)

        with pytest.raises(RequestTimeoutError):
            await client.list_chat_messages("live-chat-123")
        await client.aclose()

    @pytest.mark.asyncio
    async def test_error_status_raises_api_error(self):
        """Test that the API's error message and status are preserved."""
        client, _ = make_client(lambda request: api_error(403, "Live chat ended."))

        with pytest.raises(YouTubeAPIError, match="Live chat ended.") as exc_info:
            await client.list_chat_messages("live-chat-123")

        assert exc_info.value.status_code == 403
        assert exc_info.value.code == "YOUTUBE_API_ERROR"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_connection_error_raises_api_error(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client, _ = make_client(refuse)

        with pytest.raises(YouTubeAPIError) as exc_info:
            await client.list_broadcasts()

        assert not isinstance(exc_info.value, RequestTimeoutError)
        await client.aclose()

    @pytest.mark.asyncio
    async def test_aclose_is_idempotent(self):
        client, _ = make_client(lambda request: httpx.Response(200, json={}))

        await client.aclose()
        await client.aclose()

        assert client.is_closed is True


class TestMessageGateway:
    """Test failure classification and message construction."""

    @pytest.mark.asyncio
    async def test_fetch_batch_returns_batch(self, sample_message_list):
        client, _ = make_client(
            lambda request: httpx.Response(200, json=sample_message_list)
        )
        gateway = MessageGateway(client)

        batch = await gateway.fetch_batch("live-chat-123", "")

        assert [m.id for m in batch.items] == ["msg-1"]
        await client.aclose()

    @pytest.mark.asyncio
    async def test_fetch_timeout_is_transient(self):
        """Test that timeouts are reported as retryable."""
        client, _ = make_client(raise_timeout)
        gateway = MessageGateway(client)

        with pytest.raises(TransientFetchError) as exc_info:
            await gateway.fetch_batch("live-chat-123", "token-1")

        assert exc_info.value.live_chat_id == "live-chat-123"
        assert isinstance(exc_info.value.__cause__, RequestTimeoutError)
        await client.aclose()

    @pytest.mark.asyncio
    async def test_fetch_api_error_is_fatal(self):
        """Test that non-timeout failures are not retryable."""
        client, _ = make_client(lambda request: api_error(404, "Live chat not found."))
        gateway = MessageGateway(client)

        with pytest.raises(FatalFetchError) as exc_info:
            await gateway.fetch_batch("live-chat-123", "token-1")

        assert exc_info.value.context == {"page_token": "token-1"}
        assert exc_info.value.__cause__.status_code == 404
        await client.aclose()

    @pytest.mark.asyncio
    async def test_post_message_sends_text_message_event(self):
        """Test the insert request body and the decoded result."""
        created = {
            "id": "created-1",
            "snippet": {
                "type": "textMessageEvent",
                "liveChatId": "live-chat-123",
                "displayMessage": "hello chat",
                "textMessageDetails": {"messageText": "hello chat"},
            },
        }
        client, requests = make_client(lambda request: httpx.Response(200, json=created))
        gateway = MessageGateway(client)

        message = await gateway.post_message("live-chat-123", "hello chat")

        assert message.id == "created-1"
        assert message.text == "hello chat"
        request = requests[0]
        assert request.method == "POST"
        assert request.url.params["part"] == "snippet"
        assert json.loads(request.content) == {
            "snippet": {
                "type": "textMessageEvent",
                "liveChatId": "live-chat-123",
                "textMessageDetails": {"messageText": "hello chat"},
            }
        }
        await client.aclose()

    @pytest.mark.asyncio
    async def test_post_failure_raises_send_error_once(self):
        """Test that a failed post is reported and not retried."""
        client, requests = make_client(lambda request: api_error(403, "Forbidden"))
        gateway = MessageGateway(client)

        with pytest.raises(SendError, match="Forbidden"):
            await gateway.post_message("live-chat-123", "hello")

        assert len(requests) == 1
        await client.aclose()

    @pytest.mark.asyncio
    async def test_post_non_json_success_raises_send_error(self):
        """Test that an unreadable success body is reported as a send failure."""
        client, _ = make_client(
            lambda request: httpx.Response(200, content=b"<html>oops</html>")
        )
        gateway = MessageGateway(client)

        with pytest.raises(SendError) as exc_info:
            await gateway.post_message("live-chat-123", "hello")

        assert isinstance(exc_info.value.__cause__, YouTubeAPIError)
        assert exc_info.value.__cause__.status_code == 200
        await client.aclose()

    @pytest.mark.asyncio
    async def test_post_malformed_resource_raises_send_error(self):
        """Test that a body not matching the message resource is a send failure."""
        client, _ = make_client(
            lambda request: httpx.Response(200, json={"snippet": "not-an-object"})
        )
        gateway = MessageGateway(client)

        with pytest.raises(SendError, match="Unexpected response body"):
            await gateway.post_message("live-chat-123", "hello")
        await client.aclose()

    @pytest.mark.asyncio
    async def test_fetch_non_json_success_is_fatal(self):
        client, _ = make_client(
            lambda request: httpx.Response(200, content=b"<html>oops</html>")
        )
        gateway = MessageGateway(client)

        with pytest.raises(FatalFetchError, match="Invalid JSON"):
            await gateway.fetch_batch("live-chat-123", "token-1")
        await client.aclose()


class TestFeedResolver:
    """Test live chat id resolution."""

    @pytest.mark.asyncio
    async def test_resolves_first_broadcast_with_chat(self):
        """Test that broadcasts without a chat are skipped."""
        body = {
            "items": [
                {"snippet": {}},
                {"id": "b-2", "snippet": {"liveChatId": "live-chat-2"}},
                {"id": "b-3", "snippet": {"liveChatId": "live-chat-3"}},
            ]
        }
        client, requests = make_client(lambda request: httpx.Response(200, json=body))
        resolver = FeedResolver(broadcast_status="active", broadcast_type="event")

        feed_id = await resolver.resolve_feed_id(client)

        assert feed_id == "live-chat-2"
        params = requests[0].url.params
        assert requests[0].url.path == "/youtube/v3/liveBroadcasts"
        assert params["part"] == "snippet"
        assert params["broadcastStatus"] == "active"
        assert params["broadcastType"] == "event"
        assert params["fields"] == "items/snippet/liveChatId"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_no_broadcasts_resolves_to_none(self):
        client, _ = make_client(lambda request: httpx.Response(200, json={}))

        assert await FeedResolver().resolve_feed_id(client) is None
        await client.aclose()

    @pytest.mark.asyncio
    async def test_listing_failure_raises_initialization_error(self):
        client, _ = make_client(lambda request: api_error(401, "Invalid Credentials"))

        with pytest.raises(InitializationError, match="Invalid Credentials"):
            await FeedResolver().resolve_feed_id(client)
        await client.aclose()
