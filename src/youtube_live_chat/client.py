"""
YouTube Data API client for the live chat client.

This module provides the authorized client handle used by the feed resolver
and the message gateway, with request timeouts and error translation.
"""

from typing import Any, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from .exceptions import RequestTimeoutError, YouTubeAPIError
from .models import (
    LiveBroadcastListResponse,
    LiveChatMessage,
    LiveChatMessageListResponse,
)

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

DEFAULT_API_URL = "https://www.googleapis.com/youtube/v3"


class YouTubeClient:
    """
    Authorized YouTube Data API client.

    One instance wraps a single ``httpx.AsyncClient``. It is safe to issue
    concurrent requests through it as long as they all run on the event loop
    that created it.
    """

    def __init__(
        self,
        access_token: str,
        api_url: str = DEFAULT_API_URL,
        application_name: str = "youtube-live-chat",
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the YouTube client.

        Args:
            access_token: OAuth access token with a YouTube scope
            api_url: Base URL of the YouTube Data API
            application_name: Sent as the user agent
            timeout: Per-request timeout in seconds
            http_client: Preconfigured HTTP client, mainly for tests
        """
        self.api_url = api_url.rstrip("/")
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
            "User-Agent": application_name,
        }
        if http_client is None:
            self._http = httpx.AsyncClient(
                base_url=self.api_url, headers=headers, timeout=timeout
            )
        else:
            http_client.headers.update(headers)
            self._http = http_client
        self._closed = False

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def aclose(self) -> None:
        """Release the underlying HTTP connection pool."""
        if self._closed:
            return
        self._closed = True
        await self._http.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send a request and return the decoded JSON body."""
        try:
            response = await self._http.request(
                method, f"{self.api_url}/{path}", params=params, json=json
            )
        except httpx.TimeoutException as e:
            logger.warning("YouTube API request timed out", path=path, error=str(e))
            raise RequestTimeoutError(
                f"Request to {path} timed out", context={"path": path}
            ) from e
        except httpx.HTTPError as e:
            logger.error("YouTube API request failed", path=path, error=str(e))
            raise YouTubeAPIError(
                f"Request to {path} failed: {e}", context={"path": path}
            ) from e

        if response.status_code >= 400:
            message = _extract_error_message(response)
            logger.error(
                "YouTube API returned an error",
                path=path,
                status_code=response.status_code,
                error=message,
            )
            raise YouTubeAPIError(
                f"YouTube API error on {path}: {message}",
                status_code=response.status_code,
                context={"path": path},
            )

        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as e:
            logger.error(
                "YouTube API returned a non-JSON body",
                path=path,
                status_code=response.status_code,
            )
            raise YouTubeAPIError(
                f"Invalid JSON in response from {path}: {e}",
                status_code=response.status_code,
                context={"path": path},
            ) from e
        if not isinstance(data, dict):
            raise YouTubeAPIError(
                f"Unexpected response body from {path}",
                status_code=response.status_code,
            )
        return data

    async def list_broadcasts(
        self,
        broadcast_status: str = "all",
        broadcast_type: str = "all",
        fields: str | None = "items/snippet/liveChatId",
    ) -> LiveBroadcastListResponse:
        """
        List the authorized channel's broadcasts.

        Args:
            broadcast_status: Status filter (all, active, completed, upcoming)
            broadcast_type: Type filter (all, event, persistent)
            fields: Partial response selector

        Returns:
            Decoded broadcast list
        """
        params = {
            "part": "snippet",
            "broadcastStatus": broadcast_status,
            "broadcastType": broadcast_type,
        }
        if fields:
            params["fields"] = fields
        data = await self._request("GET", "liveBroadcasts", params=params)
        return _decode(LiveBroadcastListResponse, data, "liveBroadcasts")

    async def list_chat_messages(
        self, live_chat_id: str, page_token: str = ""
    ) -> LiveChatMessageListResponse:
        """
        List chat messages after the given page token.

        Args:
            live_chat_id: Chat to read
            page_token: Cursor from the previous response, empty for the start

        Returns:
            Decoded message batch with the next cursor
        """
        params = {"liveChatId": live_chat_id, "part": "snippet,authorDetails"}
        if page_token:
            params["pageToken"] = page_token
        data = await self._request("GET", "liveChat/messages", params=params)
        return _decode(LiveChatMessageListResponse, data, "liveChat/messages")

    async def insert_chat_message(self, message: dict[str, Any]) -> LiveChatMessage:
        """
        Insert a chat message.

        Args:
            message: Message resource in API (camelCase) form

        Returns:
            The message as created by the server
        """
        data = await self._request(
            "POST", "liveChat/messages", params={"part": "snippet"}, json=message
        )
        return _decode(LiveChatMessage, data, "liveChat/messages")


def _extract_error_message(response: httpx.Response) -> str:
    """Pull the human readable message out of a Google API error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return response.text or response.reason_phrase


def _decode(model: type[ModelT], data: dict[str, Any], path: str) -> ModelT:
    """Validate a response body against its resource model."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.error("Unexpected response shape", path=path, error=str(e))
        raise YouTubeAPIError(
            f"Unexpected response body from {path}: {e}", context={"path": path}
        ) from e
