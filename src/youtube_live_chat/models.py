"""
YouTube Data API resource models.

Only the resources and fields consumed by the live chat client are modelled.
Field names follow Python conventions and are populated from the API's
camelCase JSON through aliases; unknown fields are ignored.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base model for API resources."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class AuthorDetails(ApiModel):
    """Details about the author of a chat message."""

    channel_id: str | None = None
    channel_url: str | None = None
    display_name: str | None = None
    profile_image_url: str | None = None
    is_verified: bool = False
    is_chat_owner: bool = False
    is_chat_sponsor: bool = False
    is_chat_moderator: bool = False


class LiveChatTextMessageDetails(ApiModel):
    """Payload of a plain text chat message."""

    message_text: str = ""


class LiveChatMessageSnippet(ApiModel):
    """Basic details about a chat message."""

    type: str = "textMessageEvent"
    live_chat_id: str | None = None
    author_channel_id: str | None = None
    published_at: datetime | None = None
    has_display_content: bool = False
    display_message: str | None = None
    text_message_details: LiveChatTextMessageDetails | None = None


class LiveChatMessage(ApiModel):
    """A single message in a live chat."""

    kind: str = "youtube#liveChatMessage"
    etag: str | None = None
    id: str | None = None
    snippet: LiveChatMessageSnippet = Field(default_factory=LiveChatMessageSnippet)
    author_details: AuthorDetails | None = None

    @property
    def text(self) -> str:
        """Get the displayable text of the message."""
        if self.snippet.display_message:
            return self.snippet.display_message
        if self.snippet.text_message_details:
            return self.snippet.text_message_details.message_text
        return ""


class PageInfo(ApiModel):
    """Paging details of a list response."""

    total_results: int | None = None
    results_per_page: int | None = None


class LiveChatMessageListResponse(ApiModel):
    """A batch of chat messages plus the cursor for the next poll."""

    kind: str = "youtube#liveChatMessageListResponse"
    etag: str | None = None
    next_page_token: str | None = None
    polling_interval_millis: int | None = None
    offline_at: datetime | None = None
    page_info: PageInfo | None = None
    items: list[LiveChatMessage] = Field(default_factory=list)


class LiveBroadcastSnippet(ApiModel):
    """Basic details about a broadcast."""

    title: str | None = None
    description: str | None = None
    channel_id: str | None = None
    live_chat_id: str | None = None
    scheduled_start_time: datetime | None = None
    actual_start_time: datetime | None = None
    actual_end_time: datetime | None = None


class LiveBroadcast(ApiModel):
    """A YouTube live broadcast."""

    kind: str = "youtube#liveBroadcast"
    id: str | None = None
    snippet: LiveBroadcastSnippet | None = None


class LiveBroadcastListResponse(ApiModel):
    """A page of broadcasts."""

    kind: str = "youtube#liveBroadcastListResponse"
    next_page_token: str | None = None
    items: list[LiveBroadcast] = Field(default_factory=list)


def build_text_message(live_chat_id: str, text: str) -> LiveChatMessage:
    """Build the insert payload for a text message."""
    return LiveChatMessage(
        snippet=LiveChatMessageSnippet(
            type="textMessageEvent",
            live_chat_id=live_chat_id,
            text_message_details=LiveChatTextMessageDetails(message_text=text),
        )
    )
