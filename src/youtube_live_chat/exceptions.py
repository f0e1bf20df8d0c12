"""
Custom exceptions for the YouTube Live Chat client.

This module defines the error taxonomy used across the client: configuration
and authentication failures, API transport failures, and the lifecycle errors
raised by the polling engine.
"""

from typing import Any


class LiveChatError(Exception):
    """Base exception for YouTube Live Chat client errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code or "LIVE_CHAT_ERROR"
        self.context = context or {}


class ConfigurationError(LiveChatError):
    """Exception for configuration related errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message, "CONFIGURATION_ERROR", context)


class AuthenticationError(LiveChatError):
    """Exception for credential acquisition errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message, "AUTHENTICATION_ERROR", context)


class YouTubeAPIError(LiveChatError):
    """Exception for YouTube Data API related errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
        code: str = "YOUTUBE_API_ERROR",
    ):
        super().__init__(message, code, context)
        self.status_code = status_code


class RequestTimeoutError(YouTubeAPIError):
    """Exception for API requests that timed out before a response arrived."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message, None, context, code="REQUEST_TIMEOUT")


class InitializationError(LiveChatError):
    """Exception for failures while acquiring credentials or resolving the feed."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message, "INITIALIZATION_ERROR", context)


class TransientFetchError(LiveChatError):
    """Exception for message fetches that may succeed when retried."""

    def __init__(
        self,
        message: str,
        live_chat_id: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, "TRANSIENT_FETCH_ERROR", context)
        self.live_chat_id = live_chat_id


class FatalFetchError(LiveChatError):
    """Exception for fetch failures that terminate the polling loop."""

    def __init__(
        self,
        message: str,
        live_chat_id: str | None = None,
        attempts: int = 0,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, "FATAL_FETCH_ERROR", context)
        self.live_chat_id = live_chat_id
        self.attempts = attempts


class SendError(LiveChatError):
    """Exception for chat messages that could not be posted."""

    def __init__(
        self,
        message: str,
        live_chat_id: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, "SEND_ERROR", context)
        self.live_chat_id = live_chat_id


class DisconnectTimeoutError(LiveChatError):
    """Exception for a polling loop that did not stop within the allowed time."""

    def __init__(
        self,
        message: str,
        timeout_seconds: float | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, "DISCONNECT_TIMEOUT", context)
        self.timeout_seconds = timeout_seconds
