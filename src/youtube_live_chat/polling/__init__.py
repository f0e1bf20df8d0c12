"""
Polling system for the YouTube Live Chat client.

This package contains the polling engine and the state, retry and metrics
components it runs on.
"""

from .engine import LiveChatClient
from .metrics import PollingMetrics
from .retry import RetryState
from .state import ConnectionState, PollCursor, Session

__all__ = [
    "LiveChatClient",
    "ConnectionState",
    "PollCursor",
    "PollingMetrics",
    "RetryState",
    "Session",
]
