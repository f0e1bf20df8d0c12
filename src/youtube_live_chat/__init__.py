"""
YouTube Live Chat client

Keeps a live connection to a YouTube live chat by polling for new messages,
and posts messages to the same chat.
"""

__version__ = "0.1.0"

from .auth import (
    AccessTokenCredentialProvider,
    CredentialProvider,
    RefreshTokenCredentialProvider,
    create_credential_provider,
)
from .config import Settings
from .events import EventBus, EventKind
from .exceptions import LiveChatError
from .polling import ConnectionState, LiveChatClient

__all__ = [
    "Settings",
    "LiveChatClient",
    "ConnectionState",
    "EventBus",
    "EventKind",
    "CredentialProvider",
    "AccessTokenCredentialProvider",
    "RefreshTokenCredentialProvider",
    "create_credential_provider",
    "LiveChatError",
]
