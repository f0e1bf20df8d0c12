"""
Polling engine for the YouTube Live Chat client.

This module owns the connection lifecycle: one-time initialization, the
background polling task with its retry policy and server-paced delays, and
shutdown that waits for the task to exit.
"""

import asyncio
from collections.abc import Callable
from typing import Any

import structlog

from ..auth import CredentialProvider
from ..client import YouTubeClient
from ..config import Settings, get_settings
from ..events import EventBus, EventHandler, EventKind, Subscription
from ..exceptions import (
    DisconnectTimeoutError,
    FatalFetchError,
    InitializationError,
    TransientFetchError,
)
from ..gateway import MessageGateway
from ..models import LiveChatMessage
from ..resolver import FeedResolver
from .metrics import PollingMetrics
from .retry import RetryState
from .state import ConnectionState, PollCursor, Session

logger = structlog.get_logger(__name__)


class LiveChatClient:
    """
    Keeps a live chat connection open by polling for new messages.

    Hosts subscribe to ``EventKind`` notifications, call ``connect()`` to
    start polling, ``send_message()`` to post, and ``disconnect()`` to stop.
    The session (authorized client and live chat id) is resolved on the first
    ``connect()`` and reused by later connections.
    """

    def __init__(
        self,
        credential_provider: CredentialProvider,
        settings: Settings | None = None,
        feed_resolver: FeedResolver | None = None,
        gateway_factory: Callable[[YouTubeClient], MessageGateway] = MessageGateway,
        event_bus: EventBus | None = None,
    ):
        """
        Initialize the live chat client.

        Args:
            credential_provider: Source of the authorized API client
            settings: Application settings
            feed_resolver: Resolver for the live chat id
            gateway_factory: Builds the message gateway from the authorized client
            event_bus: Bus notifications are emitted on
        """
        self.settings = settings or get_settings()
        self.config = self.settings.polling_config
        self.credential_provider = credential_provider
        self.feed_resolver = feed_resolver or FeedResolver(
            broadcast_status=self.settings.broadcast_status,
            broadcast_type=self.settings.broadcast_type,
        )
        self.gateway_factory = gateway_factory
        self.events = event_bus or EventBus()
        self.metrics = PollingMetrics()

        self.session = Session()
        self.gateway: MessageGateway | None = None
        self.state = ConnectionState.DISCONNECTED
        self.polling_task: asyncio.Task[None] | None = None
        self._stop_event = asyncio.Event()

    @property
    def is_connected(self) -> bool:
        return self.state == ConnectionState.CONNECTED

    @property
    def is_initialized(self) -> bool:
        return self.session.initialized

    @property
    def live_chat_id(self) -> str | None:
        return self.session.feed_id

    def subscribe(self, kind: EventKind, handler: EventHandler) -> Subscription:
        """Register a handler for one kind of notification."""
        return self.events.subscribe(kind, handler)

    async def __aenter__(self) -> "LiveChatClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def connect(self) -> None:
        """
        Connect to the live chat and start polling.

        Initialization runs only until it has succeeded once. When the channel
        has no broadcast with a live chat, this returns without connecting.

        Raises:
            InitializationError: Credentials or the live chat id could not be
                obtained
        """
        if self.state != ConnectionState.DISCONNECTED:
            logger.warning("Live chat connection already active", state=self.state.value)
            return

        self.state = ConnectionState.CONNECTING
        try:
            if not self.session.initialized:
                await self._initialize()
        except BaseException:
            # Includes cancellation while initializing
            self.state = ConnectionState.DISCONNECTED
            raise

        if not self.session.has_feed:
            logger.info("No active live chat to join")
            self.state = ConnectionState.DISCONNECTED
            return

        feed_id = self.session.feed_id or ""
        self._stop_event = asyncio.Event()
        self.polling_task = asyncio.create_task(
            self._run_polling_loop(feed_id, self._stop_event),
            name=f"live-chat-poll-{feed_id}",
        )
        self.state = ConnectionState.CONNECTED

        logger.info("Connected to live chat", live_chat_id=feed_id)
        await self.events.emit(EventKind.CONNECTED, True)

    async def disconnect(self) -> None:
        """
        Stop polling and wait for the polling task to exit.

        Raises:
            DisconnectTimeoutError: The task did not exit within
                ``disconnect_timeout_seconds`` and was cancelled
        """
        task = self.polling_task
        if self.state != ConnectionState.CONNECTED or task is None:
            if task is not None and not task.done():
                # The loop is already terminating on its own
                await self._wait_for_loop_exit(task)
            else:
                logger.warning("Disconnect requested but no polling loop is running")
            return

        if asyncio.current_task() is task:
            raise RuntimeError(
                "disconnect() cannot wait for the polling loop from one of its own "
                "event handlers; schedule it with asyncio.create_task() instead"
            )

        logger.info("Disconnecting from live chat", live_chat_id=self.session.feed_id)
        self.state = ConnectionState.DISCONNECTING
        self._stop_event.set()

        try:
            await self._wait_for_loop_exit(task)
        finally:
            self.polling_task = None
            self.state = ConnectionState.DISCONNECTED
            await self.events.emit(EventKind.DISCONNECTED, True)

        logger.info("Disconnected from live chat", live_chat_id=self.session.feed_id)

    async def send_message(self, text: str) -> LiveChatMessage | None:
        """
        Post a text message to the live chat.

        Returns:
            The created message, or None when there is no live chat to post to

        Raises:
            SendError: The message could not be posted
        """
        if not self.session.has_feed or self.gateway is None:
            logger.debug("No live chat to send to, message not sent")
            return None

        return await self.gateway.post_message(self.session.feed_id or "", text)

    async def aclose(self) -> None:
        """Disconnect if needed and release the authorized client."""
        if self.polling_task is not None and not self.polling_task.done():
            await self.disconnect()
        self.gateway = None
        await self.session.release_client()

    def get_status(self) -> dict[str, Any]:
        """Get connection status and polling metrics for monitoring."""
        return {
            "state": self.state.value,
            "is_connected": self.is_connected,
            "is_initialized": self.is_initialized,
            "live_chat_id": self.session.feed_id,
            "metrics": self.metrics.get_summary(),
        }

    async def _initialize(self) -> None:
        """Acquire the authorized client and resolve the live chat id."""
        logger.info("Initializing live chat session")

        try:
            client = await self.credential_provider.get_authorized_client()
        except Exception as e:
            logger.error("Credential acquisition failed", error=str(e))
            raise InitializationError(f"Failed to acquire credentials: {e}") from e

        try:
            feed_id = await self.feed_resolver.resolve_feed_id(client)
            gateway = self.gateway_factory(client)
        except BaseException as e:
            logger.error("Live chat resolution failed", error=str(e))
            if hasattr(client, "aclose"):
                await client.aclose()
            if isinstance(e, InitializationError) or not isinstance(e, Exception):
                raise
            raise InitializationError(
                f"Failed to set up live chat session: {e}"
            ) from e

        self.session.complete(client, feed_id)
        self.gateway = gateway
        logger.info("Live chat session initialized", live_chat_id=feed_id)

    async def _wait_for_loop_exit(self, task: asyncio.Task[None]) -> None:
        """Wait for the polling task, cancelling it if it overruns the timeout."""
        timeout = self.config.disconnect_timeout_seconds
        try:
            await asyncio.wait_for(asyncio.shield(task), timeout=timeout)
        except asyncio.TimeoutError:
            logger.error(
                "Polling loop did not stop in time, cancelling",
                timeout_seconds=timeout,
            )
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            raise DisconnectTimeoutError(
                f"Polling loop did not stop within {timeout} seconds",
                timeout_seconds=timeout,
            )

    async def _run_polling_loop(self, feed_id: str, stop_event: asyncio.Event) -> None:
        """Run the polling loop and turn a fatal failure into a disconnect."""
        self.metrics.record_loop_start()
        try:
            await self._polling_loop(feed_id, stop_event)
        except FatalFetchError as e:
            await self._handle_loop_failure(e)
        except Exception as e:
            error = FatalFetchError(
                f"Polling loop crashed: {e}", live_chat_id=feed_id
            )
            error.__cause__ = e
            await self._handle_loop_failure(error)
        logger.info("Polling loop stopped", live_chat_id=feed_id)

    async def _polling_loop(self, feed_id: str, stop_event: asyncio.Event) -> None:
        """Main polling loop."""
        if self.gateway is None:
            raise FatalFetchError("Message gateway not initialized", live_chat_id=feed_id)

        cursor = PollCursor()
        retry = RetryState(
            max_attempts=self.config.max_retry_attempts,
            backoff_ms=self.config.retry_backoff_ms,
        )
        first_fetch = True

        logger.info(
            "Polling loop started",
            live_chat_id=feed_id,
            max_retry_attempts=retry.max_attempts,
            double_wait=self.config.double_wait,
        )

        while not stop_event.is_set():
            try:
                batch = await self.gateway.fetch_batch(feed_id, cursor.next_page_token)
            except TransientFetchError as e:
                self.metrics.record_transient_failure(str(e))
                if retry.exhausted:
                    raise FatalFetchError(
                        f"Fetching messages failed {retry.consecutive_failures + 1} "
                        f"times in a row: {e}",
                        live_chat_id=feed_id,
                        attempts=retry.consecutive_failures + 1,
                    ) from e

                backoff_ms = retry.record_failure()
                logger.warning(
                    "Fetching messages failed, retrying",
                    live_chat_id=feed_id,
                    attempt=retry.consecutive_failures,
                    backoff_ms=backoff_ms,
                    error=str(e),
                )
                await self._pause(backoff_ms, stop_event)
            except FatalFetchError:
                raise
            except Exception as e:
                raise FatalFetchError(
                    f"Unexpected error while fetching messages: {e}",
                    live_chat_id=feed_id,
                ) from e
            else:
                if stop_event.is_set():
                    logger.debug(
                        "Discarding batch fetched after stop was requested",
                        live_chat_id=feed_id,
                        messages=len(batch.items),
                    )
                    break

                cursor.advance(batch, self.config.default_interval_ms)
                retry.reset()
                delivered = not first_fetch
                self.metrics.record_success(delivered, len(batch.items))

                if delivered:
                    logger.debug(
                        "Messages received",
                        live_chat_id=feed_id,
                        messages=len(batch.items),
                        polling_interval_ms=cursor.polling_interval_ms,
                    )
                    await self.events.emit(EventKind.MESSAGES_RECEIVED, batch)
                else:
                    logger.debug(
                        "Initial batch used to seed the cursor",
                        live_chat_id=feed_id,
                        skipped_messages=len(batch.items),
                    )
                first_fetch = False

                if self.config.double_wait:
                    await self._pause(cursor.polling_interval_ms, stop_event)

            await self._pause(cursor.polling_interval_ms, stop_event)

    async def _pause(self, delay_ms: int, stop_event: asyncio.Event) -> None:
        """Sleep for ``delay_ms`` milliseconds, waking early on a stop request."""
        if stop_event.is_set():
            return
        if delay_ms <= 0:
            await asyncio.sleep(0)
            return
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=delay_ms / 1000)
        except asyncio.TimeoutError:
            pass

    async def _handle_loop_failure(self, error: FatalFetchError) -> None:
        """Surface a fatal loop failure and drop to the disconnected state."""
        self.metrics.record_fatal_failure(str(error))
        logger.error(
            "Polling loop terminated",
            live_chat_id=error.live_chat_id,
            attempts=error.attempts,
            error=str(error),
        )

        implicit_disconnect = self.state == ConnectionState.CONNECTED
        if implicit_disconnect:
            self.state = ConnectionState.DISCONNECTED

        await self.events.emit(EventKind.POLLING_FAILED, error)
        if implicit_disconnect:
            await self.events.emit(EventKind.DISCONNECTED, True)
