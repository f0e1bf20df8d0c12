#!/usr/bin/env python3
"""
Standalone host application for the YouTube Live Chat client.

Connects to the channel's live chat, logs every received message, and serves
a small HTTP interface for health checks and for posting messages.
"""

import asyncio
import logging
import signal
import sys
from typing import Any

from aiohttp import web

from .auth import create_credential_provider
from .config import Settings
from .events import EventKind
from .exceptions import LiveChatError, SendError
from .models import LiveChatMessageListResponse
from .polling.engine import LiveChatClient

logger = logging.getLogger(__name__)


class StandaloneApp:
    """Main application class for standalone mode."""

    def __init__(self) -> None:
        """Initialize the standalone application."""
        self.settings: Settings | None = None
        self.chat_client: LiveChatClient | None = None
        self.last_error: str | None = None
        self._shutdown_event = asyncio.Event()
        self._web_app: web.Application | None = None
        self._web_runner: web.AppRunner | None = None

    async def initialize(self) -> None:
        """Initialize all application components."""
        logger.info("Initializing YouTube live chat client...")

        try:
            self.settings = Settings()
        except Exception as e:
            logger.error(f"Failed to load configuration: {e}")
            raise

        credential_provider = create_credential_provider(self.settings)
        logger.info(f"Credential provider: {type(credential_provider).__name__}")

        self.chat_client = LiveChatClient(credential_provider, settings=self.settings)
        self.chat_client.subscribe(EventKind.CONNECTED, self._on_connected)
        self.chat_client.subscribe(EventKind.DISCONNECTED, self._on_disconnected)
        self.chat_client.subscribe(EventKind.MESSAGES_RECEIVED, self._on_messages)
        self.chat_client.subscribe(EventKind.POLLING_FAILED, self._on_polling_failed)

        logger.info("Live chat client initialized")

    async def start(self) -> None:
        """Connect to the live chat and serve until shutdown is requested."""
        if not self.settings or not self.chat_client:
            raise RuntimeError("Application not initialized")

        await self._start_web_server()
        await self.chat_client.connect()

        if not self.chat_client.is_connected:
            logger.warning("No live broadcast with a chat was found, nothing to poll")

        await self._shutdown_event.wait()

    async def stop(self) -> None:
        """Stop the standalone application."""
        logger.info("Stopping live chat client...")

        if self.chat_client:
            try:
                await self.chat_client.aclose()
                logger.info("Live chat client closed")
            except LiveChatError as e:
                logger.error(f"Error closing live chat client: {e}")

        await self._stop_web_server()

        self._shutdown_event.set()
        logger.info("Live chat client stopped")

    def setup_signal_handlers(self) -> None:
        """Set up signal handlers for graceful shutdown."""
        loop = asyncio.get_running_loop()

        def signal_handler(signum: int) -> None:
            logger.info(f"Received signal {signum}, initiating shutdown...")
            self._shutdown_event.set()

        for signum in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(signum, signal_handler, signum)

    def _on_connected(self, _: bool) -> None:
        live_chat_id = self.chat_client.live_chat_id if self.chat_client else None
        logger.info(f"Connected to live chat {live_chat_id}")

    def _on_disconnected(self, _: bool) -> None:
        logger.info("Disconnected from live chat")

    def _on_messages(self, batch: LiveChatMessageListResponse) -> None:
        for message in batch.items:
            author = (
                message.author_details.display_name
                if message.author_details
                else "unknown"
            )
            logger.info(f"[{author}] {message.text}")

    def _on_polling_failed(self, error: LiveChatError) -> None:
        self.last_error = str(error)
        logger.error(f"Live chat polling stopped: {error}")

    async def health_check(self) -> dict[str, Any]:
        """
        Perform health check of all components.

        Returns:
            Health check results
        """
        health_data: dict[str, Any] = {
            "status": "healthy",
            "mode": "standalone",
            "components": {},
        }

        if not self.chat_client:
            health_data["components"]["chat_client"] = "not_initialized"
            health_data["status"] = "unhealthy"
            return health_data

        status = self.chat_client.get_status()
        health_data["components"]["chat_client"] = status
        if self.last_error:
            health_data["status"] = "unhealthy"
            health_data["error"] = self.last_error

        return health_data

    async def send_message(self, text: str) -> dict[str, Any]:
        """Post a message and describe the outcome."""
        if not self.chat_client:
            raise RuntimeError("Application not initialized")

        created = await self.chat_client.send_message(text)
        if created is None:
            return {"sent": False}
        return {"sent": True, "id": created.id}

    async def _create_web_app(self) -> web.Application:
        """Create the web application for health checks and sending."""
        app = web.Application()

        async def health_handler(request: web.Request) -> web.Response:
            """Health check endpoint."""
            try:
                health_data = await self.health_check()
                status_code = 200 if health_data["status"] == "healthy" else 503
                return web.json_response(health_data, status=status_code)
            except Exception as e:
                logger.error(f"Health check failed: {e}")
                return web.json_response(
                    {"status": "unhealthy", "error": str(e)}, status=503
                )

        async def send_handler(request: web.Request) -> web.Response:
            """Post a chat message from a JSON body ``{"text": ...}``."""
            try:
                body = await request.json()
            except ValueError:
                return web.json_response({"error": "invalid JSON body"}, status=400)

            text = body.get("text") if isinstance(body, dict) else None
            if not isinstance(text, str) or not text.strip():
                return web.json_response({"error": "text is required"}, status=400)

            try:
                result = await self.send_message(text)
            except SendError as e:
                logger.error(f"Sending message failed: {e}")
                return web.json_response({"sent": False, "error": str(e)}, status=502)

            return web.json_response(result, status=201 if result["sent"] else 409)

        app.router.add_get("/health", health_handler)
        app.router.add_post("/messages", send_handler)
        return app

    async def _start_web_server(self) -> None:
        """Start the web server."""
        if not self.settings:
            raise RuntimeError("Settings not initialized")

        self._web_app = await self._create_web_app()
        self._web_runner = web.AppRunner(self._web_app)
        await self._web_runner.setup()

        site = web.TCPSite(
            self._web_runner, self.settings.health_host, self.settings.health_port
        )
        await site.start()
        logger.info(
            "Health check server started on "
            f"http://{self.settings.health_host}:{self.settings.health_port}"
        )

    async def _stop_web_server(self) -> None:
        """Stop the web server."""
        if self._web_runner:
            await self._web_runner.cleanup()
            self._web_runner = None
            logger.info("Health check server stopped")


async def main() -> None:
    """Main entry point for standalone mode."""
    app = StandaloneApp()

    try:
        app.setup_signal_handlers()
        await app.initialize()
        await app.start()

    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
    except Exception as e:
        logger.error(f"Application failed: {e}")
        await app.stop()
        sys.exit(1)

    await app.stop()
    logger.info("Application shutdown complete")


if __name__ == "__main__":
    asyncio.run(main())
