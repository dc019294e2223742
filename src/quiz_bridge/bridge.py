"""Bridge tying the transport, router, quiz engine and gateway together."""

import asyncio
import contextlib
import logging
from typing import Any

import uvicorn

from quiz_bridge.config import Config
from quiz_bridge.core import (
    IdentityResolver,
    MentionFilter,
    MessageRouter,
    QuizEngine,
    Route,
)
from quiz_bridge.core.logging import get_session_stats
from quiz_bridge.gateway import BridgeGateway, create_app
from quiz_bridge.transport import (
    RawMessage,
    Transport,
    extract_content,
    parse_upsert,
    to_inbound,
)

logger = logging.getLogger(__name__)

# How often to log session stats (every N messages)
STATS_LOG_INTERVAL = 50


class Bridge:
    """Processes transport events and serves the control channel."""

    def __init__(self, config: Config, transport: Transport):
        """Initialize the bridge with all components.

        Args:
            config: Application configuration
            transport: Connected-or-connectable messaging transport
        """
        self._config = config
        self._transport = transport

        token = config.gateway.token.get_secret_value() if config.gateway.token else None
        self.gateway = BridgeGateway(
            transport,
            token=token,
            auth_timeout=config.gateway.auth_timeout_seconds,
        )
        self.quiz = QuizEngine(
            transport,
            config.quiz,
            on_quiz_start=self.gateway.notify_quiz_started,
            on_quiz_end=self.gateway.notify_quiz_ended,
        )
        self.gateway.attach_quiz_engine(self.quiz)

        self._resolver = IdentityResolver(lookup=transport.lookup_phone)
        self.router = MessageRouter(
            MentionFilter(self._resolver),
            bot_address=lambda: transport.bot_address,
            on_message=self.gateway.notify_message,
            on_ignored_group_message=self._handle_ignored_group_message,
        )

        self._queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        self._worker: asyncio.Task | None = None
        self._server: uvicorn.Server | None = None

        logger.info("Bridge initialized")

    # TransportListener

    async def on_upsert(self, event: dict[str, Any]) -> None:
        """Queue an inbound event for processing."""
        await self._queue.put(event)

    async def on_status(self, status: str) -> None:
        logger.info(f"Transport status: {status}")
        await self.gateway.notify_status(status)

    async def on_qr(self, qr: str) -> None:
        logger.info("Pairing QR code received")
        await self.gateway.notify_qr(qr)

    async def handle_event(self, event: dict[str, Any]) -> list[Route]:
        """Decode and route every message in one upsert event."""
        routes: list[Route] = []
        stats = get_session_stats()
        for raw in parse_upsert(event):
            stats.increment("messages_received")
            if stats.messages_received % STATS_LOG_INTERVAL == 0:
                logger.info(f"SESSION_STATS: {stats.summary_line()}")

            content = extract_content(raw.message)
            if content is None:
                stats.increment("messages_dropped")
                logger.debug(f"Dropping message {raw.key.id} with no content")
                continue

            logger.info(f"MSG_RECEIVED: {raw.chat_id}: {content}")
            routes.append(await self.router.route(to_inbound(raw, content), raw))
        return routes

    async def _handle_ignored_group_message(self, raw: RawMessage) -> None:
        """Check an unmentioned group message as a quiz answer."""
        content = extract_content(raw.message, annotate=False)
        if not content:
            return
        await self.quiz.check_answer(raw.chat_id, content, raw.key)

    async def _process_events(self) -> None:
        """Drain the event queue, one event at a time."""
        while True:
            event = await self._queue.get()
            try:
                await self.handle_event(event)
            except Exception:
                logger.exception("Error handling inbound event")
            finally:
                self._queue.task_done()

    async def start(self) -> None:
        """Serve the control channel and connect the transport."""
        cfg = self._config.gateway
        app = create_app(self.gateway)
        server_config = uvicorn.Config(app, host=cfg.host, port=cfg.port, log_level="warning")
        self._server = uvicorn.Server(server_config)
        server_task = asyncio.create_task(self._server.serve())
        logger.info(f"Bridge server listening on ws://{cfg.host}:{cfg.port}")
        if cfg.token:
            logger.info("Token authentication enabled")

        self._worker = asyncio.create_task(self._process_events())

        try:
            logger.info("Connecting transport...")
            await self._transport.connect(self)
            await server_task
        finally:
            await self.stop()
            if not server_task.done():
                await server_task

    async def stop(self) -> None:
        """Disconnect clients and the transport."""
        await self.gateway.close()

        if self._worker is not None:
            worker, self._worker = self._worker, None
            worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await worker

        if self._server is not None:
            self._server.should_exit = True
            self._server = None

        await self._transport.disconnect()
        logger.info("Bridge stopped")
