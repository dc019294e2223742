"""WebSocket control channel between the bridge and the agent process."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.websockets import WebSocketState
from pydantic import ValidationError

from quiz_bridge.core.logging import get_session_stats
from quiz_bridge.core.quiz import EndReason, QuizEngine, QuizError, QuizSession
from quiz_bridge.gateway.protocol import (
    COMMAND_ADAPTER,
    KNOWN_COMMANDS,
    AuthCommand,
    QuizEndCommand,
    QuizStartCommand,
    QuizStatusCommand,
    SendCommand,
)
from quiz_bridge.transport.base import InboundMessage, MessageSender

logger = logging.getLogger(__name__)

CLOSE_AUTH_TIMEOUT = 4001
CLOSE_INVALID_TOKEN = 4003


class BridgeGateway:
    """Accepts agent clients, executes their commands and broadcasts events."""

    def __init__(
        self,
        sender: MessageSender,
        token: str | None = None,
        auth_timeout: float = 5.0,
    ):
        self._sender = sender
        self._token = token
        self._auth_timeout = auth_timeout
        self._quiz: QuizEngine | None = None
        self._clients: set[WebSocket] = set()
        self.transport_status: str = "disconnected"

    def attach_quiz_engine(self, engine: QuizEngine) -> None:
        """Enable quiz commands."""
        self._quiz = engine

    @property
    def client_count(self) -> int:
        return len(self._clients)

    async def handle_connection(self, ws: WebSocket) -> None:
        """Run one client connection until it disconnects."""
        await ws.accept()

        if self._token and not await self._authenticate(ws):
            return

        self._clients.add(ws)
        logger.info("Agent client connected")
        try:
            while True:
                data = await ws.receive_text()
                await self._handle_frame(data, ws)
        except WebSocketDisconnect:
            logger.info("Agent client disconnected")
        finally:
            self._clients.discard(ws)

    async def _authenticate(self, ws: WebSocket) -> bool:
        """Require an auth frame as the first message."""
        try:
            data = await asyncio.wait_for(ws.receive_text(), timeout=self._auth_timeout)
        except asyncio.TimeoutError:
            logger.warning("Agent client auth timed out")
            await ws.close(code=CLOSE_AUTH_TIMEOUT, reason="Auth timeout")
            return False
        except WebSocketDisconnect:
            return False

        try:
            auth = AuthCommand.model_validate(json.loads(data))
        except (ValueError, ValidationError):
            await ws.close(code=CLOSE_INVALID_TOKEN, reason="Invalid auth message")
            return False

        if auth.token != self._token:
            logger.warning("Agent client sent an invalid token")
            await ws.close(code=CLOSE_INVALID_TOKEN, reason="Invalid token")
            return False

        logger.info("Agent client authenticated")
        return True

    async def _handle_frame(self, data: str, ws: WebSocket) -> None:
        try:
            payload = json.loads(data)
            await self.handle_command(payload, ws)
        except WebSocketDisconnect:
            raise
        except Exception as e:
            logger.exception("Error handling command")
            await self._reply(ws, {"type": "error", "error": str(e)})

    async def handle_command(self, payload: Any, ws: WebSocket) -> None:
        """Execute a decoded command frame.

        Unknown command types are ignored. Invalid known commands raise
        ValidationError; transport failures propagate.
        """
        command_type = payload.get("type") if isinstance(payload, dict) else None
        if not isinstance(command_type, str) or command_type not in KNOWN_COMMANDS:
            logger.debug(f"Ignoring command: {payload!r}")
            return

        cmd = COMMAND_ADAPTER.validate_python(payload)
        logger.info(f"CMD: {cmd.type}")
        get_session_stats().increment("commands_handled")

        if isinstance(cmd, SendCommand):
            await self._sender.send_message(cmd.to, cmd.text)
            await self._reply(ws, {"type": "sent", "to": cmd.to})
            return

        if self._quiz is None:
            logger.debug(f"Quiz engine not ready, ignoring {cmd.type}")
            return

        if isinstance(cmd, QuizStartCommand):
            try:
                await self._quiz.start_quiz(
                    cmd.chat_id, cmd.question, cmd.answer, cmd.reply_to_message_id
                )
            except QuizError as e:
                logger.warning(f"Rejected quiz_start: {e}")
                await self._reply(ws, {"type": "error", "error": str(e)})
                return
            await self._reply(ws, {"type": "quiz_started", "success": True})
        elif isinstance(cmd, QuizEndCommand):
            await self._quiz.end_quiz(EndReason.CANCELLED, cmd.chat_id)
            await self._reply(ws, {"type": "quiz_ended", "reason": EndReason.CANCELLED.value})
        elif isinstance(cmd, QuizStatusCommand):
            quiz = self._quiz.get_quiz(cmd.chat_id)
            if cmd.chat_id is not None:
                quizzes = [quiz] if quiz else []
            else:
                quizzes = self._quiz.get_quizzes()
            await self._reply(
                ws,
                {
                    "type": "quiz_status",
                    "active": self._quiz.is_quiz_active(cmd.chat_id),
                    "quiz": quiz.to_dict() if quiz else None,
                    "quizzes": [q.to_dict() for q in quizzes],
                },
            )

    async def _reply(self, ws: WebSocket, event: dict[str, Any]) -> None:
        await ws.send_text(json.dumps(event))

    async def broadcast(self, event: dict[str, Any]) -> None:
        """Send an event to every connected client."""
        data = json.dumps(event)
        for client in list(self._clients):
            if client.client_state != WebSocketState.CONNECTED:
                self._clients.discard(client)
                continue
            try:
                await client.send_text(data)
            except Exception as e:
                logger.warning(f"Dropping client after failed send: {e}")
                self._clients.discard(client)

    async def notify_message(self, message: InboundMessage) -> None:
        await self.broadcast({"type": "message", **message.to_dict()})

    async def notify_status(self, status: str) -> None:
        self.transport_status = status
        await self.broadcast({"type": "status", "status": status})

    async def notify_qr(self, qr: str) -> None:
        await self.broadcast({"type": "qr", "qr": qr})

    async def notify_quiz_started(self, session: QuizSession) -> None:
        await self.broadcast({"type": "quiz_started", "quiz": session.to_dict()})

    async def notify_quiz_ended(self, session: QuizSession, reason: EndReason) -> None:
        await self.broadcast(
            {"type": "quiz_ended", "reason": reason.value, "chatId": session.chat_id}
        )

    def status_snapshot(self) -> dict[str, Any]:
        """Current bridge state for the HTTP status endpoint."""
        quizzes = self._quiz.get_quizzes() if self._quiz else []
        return {
            "transport": self.transport_status,
            "clients": self.client_count,
            "quizzes": [q.to_dict() for q in quizzes],
            "stats": get_session_stats().summary(),
        }

    async def close(self) -> None:
        """Close all client connections."""
        for client in list(self._clients):
            try:
                await client.close()
            except Exception as e:
                logger.debug(f"Error closing client: {e}")
        self._clients.clear()


def create_app(gateway: BridgeGateway) -> FastAPI:
    """Create the control-channel FastAPI app.

    Args:
        gateway: The gateway handling connections and commands.

    Returns:
        A configured FastAPI application.
    """
    app = FastAPI(title="Quiz Bridge")

    @app.websocket("/")
    async def control_channel(websocket: WebSocket):
        """Agent process control channel."""
        await gateway.handle_connection(websocket)

    @app.get("/status")
    async def status():
        """Bridge status as JSON."""
        return gateway.status_snapshot()

    return app
