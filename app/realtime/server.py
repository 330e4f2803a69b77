# app/realtime/server.py

"""
Socket.IO server for live updates and chat presence.

Rooms:
- ``user-{id}``: direct notifications for one user
- ``conversation-{id}``: everyone currently viewing a conversation

Client events: join-user-room, join-conversation, leave-conversation,
test-connection. Route handlers push through ``notify_user`` and
``notify_conversation``.
"""

from datetime import datetime, timezone
from typing import Any, Iterable, Optional

import socketio
from loguru import logger

from app.core.cors import is_origin_allowed
from app.realtime.presence import PresenceRegistry, Registration, UserId

MAX_MESSAGE_BYTES = 1_000_000
PING_TIMEOUT = 60
PING_INTERVAL = 25


def user_room(user_id: UserId) -> str:
    return f"user-{user_id}"


def conversation_room(conversation_id: Any) -> str:
    return f"conversation-{conversation_id}"


class RealtimeServer:
    def __init__(
        self,
        allowed_origins: Iterable[str],
        presence: Optional[PresenceRegistry] = None,
        sio: Optional[socketio.AsyncServer] = None,
    ):
        self.allowed_origins = list(allowed_origins)
        self.presence = presence if presence is not None else PresenceRegistry()
        self.sio = sio or socketio.AsyncServer(
            async_mode="asgi",
            # Engine.IO refuses the handshake for any other Origin
            cors_allowed_origins=self.allowed_origins,
            cors_credentials=True,
            max_http_buffer_size=MAX_MESSAGE_BYTES,
            ping_timeout=PING_TIMEOUT,
            ping_interval=PING_INTERVAL,
            logger=False,
            engineio_logger=False,
        )
        self._register_handlers()

    def _register_handlers(self) -> None:
        self.sio.on("connect", self.on_connect)
        self.sio.on("join-user-room", self.on_join_user_room)
        self.sio.on("join-conversation", self.on_join_conversation)
        self.sio.on("leave-conversation", self.on_leave_conversation)
        self.sio.on("test-connection", self.on_test_connection)
        self.sio.on("disconnect", self.on_disconnect)

    def asgi_app(self, other_asgi_app=None) -> socketio.ASGIApp:
        return socketio.ASGIApp(self.sio, other_asgi_app=other_asgi_app)

    # ------------------------------------------------------------------
    # Client -> server
    # ------------------------------------------------------------------
    async def on_connect(self, sid: str, environ: dict, auth: Any = None):
        origin = environ.get("HTTP_ORIGIN")
        if not is_origin_allowed(origin, self.allowed_origins):
            logger.warning(f"❌ Socket.IO CORS blocked origin: {origin}")
            raise ConnectionRefusedError("Not allowed by CORS")
        logger.info(f"🔌 User connected: {sid}")

    async def on_join_user_room(self, sid: str, user_id: UserId = None):
        if user_id is None or user_id == "":
            logger.warning(f"join-user-room without a user id from {sid}")
            return

        outcome = self.presence.register(user_id, sid)
        if outcome is Registration.RECONNECTED:
            logger.info(f"🔄 User {user_id} reconnecting, socket is now {sid}")
        elif outcome is Registration.UNCHANGED:
            logger.debug(f"User {user_id} already in room with same socket")
        else:
            logger.info(f"👤 New user {user_id} joining room")

        # Always (re)join: a reconnecting socket starts with no rooms, and for a
        # repeat join from the same socket enter_room is a no-op (the registry
        # was left untouched above)
        await self.sio.enter_room(sid, user_room(user_id))

    async def on_join_conversation(self, sid: str, conversation_id: Any = None):
        if conversation_id is None:
            return
        await self.sio.enter_room(sid, conversation_room(conversation_id))
        logger.debug(f"💬 {sid} joined conversation {conversation_id}")

    async def on_leave_conversation(self, sid: str, conversation_id: Any = None):
        if conversation_id is None:
            return
        await self.sio.leave_room(sid, conversation_room(conversation_id))
        logger.debug(f"👋 {sid} left conversation {conversation_id}")

    async def on_test_connection(self, sid: str, data: Any = None):
        logger.debug(f"🧪 Test connection received: {data}")
        await self.sio.emit(
            "test-response",
            {
                "message": "Connection test successful",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
            to=sid,
        )

    async def on_disconnect(self, sid: str, reason: Any = None):
        user_id = self.presence.remove_connection(sid)
        if user_id is not None:
            logger.info(f"🔌 User {user_id} disconnected and cleaned up")

    # ------------------------------------------------------------------
    # Server -> client
    # ------------------------------------------------------------------
    async def notify_user(self, user_id: UserId, event: str, data: Any) -> None:
        await self.sio.emit(event, data, room=user_room(user_id))

    async def notify_conversation(self, conversation_id: Any, event: str, data: Any) -> None:
        await self.sio.emit(event, data, room=conversation_room(conversation_id))
