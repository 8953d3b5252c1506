"""Session managers for the HTTP transports.

Two transport styles share one MCP server:

- Event-stream (SSE): GET opens a long-lived stream whose first event names
  the POST endpoint (`/sse?sessionId=<id>`); client messages are POSTed there
  and answers flow back over the stream.
- Streamable HTTP: every exchange is a POST/GET/DELETE on `/mcp` carrying the
  `mcp-session-id` header once the session is initialized.

Each manager owns its session map. Entries are added only by the manager and
removed only when the owning transport closes, so a stale identifier can
never resolve to a different session.
"""
import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Awaitable, Callable, Generic, Optional, TypeVar
from uuid import uuid4

import anyio
from anyio.abc import TaskGroup, TaskStatus
from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.streamable_http import MCP_SESSION_ID_HEADER, StreamableHTTPServerTransport
from mcp.shared.message import SessionMessage
from pydantic import ValidationError
from sse_starlette.sse import EventSourceResponse
from starlette.datastructures import Headers
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.types import Message, Receive, Scope, Send

logger = logging.getLogger("jira-mcp.sessions")

SESSION_ID_ALIAS_HEADER = "x-session-id"

TransportT = TypeVar("TransportT")
RunServer = Callable[..., Awaitable[None]]


class SessionManager(ABC, Generic[TransportT]):
    """Common bookkeeping for both HTTP transport styles.

    Instances are ASGI applications.
    """

    transport_name = "session"

    def __init__(self, server: Server):
        self.server = server
        self.sessions: dict[str, TransportT] = {}

    def _register(self, session_id: str, transport: TransportT) -> None:
        self.sessions[session_id] = transport
        logger.info(f"New {self.transport_name} session established: {session_id} (active: {len(self.sessions)})")

    def _unregister(self, session_id: Optional[str], transport: TransportT) -> bool:
        """Remove the entry only if it still points at this transport."""
        if session_id is None or self.sessions.get(session_id) is not transport:
            return False
        del self.sessions[session_id]
        logger.info(f"{self.transport_name} session closed: {session_id} (active: {len(self.sessions)})")
        return True

    def get(self, session_id: str) -> Optional[TransportT]:
        return self.sessions.get(session_id)

    async def _run_server(self, read_stream, write_stream, *, stateless: bool = False) -> None:
        await self.server.run(
            read_stream,
            write_stream,
            self.server.create_initialization_options(),
            stateless=stateless,
        )

    @staticmethod
    async def _reply(scope: Scope, receive: Receive, send: Send, status: int, text: str, **kwargs) -> None:
        await PlainTextResponse(text, status_code=status, **kwargs)(scope, receive, send)

    @abstractmethod
    async def handle_request(self, scope: Scope, receive: Receive, send: Send) -> None:
        ...

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.handle_request(scope, receive, send)


# ============================================================================
# Event-stream (SSE) transport
# ============================================================================

class EventStreamTransport:
    """One SSE connection bridged to a pair of MCP message streams.

    The session id is generated here, at construction, and never changes.
    Framing and keep-alive pings are handled by EventSourceResponse; a
    ping_interval of None uses its default.
    """

    def __init__(self, endpoint: str, ping_interval: Optional[float] = None):
        self.session_id = uuid4().hex
        self.endpoint = endpoint
        self.ping_interval = ping_interval
        self._incoming, self.read_stream = anyio.create_memory_object_stream[SessionMessage | Exception](0)
        self.write_stream, self._outgoing = anyio.create_memory_object_stream[SessionMessage](0)

    @property
    def endpoint_url(self) -> str:
        return f"{self.endpoint}?sessionId={self.session_id}"

    async def _events(self) -> AsyncIterator[dict]:
        yield {"event": "endpoint", "data": self.endpoint_url}
        async with self._outgoing:
            async for session_message in self._outgoing:
                yield {
                    "event": "message",
                    "data": session_message.message.model_dump_json(by_alias=True, exclude_none=True),
                }

    async def _serve(self, run_server: RunServer) -> None:
        try:
            await run_server(self.read_stream, self.write_stream)
        finally:
            # ends the event iterator, and with it the response
            self.write_stream.close()

    async def stream(self, scope: Scope, receive: Receive, send: Send, run_server: RunServer) -> None:
        """Serve the event stream until the client disconnects or the server stops.

        Closing the stream cancels any in-flight handler work for this session.
        """
        response = EventSourceResponse(self._events(), ping=self.ping_interval)
        try:
            async with anyio.create_task_group() as tg:
                tg.start_soon(self._serve, run_server)
                await response(scope, receive, send)
                tg.cancel_scope.cancel()
        finally:
            self.close()
        logger.info(f"SSE stream closed: {self.session_id}")

    async def handle_post(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Accept one client message for this session and hand it to the server."""
        body = await Request(scope, receive).body()
        try:
            message = types.JSONRPCMessage.model_validate_json(body)
        except ValidationError as e:
            logger.warning(f"Could not parse message for session {self.session_id}: {e}")
            await PlainTextResponse("Could not parse message", status_code=400)(scope, receive, send)
            return

        await PlainTextResponse("Accepted", status_code=202)(scope, receive, send)
        try:
            await self._incoming.send(SessionMessage(message))
        except (anyio.ClosedResourceError, anyio.BrokenResourceError):
            logger.warning(f"Dropped message for closed session {self.session_id}")

    def close(self) -> None:
        self._incoming.close()
        self.read_stream.close()
        self.write_stream.close()
        self._outgoing.close()


class EventStreamSessionManager(SessionManager[EventStreamTransport]):
    """Legacy SSE transport: GET opens a session, POST ?sessionId=<id> delivers messages."""

    transport_name = "SSE"

    def __init__(self, server: Server, endpoint: str = "/sse", *, ping_interval: Optional[float] = None):
        super().__init__(server)
        self.endpoint = endpoint
        self.ping_interval = ping_interval

    async def handle_request(self, scope: Scope, receive: Receive, send: Send) -> None:
        method = scope["method"]
        if method == "GET":
            await self._open_stream(scope, receive, send)
        elif method == "POST":
            await self._route_message(scope, receive, send)
        else:
            await self._reply(scope, receive, send, 405, "Method not allowed", headers={"Allow": "GET, POST"})

    async def _open_stream(self, scope: Scope, receive: Receive, send: Send) -> None:
        transport = EventStreamTransport(scope.get("root_path", "") + self.endpoint, self.ping_interval)
        self._register(transport.session_id, transport)
        try:
            await transport.stream(scope, receive, send, self._run_server)
        finally:
            self._unregister(transport.session_id, transport)

    async def _route_message(self, scope: Scope, receive: Receive, send: Send) -> None:
        session_id = Request(scope).query_params.get("sessionId")
        if not session_id:
            logger.error("Missing sessionId in POST request")
            await self._reply(scope, receive, send, 400, "Missing sessionId")
            return

        transport = self.sessions.get(session_id)
        if transport is None:
            logger.error(f"SSE session not found: {session_id}")
            await self._reply(scope, receive, send, 404, "Session not found")
            return

        await transport.handle_post(scope, receive, send)


# ============================================================================
# Streamable HTTP transport
# ============================================================================

@dataclass
class PendingSession:
    """A streamable session between transport creation and initialization."""

    session_id: str
    transport: StreamableHTTPServerTransport
    initialized: anyio.Event = field(default_factory=anyio.Event)


def _response_header(message: Message, name: str) -> Optional[str]:
    wanted = name.encode("latin-1")
    for key, value in message.get("headers", []):
        if key.lower() == wanted:
            return value.decode("latin-1")
    return None


def _with_session_header(scope: Scope, session_id: str) -> Scope:
    """Make sure the SDK transport sees the id under `mcp-session-id`."""
    headers = list(scope.get("headers", []))
    if any(key.lower() == MCP_SESSION_ID_HEADER.encode() for key, _ in headers):
        return scope
    headers.append((MCP_SESSION_ID_HEADER.encode(), session_id.encode("latin-1")))
    return {**scope, "headers": headers}


class StreamableSessionManager(SessionManager[StreamableHTTPServerTransport]):
    """Header-keyed streamable HTTP transport.

    A POST without a session header starts a pending session. It is
    registered the moment its transport answers `initialize` with the
    generated `mcp-session-id`; a request that never initializes is
    terminated and leaves no entry behind.

    run() must be entered (normally from the app lifespan) before requests
    arrive; it owns the task group that serves every session.
    """

    transport_name = "Streamable HTTP"

    def __init__(self, server: Server, *, json_response: bool = False):
        super().__init__(server)
        self.json_response = json_response
        self._task_group: Optional[TaskGroup] = None

    @asynccontextmanager
    async def run(self) -> AsyncIterator[None]:
        if self._task_group is not None:
            raise RuntimeError("StreamableSessionManager is already running")
        async with anyio.create_task_group() as tg:
            self._task_group = tg
            logger.info("Streamable HTTP session manager started")
            try:
                yield
            finally:
                logger.info(f"Streamable HTTP session manager shutting down ({len(self.sessions)} open sessions)")
                tg.cancel_scope.cancel()
                self._task_group = None
                self.sessions.clear()

    async def handle_request(self, scope: Scope, receive: Receive, send: Send) -> None:
        headers = Headers(scope=scope)
        session_id = headers.get(MCP_SESSION_ID_HEADER) or headers.get(SESSION_ID_ALIAS_HEADER)

        if session_id:
            transport = self.sessions.get(session_id)
            if transport is None:
                logger.error(f"Streamable HTTP session not found: {session_id}")
                await self._reply(scope, receive, send, 404, "Session not found")
                return
            await transport.handle_request(_with_session_header(scope, session_id), receive, send)
            return

        if scope["method"] != "POST":
            await self._reply(scope, receive, send, 400, "Invalid request")
            return

        if self._task_group is None:
            logger.error("Streamable HTTP request received before the session manager was started")
            await self._reply(scope, receive, send, 503, "Session manager is not running")
            return

        await self._open_session(scope, receive, send)

    async def _open_session(self, scope: Scope, receive: Receive, send: Send) -> None:
        session_id = uuid4().hex
        pending = PendingSession(
            session_id=session_id,
            transport=StreamableHTTPServerTransport(
                mcp_session_id=session_id,
                is_json_response_enabled=self.json_response,
            ),
        )
        await self._task_group.start(self._serve, pending.transport)
        await pending.transport.handle_request(scope, receive, self._watch_initialization(pending, send))

        if not pending.initialized.is_set():
            logger.info(f"Discarding streamable session {session_id}: request did not initialize")
            await pending.transport.terminate()

    def _watch_initialization(self, pending: PendingSession, send: Send) -> Send:
        """Register the session when the transport confirms initialization.

        Registration happens before the response start is forwarded, so the
        client cannot use the id before the manager knows it.
        """
        async def send_wrapper(message: Message) -> None:
            if (
                message["type"] == "http.response.start"
                and not pending.initialized.is_set()
                and message.get("status") == 200
                and _response_header(message, MCP_SESSION_ID_HEADER) == pending.session_id
            ):
                self._register(pending.session_id, pending.transport)
                pending.initialized.set()
            await send(message)

        return send_wrapper

    async def _serve(
        self,
        transport: StreamableHTTPServerTransport,
        *,
        task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED,
    ) -> None:
        session_id = transport.mcp_session_id
        try:
            async with transport.connect() as (read_stream, write_stream):
                task_status.started()
                await self._run_server(read_stream, write_stream)
        except Exception:
            logger.exception(f"Streamable HTTP session {session_id} crashed")
        finally:
            self._unregister(session_id, transport)
