"""
Observer server: WebSocket fan-out of home state snapshots.
"""
import asyncio
import itertools
import json
import logging
from enum import Enum
from typing import Any, Dict, Optional

import websockets
from websockets.exceptions import ConnectionClosed

from interfaces import CommandSource, SimulationEngine
from models import CommandParseError, JsonCommandSource, MessageType, get_simulation_parameters

logger = logging.getLogger("ObserverServer")


class ConnectionState(Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class ObserverSession:
    """
    One connected observer: its transport handle, its tick task and its
    outbox writer. Both tasks are cancelled whenever the session closes.
    """

    _ids = itertools.count(1)

    def __init__(self, connection):
        self.id = f"observer-{next(self._ids)}"
        self.connection = connection
        self.state = ConnectionState.CONNECTING
        self.timer: Optional[asyncio.Task] = None
        self.writer: Optional[asyncio.Task] = None
        self.sent = 0
        self._outbox: asyncio.Queue = asyncio.Queue()

    @property
    def remote_address(self):
        return getattr(self.connection, 'remote_address', None)

    @property
    def is_open(self) -> bool:
        return self.state == ConnectionState.OPEN

    async def send(self, message: Dict[str, Any]) -> bool:
        """Best-effort send. Failures are logged and reported as False."""
        if self.state == ConnectionState.CLOSED:
            return False
        try:
            await self.connection.send(json.dumps(message))
        except (ConnectionClosed, OSError) as e:
            logger.warning(f"Send to {self.id} failed: {e}")
            return False
        self.sent += 1
        return True

    def post(self, message: Dict[str, Any]) -> bool:
        """
        Queue a message for the writer task without waiting on the transport.
        Returns False once the writer has stopped.
        """
        if self.writer is None or self.writer.done():
            return False
        self._outbox.put_nowait(message)
        return True

    async def _drain(self) -> None:
        while True:
            message = await self._outbox.get()
            if not await self.send(message):
                break

    def start_writer(self) -> None:
        self.writer = asyncio.create_task(self._drain())

    def cancel_tasks(self) -> None:
        for task in (self.timer, self.writer):
            if task is not None and not task.done():
                task.cancel()


class BroadcastCoordinator:
    """
    Tracks connected observers and drives their updates.

    Connection lifecycle: CONNECTING -> OPEN -> CLOSED. On open the observer
    gets one INITIAL_STATE and its own periodic tick task; each firing runs
    a simulation tick and sends a STATE_UPDATE. Commands are applied and the
    fresh state is broadcast to every open observer. Malformed frames get a
    single ERROR back and change nothing.
    """

    def __init__(self, engine: SimulationEngine, tick_interval: float = None,
                 command_source: CommandSource = None):
        self._engine = engine
        self._tick_interval = tick_interval
        self._source = command_source or JsonCommandSource()
        self._sessions: Dict[str, ObserverSession] = {}

    @property
    def tick_interval(self) -> float:
        if self._tick_interval is not None:
            return self._tick_interval
        return get_simulation_parameters().get('tick_interval')

    @property
    def observer_count(self) -> int:
        return sum(1 for s in self._sessions.values() if s.is_open)

    @property
    def sessions(self) -> Dict[str, ObserverSession]:
        return dict(self._sessions)

    async def handle_connection(self, connection) -> None:
        """Serve one observer for the lifetime of its connection."""
        session = ObserverSession(connection)
        self._sessions[session.id] = session
        logger.info(f"Observer connected: {session.id} from {session.remote_address}")

        try:
            await self._open(session)
            async for message in connection:
                await self._on_message(session, message)
        except ConnectionClosed:
            logger.info(f"Observer connection dropped: {session.id}")
        except OSError as e:
            logger.warning(f"Transport error on {session.id}: {e}")
        finally:
            self._close(session)

    async def _open(self, session: ObserverSession) -> None:
        session.state = ConnectionState.OPEN
        session.start_writer()
        session.post({
            'type': MessageType.INITIAL_STATE.value,
            'data': self._engine.snapshot().to_dict(),
        })
        session.timer = asyncio.create_task(self._tick_loop(session))

    async def _tick_loop(self, session: ObserverSession) -> None:
        while session.is_open:
            # tick_interval may change while the session is live
            interval = self.tick_interval
            await asyncio.sleep(interval)
            if not session.is_open:
                break
            snapshot = self._engine.tick(interval)
            update = {'type': MessageType.STATE_UPDATE.value, 'data': snapshot.to_dict()}
            if not session.post(update):
                break

    async def _on_message(self, session: ObserverSession, raw) -> None:
        try:
            command = self._source.produce(raw)
        except CommandParseError as e:
            logger.warning(f"Malformed message from {session.id}: {e}")
            session.post({'type': MessageType.ERROR.value, 'error': str(e)})
            return

        try:
            self._engine.handle_command(command)
        except Exception as e:
            logger.error(f"Error handling command from {session.id}: {e}")
            return
        self.broadcast({
            'type': MessageType.STATE_UPDATE.value,
            'data': self._engine.snapshot().to_dict(),
        })

    def broadcast(self, message: Dict[str, Any]) -> int:
        """
        Queue a message for every open observer. Each session's writer
        sends on its own, so a slow observer never holds up the caller.
        Returns how many sessions accepted the message.
        """
        targets = [s for s in self._sessions.values() if s.is_open]
        return sum(1 for s in targets if s.post(message))

    def _close(self, session: ObserverSession) -> None:
        session.state = ConnectionState.CLOSED
        session.cancel_tasks()
        self._sessions.pop(session.id, None)
        logger.info(f"Observer disconnected: {session.id} ({session.sent} messages sent)")

    def shutdown(self) -> None:
        """Stop every tick and writer task. Connections themselves are closed by the server."""
        for session in list(self._sessions.values()):
            self._close(session)


class WebSocketServer:
    """
    Listens for observer connections and hands them to the coordinator.
    """

    def __init__(self, coordinator: BroadcastCoordinator, host: str = "0.0.0.0", port: int = 3000):
        self._coordinator = coordinator
        self._host = host
        self._port = port
        self._server = None

    @property
    def port(self) -> int:
        """Bound port (useful when constructed with port 0)."""
        if self._server is not None and self._server.sockets:
            return self._server.sockets[0].getsockname()[1]
        return self._port

    async def start(self) -> None:
        self._server = await websockets.serve(
            self._coordinator.handle_connection,
            self._host,
            self._port,
        )
        logger.info(f"Observer server running on ws://{self._host}:{self.port}")

    async def stop(self) -> None:
        """Stop accepting connections, close open ones, cancel tick tasks."""
        if self._server is None:
            return
        self._server.close()
        await self._server.wait_closed()
        self._coordinator.shutdown()
        self._server = None
        logger.info("Observer server stopped")
