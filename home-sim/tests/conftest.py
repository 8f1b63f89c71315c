import asyncio
import json
import random
from datetime import datetime

import pytest
from websockets.exceptions import ConnectionClosedOK

from models import AnalyticsWindow, HomeEngine, SceneManager, SystemState, get_simulation_parameters

START = datetime(2024, 6, 1, 12, 0, 0)


@pytest.fixture(autouse=True)
def reset_parameters():
    """The parameter registry is process-wide; every test starts from defaults."""
    params = get_simulation_parameters()
    params.reset()
    yield params
    params.reset()


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def start():
    return START


@pytest.fixture
def state():
    return SystemState()


@pytest.fixture
def analytics():
    return AnalyticsWindow()


@pytest.fixture
def scenes():
    return SceneManager()


@pytest.fixture
def engine(rng, start, scenes, monkeypatch):
    monkeypatch.delenv("SEED", raising=False)
    monkeypatch.delenv("SIMULATION_SPEED", raising=False)
    return HomeEngine(scenes=scenes, rng=rng, start=start)


@pytest.fixture
def quiet_devices(reset_parameters):
    """Devices never raise warnings, so notification counts are exact."""
    reset_parameters.set('device_warning_probability', 0.0)
    return reset_parameters


class FakeConnection:
    """
    In-memory stand-in for a websockets server connection.
    Frames pushed with `feed` are yielded by async iteration; `close`
    ends the iteration. Everything sent is recorded, decoded.
    """

    def __init__(self, remote_address=("127.0.0.1", 50000)):
        self.remote_address = remote_address
        self.sent = []
        self.closed = False
        self._incoming = asyncio.Queue()

    def feed(self, message) -> None:
        self._incoming.put_nowait(message)

    def close(self) -> None:
        self._incoming.put_nowait(None)

    async def send(self, message: str) -> None:
        if self.closed:
            raise ConnectionClosedOK(None, None)
        self.sent.append(json.loads(message))

    def __aiter__(self):
        return self

    async def __anext__(self):
        message = await self._incoming.get()
        if message is None:
            self.closed = True
            raise StopAsyncIteration
        return message

    def of_type(self, message_type: str):
        return [m for m in self.sent if m['type'] == message_type]


async def wait_for(predicate, timeout: float = 2.0):
    """Yield to the loop until predicate() holds."""
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.005)


@pytest.fixture
def fake_connection_factory():
    return FakeConnection
