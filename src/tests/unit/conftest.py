#  Tapmouse - open-source remote pointer for the local network.
#  Copyright (c) 2026 Federico Izzi.
#
#  This program is free software: you can redistribute it and/or modify
#  it under the terms of the GNU General Public License as published by
#  the Free Software Foundation, either version 3 of the License, or
#  (at your option) any later version.
#
#  This program is distributed in the hope that it will be useful,
#  but WITHOUT ANY WARRANTY; without even the implied warranty of
#  MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
#  GNU General Public License for more details.
#
#  You should have received a copy of the GNU General Public License
#  along with this program.  If not, see <https://www.gnu.org/licenses/>.
#

import asyncio
import socket
from typing import Callable, Iterable, List, Tuple
from unittest.mock import AsyncMock, MagicMock

import pytest

from config import ApplicationConfig, ClientConfig, ServerConfig
from event.bus import AsyncEventBus, EventBus
from input.mouse import PointerActuator
from model.action import MouseButton
from network.connection.probe import ReachabilityProber
from network.errors import UnreachableHostError


# ============================================================================
# Asyncio Backend Configuration
# ============================================================================


@pytest.fixture(
    params=[
        pytest.param(("asyncio", {"use_uvloop": True}), id="asyncio+uvloop"),
        pytest.param(("asyncio", {"use_uvloop": False}), id="asyncio"),
    ]
)
def anyio_backend(request):
    return request.param


# ============================================================================
# Helpers
# ============================================================================


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    """Poll predicate until it holds or timeout expires."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() >= deadline:
            return False
        await asyncio.sleep(0.01)
    return True


class FakeActuator(PointerActuator):
    """Records every pointer operation instead of performing it."""

    def __init__(self, position: Tuple[int, int] = (0, 0)):
        self.position = position
        self.calls: List[tuple] = []

    def get_position(self) -> Tuple[int, int]:
        return self.position

    def move_to(self, x: int, y: int) -> None:
        self.position = (x, y)
        self.calls.append(("move_to", x, y))

    def press(self, button: MouseButton) -> None:
        self.calls.append(("press", button))

    def release(self, button: MouseButton) -> None:
        self.calls.append(("release", button))

    def click(self, button: MouseButton) -> None:
        self.calls.append(("click", button))


class FakeProber(ReachabilityProber):
    """
    Prober answering from a fixed set of reachable hosts, without touching the network.
    """

    def __init__(
        self,
        reachable: Iterable[str] = (),
        port: int = 6886,
        timeout: float = 0.5,
        delay: float = 0.0,
    ):
        super().__init__(port=port, timeout=timeout)
        self.reachable = set(reachable)
        self.delay = delay
        self.probed: List[str] = []
        self.connections: List[str] = []

    async def probe(self, host: str) -> bool:
        self.probed.append(host)
        if self.delay:
            await asyncio.sleep(self.delay)
        return host in self.reachable

    async def open_connection(self, host: str, port=None):
        self.connections.append(host)
        raise UnreachableHostError(host, port or self.port, "fake")


# ============================================================================
# Directory and Config Fixtures
# ============================================================================


@pytest.fixture
def temp_dir(tmp_path):
    """Provide a temporary directory for tests."""
    return tmp_path


@pytest.fixture
def app_config(temp_dir) -> ApplicationConfig:
    config = ApplicationConfig()
    config.set_save_path(str(temp_dir))
    return config


@pytest.fixture
def server_config(app_config) -> ServerConfig:
    return ServerConfig(app_config)


@pytest.fixture
def client_config(app_config) -> ClientConfig:
    return ClientConfig(app_config)


# ============================================================================
# Network Fixtures
# ============================================================================


@pytest.fixture
def unused_tcp_port() -> int:
    """A local port nobody listens on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def fake_actuator() -> FakeActuator:
    return FakeActuator(position=(100, 200))


# ============================================================================
# Event Bus Fixtures
# ============================================================================


@pytest.fixture
def event_bus() -> AsyncEventBus:
    """Provide a real AsyncEventBus instance for testing."""
    return AsyncEventBus()


@pytest.fixture
def mock_event_bus():
    """Provide a mocked EventBus for unit testing."""
    bus = AsyncMock(spec=EventBus)
    bus.dispatch = AsyncMock()
    bus.dispatch_nowait = MagicMock()
    bus.subscribe = MagicMock()
    bus.unsubscribe = MagicMock()
    return bus
