"""In-memory discovery used for local simulation and tests."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Iterable
from typing import Any

from boardwatch.discovery.base import DiscoveryBackend
from boardwatch.discovery.port import Port, PortEvent, PortEventType

_SENTINEL = object()


class MockDiscovery(DiscoveryBackend):
    """Queue-backed discovery that can be fed by tests or debug commands."""

    protocol = "mock"

    def __init__(
        self,
        name: str = "mock",
        *,
        ports: Iterable[Port | dict[str, Any]] = (),
        start_error: Exception | None = None,
    ) -> None:
        self.name = name
        self.start_error = start_error
        self.start_calls = 0
        self._initial = [p if isinstance(p, Port) else Port.from_dict(p) for p in ports]
        self._running = False
        self._inbound: asyncio.Queue[PortEvent | object] = asyncio.Queue()

    async def start(self) -> None:
        self.start_calls += 1
        if self.start_error is not None:
            raise self.start_error
        self._running = True
        for port in self._initial:
            await self._inbound.put(PortEvent(PortEventType.ADD, port, backend=self.name))

    async def stop(self) -> None:
        self._running = False
        await self._inbound.put(_SENTINEL)

    async def recv_events(self) -> AsyncIterator[PortEvent]:
        while self._running:
            event = await self._inbound.get()
            if event is _SENTINEL:
                break
            yield event

    async def add_port(self, port: Port | dict[str, Any]) -> Port:
        """Inject a port arrival."""
        value = port if isinstance(port, Port) else Port.from_dict(port)
        await self._inbound.put(PortEvent(PortEventType.ADD, value, backend=self.name))
        return value

    async def remove_port(self, port: Port | dict[str, Any]) -> Port:
        """Inject a port departure."""
        value = port if isinstance(port, Port) else Port.from_dict(port)
        await self._inbound.put(PortEvent(PortEventType.REMOVE, value, backend=self.name))
        return value
