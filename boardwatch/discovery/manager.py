"""Discovery manager fanning backend events out to snapshots and watchers."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator, Iterable

from loguru import logger

from boardwatch.discovery.base import DiscoveryBackend
from boardwatch.discovery.port import Port, PortEvent, PortEventType
from boardwatch.errors import DiscoveryStartError

_SENTINEL = object()


class PortWatcher:
    """Subscription to the manager's port events."""

    def __init__(self, manager: "DiscoveryManager") -> None:
        self._manager = manager
        self._queue: asyncio.Queue[PortEvent | object] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def push(self, event: PortEvent) -> None:
        if not self._closed:
            self._queue.put_nowait(event)

    async def feed(self) -> AsyncIterator[PortEvent]:
        """Yield events until the watcher is closed and drained."""
        while True:
            event = await self._queue.get()
            if event is _SENTINEL:
                break
            yield event

    def close(self) -> None:
        """Stop receiving events; already queued events are still fed."""
        if self._closed:
            return
        self._closed = True
        self._manager._detach(self)
        self._queue.put_nowait(_SENTINEL)


class DiscoveryManager:
    """Runs a set of discovery backends and keeps a cache of visible ports."""

    def __init__(self, backends: Iterable[DiscoveryBackend] = ()) -> None:
        self._backends: dict[str, DiscoveryBackend] = {}
        self._started: set[str] = set()
        self._tasks: dict[str, asyncio.Task] = {}
        self._ports: dict[str, dict[tuple[str, str], Port]] = {}
        self._watchers: set[PortWatcher] = set()
        self._lock = asyncio.Lock()
        for backend in backends:
            self.add(backend)

    def add(self, backend: DiscoveryBackend) -> None:
        if backend.name in self._backends:
            raise ValueError(f"discovery {backend.name} already registered")
        self._backends[backend.name] = backend

    @property
    def backend_names(self) -> list[str]:
        return list(self._backends)

    def is_started(self, name: str) -> bool:
        return name in self._started

    async def start(self) -> list[DiscoveryStartError]:
        """Start every backend not yet running, collecting start failures."""
        errors: list[DiscoveryStartError] = []
        async with self._lock:
            for name, backend in self._backends.items():
                if name in self._started:
                    continue
                try:
                    await backend.start()
                except Exception as e:
                    logger.warning(f"discovery {name} failed to start: {e}")
                    errors.append(DiscoveryStartError(name, e))
                    continue
                self._started.add(name)
                self._ports[name] = {}
                self._tasks[name] = asyncio.create_task(self._consume(backend))
                logger.debug(f"discovery {name} started")
        return errors

    def list_ports(self) -> list[Port]:
        """Snapshot of all ports currently visible to running backends."""
        ports: list[Port] = []
        for name in self._backends:
            ports.extend(self._ports.get(name, {}).values())
        return ports

    async def watch(self) -> PortWatcher:
        """Open a subscription; known ports are replayed as add events first."""
        await self.start()
        watcher = PortWatcher(self)
        for name in self._backends:
            for port in self._ports.get(name, {}).values():
                watcher.push(PortEvent(PortEventType.ADD, port, backend=name))
        self._watchers.add(watcher)
        return watcher

    async def stop(self) -> None:
        async with self._lock:
            for name in list(self._started):
                try:
                    await self._backends[name].stop()
                except Exception as e:
                    logger.warning(f"discovery {name} failed to stop: {e}")
            for task in self._tasks.values():
                task.cancel()
            for task in self._tasks.values():
                with contextlib.suppress(asyncio.CancelledError):
                    await task
            self._tasks.clear()
            self._started.clear()
            self._ports.clear()
        for watcher in list(self._watchers):
            watcher.close()
        logger.info("Discovery manager stopped")

    async def _consume(self, backend: DiscoveryBackend) -> None:
        try:
            async for event in backend.recv_events():
                self._apply(backend.name, event)
        except Exception as e:
            logger.warning(f"discovery {backend.name} event stream failed: {e}")
        finally:
            self._ports.pop(backend.name, None)

    def _apply(self, name: str, event: PortEvent) -> None:
        cache = self._ports.setdefault(name, {})
        if event.type == PortEventType.ADD:
            cache[event.port.key] = event.port
        elif event.type == PortEventType.REMOVE:
            cache.pop(event.port.key, None)
        else:
            logger.debug(f"Unsupported port event type from {name}: {event.type}")
            return
        event.backend = name
        for watcher in list(self._watchers):
            watcher.push(event)

    def _detach(self, watcher: PortWatcher) -> None:
        self._watchers.discard(watcher)
