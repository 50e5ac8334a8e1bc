"""Board listing: one-shot snapshot and live connection events."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from boardwatch.discovery.port import Port, PortEventType
from boardwatch.errors import DiscoveryStartError, InvalidInstanceError, UnavailableError
from boardwatch.identify.candidates import BoardCandidate
from boardwatch.instance import InstanceRegistry

_CLOSED = object()


@dataclass(slots=True)
class BoardListRequest:
    instance_id: int
    timeout_ms: int = 1000


@dataclass(slots=True)
class BoardListWatchRequest:
    instance_id: int


@dataclass(slots=True)
class DetectedPort:
    """A port and the boards that may be connected to it (possibly none)."""

    port: Port
    matching_boards: list[BoardCandidate] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "port": self.port.to_dict(),
            "matching_boards": [b.to_dict() for b in self.matching_boards],
        }


@dataclass(slots=True)
class BoardListWatchResponse:
    """One connection/disconnection event; error is set when identification failed."""

    event_type: str
    port: DetectedPort
    error: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_type": self.event_type,
            "port": self.port.to_dict(),
            "error": self.error,
        }


async def list_boards(
    registry: InstanceRegistry,
    request: BoardListRequest,
) -> tuple[list[DetectedPort], list[DiscoveryStartError]]:
    """List ports visible after the grace period, with their matching boards.

    Backends that fail to start are returned alongside the result. An
    identification failure on any port aborts the whole listing; the raised
    error carries the start failures in `discovery_errors`.
    """
    with registry.lease(request.instance_id) as explorer:
        discovery = explorer.discovery
        start_errors = await discovery.start()
        await asyncio.sleep(max(0, int(request.timeout_ms)) / 1000)

        detected: list[DetectedPort] = []
        for port in discovery.list_ports():
            try:
                boards = await explorer.identifier.identify(port)
            except UnavailableError as e:
                e.discovery_errors = list(start_errors)
                raise
            # boards may be empty when neither platforms nor the service know the port
            detected.append(DetectedPort(port=port, matching_boards=boards))
        return detected, start_errors


class BoardEventStream:
    """Async iterator over watch events; ends once the watch is torn down."""

    def __init__(self, queue: asyncio.Queue) -> None:
        self._queue = queue
        self._closed = False
        self._tasks: list[asyncio.Task] = []

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> "BoardEventStream":
        return self

    async def __anext__(self) -> BoardListWatchResponse:
        if self._closed:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            self._closed = True
            raise StopAsyncIteration
        return item

    async def next_event(self, timeout_s: float = 1.0) -> BoardListWatchResponse:
        """Await the next event; raises StopAsyncIteration when closed."""
        return await asyncio.wait_for(self.__anext__(), timeout=timeout_s)


async def watch_boards(
    registry: InstanceRegistry,
    request: BoardListWatchRequest,
) -> tuple[BoardEventStream, Callable[[], None]]:
    """Stream board connection and disconnection events.

    Returns the event stream and a cancel callback. Cancelling closes the
    discovery subscription; events already taken from it are still delivered
    before the stream ends.
    """
    explorer, release = registry.acquire(request.instance_id)
    if explorer is None:
        raise InvalidInstanceError()
    try:
        watcher = await explorer.discovery.watch()
    except Exception:
        release()
        raise

    done = asyncio.Event()
    out: asyncio.Queue = asyncio.Queue(maxsize=explorer.watch_queue_size)
    stream = BoardEventStream(out)

    async def _propagate_cancel() -> None:
        await done.wait()
        watcher.close()

    async def _translate() -> None:
        try:
            async for event in watcher.feed():
                detected = DetectedPort(port=event.port)
                boards_error = ""
                if event.type == PortEventType.ADD:
                    try:
                        detected.matching_boards = await explorer.identifier.identify(event.port)
                    except Exception as e:
                        logger.debug(f"board identification failed for {event.port.address}: {e}")
                        boards_error = str(e)
                await out.put(
                    BoardListWatchResponse(
                        event_type=str(event.type),
                        port=detected,
                        error=boards_error,
                    )
                )
        finally:
            release()
            if not cancel_task.done():
                cancel_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await cancel_task
            await out.put(_CLOSED)

    cancel_task = asyncio.create_task(_propagate_cancel())
    stream._tasks = [cancel_task, asyncio.create_task(_translate())]
    return stream, done.set
