"""Serial port discovery backed by pyserial enumeration."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from typing import Any

from loguru import logger
from serial.tools import list_ports

from boardwatch.discovery.base import DiscoveryBackend
from boardwatch.discovery.port import Port, PortEvent, PortEventType

_SENTINEL = object()

PortEnumerator = Callable[[], list[Any]]


def port_from_comport(info: Any) -> Port:
    """Map a pyserial ListPortInfo to a Port."""
    properties: dict[str, str] = {}
    vid = getattr(info, "vid", None)
    pid = getattr(info, "pid", None)
    if vid is not None and pid is not None:
        properties["vid"] = f"0x{int(vid):04x}"
        properties["pid"] = f"0x{int(pid):04x}"
    serial_number = getattr(info, "serial_number", None)
    if serial_number:
        properties["serialNumber"] = str(serial_number)
    device = str(info.device)
    return Port(
        address=device,
        protocol="serial",
        label=device,
        protocol_label="Serial Port (USB)" if "vid" in properties else "Serial Port",
        hardware_id=str(serial_number or ""),
        properties=properties,
    )


class SerialDiscovery(DiscoveryBackend):
    """Polls the host's serial ports and reports arrivals and departures."""

    name = "serial"
    protocol = "serial"

    def __init__(
        self,
        *,
        poll_interval_ms: int = 1000,
        enumerator: PortEnumerator | None = None,
    ) -> None:
        self.poll_interval_s = max(50, int(poll_interval_ms)) / 1000
        self._enumerator = enumerator or list_ports.comports
        self._running = False
        self._queue: asyncio.Queue[PortEvent | object] = asyncio.Queue()
        self._known: dict[str, Port] = {}
        self._poll_task: asyncio.Task | None = None

    async def start(self) -> None:
        if self._running:
            return
        # first scan surfaces enumeration failures to the caller
        await self._scan()
        self._running = True
        self._poll_task = asyncio.create_task(self._poll_loop())
        logger.info(f"Serial discovery started, {len(self._known)} port(s) present")

    async def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        if self._poll_task:
            self._poll_task.cancel()
            try:
                await self._poll_task
            except asyncio.CancelledError:
                pass
            self._poll_task = None
        self._known.clear()
        await self._queue.put(_SENTINEL)
        logger.info("Serial discovery stopped")

    async def recv_events(self) -> AsyncIterator[PortEvent]:
        while True:
            event = await self._queue.get()
            if event is _SENTINEL:
                break
            yield event

    async def _poll_loop(self) -> None:
        while self._running:
            await asyncio.sleep(self.poll_interval_s)
            try:
                await self._scan()
            except Exception as e:
                logger.warning(f"serial port scan failed: {e}")

    async def _scan(self) -> None:
        infos = await asyncio.to_thread(self._enumerator)
        current = {port.address: port for port in (port_from_comport(i) for i in infos)}
        for address, port in self._known.items():
            if address not in current:
                await self._queue.put(PortEvent(PortEventType.REMOVE, port, backend=self.name))
        for address, port in current.items():
            if address not in self._known:
                await self._queue.put(PortEvent(PortEventType.ADD, port, backend=self.name))
        self._known = current
