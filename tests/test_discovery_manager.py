import asyncio
from types import SimpleNamespace

import pytest

from boardwatch.discovery import (
    DiscoveryManager,
    MockDiscovery,
    Port,
    PortEventType,
    SerialDiscovery,
)
from boardwatch.discovery.serial_discovery import port_from_comport


def _port(address: str, **properties: str) -> Port:
    return Port(address=address, protocol="serial", label=address, properties=dict(properties))


@pytest.mark.asyncio
async def test_start_collects_backend_failures_and_retries_them() -> None:
    ok = MockDiscovery("ok", ports=[_port("/dev/ttyS0")])
    broken = MockDiscovery("broken", start_error=OSError("permission denied"))
    manager = DiscoveryManager([ok, broken])

    first = await manager.start()
    second = await manager.start()

    assert [e.backend for e in first] == ["broken"]
    assert isinstance(first[0].cause, OSError)
    assert [e.backend for e in second] == ["broken"]
    assert ok.start_calls == 1
    assert broken.start_calls == 2
    assert manager.is_started("ok")
    assert not manager.is_started("broken")
    await manager.stop()


@pytest.mark.asyncio
async def test_list_ports_tracks_add_and_remove() -> None:
    backend = MockDiscovery(ports=[_port("/dev/ttyS0"), _port("/dev/ttyS1")])
    manager = DiscoveryManager([backend])
    await manager.start()
    await asyncio.sleep(0.02)

    assert [p.address for p in manager.list_ports()] == ["/dev/ttyS0", "/dev/ttyS1"]

    await backend.remove_port(_port("/dev/ttyS0"))
    await asyncio.sleep(0.02)

    assert [p.address for p in manager.list_ports()] == ["/dev/ttyS1"]
    await manager.stop()
    assert manager.list_ports() == []


@pytest.mark.asyncio
async def test_duplicate_backend_name_rejected() -> None:
    manager = DiscoveryManager([MockDiscovery("dup")])
    with pytest.raises(ValueError):
        manager.add(MockDiscovery("dup"))


@pytest.mark.asyncio
async def test_watch_replays_known_ports_then_streams_live_events() -> None:
    backend = MockDiscovery(ports=[_port("/dev/ttyS0")])
    manager = DiscoveryManager([backend])
    await manager.start()
    await asyncio.sleep(0.02)

    watcher = await manager.watch()
    await backend.add_port(_port("/dev/ttyS1"))
    await asyncio.sleep(0.02)
    watcher.close()

    events = [event async for event in watcher.feed()]

    assert [(e.type, e.port.address) for e in events] == [
        (PortEventType.ADD, "/dev/ttyS0"),
        (PortEventType.ADD, "/dev/ttyS1"),
    ]
    assert events[0].backend == "mock"
    await manager.stop()


@pytest.mark.asyncio
async def test_closed_watcher_stops_receiving() -> None:
    backend = MockDiscovery()
    manager = DiscoveryManager([backend])
    watcher = await manager.watch()
    watcher.close()
    watcher.close()

    await backend.add_port(_port("/dev/ttyS9"))
    await asyncio.sleep(0.02)

    events = [event async for event in watcher.feed()]
    assert events == []
    assert watcher.closed is True
    await manager.stop()


def test_port_from_comport_maps_usb_identifiers() -> None:
    info = SimpleNamespace(device="/dev/ttyACM0", vid=0x2341, pid=0x43, serial_number="75830333")

    port = port_from_comport(info)

    assert port.address == "/dev/ttyACM0"
    assert port.protocol == "serial"
    assert port.protocol_label == "Serial Port (USB)"
    assert port.properties == {"vid": "0x2341", "pid": "0x0043", "serialNumber": "75830333"}
    assert port.is_usb()


def test_port_from_comport_without_usb_identifiers() -> None:
    info = SimpleNamespace(device="/dev/ttyS0", vid=None, pid=None, serial_number=None)

    port = port_from_comport(info)

    assert port.properties == {}
    assert port.protocol_label == "Serial Port"
    assert not port.is_usb()


@pytest.mark.asyncio
async def test_serial_discovery_reports_arrivals_and_departures() -> None:
    acm = SimpleNamespace(device="/dev/ttyACM0", vid=0x2341, pid=0x43, serial_number="1")
    usb = SimpleNamespace(device="/dev/ttyUSB0", vid=0x1A86, pid=0x7523, serial_number=None)
    scans = [[acm], [acm, usb], [usb]]
    state = {"n": 0}

    def _enumerate():  # type: ignore[no-untyped-def]
        idx = min(state["n"], len(scans) - 1)
        state["n"] += 1
        return scans[idx]

    backend = SerialDiscovery(poll_interval_ms=50, enumerator=_enumerate)
    manager = DiscoveryManager([backend])
    watcher = await manager.watch()

    events = []
    async def _collect() -> None:
        async for event in watcher.feed():
            events.append((event.type, event.port.address))
            if len(events) == 3:
                return

    await asyncio.wait_for(_collect(), timeout=2.0)
    await manager.stop()

    assert events == [
        (PortEventType.ADD, "/dev/ttyACM0"),
        (PortEventType.ADD, "/dev/ttyUSB0"),
        (PortEventType.REMOVE, "/dev/ttyACM0"),
    ]


@pytest.mark.asyncio
async def test_serial_discovery_start_failure_is_reported() -> None:
    def _enumerate():  # type: ignore[no-untyped-def]
        raise OSError("no sysfs")

    manager = DiscoveryManager([SerialDiscovery(enumerator=_enumerate)])

    errors = await manager.start()

    assert [e.backend for e in errors] == ["serial"]
    assert manager.list_ports() == []


class _FailingStream(MockDiscovery):
    async def recv_events(self):  # type: ignore[no-untyped-def]
        async for event in super().recv_events():
            yield event
            raise RuntimeError("device tree vanished")


@pytest.mark.asyncio
async def test_failing_backend_stream_drops_its_ports() -> None:
    backend = _FailingStream("flaky", ports=[_port("/dev/ttyS0")])
    manager = DiscoveryManager([backend])
    await manager.start()
    await asyncio.sleep(0.02)

    assert manager.list_ports() == []
    await manager.stop()
