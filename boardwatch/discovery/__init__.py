"""Port discovery: backends, port records and the discovery manager."""

from boardwatch.discovery.base import DiscoveryBackend
from boardwatch.discovery.manager import DiscoveryManager, PortWatcher
from boardwatch.discovery.mock_discovery import MockDiscovery
from boardwatch.discovery.port import Port, PortEvent, PortEventType
from boardwatch.discovery.serial_discovery import SerialDiscovery

__all__ = [
    "DiscoveryBackend",
    "DiscoveryManager",
    "PortWatcher",
    "MockDiscovery",
    "SerialDiscovery",
    "Port",
    "PortEvent",
    "PortEventType",
]
