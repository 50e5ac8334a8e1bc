"""Backend contract for port discovery integrations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from boardwatch.discovery.port import PortEvent


class DiscoveryBackend(ABC):
    """Abstract discovery contract used by the discovery manager."""

    name: str = "base"
    protocol: str = "unknown"

    @abstractmethod
    async def start(self) -> None:
        """Start backend resources and begin enumerating ports."""

    @abstractmethod
    async def stop(self) -> None:
        """Stop backend resources and end the event stream."""

    @abstractmethod
    async def recv_events(self) -> AsyncIterator[PortEvent]:
        """Yield add/remove events, starting with ports already present."""
