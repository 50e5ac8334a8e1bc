"""Instances: leased handles bundling discovery, platforms and identification."""

from __future__ import annotations

import itertools
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger

from boardwatch.discovery import DiscoveryManager, MockDiscovery, SerialDiscovery
from boardwatch.errors import InvalidInstanceError
from boardwatch.identify import BoardIdentifier, LocalBoardLookup, RemoteBoardLookup
from boardwatch.platforms import SignatureDatabase
from boardwatch.utils.helpers import expand_path

if TYPE_CHECKING:
    from boardwatch.config.schema import Config


@dataclass(slots=True)
class BoardExplorer:
    """Handle giving access to the discovery manager and board identifier."""

    discovery: DiscoveryManager
    identifier: BoardIdentifier
    database: SignatureDatabase
    watch_queue_size: int = 1


class InstanceRegistry:
    """Tracks live instances and hands out leased explorers."""

    def __init__(self) -> None:
        self._instances: dict[int, BoardExplorer] = {}
        self._leases: dict[int, int] = {}
        self._ids = itertools.count(1)

    def create(self, explorer: BoardExplorer) -> int:
        instance_id = next(self._ids)
        self._instances[instance_id] = explorer
        self._leases[instance_id] = 0
        logger.info(f"Instance {instance_id} created")
        return instance_id

    def acquire(self, instance_id: int) -> tuple[BoardExplorer | None, Callable[[], None]]:
        """Lease an explorer. The release callback must be called exactly once."""
        explorer = self._instances.get(instance_id)
        if explorer is None:
            return None, _noop
        self._leases[instance_id] += 1
        released = False

        def release() -> None:
            nonlocal released
            if released:
                return
            released = True
            if instance_id in self._leases:
                self._leases[instance_id] -= 1

        return explorer, release

    @contextmanager
    def lease(self, instance_id: int) -> Iterator[BoardExplorer]:
        explorer, release = self.acquire(instance_id)
        if explorer is None:
            raise InvalidInstanceError()
        try:
            yield explorer
        finally:
            release()

    def active_leases(self, instance_id: int) -> int:
        return self._leases.get(instance_id, 0)

    async def destroy(self, instance_id: int) -> None:
        explorer = self._instances.pop(instance_id, None)
        self._leases.pop(instance_id, None)
        if explorer is None:
            raise InvalidInstanceError()
        await explorer.discovery.stop()
        logger.info(f"Instance {instance_id} destroyed")


def _noop() -> None:
    return None


def create_instance(config: "Config") -> BoardExplorer:
    """Build an explorer from configuration."""
    backends = []
    for name in config.discovery.backends:
        kind = str(name or "").strip().lower()
        if kind == "serial":
            backends.append(SerialDiscovery(poll_interval_ms=config.discovery.serial_poll_interval_ms))
        elif kind == "mock":
            backends.append(MockDiscovery())
        else:
            raise ValueError(f"Unsupported discovery backend: {name}")

    database = SignatureDatabase.from_file(expand_path(config.platforms.database_path))
    remote = RemoteBoardLookup(
        base_url=config.lookup.base_url,
        timeout_seconds=config.lookup.timeout_seconds,
        user_agent=config.lookup.user_agent,
    )
    return BoardExplorer(
        discovery=DiscoveryManager(backends),
        identifier=BoardIdentifier(local=LocalBoardLookup(database), remote=remote),
        database=database,
        watch_queue_size=max(1, int(config.board_list.watch_queue_size)),
    )
