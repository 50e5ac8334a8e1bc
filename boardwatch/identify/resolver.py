"""Combines local and remote lookups into a ranked list of boards per port."""

from __future__ import annotations

from loguru import logger

from boardwatch.discovery.port import Port
from boardwatch.errors import BoardNotFoundError, UnavailableError
from boardwatch.identify.candidates import BoardCandidate, RankedCandidate, rank_candidates
from boardwatch.identify.local import LocalBoardLookup
from boardwatch.identify.remote import RemoteBoardLookup


class BoardIdentifier:
    """Identifies the boards that may be behind a port.

    Installed platforms are consulted first. The remote service is only asked
    when nothing local matches and the port carries USB identifiers. A remote
    "not found" yields an empty list; any other remote failure is raised as
    UnavailableError.
    """

    def __init__(self, *, local: LocalBoardLookup, remote: RemoteBoardLookup) -> None:
        self.local = local
        self.remote = remote

    async def identify(self, port: Port) -> list[BoardCandidate]:
        logger.debug("Querying installed platforms for board identification...")
        candidates = self.local.identify(port.properties)

        if not candidates:
            try:
                candidates = await self._identify_remote(port)
            except BoardNotFoundError:
                logger.debug("Board not recognized")
                candidates = []
            except Exception as e:
                logger.debug(f"remote board lookup failed for {port.address}: {e}")
                raise UnavailableError("Error getting board info from the board lookup service") from e

        return rank_candidates(candidates)

    async def _identify_remote(self, port: Port) -> list[RankedCandidate]:
        # non-USB ports are never sent to the lookup service
        if not port.is_usb():
            raise BoardNotFoundError()
        logger.debug("Querying board lookup service for board identification...")
        return await self.remote.by_vid_pid(port.properties["vid"], port.properties["pid"])
