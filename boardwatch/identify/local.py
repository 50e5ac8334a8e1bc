"""Board identification against installed platforms."""

from __future__ import annotations

from typing import Any

from boardwatch.identify.candidates import RankedCandidate


class LocalBoardLookup:
    """Wraps a signature database's matches into ranking candidates."""

    def __init__(self, database: Any) -> None:
        self.database = database

    def identify(self, properties: dict[str, str]) -> list[RankedCandidate]:
        return [
            RankedCandidate(
                name=board.name,
                fqbn=board.fqbn,
                maintainer=board.platform.maintainer,
            )
            for board in self.database.identify_board(properties)
        ]
