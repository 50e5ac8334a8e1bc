"""Board candidate records: the public view and the ranking view."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

ARDUINO_MAINTAINER = "Arduino"


@dataclass(slots=True, frozen=True)
class BoardCandidate:
    """A board proposed as a match for a port."""

    name: str
    fqbn: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "fqbn": self.fqbn}


@dataclass(slots=True, frozen=True)
class RankedCandidate:
    """Candidate carrying the platform maintainer, used only while ranking."""

    name: str
    fqbn: str
    maintainer: str = ""

    @property
    def first_party(self) -> bool:
        return self.maintainer == ARDUINO_MAINTAINER

    def to_candidate(self) -> BoardCandidate:
        return BoardCandidate(name=self.name, fqbn=self.fqbn)


def rank_candidates(candidates: list[RankedCandidate]) -> list[BoardCandidate]:
    """Order by FQBN (case-insensitive), then move first-party boards ahead.

    The second sort is stable, so each group keeps its alphabetical order.
    """
    ordered = sorted(candidates, key=lambda c: c.fqbn.lower())
    ordered.sort(key=lambda c: not c.first_party)
    return [c.to_candidate() for c in ordered]
