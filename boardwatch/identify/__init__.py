"""Board identification from installed platforms and the lookup service."""

from boardwatch.identify.candidates import BoardCandidate, RankedCandidate, rank_candidates
from boardwatch.identify.local import LocalBoardLookup
from boardwatch.identify.remote import DEFAULT_LOOKUP_URL, RemoteBoardLookup, is_valid_usb_id
from boardwatch.identify.resolver import BoardIdentifier

__all__ = [
    "BoardCandidate",
    "RankedCandidate",
    "rank_candidates",
    "LocalBoardLookup",
    "RemoteBoardLookup",
    "DEFAULT_LOOKUP_URL",
    "is_valid_usb_id",
    "BoardIdentifier",
]
