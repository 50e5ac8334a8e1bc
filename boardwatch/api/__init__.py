"""Board listing operations."""

from boardwatch.api.board_list import (
    BoardEventStream,
    BoardListRequest,
    BoardListWatchRequest,
    BoardListWatchResponse,
    DetectedPort,
    list_boards,
    watch_boards,
)

__all__ = [
    "BoardEventStream",
    "BoardListRequest",
    "BoardListWatchRequest",
    "BoardListWatchResponse",
    "DetectedPort",
    "list_boards",
    "watch_boards",
]
