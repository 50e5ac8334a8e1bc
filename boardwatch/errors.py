"""Error types raised by board identification and listing."""

from __future__ import annotations


class BoardWatchError(Exception):
    """Base class for all boardwatch errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class InvalidArgumentError(BoardWatchError, ValueError):
    """A request argument failed validation before any I/O happened."""


class BoardNotFoundError(BoardWatchError):
    """The lookup service does not know the requested board."""

    def __init__(self) -> None:
        super().__init__("board not found")


class MalformedResponseError(BoardWatchError):
    """The lookup service answered with an unexpected payload."""


class UpstreamError(BoardWatchError):
    """The lookup service answered with a failure status."""

    def __init__(self, status_code: int, reason: str = "") -> None:
        status = f"{status_code} {reason}".strip()
        super().__init__(f"the server responded with status {status}")
        self.status_code = status_code
        self.status = status


class TransportError(BoardWatchError):
    """The lookup service could not be reached."""


class UnavailableError(BoardWatchError):
    """Board identification could not complete."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.discovery_errors: list[DiscoveryStartError] = []


class InvalidInstanceError(BoardWatchError):
    """No usable instance exists for the request."""

    def __init__(self, message: str = "Invalid instance") -> None:
        super().__init__(message)


class DiscoveryStartError(BoardWatchError):
    """One discovery backend failed to start."""

    def __init__(self, backend: str, cause: BaseException) -> None:
        super().__init__(f"discovery {backend} failed to start: {cause}")
        self.backend = backend
        self.cause = cause
