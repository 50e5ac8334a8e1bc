"""Board identification through the remote VID/PID lookup service."""

from __future__ import annotations

import re

import httpx
from loguru import logger

from boardwatch.errors import (
    BoardNotFoundError,
    InvalidArgumentError,
    MalformedResponseError,
    TransportError,
    UpstreamError,
)
from boardwatch.identify.candidates import RankedCandidate

DEFAULT_LOOKUP_URL = "https://builder.arduino.cc/v3/boards/byVidPid"

_VID_PID_RE = re.compile(r"0[xX][0-9a-fA-F]{4}")


def is_valid_usb_id(value: str) -> bool:
    """Whole-value match only; extra digits such as `0x23415` are rejected."""
    return bool(_VID_PID_RE.fullmatch(str(value or "")))


class RemoteBoardLookup:
    """Resolves a USB VID/PID pair to at most one board."""

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_LOOKUP_URL,
        timeout_seconds: float = 10.0,
        user_agent: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = str(base_url or DEFAULT_LOOKUP_URL).rstrip("/")
        self.timeout_seconds = max(0.2, float(timeout_seconds))
        self.user_agent = str(user_agent or "").strip()
        self._transport = transport

    async def by_vid_pid(self, vid: str, pid: str) -> list[RankedCandidate]:
        """Query the service; raises BoardNotFoundError when it has no match."""
        if not is_valid_usb_id(vid):
            raise InvalidArgumentError(f"Invalid vid value: '{vid}'")
        if not is_valid_usb_id(pid):
            raise InvalidArgumentError(f"Invalid pid value: '{pid}'")

        url = f"{self.base_url}/{vid}/{pid}"
        headers = {"Content-Type": "application/json"}
        if self.user_agent:
            headers["User-Agent"] = self.user_agent

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(url, headers=headers)
        except httpx.HTTPError as e:
            raise TransportError(f"error querying board lookup service: {e}") from e

        if response.status_code >= 400:
            if response.status_code == 404:
                raise BoardNotFoundError()
            logger.debug(f"lookup {url} failed with status {response.status_code}")
            raise UpstreamError(response.status_code, response.reason_phrase)

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"error processing response from server: {e}") from e

        name = data.get("name") if isinstance(data, dict) else None
        fqbn = data.get("fqbn") if isinstance(data, dict) else None
        if not isinstance(name, str) or not isinstance(fqbn, str):
            raise MalformedResponseError("wrong format in server response")
        return [RankedCandidate(name=name, fqbn=fqbn)]
