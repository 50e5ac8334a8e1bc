"""Installed platform signature database used for local board identification."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger


@dataclass(slots=True)
class Platform:
    """An installed platform package and who maintains it."""

    id: str
    maintainer: str = ""
    name: str = ""
    boards: list["BoardDefinition"] = field(default_factory=list)


@dataclass(slots=True)
class BoardDefinition:
    """One board declared by a platform, with its identification signatures."""

    id: str
    name: str
    platform: Platform
    identification: list[dict[str, str]] = field(default_factory=list)

    @property
    def fqbn(self) -> str:
        return f"{self.platform.id}:{self.id}"

    def matches(self, properties: dict[str, str]) -> bool:
        """True when any identification set is contained in the property bag."""
        for signature in self.identification:
            if not signature:
                continue
            if all(
                key in properties and properties[key].lower() == value.lower()
                for key, value in signature.items()
            ):
                return True
        return False


class SignatureDatabase:
    """Known hardware signatures grouped by installed platform."""

    def __init__(self, platforms: list[Platform] | None = None) -> None:
        self.platforms: list[Platform] = list(platforms or [])

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SignatureDatabase":
        raw_platforms = data.get("platforms", [])
        if not isinstance(raw_platforms, list):
            raise ValueError("platforms must be a list")
        platforms: list[Platform] = []
        for raw in raw_platforms:
            platform_id = str(raw.get("id") or "").strip()
            if not platform_id:
                raise ValueError("platform id is required")
            platform = Platform(
                id=platform_id,
                maintainer=str(raw.get("maintainer") or ""),
                name=str(raw.get("name") or ""),
            )
            for board in raw.get("boards", []):
                board_id = str(board.get("id") or "").strip()
                if not board_id:
                    raise ValueError(f"board id is required in platform {platform_id}")
                signatures = [
                    {str(k): str(v) for k, v in sig.items()}
                    for sig in board.get("identification", [])
                    if isinstance(sig, dict)
                ]
                platform.boards.append(
                    BoardDefinition(
                        id=board_id,
                        name=str(board.get("name") or board_id),
                        platform=platform,
                        identification=signatures,
                    )
                )
            platforms.append(platform)
        return cls(platforms)

    @classmethod
    def from_file(cls, path: Path) -> "SignatureDatabase":
        """Load the database from JSON; a missing file yields an empty database."""
        if not path.exists():
            logger.debug(f"No platform database at {path}, local identification disabled")
            return cls()
        with path.open() as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{path} must be a JSON object")
        db = cls.from_dict(data)
        logger.debug(f"Loaded {len(db.platforms)} platform(s) from {path}")
        return db

    def identify_board(self, properties: dict[str, str]) -> list[BoardDefinition]:
        """Return every installed board whose signature matches the properties."""
        return [
            board
            for platform in self.platforms
            for board in platform.boards
            if board.matches(properties)
        ]
