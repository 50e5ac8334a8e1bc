"""Port and port event records produced by discovery backends."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class PortEventType(StrEnum):
    """Event types emitted by discovery backends."""

    ADD = "add"
    REMOVE = "remove"


@dataclass(slots=True)
class Port:
    """One communication endpoint seen by a discovery backend."""

    address: str
    protocol: str
    label: str = ""
    protocol_label: str = ""
    hardware_id: str = ""
    properties: dict[str, str] = field(default_factory=dict)

    @property
    def key(self) -> tuple[str, str]:
        return (self.protocol, self.address)

    def is_usb(self) -> bool:
        """True when the property bag carries both USB identifiers."""
        return "vid" in self.properties and "pid" in self.properties

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Port":
        address = str(data.get("address") or "").strip()
        protocol = str(data.get("protocol") or "").strip()
        if not address:
            raise ValueError("address is required")
        if not protocol:
            raise ValueError("protocol is required")
        raw_props = data.get("properties") or {}
        if not isinstance(raw_props, dict):
            raise ValueError("properties must be an object")
        return cls(
            address=address,
            protocol=protocol,
            label=str(data.get("label") or address),
            protocol_label=str(data.get("protocol_label", data.get("protocolLabel")) or ""),
            hardware_id=str(data.get("hardware_id", data.get("hardwareId")) or ""),
            properties={str(k): str(v) for k, v in raw_props.items()},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "label": self.label,
            "protocol": self.protocol,
            "protocol_label": self.protocol_label,
            "hardware_id": self.hardware_id,
            "properties": dict(self.properties),
        }


@dataclass(slots=True)
class PortEvent:
    """A port appearing on or disappearing from a backend."""

    type: PortEventType
    port: Port
    backend: str = ""
