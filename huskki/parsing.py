"""Decoding of known diagnostic identifiers into dashboard values."""

from __future__ import annotations

import math
from typing import Any, Protocol

COOLANT_OFFSET = -40

RPM_DID = 0x0100
THROTTLE_DID = 0x0001
GRIP_DID = 0x0070
TPS_DID = 0x0076
COOLANT_DID = 0x0009


class _Broadcaster(Protocol):
    def broadcast(self, signal: dict[str, Any]) -> None: ...


def _round(value: float) -> int:
    """Round half away from zero, for non-negative values."""
    return int(math.floor(value + 0.5))


def _percent_of_byte(data: bytes) -> int:
    return _round(data[-1] / 255.0 * 100.0)


def _u16be(data: bytes) -> int:
    return (data[0] << 8) | data[1]


def parse_sensor_data(did: int, data: bytes, timestamp: int) -> dict[str, Any] | None:
    """Decode one frame's payload into an event, or None if it carries nothing known."""
    did &= 0xFFFF
    if did == RPM_DID:
        if len(data) >= 2:
            return {"rpm": _u16be(data) // 4, "timestamp": timestamp}
    elif did == THROTTLE_DID:
        if data:
            return {"throttle": _percent_of_byte(data), "timestamp": timestamp}
    elif did == GRIP_DID:
        if data:
            return {"grip": _percent_of_byte(data), "timestamp": timestamp}
    elif did == TPS_DID:
        if len(data) >= 2:
            raw = min(_u16be(data), 1023)
            return {"tps": _round(raw / 1023.0 * 100.0), "timestamp": timestamp}
    elif did == COOLANT_DID:
        if len(data) >= 2:
            return {"coolant": _u16be(data) + COOLANT_OFFSET, "timestamp": timestamp}
        if len(data) == 1:
            return {"coolant": data[0] + COOLANT_OFFSET, "timestamp": timestamp}
    return None


def broadcast_parsed_sensor_data(
    hub: _Broadcaster, did: int, data: bytes, timestamp: int
) -> None:
    """Decode a payload and broadcast it on ``hub`` if it is recognised."""
    event = parse_sensor_data(did, data, timestamp)
    if event is not None:
        hub.broadcast(event)