"""Serial link to the Arduino CAN bridge and the reader for its frame stream."""

from __future__ import annotations

import logging
import time
from typing import BinaryIO

import serial
from serial.tools import list_ports

from .frames import FrameError, read_frame
from .hub import EventHub
from .parsing import broadcast_parsed_sensor_data

log = logging.getLogger(__name__)

DEFAULT_BAUD_RATE = 115200
WRITE_EVERY_N_FRAMES = 100

# USB vendor IDs of Arduino boards and the usual clone chips.
PREFERRED_VIDS = frozenset(
    {
        "2341",  # Arduino
        "2A03",  # Arduino (older)
        "1A86",  # CH340
        "10C4",  # CP210x
        "0403",  # FTDI
    }
)


def auto_select_port() -> str:
    """Return the device name of the first USB serial port that looks like an Arduino."""
    for info in list_ports.comports():
        if info.vid is not None and f"{info.vid:04X}" in PREFERRED_VIDS:
            return info.device
    raise LookupError("no arduino serial ports found")


def open_port(port: str = "auto", baud: int = DEFAULT_BAUD_RATE) -> serial.Serial:
    """Open ``port`` at ``baud``; ``"auto"`` picks the first Arduino-like port."""
    if port == "auto":
        port = auto_select_port()
    connection = serial.Serial(port, baudrate=baud)
    log.info("connected to %s @ %d", port, baud)
    return connection


def read_binary(stream: BinaryIO, hub: EventHub, raw: BinaryIO | None = None) -> None:
    """Read frames until end of stream, logging them to ``raw`` and broadcasting on ``hub``.

    Invalid frames are logged and skipped. Each valid frame is written to
    ``raw`` as its exact wire record, so that a log can be replayed later.
    """
    written = 0
    while True:
        try:
            frame = read_frame(stream)
        except EOFError:
            return
        except FrameError as exc:
            log.warning("read frame: %s", exc)
            continue

        if raw is not None:
            try:
                raw.write(frame.encode())
            except OSError as exc:
                log.warning("raw write: %s", exc)
            else:
                written += 1
                if written % WRITE_EVERY_N_FRAMES == 0:
                    raw.flush()

        broadcast_parsed_sensor_data(hub, frame.did, frame.data, int(time.time() * 1000))