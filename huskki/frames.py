"""Binary CAN frame format: [AA 55][millis:u32 LE][DID:u16 BE][len:u8][data][crc8]."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import BinaryIO, Iterable

MAGIC = b"\xaa\x55"
MAX_DATA_LENGTH = 64
HEADER_SIZE = 7

_HEADER = struct.Struct("<IHB")


class FrameError(Exception):
    """A frame could not be read."""


class BadLengthError(FrameError):
    """The frame's data length is outside the allowed range."""


class BadChecksumError(FrameError):
    """The frame's checksum does not match its contents."""


def crc8_update(crc: int, byte: int) -> int:
    """Feed one byte into a CRC-8 (poly 0x07, init 0x00)."""
    crc ^= byte
    for _ in range(8):
        if crc & 0x80:
            crc = ((crc << 1) ^ 0x07) & 0xFF
        else:
            crc = (crc << 1) & 0xFF
    return crc


def crc8(buffer: Iterable[int], crc: int = 0x00) -> int:
    """CRC-8 of ``buffer``, continuing from ``crc``."""
    for byte in buffer:
        crc = crc8_update(crc, byte)
    return crc


@dataclass(frozen=True)
class Frame:
    """One validated CAN bus frame from the stream or a log."""

    millis: int
    did: int
    data: bytes

    def encode(self) -> bytes:
        """The exact wire record, including magic bytes and checksum."""
        if len(self.data) > MAX_DATA_LENGTH:
            raise BadLengthError(f"error data length {len(self.data)}")
        body = (
            struct.pack("<I", self.millis & 0xFFFFFFFF)
            + struct.pack(">H", self.did & 0xFFFF)
            + bytes([len(self.data)])
            + bytes(self.data)
        )
        return MAGIC + body + bytes([crc8(body)])


def _read_byte(stream: BinaryIO) -> int:
    chunk = stream.read(1)
    if not chunk:
        raise EOFError("end of stream")
    return chunk[0]


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    buf = bytearray()
    while len(buf) < size:
        chunk = stream.read(size - len(buf))
        if not chunk:
            if not buf:
                raise EOFError("end of stream")
            raise FrameError("unexpected end of stream inside frame")
        buf += chunk
    return bytes(buf)


def read_frame(stream: BinaryIO) -> Frame:
    """Read one frame, skipping bytes until the magic marker.

    Raises EOFError at a clean end of stream, FrameError for a truncated
    frame, BadLengthError or BadChecksumError for invalid frames.
    """
    while True:
        if _read_byte(stream) != MAGIC[0]:
            continue
        if _read_byte(stream) == MAGIC[1]:
            break

    header = _read_exact(stream, HEADER_SIZE)
    length = header[6]
    if length > MAX_DATA_LENGTH:
        raise BadLengthError(f"error data length {length}")

    tail = _read_exact(stream, length + 1)
    data, received = tail[:length], tail[length]
    if crc8(data, crc8(header)) != received:
        raise BadChecksumError("error frame checksum does not match")

    millis = _HEADER.unpack(header[:4] + b"\x00\x00\x00")[0]
    did = struct.unpack(">H", header[4:6])[0]
    return Frame(millis=millis, did=did, data=data)