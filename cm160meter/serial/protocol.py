"""CM160 wire protocol: message classification and frame decoding.

Every message the device sends is 11 bytes long. Two of them are
handshake markers that ask the host for a command, the others are data
records::

    +--------+------+-------+-----+------+--------+-----------+-------------+----------+
    | Marker | Year | Month | Day | Hour | Minute | (unknown) | Current     | Checksum |
    | 1 byte | +2000| low 4 |     |      |        | 2 bytes   | 2 bytes LE  | 1 byte   |
    +--------+------+-------+-----+------+--------+-----------+-------------+----------+

- Marker: 0x59 history record, 0x51 live record
- Current: raw value * 0.07 A
- Checksum: sum of the first 10 bytes modulo 256
"""

from __future__ import annotations

from enum import Enum

from ..core.sample import Sample
from .config import SerialConfig
from .errors import BadChecksumError, BadLengthError

# Device -> host handshake markers
READY_FOR_HISTORY = b"\xA9IDTCMV001\x01"
WAITING_FOR_REQUEST = b"\xA9IDTWAITPCR"

# Host -> device commands
GET_HISTORY = b"\x5A"
GET_CURRENT = b"\xA5"

# Data record markers
HISTORY_RECORD = 0x59
LIVE_RECORD = 0x51

CURRENT_SCALE = 0.07
YEAR_OFFSET = 2000
MONTH_MASK = 0x0F  # High nibble has unknown meaning


class MessageKind(Enum):
    """What an 11-byte read turned out to be."""

    READY_FOR_HISTORY = "ready_for_history"
    WAITING_FOR_REQUEST = "waiting_for_request"
    DATA = "data"
    UNKNOWN = "unknown"


def classify(data: bytes) -> MessageKind:
    """Identify a raw read by its prefix."""
    if data.startswith(READY_FOR_HISTORY):
        return MessageKind.READY_FOR_HISTORY
    if data.startswith(WAITING_FOR_REQUEST):
        return MessageKind.WAITING_FOR_REQUEST
    if data and data[0] in (HISTORY_RECORD, LIVE_RECORD):
        return MessageKind.DATA
    return MessageKind.UNKNOWN


def checksum(payload: bytes) -> int:
    """8-bit additive checksum used by data records."""
    return sum(payload) & 0xFF


def parse_frame(data: bytes) -> Sample:
    """Decode an 11-byte data record into a Sample.

    Args:
        data: Raw bytes of one read, marker byte included.

    Returns:
        The decoded Sample.

    Raises:
        BadLengthError: If ``data`` is not exactly 11 bytes.
        BadChecksumError: If the last byte is not the sum of the others.
    """
    if len(data) != SerialConfig.FRAME_SIZE:
        raise BadLengthError(len(data))

    payload, declared = data[:-1], data[-1]
    actual = checksum(payload)
    if actual != declared:
        raise BadChecksumError(declared, actual)

    return Sample(
        year=payload[1] + YEAR_OFFSET,
        month=payload[2] & MONTH_MASK,
        day=payload[3],
        hour=payload[4],
        minute=payload[5],
        current_amps=(payload[8] + (payload[9] << 8)) * CURRENT_SCALE,
        record_type=payload[0],
    )


def could_start_message(window: bytes) -> bool:
    """Check whether a message may begin at the start of ``window``.

    A full 11-byte window must be a handshake marker or a data record
    with a valid checksum. A shorter window (the rest has not arrived
    yet) only needs to agree with what it holds so far.
    """
    window = bytes(window[:SerialConfig.FRAME_SIZE])
    if not window:
        return False
    if len(window) == SerialConfig.FRAME_SIZE:
        kind = classify(window)
        if kind is MessageKind.DATA:
            return checksum(window[:-1]) == window[-1]
        return kind is not MessageKind.UNKNOWN
    return (
        READY_FOR_HISTORY.startswith(window)
        or WAITING_FOR_REQUEST.startswith(window)
        or window[0] in (HISTORY_RECORD, LIVE_RECORD)
    )


def find_message_start(buffer: bytes, start: int = 1) -> int:
    """Offset of the first plausible message at or after ``start``.

    Returns ``len(buffer)`` when nothing in the buffer can start one.
    """
    for offset in range(start, len(buffer)):
        if could_start_message(buffer[offset:offset + SerialConfig.FRAME_SIZE]):
            return offset
    return len(buffer)
