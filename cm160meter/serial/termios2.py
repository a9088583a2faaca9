"""Custom baud rate support through Linux ``struct termios2``.

The CM160 clocks its UART at 250000 baud, which is not one of the
``Bxxx`` rates the portable termios API accepts. Linux lets a port run
at an arbitrary rate when ``BOTHER`` replaces the baud bits in
``c_cflag`` and the rate itself goes into ``c_ispeed``/``c_ospeed``.
Those fields only exist in ``struct termios2``, reachable through the
``TCGETS2``/``TCSETS2`` ioctls::

    struct termios2 {
        tcflag_t c_iflag;      /* 4 bytes */
        tcflag_t c_oflag;      /* 4 bytes */
        tcflag_t c_cflag;      /* 4 bytes */
        tcflag_t c_lflag;      /* 4 bytes */
        cc_t     c_line;       /* 1 byte  */
        cc_t     c_cc[19];     /* 19 bytes */
        speed_t  c_ispeed;     /* 4 bytes */
        speed_t  c_ospeed;     /* 4 bytes */
    };                         /* 44 bytes */
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, field
from typing import Protocol

from .errors import NegotiationError

logger = logging.getLogger(__name__)

# asm-generic values (x86, ARM, AArch64)
TCGETS2 = 0x802C542A
TCSETS2 = 0x402C542B
CBAUD = 0o010017
BOTHER = 0o010000

NCCS = 19
TERMIOS2_FORMAT = "@4IB19s2I"
TERMIOS2_SIZE = 44


class IoctlTarget(Protocol):
    """Anything that can issue an ioctl filling a mutable buffer."""

    def ioctl(self, request: int, buffer: bytearray) -> int: ...


@dataclass
class Termios2:
    """In-memory copy of ``struct termios2``."""
    c_iflag: int = 0
    c_oflag: int = 0
    c_cflag: int = 0
    c_lflag: int = 0
    c_line: int = 0
    c_cc: bytes = field(default=bytes(NCCS))
    c_ispeed: int = 0
    c_ospeed: int = 0

    def pack(self) -> bytearray:
        """Serialize to a mutable buffer suitable for ``fcntl.ioctl``."""
        return bytearray(struct.pack(
            TERMIOS2_FORMAT,
            self.c_iflag,
            self.c_oflag,
            self.c_cflag,
            self.c_lflag,
            self.c_line,
            bytes(self.c_cc),
            self.c_ispeed,
            self.c_ospeed,
        ))

    @classmethod
    def unpack(cls, buffer: bytes | bytearray) -> 'Termios2':
        """Build a record from a raw 44-byte buffer."""
        if len(buffer) != TERMIOS2_SIZE:
            raise ValueError(
                f"termios2 buffer must be {TERMIOS2_SIZE} bytes, got {len(buffer)}"
            )
        return cls(*struct.unpack(TERMIOS2_FORMAT, bytes(buffer)))


def read_termios2(target: IoctlTarget) -> Termios2:
    """Fetch the current line settings of ``target``."""
    buffer = Termios2().pack()
    target.ioctl(TCGETS2, buffer)
    return Termios2.unpack(buffer)


def write_termios2(target: IoctlTarget, tio: Termios2) -> None:
    """Apply ``tio`` to ``target`` immediately."""
    target.ioctl(TCSETS2, tio.pack())


def set_custom_baud(target: IoctlTarget, baud: int) -> None:
    """Switch ``target`` to an arbitrary baud rate and verify it stuck.

    The current settings are read first so that parity, stop bits,
    character size and flow control survive the change. The rate is
    read back afterwards because the driver may clamp or ignore a rate
    it cannot produce without reporting an error.

    Args:
        target: Open port exposing ``ioctl(request, buffer)``.
        baud: Requested rate in baud.

    Raises:
        ValueError: If ``baud`` is not a positive integer.
        NegotiationError: If the read-back speeds differ from ``baud``.
    """
    if isinstance(baud, bool) or not isinstance(baud, int) or baud <= 0:
        raise ValueError(f"Baud rate must be a positive integer, got {baud!r}")

    tio = read_termios2(target)

    tio.c_cflag &= ~CBAUD
    tio.c_cflag |= BOTHER
    tio.c_ispeed = baud
    tio.c_ospeed = baud
    write_termios2(target, tio)

    applied = read_termios2(target)
    if applied.c_ispeed != baud or applied.c_ospeed != baud:
        logger.error(
            "Custom baud rate rejected: requested %d, applied %d/%d",
            baud, applied.c_ispeed, applied.c_ospeed,
        )
        raise NegotiationError(baud, applied.c_ispeed, applied.c_ospeed)

    logger.info("Custom baud rate set to %d", baud)
