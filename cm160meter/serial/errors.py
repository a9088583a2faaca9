"""Exceptions raised by the CM160 serial layer."""

from __future__ import annotations


class CM160Error(Exception):
    """Base class for CM160 driver errors."""


class NegotiationError(CM160Error):
    """The port did not accept the requested custom baud rate.

    Fatal: nothing else can be read from the device without the
    correct clock.
    """

    def __init__(self, requested: int, applied_ispeed: int, applied_ospeed: int):
        self.requested = requested
        self.applied_ispeed = applied_ispeed
        self.applied_ospeed = applied_ospeed
        super().__init__(
            f"failed to set baudrate expected:{requested} "
            f"but set:{applied_ispeed}/{applied_ospeed}"
        )


class FrameError(CM160Error, ValueError):
    """A data frame could not be decoded."""


class BadLengthError(FrameError):
    """Frame is not exactly 11 bytes long."""

    def __init__(self, length: int):
        self.length = length
        super().__init__(f"invalid frame length: {length}")


class BadChecksumError(FrameError):
    """Declared checksum byte does not match the payload sum."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"invalid checksum: declared 0x{expected:02X}, computed 0x{actual:02X}"
        )
