"""Serial communication package for CM160Meter."""

from .config import SerialConfig
from .errors import (
    CM160Error,
    NegotiationError,
    FrameError,
    BadLengthError,
    BadChecksumError,
)
from .termios2 import Termios2, set_custom_baud
from .protocol import MessageKind, classify, parse_frame
from .engine import FrameProtocolEngine
from .handler import SerialPortHandler
from .serial_reader import SerialReader

__all__ = [
    "SerialConfig",
    "CM160Error",
    "NegotiationError",
    "FrameError",
    "BadLengthError",
    "BadChecksumError",
    "Termios2",
    "set_custom_baud",
    "MessageKind",
    "classify",
    "parse_frame",
    "FrameProtocolEngine",
    "SerialPortHandler",
    "SerialReader",
]
