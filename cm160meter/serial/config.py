"""Serial port configuration for CM160Meter."""

from __future__ import annotations


class SerialConfig:
    """Configuration for the CM160 serial link."""
    NATIVE_BAUD = 230400  # Rate the port is opened at
    DEVICE_BAUD = 250000  # Real device clock, set through termios2
    FRAME_SIZE = 11
    READ_TIMEOUT = None  # Block until a full frame arrives
    WRITE_TIMEOUT = 1.0
