"""Low-level serial port handler."""

from __future__ import annotations

import logging
import sys
import time
from typing import Optional

import serial

from .config import SerialConfig

# termios2 ioctls are Linux only
_IS_LINUX = sys.platform.startswith('linux')
if _IS_LINUX:
    import fcntl

logger = logging.getLogger(__name__)


class SerialPortHandler:
    """Binary serial port used as the CM160 transport.

    The port is opened at the device-native rate (8N1, no flow control);
    the real 250000 baud clock is installed afterwards through ``ioctl``.
    Reconfiguring the pyserial object after that would reset the rate,
    so settings are fixed at construction.
    """

    def __init__(self, port: str, baud: int = SerialConfig.NATIVE_BAUD,
                 timeout: Optional[float] = SerialConfig.READ_TIMEOUT):
        self.port = port
        self.baud = baud
        self.timeout = timeout
        self._ser: Optional[serial.Serial] = None

    @property
    def is_open(self) -> bool:
        """Check if port is open."""
        return self._ser is not None and self._ser.is_open

    def open(self) -> None:
        """Open the serial port.

        Raises:
            ConnectionError: If the port cannot be opened.
        """
        try:
            self._ser = serial.Serial(
                self.port,
                self.baud,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                xonxoff=False,
                rtscts=False,
                timeout=self.timeout,
                write_timeout=SerialConfig.WRITE_TIMEOUT,
            )
        except (serial.SerialException, OSError, ValueError) as e:
            self._ser = None
            raise ConnectionError(
                f"Cannot open {self.port}: {e}\n"
                "Check that the device exists and permissions are correct."
            ) from e

        time.sleep(0.1)  # Let port stabilize
        self._ser.reset_input_buffer()
        logger.info(f"Opened {self.port} at {self.baud} baud")

    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes, blocking according to the timeout."""
        return self._port().read(size)

    def write(self, data: bytes) -> Optional[int]:
        """Write raw bytes to the device."""
        return self._port().write(data)

    def flush(self) -> None:
        """Wait until all written data has been transmitted."""
        self._port().flush()

    def ioctl(self, request: int, buffer: bytearray) -> int:
        """Issue an ioctl on the port, filling ``buffer`` in place."""
        if not _IS_LINUX:
            raise NotImplementedError("termios2 ioctls are only available on Linux")
        return fcntl.ioctl(self._port().fileno(), request, buffer, True)

    def cancel_read(self) -> None:
        """Wake up a read blocked in another thread."""
        if self._ser is not None and hasattr(self._ser, 'cancel_read'):
            self._ser.cancel_read()

    def close(self) -> None:
        """Close the serial connection."""
        if self._ser:
            try:
                if self._ser.is_open:
                    self._ser.close()
                    logger.info(f"Closed {self.port}")
            except (serial.SerialException, OSError) as e:
                logger.warning("Error closing %s: %s", self.port, e)
            self._ser = None

    def _port(self) -> serial.Serial:
        if self._ser is None:
            raise ConnectionError(f"{self.port} is not open")
        return self._ser

    def __enter__(self) -> 'SerialPortHandler':
        self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
