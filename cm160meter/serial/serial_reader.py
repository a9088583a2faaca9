"""Serial port reader thread for CM160Meter.

This module provides a background reader that negotiates the CM160 baud
rate, runs the frame protocol and emits decoded samples as Qt signals.
"""

from __future__ import annotations

import traceback
from typing import Optional

from PySide6 import QtCore
import serial

from .config import SerialConfig
from .engine import FrameProtocolEngine
from .errors import NegotiationError
from .handler import SerialPortHandler
from .termios2 import set_custom_baud


class SerialReader(QtCore.QThread):
    """Background thread that reads samples from a CM160.

    Signals:
        negotiated: Emitted with the baud rate once it has been verified.
        sample_received: Emitted for every decoded Sample, in read order.
        error: Emitted when the port fails; the thread then ends.
    """

    negotiated = QtCore.Signal(int)
    sample_received = QtCore.Signal(object)
    error = QtCore.Signal(str)

    def __init__(self, port: str, native_baud: int = SerialConfig.NATIVE_BAUD,
                 device_baud: int = SerialConfig.DEVICE_BAUD,
                 timeout: Optional[float] = SerialConfig.READ_TIMEOUT,
                 parent=None, handler: Optional[SerialPortHandler] = None):
        super().__init__(parent)
        self._port_handler = handler or SerialPortHandler(port, native_baud, timeout)
        self._device_baud = device_baud
        self._engine: Optional[FrameProtocolEngine] = None
        self._running = False

    @property
    def port(self) -> str:
        """Get serial port path."""
        return self._port_handler.port

    def run(self) -> None:
        """Main thread loop: negotiate, then stream samples."""
        # A sample stream is single use, so every start gets its own engine
        self._engine = FrameProtocolEngine(self._port_handler)
        try:
            self._port_handler.open()
        except ConnectionError as e:
            self.error.emit(str(e))
            return

        self._running = True
        try:
            set_custom_baud(self._port_handler, self._device_baud)
            self.negotiated.emit(self._device_baud)

            self._engine.run(self.sample_received.emit)
        except NegotiationError as e:
            self.error.emit(str(e))
        except (serial.SerialException, OSError) as e:
            if self._running:
                self.error.emit(f"Serial read error: {e}")
        except Exception:
            if self._running:
                self.error.emit(f"Unexpected error:\n{traceback.format_exc()}")
        finally:
            self._running = False
            self._port_handler.close()

    def stop(self, wait_ms: int = 3000) -> None:
        """Stop the reader thread.

        Args:
            wait_ms: Maximum milliseconds to wait for thread to finish.
        """
        self._running = False
        if self._engine is not None:
            self._engine.stop()
        self._port_handler.cancel_read()
        self.wait(wait_ms)
        self._port_handler.close()
