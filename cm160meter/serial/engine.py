"""Read loop driving the CM160 handshake and decoding its records."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterator, Optional, Protocol

from ..core.sample import Sample
from .config import SerialConfig
from .errors import FrameError
from .protocol import (
    GET_CURRENT,
    GET_HISTORY,
    MessageKind,
    classify,
    find_message_start,
    parse_frame,
)
from .termios2 import IoctlTarget

logger = logging.getLogger(__name__)


class Transport(IoctlTarget, Protocol):
    """Byte stream the engine talks to, already open at the device rate."""

    def read(self, size: int) -> bytes: ...

    def write(self, data: bytes) -> Optional[int]: ...

    def flush(self) -> None: ...


class FrameProtocolEngine:
    """Answers the device handshake and turns data records into Samples.

    The device sends fixed 11-byte messages. Handshake markers are
    answered with a one-byte command, data records are decoded and
    yielded. The stream is not guaranteed to start on a message
    boundary, so when the head of the buffer is not a valid message the
    engine skips ahead to the next byte that can start one and reads
    only what is missing. A corrupt record never ends the stream;
    transport errors do.

    Usage::

        engine = FrameProtocolEngine(handler)
        for sample in engine.samples():
            ...

    The stream can only be consumed once. Call ``stop()`` (from any
    thread) to end it after the read in progress returns.
    """

    def __init__(self, transport: Transport, frame_size: int = SerialConfig.FRAME_SIZE):
        self._transport = transport
        self._frame_size = frame_size
        self._buffer = bytearray()
        self._synced = True  # Cleared while skipping garbage
        self._stop = threading.Event()
        self._started = False

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def stop(self) -> None:
        """Ask the read loop to finish before its next read."""
        self._stop.set()

    def samples(self) -> Iterator[Sample]:
        """Return the lazy, unbounded stream of decoded samples.

        Raises:
            RuntimeError: If the stream was already requested.
        """
        if self._started:
            raise RuntimeError("Sample stream already consumed")
        self._started = True
        return self._stream()

    def run(self, callback: Callable[[Sample], None]) -> None:
        """Hand every sample to ``callback`` until stopped."""
        for sample in self.samples():
            callback(sample)

    def _stream(self) -> Iterator[Sample]:
        while not self._stop.is_set():
            missing = self._frame_size - len(self._buffer)
            if missing > 0:
                data = self._transport.read(missing)
                if not data:
                    # Read timed out with nothing received
                    continue
                self._buffer += data
                if len(self._buffer) < self._frame_size:
                    continue

            sample = self._process()
            if sample is not None:
                yield sample

    def _process(self) -> Optional[Sample]:
        """Handle the message at the head of the buffer."""
        frame = bytes(self._buffer[:self._frame_size])
        kind = classify(frame)

        if kind is MessageKind.READY_FOR_HISTORY:
            self._consume()
            logger.debug("GET_HISTORY")
            self._send(GET_HISTORY)
        elif kind is MessageKind.WAITING_FOR_REQUEST:
            self._consume()
            logger.debug("GET_CURRENT")
            self._send(GET_CURRENT)
        elif kind is MessageKind.DATA:
            try:
                sample = parse_frame(frame)
            except FrameError as e:
                self._resync(logging.WARNING, "Dropping frame %s: %s", frame.hex(' '), e)
                return None
            self._consume()
            logger.debug("%s", sample)
            return sample
        else:
            self._resync(logging.INFO, "Unknown message %s (%d)", frame.hex(' '), len(frame))
        return None

    def _consume(self) -> None:
        del self._buffer[:self._frame_size]
        self._synced = True

    def _resync(self, level: int, msg: str, *args) -> None:
        # Only the first bad message after a good one is worth reporting
        logger.log(level if self._synced else logging.DEBUG, msg, *args)
        self._synced = False
        skip = find_message_start(self._buffer)
        del self._buffer[:skip]
        logger.debug("Skipped %d bytes to resynchronize", skip)

    def _send(self, command: bytes) -> None:
        self._transport.write(command)
        self._transport.flush()
