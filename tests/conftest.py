"""Shared fakes for the CM160 driver tests."""

import pytest

from cm160meter.serial.termios2 import TCGETS2, TCSETS2, Termios2


def make_frame(marker=0x59, year=24, month=7, day=15, hour=13, minute=45,
               current=(100, 0), checksum=None):
    """Build an 11-byte data record with a valid checksum by default."""
    payload = bytes([marker, year, month, day, hour, minute, 0, 0, current[0], current[1]])
    if checksum is None:
        checksum = sum(payload) & 0xFF
    return payload + bytes([checksum])


class FakeTransport:
    """Scripted transport: each queued item is what the port has buffered
    before a read returns. A read takes at most ``size`` bytes of the
    current item and leaves the rest for the next one. ``b""`` is a read
    that timed out; an exception item is raised from the read.

    When the script runs out, ``on_exhausted`` is called (usually the
    engine's ``stop``) so the sample stream ends.
    """

    def __init__(self, reads):
        self.reads = list(reads)
        self.read_sizes = []
        self.writes = []
        self.flushes = 0
        self.events = []
        self.on_exhausted = None

    def read(self, size):
        self.read_sizes.append(size)
        if not self.reads:
            return self._exhausted()
        item = self.reads[0]
        if isinstance(item, Exception):
            self.reads.pop(0)
            raise item
        chunk, rest = item[:size], item[size:]
        if rest:
            self.reads[0] = rest
        else:
            self.reads.pop(0)
        return chunk

    def _exhausted(self):
        if self.on_exhausted is not None:
            self.on_exhausted()
        return b""

    def write(self, data):
        self.writes.append(bytes(data))
        self.events.append(("write", bytes(data)))
        return len(data)

    def flush(self):
        self.flushes += 1
        self.events.append(("flush",))

    def ioctl(self, request, buffer):
        raise NotImplementedError


class ByteStream(FakeTransport):
    """Continuous byte stream with blocking pyserial ``read(n)`` semantics:
    every read returns exactly ``n`` bytes until the data runs out.
    """

    def __init__(self, data):
        super().__init__([])
        self.data = bytearray(data)

    def read(self, size):
        self.read_sizes.append(size)
        if not self.data:
            return self._exhausted()
        chunk = bytes(self.data[:size])
        del self.data[:size]
        return chunk


class FakeTermiosPort:
    """Port emulating TCGETS2/TCSETS2 on an in-memory termios2 record.

    ``applied_speed`` simulates a driver that silently programs a
    different rate than requested.
    """

    def __init__(self, initial=None, applied_speed=None):
        self.state = initial if initial is not None else Termios2(
            c_iflag=0x0001,
            c_oflag=0x0004,
            c_cflag=0o010000 | 0o000060 | 0o004000 | 0o000200 | 0o000015,
            c_lflag=0x0008,
            c_line=0,
            c_cc=bytes(range(1, 20)),
            c_ispeed=230400,
            c_ospeed=230400,
        )
        self.applied_speed = applied_speed
        self.requests = []
        self.written = []

    def ioctl(self, request, buffer):
        self.requests.append(request)
        if request == TCGETS2:
            buffer[:] = self.state.pack()
        elif request == TCSETS2:
            tio = Termios2.unpack(buffer)
            self.written.append(tio)
            if self.applied_speed is not None:
                tio.c_ispeed = self.applied_speed
                tio.c_ospeed = self.applied_speed
            self.state = tio
        else:
            raise OSError(f"unexpected ioctl 0x{request:X}")
        return 0


@pytest.fixture
def qapp():
    from PySide6 import QtCore

    app = QtCore.QCoreApplication.instance()
    if app is None:
        app = QtCore.QCoreApplication([])
    yield app
