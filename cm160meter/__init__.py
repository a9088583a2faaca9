"""CM160Meter application package."""

from .version import __version__, __version_info__, APP_NAME
from .core import Sample, AppSettings
from .serial import (
    FrameProtocolEngine,
    NegotiationError,
    SerialConfig,
    SerialReader,
    parse_frame,
    set_custom_baud,
)

__all__ = [
    "__version__",
    "__version_info__",
    "APP_NAME",
    "Sample",
    "AppSettings",
    "FrameProtocolEngine",
    "NegotiationError",
    "SerialConfig",
    "SerialReader",
    "parse_frame",
    "set_custom_baud",
]
