"""CM160Meter version information."""

__version__ = "1.0.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))

APP_NAME = "CM160Meter"
DESCRIPTION = "Driver and logger for the OWL CM160 USB energy monitor"
LICENSE = "Apache-2.0"
