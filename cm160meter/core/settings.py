"""Application settings with persistence."""

from __future__ import annotations
import logging
from dataclasses import dataclass, fields
from PySide6.QtCore import QSettings

logger = logging.getLogger(__name__)


@dataclass
class AppSettings:
    """Application settings."""
    # Serial
    port: str = "/dev/ttyUSB0"
    native_baud: int = 230400  # Rate the port is opened at
    device_baud: int = 250000  # Custom rate installed through termios2
    read_timeout: float = 0.0  # Seconds, 0 = block until a frame arrives

    # Power
    ac_voltage: float = 100.0
    max_sample_age: int = 120  # Seconds; older history records are skipped

    # Logging
    log_level: str = "INFO"

    @property
    def timeout(self) -> 'float | None':
        """Read timeout in the form pyserial expects."""
        return self.read_timeout if self.read_timeout > 0 else None

    def save(self) -> None:
        """Save settings to persistent storage.

        Uses QSettings which automatically handles:
        - Linux: ~/.config/CM160Meter/CM160Meter.conf
        - Windows: Registry HKEY_CURRENT_USER\\Software\\CM160Meter
        - macOS: ~/Library/Preferences/com.CM160Meter.plist
        """
        try:
            settings = QSettings("CM160Meter", "CM160Meter")
            for f in fields(self):
                settings.setValue(f.name, getattr(self, f.name))
            settings.sync()
        except Exception as e:
            logger.warning("Could not save settings: %s", e)

    @classmethod
    def load(cls) -> 'AppSettings':
        """Load settings from persistent storage.

        Returns default settings if nothing is stored or it can't be read.
        """
        instance = cls()

        try:
            settings = QSettings("CM160Meter", "CM160Meter")

            for f in fields(instance):
                if settings.contains(f.name):
                    stored = settings.value(f.name)
                    default_val = getattr(instance, f.name)

                    # QSettings may hand back strings for numeric values
                    if isinstance(default_val, int):
                        value = int(stored)
                    elif isinstance(default_val, float):
                        value = float(stored)
                    else:
                        value = str(stored)
                    setattr(instance, f.name, value)
        except Exception as e:
            logger.warning("Could not load settings, using defaults: %s", e)
            return cls()

        return instance
