"""Sample data structures."""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Sample:
    """One current reading decoded from a CM160 data frame."""
    year: int
    month: int
    day: int
    hour: int
    minute: int
    current_amps: float
    record_type: int = 0x51  # Frame marker: 0x59 history, 0x51 live

    @property
    def is_history(self) -> bool:
        """True for records replayed from the device memory."""
        return self.record_type == 0x59

    @property
    def timestamp(self) -> datetime:
        """Device time of the reading (local, minute resolution)."""
        return datetime(self.year, self.month, self.day, self.hour, self.minute)

    def power_watts(self, voltage: float) -> float:
        """Apparent power for the given mains voltage."""
        return self.current_amps * voltage

    def to_dict(self) -> dict:
        """Convert sample to dictionary format."""
        return {
            'year': self.year,
            'month': self.month,
            'day': self.day,
            'hour': self.hour,
            'minute': self.minute,
            'current_amps': self.current_amps,
            'record_type': self.record_type,
        }

    def __str__(self) -> str:
        return (
            f"Sample("
            f"{self.year:04d}-{self.month:02d}-{self.day:02d} "
            f"{self.hour:02d}:{self.minute:02d}, "
            f"I={self.current_amps:.2f}A, "
            f"{'history' if self.is_history else 'live'})"
        )
