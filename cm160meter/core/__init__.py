"""Core data structures and models for CM160Meter."""

from .sample import Sample
from .settings import AppSettings

__all__ = [
    'Sample',
    'AppSettings',
]
