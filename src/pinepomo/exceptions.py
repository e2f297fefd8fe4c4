"""Exceptions raised by Pinepomo collaborators.

The timer state machine never raises for invalid transitions; these cover the
storage, configuration and integration layers around it.
"""

from __future__ import annotations


class PinepomoError(Exception):
    """Base class for Pinepomo errors."""


class StorageError(PinepomoError):
    """A storage adapter failed to read or write."""


class ConfigError(PinepomoError):
    """Configuration could not be loaded, validated or saved."""
