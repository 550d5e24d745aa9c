"""Exception hierarchy for selfpark."""

from __future__ import annotations


class SelfParkError(Exception):
    """Base class for all selfpark errors."""


class ConfigurationError(SelfParkError, ValueError):
    """Invalid configuration, detected at construction time."""


class EpisodeStateError(SelfParkError, RuntimeError):
    """Operation not allowed in the current episode phase."""
