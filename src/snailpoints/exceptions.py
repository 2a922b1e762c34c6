"""Exception hierarchy for Snail Points client errors.

Backend failures are not raised: they travel back to callers as
:class:`~snailpoints.api.client.ApiResponse` values. The exceptions here
cover misuse of the client itself.
"""

from __future__ import annotations


class SnailPointsError(Exception):
    """Base exception for all Snail Points client errors."""


class ConfigurationError(SnailPointsError):
    """Client configuration is missing or invalid."""


class UnknownCounterError(SnailPointsError):
    """No counter with the given id is cached."""

    def __init__(self, counter_id: int) -> None:
        self.counter_id = counter_id
        super().__init__(f"Unknown counter id: {counter_id}")


class UnknownSettingError(SnailPointsError):
    """No configuration entry with the given key is known."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Unknown setting: {key}")
