"""Failure types raised on the ingress path.

Each carries a message suitable for returning to the HTTP caller.
"""

from __future__ import annotations


class BridgeError(Exception):
    """Base class for failures that abort a single submission."""


class ConfigurationError(BridgeError):
    """Required configuration (credential, destination) is missing."""


class NoDestinationError(ConfigurationError):
    """No channel is configured for the city and no default is set."""

    def __init__(self, city: str | None) -> None:
        self.city = city
        super().__init__(
            f"No destination channel configured for city {city!r} and no default channel set"
        )


class UpstreamUnavailableError(BridgeError):
    """The chat client is not connected yet. Callers should retry later."""

    def __init__(self) -> None:
        super().__init__("Discord bot is not ready yet, try again shortly")


class DestinationNotFoundError(BridgeError):
    def __init__(self, channel_id: str) -> None:
        self.channel_id = channel_id
        super().__init__(f"Channel {channel_id} not found or not accessible")


class UnsupportedDestinationError(BridgeError):
    def __init__(self, channel_id: str, channel_type: str) -> None:
        self.channel_id = channel_id
        self.channel_type = channel_type
        super().__init__(
            f"Channel {channel_id} has unsupported type {channel_type!r}; "
            "expected a text or forum channel"
        )


class InteractionAlreadyAnsweredError(BridgeError):
    """A second response was attempted for an interaction."""

    def __init__(self, custom_id: str) -> None:
        self.custom_id = custom_id
        super().__init__(f"Interaction {custom_id!r} was already answered")
