"""City → Discord channel routing."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass

from playlist_bridge.errors import NoDestinationError

logger = logging.getLogger(__name__)

DEFAULT_KEY = "default"

# Keep ASCII letters and CJK unified ideographs only.
_CITY_STRIP_RE = re.compile(r"[^a-z\u3400-\u4dbf\u4e00-\u9fff]")


def normalize_city(city: str | None) -> str:
    """Lowercase and strip everything but ASCII letters and CJK ideographs."""
    if not city:
        return ""
    return _CITY_STRIP_RE.sub("", city.strip().lower())


@dataclass(frozen=True)
class RouteMatch:
    """Outcome of a routing lookup.

    Attributes:
        channel_id: Destination channel, or ``None`` when nothing is configured.
        match: One of ``"exact"``, ``"fuzzy"``, ``"default"`` or ``"none"``.
        key: The mapping key that matched, if any.
    """

    channel_id: str | None
    match: str
    key: str | None = None


class CityRouter:
    """Resolves free-text city names against a static channel mapping.

    The mapping is normalized once at construction and never mutated.
    Keys are matched exactly first, then by substring in definition order,
    then fall back to the ``default`` entry.
    """

    def __init__(self, mapping: Mapping[str, str], default_channel_id: str | None = None) -> None:
        self._table: dict[str, str] = {}
        for city, channel_id in mapping.items():
            key = normalize_city(city)
            if not key or not channel_id:
                continue
            if key == DEFAULT_KEY:
                default_channel_id = default_channel_id or channel_id
                continue
            self._table.setdefault(key, channel_id)
        self._default = (default_channel_id or "").strip() or None

    @classmethod
    def from_settings(cls, settings) -> CityRouter:
        return cls(settings.get_city_channels(), settings.default_channel_id)

    @property
    def default_channel_id(self) -> str | None:
        return self._default

    @property
    def mapping(self) -> dict[str, str]:
        """Normalized city keys in definition order (excluding ``default``)."""
        return dict(self._table)

    def match(self, city: str | None) -> RouteMatch:
        """Resolve *city* and report how the match was made."""
        key = normalize_city(city)
        if key:
            if key in self._table:
                return RouteMatch(self._table[key], "exact", key)
            for candidate, channel_id in self._table.items():
                if candidate in key or key in candidate:
                    return RouteMatch(channel_id, "fuzzy", candidate)
        if self._default:
            return RouteMatch(self._default, "default", DEFAULT_KEY)
        return RouteMatch(None, "none")

    def resolve_channel(self, city: str | None) -> str:
        """Return the channel for *city*. Raises ``NoDestinationError`` if none."""
        result = self.match(city)
        if result.channel_id is None:
            logger.warning("No channel for city=%r and no default configured", city)
            raise NoDestinationError(city)
        logger.debug("City %r routed to %s (%s)", city, result.channel_id, result.match)
        return result.channel_id
