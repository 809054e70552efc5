"""Resolve button presses on published playlists.

``InteractionResolver.resolve`` is a pure lookup from an interaction ID to
the view that should be shown. ``handle_interaction`` is the thin async
shim the chat adapter calls; it answers the event and never raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from playlist_bridge.errors import InteractionAlreadyAnsweredError
from playlist_bridge.render import SHOW_ROUTES_PREFIX, SHOW_VENUES_PREFIX

if TYPE_CHECKING:
    from collections.abc import Sequence

    from playlist_bridge.cache import SubmissionCache
    from playlist_bridge.chat.ports import InteractionEvent
    from playlist_bridge.models import Place

logger = logging.getLogger(__name__)

MAX_LIST_ENTRIES = 25
LIST_TEXT_BUDGET = 1500

_ITEM_TYPES = ("venue", "route")


class ViewKind(StrEnum):
    LIST = "list"
    LINK = "link"
    ACK = "ack"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"
    ERROR = "error"


@dataclass(frozen=True)
class ResolvedView:
    kind: ViewKind
    content: str
    title: str | None = None
    url: str | None = None


UNAVAILABLE_VIEW = ResolvedView(
    ViewKind.UNAVAILABLE,
    "This playlist's data is no longer available. Please try again later "
    "or open the playlist page.",
)
UNKNOWN_VIEW = ResolvedView(ViewKind.UNKNOWN, "Unknown action.")
ERROR_VIEW = ResolvedView(ViewKind.ERROR, "Something went wrong handling that button. Please retry.")


def format_place_list(places: Sequence[Place]) -> str:
    """Numbered list with map links, capped by entry count and text size."""
    lines: list[str] = []
    used = 0
    for index, place in enumerate(places[:MAX_LIST_ENTRIES], start=1):
        line = f"{index}. **{place.display_name}**"
        link = place.map_link
        if link:
            line += f" - [Map]({link})"
        cost = len(line) + 1
        if used + cost > LIST_TEXT_BUDGET:
            break
        lines.append(line)
        used += cost

    remaining = len(places) - len(lines)
    if remaining > 0:
        lines.append(f"...and {remaining} more")
    return "\n".join(lines)


class InteractionResolver:
    """Maps interaction IDs to views using the submission cache."""

    def __init__(self, cache: SubmissionCache, frontend_base_url: str) -> None:
        self._cache = cache
        self._base_url = frontend_base_url.rstrip("/")

    def resolve(self, custom_id: str) -> ResolvedView:
        if custom_id.startswith(SHOW_VENUES_PREFIX):
            return self._show_list(custom_id[len(SHOW_VENUES_PREFIX):], "venues")
        if custom_id.startswith(SHOW_ROUTES_PREFIX):
            return self._show_list(custom_id[len(SHOW_ROUTES_PREFIX):], "routes")

        parts = custom_id.split("_", 2)
        if len(parts) == 3 and parts[0] in _ITEM_TYPES and parts[2]:
            item_type, action, item_id = parts
            if action == "view":
                url = f"{self._base_url}/{item_type}/{item_id}"
                return ResolvedView(
                    ViewKind.LINK, f"View this {item_type}: {url}", url=url
                )
            if action == "maps":
                return ResolvedView(ViewKind.ACK, f"Opening the {item_type} in maps...")

        logger.info("Unknown interaction id: %s", custom_id)
        return UNKNOWN_VIEW

    def _show_list(self, submission_id: str, attr: str) -> ResolvedView:
        payload = self._cache.get(submission_id) if submission_id else None
        if payload is None:
            logger.info("Submission %s not in cache (expired?)", submission_id)
            return UNAVAILABLE_VIEW

        places = payload.related_venues if attr == "venues" else payload.related_routes
        title = f"{payload.title or 'Playlist'} - {attr.capitalize()} ({len(places)})"
        if not places:
            return ResolvedView(ViewKind.LIST, f"No {attr} in this playlist.", title=title)
        return ResolvedView(ViewKind.LIST, format_place_list(places), title=title)


async def handle_interaction(event: InteractionEvent, resolver: InteractionResolver) -> None:
    """Answer *event*. Failures are logged and never propagate."""
    custom_id = event.custom_id
    try:
        view = resolver.resolve(custom_id)
        if event.answered:
            logger.warning("Interaction %s already answered, dropping reply", custom_id)
            return
        await event.reply(view)
        logger.info("Answered interaction %s (%s)", custom_id, view.kind)
    except InteractionAlreadyAnsweredError:
        logger.warning("Interaction %s already answered, dropping reply", custom_id)
    except Exception:
        logger.exception("Interaction %s failed", custom_id)
        if event.answered:
            return
        try:
            await event.reply(ERROR_VIEW)
        except Exception:
            logger.warning("Could not send error reply for %s", custom_id, exc_info=True)
