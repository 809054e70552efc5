"""Build the outbound post for a playlist submission."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from playlist_bridge.chat.ports import ChannelKind
from playlist_bridge.errors import UnsupportedDestinationError
from playlist_bridge.tags import Tag, select_tag

if TYPE_CHECKING:
    from collections.abc import Sequence

    from playlist_bridge.chat.ports import Destination
    from playlist_bridge.models import Payload, Place

logger = logging.getLogger(__name__)

UNTITLED = "Untitled Playlist"
NO_DESCRIPTION = "No description"
EMBED_COLOR = 3447003

VENUE_PREVIEW_LIMIT = 3
ROUTE_PREVIEW_LIMIT = 2

# Interaction ID prefixes; the submission ID follows directly.
SHOW_VENUES_PREFIX = "show_venues_"
SHOW_ROUTES_PREFIX = "show_routes_"

_PLACEHOLDER_IMAGE_HOST = "example.com"


class DisplayMode(StrEnum):
    FLAT = "flat"
    THREADED = "threaded"


@dataclass(frozen=True)
class PostField:
    name: str
    value: str
    inline: bool = True


@dataclass(frozen=True)
class PostButton:
    """A button. Exactly one of ``custom_id`` (interactive) or ``url`` (link)."""

    label: str
    custom_id: str | None = None
    url: str | None = None


@dataclass
class RenderedPost:
    """Platform-neutral representation of a playlist post."""

    submission_id: str
    title: str
    body: str
    fields: list[PostField] = field(default_factory=list)
    buttons: list[PostButton] = field(default_factory=list)
    image_url: str | None = None
    url: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    display_mode: DisplayMode = DisplayMode.FLAT
    tag: Tag | None = None
    color: int = EMBED_COLOR


def usable_image_url(url: str | None) -> str | None:
    """Return *url* unless it is missing or points at a placeholder host."""
    if not url or _PLACEHOLDER_IMAGE_HOST in url:
        return None
    return url


def preview_list(places: Sequence[Place], limit: int) -> str:
    """Bullet the first *limit* names, with an overflow marker."""
    lines = [f"• {p.display_name}" for p in places[:limit]]
    remaining = len(places) - limit
    if remaining > 0:
        lines.append(f"...and {remaining} more")
    return "\n".join(lines)


def display_mode_for(destination: Destination) -> DisplayMode:
    if destination.kind == ChannelKind.FORUM:
        return DisplayMode.THREADED
    if destination.kind == ChannelKind.TEXT:
        return DisplayMode.FLAT
    raise UnsupportedDestinationError(destination.id, destination.type_name)


def render_post(
    payload: Payload,
    submission_id: str,
    destination: Destination | None = None,
) -> RenderedPost:
    """Render *payload* for *destination*.

    Without a destination the post is rendered flat. Forum destinations get
    threaded mode and a tag chosen from their available tags.
    """
    venues = payload.related_venues
    routes = payload.related_routes

    fields = [
        PostField("City", payload.city or "Unknown"),
        PostField("Travel Type", payload.travel_type or "General"),
        PostField("Venues", str(len(venues))),
        PostField("Routes", str(len(routes))),
    ]
    if venues:
        fields.append(
            PostField("Featured Venues", preview_list(venues, VENUE_PREVIEW_LIMIT), inline=False)
        )
    if routes:
        fields.append(
            PostField("Featured Routes", preview_list(routes, ROUTE_PREVIEW_LIMIT), inline=False)
        )

    buttons: list[PostButton] = []
    if venues:
        buttons.append(
            PostButton(f"View Venues ({len(venues)})", custom_id=SHOW_VENUES_PREFIX + submission_id)
        )
    if routes:
        buttons.append(
            PostButton(f"View Routes ({len(routes)})", custom_id=SHOW_ROUTES_PREFIX + submission_id)
        )
    if payload.page_url:
        buttons.append(PostButton("Open Playlist", url=payload.page_url))

    post = RenderedPost(
        submission_id=submission_id,
        title=payload.title or UNTITLED,
        body=payload.description or NO_DESCRIPTION,
        fields=fields,
        buttons=buttons,
        image_url=usable_image_url(payload.image_url),
        url=payload.page_url,
    )

    if destination is None:
        return post

    post.display_mode = display_mode_for(destination)
    if post.display_mode == DisplayMode.THREADED:
        post.tag = select_tag(
            destination.available_tags,
            travel_type=payload.travel_type,
            city=payload.city,
            title=payload.title,
            description=payload.description,
        )
        logger.debug(
            "Selected tag %s for submission %s",
            post.tag.name if post.tag else None,
            submission_id,
        )
    return post
