"""PlaylistPublisher: delivers a pushed playlist to its city channel."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from playlist_bridge.errors import (
    ConfigurationError,
    DestinationNotFoundError,
    UpstreamUnavailableError,
)
from playlist_bridge.render import DisplayMode, render_post
from playlist_bridge.routing import DEFAULT_KEY

if TYPE_CHECKING:
    from playlist_bridge.cache import SubmissionCache
    from playlist_bridge.chat.ports import ChatClient
    from playlist_bridge.models import Payload
    from playlist_bridge.render import RenderedPost
    from playlist_bridge.routing import CityRouter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublishResult:
    submission_id: str
    channel_id: str
    channel_name: str
    display_mode: DisplayMode
    dispatched_id: str
    post: RenderedPost
    payload: Payload

    def stats(self) -> dict[str, Any]:
        return {
            "submissionId": self.submission_id,
            "channelId": self.channel_id,
            "channelName": self.channel_name,
            "city": self.payload.city,
            "venues": len(self.payload.related_venues),
            "routes": len(self.payload.related_routes),
            "displayMode": str(self.display_mode),
            "messageId": self.dispatched_id,
            "tag": self.post.tag.name if self.post.tag else None,
        }


class PlaylistPublisher:
    """Ingress orchestration for ``POST /pushPlaylist``.

    Owns no state of its own: the router is read-only and the cache is
    shared with the interaction resolver.
    """

    def __init__(
        self,
        chat: ChatClient,
        router: CityRouter,
        cache: SubmissionCache,
        *,
        credential_configured: bool = True,
    ) -> None:
        self.chat = chat
        self.router = router
        self.cache = cache
        self.credential_configured = credential_configured

    async def publish(self, payload: Payload) -> PublishResult:
        """Deliver *payload* to its city's channel.

        Raises a ``BridgeError`` subclass when the bot token is missing, the
        bot is not ready, no destination is configured, the channel is
        missing, or the channel type cannot hold playlist posts.
        """
        logger.info(
            "Playlist received: title=%r, city=%r, venues=%d, routes=%d",
            payload.title,
            payload.city,
            len(payload.related_venues),
            len(payload.related_routes),
        )
        if not self.credential_configured:
            msg = "DISCORD_BOT_TOKEN is not set"
            raise ConfigurationError(msg)
        if not self.chat.is_ready():
            raise UpstreamUnavailableError

        channel_id = self.router.resolve_channel(payload.city)
        destination = await self.chat.fetch_channel(channel_id)
        if destination is None:
            raise DestinationNotFoundError(channel_id)

        submission_id = self.cache.put(payload)
        post = render_post(payload, submission_id, destination)

        if post.display_mode == DisplayMode.THREADED:
            dispatched_id = await destination.create_thread(post, post.tag)
        else:
            dispatched_id = await destination.send(post)

        logger.info(
            "Playlist pushed: %r -> #%s (%s, %s, submission=%s)",
            post.title,
            destination.name,
            channel_id,
            post.display_mode,
            submission_id,
        )
        return PublishResult(
            submission_id=submission_id,
            channel_id=channel_id,
            channel_name=destination.name,
            display_mode=post.display_mode,
            dispatched_id=dispatched_id,
            post=post,
            payload=payload,
        )

    async def channel_status(self) -> list[dict[str, Any]]:
        """Connectivity report for every mapped city plus ``default``."""
        entries = list(self.router.mapping.items())
        entries.append((DEFAULT_KEY, self.router.default_channel_id or ""))

        report: list[dict[str, Any]] = []
        for city, channel_id in entries:
            row: dict[str, Any] = {
                "city": city,
                "channelId": channel_id or None,
                "configured": bool(channel_id),
                "connected": False,
                "name": None,
                "type": None,
            }
            if channel_id and self.chat.is_ready():
                try:
                    destination = await self.chat.fetch_channel(channel_id)
                except Exception as exc:
                    logger.warning("Channel check failed for %s: %s", channel_id, exc)
                    row["error"] = str(exc)
                    destination = None
                if destination is not None:
                    row.update(
                        connected=True,
                        name=destination.name,
                        type=str(destination.kind),
                    )
            report.append(row)
        return report
