"""Chat-platform protocols consumed by the publisher and interaction shim."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from playlist_bridge.interactions import ResolvedView
    from playlist_bridge.render import RenderedPost
    from playlist_bridge.tags import Tag


class ChannelKind(StrEnum):
    TEXT = "text"  # plain messages
    FORUM = "forum"  # threaded posts with tags
    OTHER = "other"


@runtime_checkable
class Destination(Protocol):
    """A channel a rendered post can be delivered to."""

    @property
    def id(self) -> str: ...

    @property
    def name(self) -> str: ...

    @property
    def kind(self) -> ChannelKind: ...

    @property
    def type_name(self) -> str:
        """Platform-specific channel type, used in error messages."""
        ...

    @property
    def available_tags(self) -> list[Tag]: ...

    async def send(self, post: RenderedPost) -> str:
        """Send a flat message. Returns the message ID."""
        ...

    async def create_thread(self, post: RenderedPost, tag: Tag | None) -> str:
        """Create a threaded post. Returns the thread ID."""
        ...


@runtime_checkable
class ChatClient(Protocol):
    """Connection to the chat platform."""

    def is_ready(self) -> bool: ...

    async def fetch_channel(self, channel_id: str) -> Destination | None:
        """Return the channel, or None if it does not exist or is not visible."""
        ...


@runtime_checkable
class InteractionEvent(Protocol):
    """A button press delivered by the chat platform."""

    @property
    def custom_id(self) -> str: ...

    @property
    def answered(self) -> bool:
        """True once a response has been sent. Interactions answer only once."""
        ...

    async def reply(self, view: ResolvedView) -> None: ...
