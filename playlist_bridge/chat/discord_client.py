"""Discord implementation of the chat ports (discord.py 2.x)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import discord

from playlist_bridge.chat.ports import ChannelKind
from playlist_bridge.errors import InteractionAlreadyAnsweredError
from playlist_bridge.interactions import ViewKind, handle_interaction
from playlist_bridge.tags import Tag

if TYPE_CHECKING:
    from playlist_bridge.interactions import InteractionResolver, ResolvedView
    from playlist_bridge.render import RenderedPost

logger = logging.getLogger(__name__)

# Discord API limits
MAX_TITLE = 256
MAX_DESCRIPTION = 4096
MAX_FIELD_VALUE = 1024
MAX_THREAD_NAME = 100
MAX_EMBED_TOTAL = 6000


def build_embed(post: RenderedPost) -> discord.Embed:
    embed = discord.Embed(
        title=post.title[:MAX_TITLE],
        description=post.body[:MAX_DESCRIPTION],
        url=post.url,
        color=post.color,
        timestamp=post.timestamp,
    )
    for f in post.fields:
        embed.add_field(name=f.name, value=f.value[:MAX_FIELD_VALUE] or "-", inline=f.inline)
    if post.image_url:
        embed.set_image(url=post.image_url)
    fit_embed(embed)
    return embed


def fit_embed(embed: discord.Embed, limit: int = MAX_EMBED_TOTAL) -> None:
    """Shorten the description, then fields from the last, until *embed* fits."""
    excess = len(embed) - limit
    if excess <= 0:
        return
    if embed.description:
        keep = max(len(embed.description) - excess - 1, 0)
        embed.description = embed.description[:keep] + "…"
        excess = len(embed) - limit
    for index in reversed(range(len(embed.fields))):
        if excess <= 0:
            break
        field = embed.fields[index]
        value = field.value or ""
        keep = max(len(value) - excess - 1, 1)
        embed.set_field_at(index, name=field.name, value=value[:keep] + "…", inline=field.inline)
        excess = len(embed) - limit


def build_view(post: RenderedPost, *, timeout: float | None = None) -> discord.ui.View | None:
    """Buttons for *post*, or None when it has none. Must run inside an event loop."""
    if not post.buttons:
        return None
    view = discord.ui.View(timeout=timeout)
    for button in post.buttons:
        if button.url:
            item = discord.ui.Button(label=button.label, style=discord.ButtonStyle.link, url=button.url)
        else:
            item = discord.ui.Button(
                label=button.label,
                style=discord.ButtonStyle.primary,
                custom_id=button.custom_id,
            )
        view.add_item(item)
    return view


def channel_kind(channel: Any) -> ChannelKind:
    if isinstance(channel, discord.ForumChannel):
        return ChannelKind.FORUM
    if isinstance(channel, discord.TextChannel | discord.Thread):
        return ChannelKind.TEXT
    return ChannelKind.OTHER


class DiscordDestination:
    """Adapts a discord.py channel to the ``Destination`` protocol."""

    def __init__(self, channel: Any, *, view_timeout: float | None = None) -> None:
        self._channel = channel
        self._view_timeout = view_timeout

    @property
    def id(self) -> str:
        return str(self._channel.id)

    @property
    def name(self) -> str:
        return getattr(self._channel, "name", None) or self.id

    @property
    def kind(self) -> ChannelKind:
        return channel_kind(self._channel)

    @property
    def type_name(self) -> str:
        return str(getattr(self._channel, "type", type(self._channel).__name__))

    @property
    def available_tags(self) -> list[Tag]:
        if self.kind != ChannelKind.FORUM:
            return []
        return [Tag(name=t.name, id=t.id) for t in self._channel.available_tags]

    def _message_kwargs(self, post: RenderedPost) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"embed": build_embed(post)}
        view = build_view(post, timeout=self._view_timeout)
        if view is not None:
            kwargs["view"] = view
        return kwargs

    async def send(self, post: RenderedPost) -> str:
        message = await self._channel.send(**self._message_kwargs(post))
        return str(message.id)

    async def create_thread(self, post: RenderedPost, tag: Tag | None) -> str:
        applied = []
        if tag is not None:
            forum_tag = self._channel.get_tag(int(tag.id))
            if forum_tag is not None:
                applied.append(forum_tag)
        result = await self._channel.create_thread(
            name=post.title[:MAX_THREAD_NAME],
            applied_tags=applied,
            **self._message_kwargs(post),
        )
        return str(result.thread.id)


class DiscordInteractionEvent:
    """Adapts a component ``discord.Interaction`` to ``InteractionEvent``."""

    def __init__(self, interaction: discord.Interaction) -> None:
        self._interaction = interaction

    @property
    def custom_id(self) -> str:
        data = self._interaction.data or {}
        return str(data.get("custom_id", ""))

    @property
    def answered(self) -> bool:
        return self._interaction.response.is_done()

    async def reply(self, view: ResolvedView) -> None:
        kwargs: dict[str, Any] = {"ephemeral": True}
        if view.kind == ViewKind.LIST:
            kwargs["embed"] = discord.Embed(
                title=(view.title or "")[:MAX_TITLE] or None,
                description=view.content[:MAX_DESCRIPTION],
                color=discord.Color.blue(),
            )
        else:
            kwargs["content"] = view.content
        try:
            await self._interaction.response.send_message(**kwargs)
        except discord.InteractionResponded as exc:
            raise InteractionAlreadyAnsweredError(self.custom_id) from exc


class BridgeBot(discord.Client):
    """Gateway client that forwards button presses to the resolver."""

    def __init__(self, resolver: InteractionResolver, **kwargs: Any) -> None:
        kwargs.setdefault("intents", discord.Intents.default())
        super().__init__(**kwargs)
        self.resolver = resolver

    async def on_ready(self) -> None:
        logger.info("Logged in as %s", self.user)

    async def on_interaction(self, interaction: discord.Interaction) -> None:
        if interaction.type != discord.InteractionType.component:
            return
        await handle_interaction(DiscordInteractionEvent(interaction), self.resolver)


class DiscordChatClient:
    """``ChatClient`` backed by a discord.py client."""

    def __init__(self, bot: discord.Client, *, view_timeout: float | None = None) -> None:
        self.bot = bot
        self._view_timeout = view_timeout

    def is_ready(self) -> bool:
        return self.bot.is_ready()

    async def fetch_channel(self, channel_id: str) -> DiscordDestination | None:
        try:
            snowflake = int(channel_id)
        except (TypeError, ValueError):
            logger.warning("Invalid channel id: %r", channel_id)
            return None

        channel = self.bot.get_channel(snowflake)
        if channel is None:
            try:
                channel = await self.bot.fetch_channel(snowflake)
            except (discord.NotFound, discord.Forbidden):
                logger.warning("Channel %s not found or not accessible", channel_id)
                return None
        return DiscordDestination(channel, view_timeout=self._view_timeout)
