"""Playlist bridge entry point."""

import asyncio
import contextlib
import logging

from playlist_bridge.config import settings

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
)
logger = logging.getLogger(__name__)


async def run() -> None:
    """Start the HTTP server, cache sweeper and Discord client."""
    from playlist_bridge.cache import SubmissionCache
    from playlist_bridge.chat.discord_client import BridgeBot, DiscordChatClient
    from playlist_bridge.interactions import InteractionResolver
    from playlist_bridge.publisher import PlaylistPublisher
    from playlist_bridge.routing import CityRouter
    from playlist_bridge.webhooks.server import WebhookServer

    cache = SubmissionCache(
        settings.submission_ttl_seconds,
        sweep_interval=settings.cache_sweep_interval_seconds,
    )
    router = CityRouter.from_settings(settings)
    resolver = InteractionResolver(cache, settings.frontend_base_url)
    bot = BridgeBot(resolver)
    chat = DiscordChatClient(bot, view_timeout=settings.submission_ttl_seconds)
    publisher = PlaylistPublisher(
        chat, router, cache, credential_configured=bool(settings.discord_bot_token)
    )
    server = WebhookServer(publisher)

    if router.default_channel_id is None:
        logger.warning("DEFAULT_CHANNEL_ID is empty; unmatched cities will be rejected")
    logger.info("City channels: %s", router.mapping or "none configured")

    cache.start()
    await server.start()
    try:
        if settings.discord_bot_token:
            async with bot:
                await bot.start(settings.discord_bot_token)
        else:
            logger.error("DISCORD_BOT_TOKEN is empty, serving HTTP only and pushes will fail")
            await asyncio.Event().wait()
    finally:
        await server.stop()
        await cache.stop()


def main() -> None:
    """Run until interrupted."""
    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(run())


if __name__ == "__main__":
    main()
