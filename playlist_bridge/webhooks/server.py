"""Async HTTP server receiving playlist pushes.

Runs alongside the Discord gateway client in the same asyncio event loop.
Uses aiohttp's AppRunner/TCPSite for non-blocking start/stop.
"""

from __future__ import annotations

import logging
import traceback
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from aiohttp import web
from pydantic import ValidationError

from playlist_bridge.config import settings
from playlist_bridge.models import Payload
from playlist_bridge.routing import normalize_city

if TYPE_CHECKING:
    from playlist_bridge.publisher import PlaylistPublisher

logger = logging.getLogger(__name__)

PUBLISHER_KEY: web.AppKey[PlaylistPublisher] = web.AppKey("publisher")

_CORS_METHODS = "GET, POST, OPTIONS"
_CORS_HEADERS = "Content-Type, Authorization"


def _failure(error: str, exc: BaseException | None = None, *, status: int = 500) -> web.Response:
    body: dict[str, Any] = {"success": False, "error": error}
    if exc is not None and settings.is_development:
        body["details"] = "".join(traceback.format_exception(exc))
    return web.json_response(body, status=status)


@web.middleware
async def cors_middleware(request: web.Request, handler) -> web.StreamResponse:
    """Answer preflights and tag responses for allow-listed origins."""
    origin = request.headers.get("Origin", "").rstrip("/")
    allowed = origin and origin in settings.get_allowed_origins()

    if request.method == "OPTIONS":
        response: web.StreamResponse = web.Response(status=204 if allowed else 403)
    else:
        response = await handler(request)

    if allowed:
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Methods"] = _CORS_METHODS
        response.headers["Access-Control-Allow-Headers"] = _CORS_HEADERS
        response.headers["Vary"] = "Origin"
    elif origin:
        logger.debug("CORS origin not allowed: %s", origin)
    return response


async def _push_playlist(request: web.Request) -> web.Response:
    """POST /pushPlaylist: publish a playlist to its city's channel."""
    publisher = request.app[PUBLISHER_KEY]

    try:
        data = await request.json()
    except Exception as exc:
        logger.warning("pushPlaylist bad request: invalid JSON")
        return _failure("Invalid JSON body", exc, status=400)

    try:
        payload = Payload.model_validate(data)
    except ValidationError as exc:
        logger.warning("pushPlaylist bad request: %d validation error(s)", exc.error_count())
        return _failure("Invalid playlist payload", exc, status=400)

    try:
        result = await publisher.publish(payload)
    except Exception as exc:
        logger.exception("Push failed: title=%r, city=%r", payload.title, payload.city)
        return _failure(str(exc) or type(exc).__name__, exc)

    return web.json_response(
        {
            "success": True,
            "message": f"Playlist pushed to Discord #{result.channel_name}",
            "stats": result.stats(),
        }
    )


async def _health(request: web.Request) -> web.Response:
    """GET /: liveness plus bot connection state."""
    publisher = request.app[PUBLISHER_KEY]
    return web.json_response(
        {
            "status": "ok",
            "botReady": publisher.chat.is_ready(),
            "timestamp": datetime.now(UTC).isoformat(),
        }
    )


async def _admin_channels(request: web.Request) -> web.Response:
    """GET /admin/channels: per-city channel configuration and reachability."""
    publisher = request.app[PUBLISHER_KEY]
    channels = await publisher.channel_status()
    return web.json_response(
        {
            "botReady": publisher.chat.is_ready(),
            "cachedSubmissions": len(publisher.cache),
            "channels": channels,
        }
    )


async def _test_city(request: web.Request) -> web.Response:
    """GET /test/city/{cityName}: show how a city name would be routed."""
    publisher = request.app[PUBLISHER_KEY]
    city = request.match_info["cityName"]
    result = publisher.router.match(city)
    return web.json_response(
        {
            "input": city,
            "normalized": normalize_city(city),
            "channelId": result.channel_id,
            "matched": result.match,
            "key": result.key,
        }
    )


def _deprecated_stub(item_type: str):
    async def handler(request: web.Request) -> web.Response:
        item_id = request.match_info["id"]
        redirect = f"{settings.frontend_base_url.rstrip('/')}/{item_type}/{item_id}"
        return web.json_response(
            {
                "deprecated": True,
                "message": f"/{item_type}/{{id}} is no longer served here",
                "redirect": redirect,
            },
            status=410,
        )

    return handler


def create_web_app(publisher: PlaylistPublisher) -> web.Application:
    """Build the aiohttp Application with routes."""
    app = web.Application(middlewares=[cors_middleware])
    app[PUBLISHER_KEY] = publisher
    app.router.add_get("/", _health)
    app.router.add_post("/pushPlaylist", _push_playlist)
    app.router.add_get("/admin/channels", _admin_channels)
    app.router.add_get("/test/city/{cityName}", _test_city)
    app.router.add_get("/venue/{id}", _deprecated_stub("venue"))
    app.router.add_get("/route/{id}", _deprecated_stub("route"))
    return app


class WebhookServer:
    """Manages the aiohttp server lifecycle."""

    def __init__(
        self,
        publisher: PlaylistPublisher,
        *,
        host: str | None = None,
        port: int | None = None,
    ) -> None:
        self.publisher = publisher
        self.host = host or settings.host
        self.port = port or settings.port
        self._runner: web.AppRunner | None = None

    async def start(self) -> None:
        """Start listening for playlist pushes."""
        app = create_web_app(self.publisher)
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info("API running on %s:%d", self.host, self.port)

    async def stop(self) -> None:
        """Shut down the server gracefully."""
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
            logger.info("HTTP server stopped")
