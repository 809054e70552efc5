"""Shared test fixtures."""

from __future__ import annotations

import pytest

from playlist_bridge.cache import SubmissionCache
from playlist_bridge.chat.ports import ChannelKind
from playlist_bridge.interactions import InteractionResolver
from playlist_bridge.publisher import PlaylistPublisher
from playlist_bridge.routing import CityRouter
from playlist_bridge.tags import Tag
from tests.fakes import FakeChatClient, FakeClock, FakeDestination

FRONTEND = "https://trips.test"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> SubmissionCache:
    return SubmissionCache(ttl=60.0, clock=clock)


@pytest.fixture
def beijing() -> FakeDestination:
    return FakeDestination("100", name="beijing-trips")


@pytest.fixture
def forum() -> FakeDestination:
    return FakeDestination(
        "300",
        name="shanghai-forum",
        kind=ChannelKind.FORUM,
        tags=[Tag("🍜 Food", 1), Tag("Culture", 2), Tag("Shanghai", 3)],
    )


@pytest.fixture
def router() -> CityRouter:
    return CityRouter({"beijing": "100", "shanghai": "300", "chengdu": "404"}, "200")


@pytest.fixture
def chat(beijing: FakeDestination, forum: FakeDestination) -> FakeChatClient:
    return FakeChatClient(beijing, forum, FakeDestination("200", name="default"))


@pytest.fixture
def publisher(chat: FakeChatClient, router: CityRouter, cache: SubmissionCache) -> PlaylistPublisher:
    return PlaylistPublisher(chat, router, cache)


@pytest.fixture
def resolver(cache: SubmissionCache) -> InteractionResolver:
    return InteractionResolver(cache, FRONTEND)
