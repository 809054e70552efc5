"""Tests for post rendering."""

import pytest

from playlist_bridge.chat.ports import ChannelKind
from playlist_bridge.errors import UnsupportedDestinationError
from playlist_bridge.models import Payload
from playlist_bridge.render import (
    NO_DESCRIPTION,
    UNTITLED,
    DisplayMode,
    render_post,
    usable_image_url,
)
from playlist_bridge.tags import Tag

from tests.fakes import FakeDestination


def _payload(**kwargs) -> Payload:
    return Payload.model_validate(kwargs)


def _field(post, name):
    return next(f for f in post.fields if f.name == name)


def test_placeholders_when_empty() -> None:
    post = render_post(_payload(), "sid1")
    assert post.title == UNTITLED
    assert post.body == NO_DESCRIPTION
    assert _field(post, "City").value == "Unknown"
    assert _field(post, "Venues").value == "0"
    assert post.buttons == []
    assert post.image_url is None
    assert post.display_mode == DisplayMode.FLAT


def test_summary_fields() -> None:
    post = render_post(
        _payload(
            title="Trip",
            description="Eat",
            city="Beijing",
            travelType="Foodie",
            relatedVenues=[{"name": "A"}],
            relatedRoutes=[{"name": "R1"}, {"name": "R2"}],
        ),
        "sid1",
    )
    assert post.title == "Trip"
    assert post.body == "Eat"
    assert _field(post, "City").value == "Beijing"
    assert _field(post, "Travel Type").value == "Foodie"
    assert _field(post, "Venues").value == "1"
    assert _field(post, "Routes").value == "2"
    assert post.timestamp.tzinfo is not None


def test_venue_preview_truncates_to_three() -> None:
    venues = [{"name": n} for n in "ABCDE"]
    post = render_post(_payload(relatedVenues=venues), "sid1")
    preview = _field(post, "Featured Venues").value.splitlines()
    assert preview == ["• A", "• B", "• C", "...and 2 more"]


def test_route_preview_truncates_to_two() -> None:
    routes = [{"name": n} for n in ("R1", "R2", "R3")]
    post = render_post(_payload(relatedRoutes=routes), "sid1")
    assert _field(post, "Featured Routes").value.splitlines() == ["• R1", "• R2", "...and 1 more"]


def test_short_preview_has_no_marker() -> None:
    post = render_post(_payload(relatedVenues=[{"name": "A"}, {"name": "B"}]), "sid1")
    assert "more" not in _field(post, "Featured Venues").value


def test_placeholder_image_is_dropped() -> None:
    post = render_post(_payload(imageUrl="https://example.com/cover.jpg"), "sid1")
    assert post.image_url is None


def test_real_image_is_kept() -> None:
    assert usable_image_url("https://cdn.test/a.jpg") == "https://cdn.test/a.jpg"
    assert usable_image_url(None) is None


def test_buttons_embed_submission_id() -> None:
    post = render_post(
        _payload(
            relatedVenues=[{"name": "A"}],
            relatedRoutes=[{"name": "R"}],
            pageUrl="https://trips.test/p/1",
        ),
        "abc123",
    )
    ids = [b.custom_id for b in post.buttons if b.custom_id]
    assert ids == ["show_venues_abc123", "show_routes_abc123"]
    link = post.buttons[-1]
    assert link.url == "https://trips.test/p/1"
    assert link.custom_id is None
    assert post.url == "https://trips.test/p/1"


def test_only_venue_button_without_routes() -> None:
    post = render_post(_payload(relatedVenues=[{"name": "A"}]), "s")
    assert [b.custom_id for b in post.buttons] == ["show_venues_s"]


# -- Display mode ------------------------------------------------------------


def test_text_destination_is_flat() -> None:
    post = render_post(_payload(title="Trip"), "s", FakeDestination("1"))
    assert post.display_mode == DisplayMode.FLAT
    assert post.tag is None


def test_forum_destination_is_threaded_with_tag() -> None:
    forum = FakeDestination(
        "2", kind=ChannelKind.FORUM, tags=[Tag("Culture", 1), Tag("Food", 2)]
    )
    post = render_post(_payload(title="Trip", travelType="Foodie"), "s", forum)
    assert post.display_mode == DisplayMode.THREADED
    assert post.tag == Tag("Food", 2)


def test_forum_without_tags_has_no_tag() -> None:
    post = render_post(_payload(), "s", FakeDestination("2", kind=ChannelKind.FORUM))
    assert post.display_mode == DisplayMode.THREADED
    assert post.tag is None


def test_other_destination_is_rejected() -> None:
    with pytest.raises(UnsupportedDestinationError) as exc_info:
        render_post(_payload(), "s", FakeDestination("9", kind=ChannelKind.OTHER))
    assert exc_info.value.channel_id == "9"
    assert "other" in str(exc_info.value)
