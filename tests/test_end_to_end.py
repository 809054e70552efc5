"""Push a playlist over HTTP, then press its button."""

from aiohttp.test_utils import TestClient, TestServer

from playlist_bridge.interactions import ViewKind, handle_interaction
from playlist_bridge.models import Payload
from playlist_bridge.webhooks.server import create_web_app
from tests.fakes import FakeEvent


async def test_push_then_show_venues(publisher, resolver, beijing) -> None:
    client = TestClient(TestServer(create_web_app(publisher)))
    await client.start_server()
    try:
        resp = await client.post(
            "/pushPlaylist",
            json={"title": "Trip", "city": "beijing", "relatedVenues": [{"name": "A"}]},
        )
        data = await resp.json()
    finally:
        await client.close()

    assert data["success"] is True
    submission_id = data["stats"]["submissionId"]
    button = beijing.sent[0].buttons[0]
    assert submission_id in button.custom_id

    event = FakeEvent(button.custom_id)
    await handle_interaction(event, resolver)

    (view,) = event.replies
    assert view.kind == ViewKind.LIST
    assert "A" in view.content


async def test_button_after_expiry_is_unavailable(publisher, resolver, beijing, clock) -> None:
    await publisher.publish(
        Payload.model_validate(
            {"title": "Trip", "city": "beijing", "relatedRoutes": [{"name": "Loop"}]}
        )
    )
    event = FakeEvent(beijing.sent[0].buttons[0].custom_id)
    clock.advance(3600)

    await handle_interaction(event, resolver)

    (view,) = event.replies
    assert view.kind == ViewKind.UNAVAILABLE
