import json

import httpx
import pytest

from smart_shopper.client.api_client import ShopperApiClient
from smart_shopper.client.events import (
    ChatOpened,
    ChoiceSelected,
    MessageSent,
    ProductClicked,
    WidgetEventHandler,
    decode_data_url,
    parse_event,
)

PNG_DATA_URL = "data:image/png;base64,iVBORw0KGgo="


class RecordingTransport(httpx.MockTransport):
    """Mock transport that keeps every request it answered"""

    def __init__(self, responder):
        self.requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return responder(request)

        super().__init__(handler)


def test_mock_client_health():
    with ShopperApiClient.mock() as client:
        body = client.health()

    assert body["success"] is True
    assert body["environment"] == "mock"


def test_mock_conversation_echoes_session_id():
    with ShopperApiClient.mock() as client:
        data = client.send_message("I need a chair", session_id="abc")["data"]
        fresh = client.send_message("hello")["data"]

    assert data["sessionId"] == "abc"
    assert data["products"][0]["title"] == "Ergonomic Mesh Office Chair"
    assert fresh["sessionId"].startswith("mock-session-")
    assert fresh["products"] == []


def test_mock_catalog_and_faq():
    with ShopperApiClient.mock() as client:
        assert len(client.products()["data"]["products"]) == 3
        assert client.categories()["data"]["predefined"][0]["slug"] == "tech-electronics"
        assert client.search_faq("returns")["data"]["query"] == "returns"


def test_unknown_route_raises_status_error():
    with ShopperApiClient.mock() as client:
        with pytest.raises(httpx.HTTPStatusError) as excinfo:
            client.history("abc")

    assert excinfo.value.response.status_code == 404


def test_parse_event_builds_typed_events():
    event = parse_event("productClicked", {"productId": "p1", "productCategory": "Chair"})

    assert isinstance(event, ProductClicked)
    assert event.product_category == "Chair"
    assert isinstance(parse_event("chatOpened", {"anything": 1}), ChatOpened)
    assert parse_event("choiceSelected", {"choice": {"label": "Chairs", "value": "chairs"}}).choice.value == "chairs"


def test_parse_event_rejects_unknown_names():
    with pytest.raises(ValueError):
        parse_event("somethingElse", {})


def test_decode_data_url():
    content, mime_type = decode_data_url(PNG_DATA_URL)

    assert mime_type == "image/png"
    assert content.startswith(b"\x89PNG")
    with pytest.raises(ValueError):
        decode_data_url("not a data url")
    with pytest.raises(ValueError):
        decode_data_url("data:image/png;base64,@@@")


def test_text_message_falls_back_to_simple_chat():
    def responder(request):
        if request.url.path.endswith("/chat/conversation"):
            return httpx.Response(500, json={"success": False})
        return httpx.Response(200, json={"success": True, "data": {"aiResponse": "fallback"}})

    transport = RecordingTransport(responder)
    handler = WidgetEventHandler(ShopperApiClient(transport=transport), session_id="s1")

    body = handler.handle(MessageSent(message="hi there"))

    assert body["data"]["aiResponse"] == "fallback"
    assert [r.url.path for r in transport.requests] == ["/api/chat/conversation", "/api/chat/simple"]


def test_text_message_adopts_server_session_id():
    handler = WidgetEventHandler(ShopperApiClient.mock())

    handler.handle(parse_event("suggestedPromptSelected", {"prompt": {"id": "p1", "text": "Find me a laptop"}}))

    assert handler.session_id.startswith("mock-session-")


def test_choice_sends_its_value():
    transport = RecordingTransport(lambda request: httpx.Response(200, json={"success": True, "data": {}}))
    handler = WidgetEventHandler(ShopperApiClient(transport=transport))

    handler.handle(ChoiceSelected.model_validate({"choice": {"label": "Chairs", "value": "chairs"}}))

    assert json.loads(transport.requests[0].content) == {"message": "chairs"}


def test_image_message_uploads_multipart():
    transport = RecordingTransport(lambda request: httpx.Response(200, json={"success": True, "data": {}}))
    handler = WidgetEventHandler(ShopperApiClient(transport=transport), session_id="s1")

    handler.handle(parse_event("messageSent", {"message": "what is this?", "hasImage": True, "imageData": PNG_DATA_URL}))

    request = transport.requests[0]
    assert request.url.path == "/api/upload/image-chat"
    assert request.headers["content-type"].startswith("multipart/form-data")
    body = request.content
    assert b'filename="image.png"' in body
    assert b'name="sessionId"' in body


def test_product_click_posts_only_known_fields():
    transport = RecordingTransport(lambda request: httpx.Response(200, json={"success": True, "hasReminder": False}))
    handler = WidgetEventHandler(ShopperApiClient(transport=transport), session_id="s1")

    handler.handle(ProductClicked(product_id="p1", product_category="Chair"))

    assert json.loads(transport.requests[0].content) == {
        "sessionId": "s1",
        "productId": "p1",
        "productCategory": "Chair",
    }


def test_lifecycle_events_make_no_calls():
    transport = RecordingTransport(lambda request: httpx.Response(200, json={}))
    handler = WidgetEventHandler(ShopperApiClient(transport=transport))

    assert handler.handle(parse_event("chatOpened", {"source": "button"})) is None
    assert handler.handle(parse_event("sessionStarted", {"userId": "u1"})) is None
    assert transport.requests == []
