"""
Chat widget events and what each one asks of the backend.

The widget emits DOM custom events (`messageSent`, `productClicked`, ...)
whose `detail` objects use camelCase keys. `parse_event` turns a name and
detail into a typed event; `WidgetEventHandler` makes the matching API call.
"""

import base64
import binascii
import logging
from typing import Any, ClassVar

import httpx
from pydantic import Field

from smart_shopper.client.api_client import ShopperApiClient
from smart_shopper.schemas.base import CamelModel
from smart_shopper.schemas.chat import OptionItem, SuggestedPrompt

logger = logging.getLogger(__name__)


class WidgetEvent(CamelModel):
    name: ClassVar[str] = ""
    # Lifecycle events only need logging
    lifecycle: ClassVar[bool] = False


class MessageSent(WidgetEvent):
    name = "messageSent"

    message: str = ""
    has_image: bool = False
    image_data: str | None = None
    user_id: str | None = None


class SuggestedPromptSelected(WidgetEvent):
    name = "suggestedPromptSelected"

    prompt: SuggestedPrompt


class ChoiceSelected(WidgetEvent):
    name = "choiceSelected"

    choice: OptionItem


class ProductClicked(WidgetEvent):
    name = "productClicked"

    product_id: str | None = None
    product_name: str | None = None
    product_url: str | None = None
    product_category: str | None = None


class ImageUploaded(WidgetEvent):
    name = "imageUploaded"
    lifecycle = True

    image_data: str | None = None
    type: str | None = None
    timestamp: Any = None


class ChatError(WidgetEvent):
    name = "chatError"
    lifecycle = True

    error: Any = None
    context: Any = None
    timestamp: Any = None


class ChatOpened(WidgetEvent):
    name = "chatOpened"
    lifecycle = True

    detail: dict[str, Any] = Field(default_factory=dict)


class ChatClosed(ChatOpened):
    name = "chatClosed"


class ChatMinimized(ChatOpened):
    name = "chatMinimized"


class ChatHistoryLoaded(WidgetEvent):
    name = "chatHistoryLoaded"
    lifecycle = True

    message_count: int = 0
    user_id: str | None = None


class SessionStarted(WidgetEvent):
    name = "sessionStarted"
    lifecycle = True

    user_id: str | None = None
    device_id: str | None = None
    timestamp: Any = None


EVENT_TYPES: dict[str, type[WidgetEvent]] = {
    cls.name: cls
    for cls in (
        MessageSent,
        SuggestedPromptSelected,
        ChoiceSelected,
        ProductClicked,
        ImageUploaded,
        ChatError,
        ChatOpened,
        ChatClosed,
        ChatMinimized,
        ChatHistoryLoaded,
        SessionStarted,
    )
}

# Window-state events carry arbitrary detail
DETAIL_WRAPPED = (ChatOpened, ChatClosed, ChatMinimized)


def parse_event(name: str, detail: dict[str, Any] | None = None) -> WidgetEvent:
    """Typed event for a widget event name; raises ValueError for unknown names"""
    event_type = EVENT_TYPES.get(name)
    if event_type is None:
        raise ValueError(f"Unknown widget event: {name}")
    detail = detail or {}
    if event_type in DETAIL_WRAPPED:
        return event_type(detail=detail)
    return event_type.model_validate(detail)


def decode_data_url(data_url: str) -> tuple[bytes, str]:
    """Bytes and mime type of a `data:<mime>;base64,<payload>` URL"""
    header, _, payload = data_url.partition(",")
    if not header.startswith("data:") or not payload:
        raise ValueError("Image data is not a data URL")
    mime_type = header[len("data:"):].split(";")[0] or "image/jpeg"
    try:
        return base64.b64decode(payload, validate=True), mime_type
    except binascii.Error as e:
        raise ValueError(f"Image data is not valid base64: {e}") from e


class WidgetEventHandler:
    """Routes widget events to the backend for one chat session"""

    def __init__(self, client: ShopperApiClient, session_id: str | None = None):
        self.client = client
        self.session_id = session_id

    def handle(self, event: WidgetEvent) -> dict[str, Any] | None:
        """Backend response for the event, or None when no call is needed"""
        if event.lifecycle:
            logger.info(f"Widget event {event.name}: {event.model_dump(exclude_none=True)}")
            return None

        if isinstance(event, MessageSent):
            if event.has_image and event.image_data:
                return self.send_image(event)
            return self.send_text(event.message)

        if isinstance(event, SuggestedPromptSelected):
            return self.send_text(event.prompt.text)

        if isinstance(event, ChoiceSelected):
            return self.send_text(event.choice.value)

        if isinstance(event, ProductClicked):
            return self.client.product_clicked(
                self.session_id,
                product_id=event.product_id,
                product_name=event.product_name,
                product_category=event.product_category,
            )

        logger.warning(f"No handler for widget event {event.name}")
        return None

    def send_text(self, message: str) -> dict[str, Any]:
        """Conversation endpoint first, one-shot chat if it fails"""
        try:
            response = self.client.send_message(message, self.session_id)
        except httpx.HTTPError as e:
            logger.warning(f"Conversation endpoint failed, trying simple chat: {e}")
            return self.client.send_simple(message)

        self.session_id = response.get("data", {}).get("sessionId") or self.session_id
        return response

    def send_image(self, event: MessageSent) -> dict[str, Any]:
        content, mime_type = decode_data_url(event.image_data or "")
        extension = mime_type.split("/")[-1].replace("jpeg", "jpg")
        return self.client.upload_image(
            content,
            filename=f"image.{extension}",
            content_type=mime_type,
            message=event.message or None,
            session_id=self.session_id,
        )
