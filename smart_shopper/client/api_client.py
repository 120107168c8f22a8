"""HTTP client for the shopping assistant API"""

import logging
from typing import Any

import httpx

from smart_shopper.client import mock_api

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3000/api"


class ShopperApiClient:
    """
    Thin wrapper over the REST endpoints.

    The transport decides where requests go: the network by default, or an
    in-process `httpx.MockTransport` serving canned responses (see `mock()`).
    Non-2xx responses raise `httpx.HTTPStatusError`.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        transport: httpx.BaseTransport | None = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url
        self.client = httpx.Client(
            base_url=base_url,
            transport=transport,
            timeout=timeout,
            event_hooks={"request": [self._log_request], "response": [self._log_response]},
        )

    @classmethod
    def mock(cls, base_url: str = DEFAULT_BASE_URL) -> "ShopperApiClient":
        return cls(base_url=base_url, transport=httpx.MockTransport(mock_api.handle))

    @staticmethod
    def _log_request(request: httpx.Request) -> None:
        logger.debug(f"API request: {request.method} {request.url.path}")

    @staticmethod
    def _log_response(response: httpx.Response) -> None:
        request = response.request
        logger.debug(f"API response: {request.method} {request.url.path} {response.status_code}")

    def _send(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        response = self.client.request(method, path, **kwargs)
        if response.is_error:
            logger.error(f"API error: {method} {path} {response.status_code}")
        response.raise_for_status()
        return response.json()

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "ShopperApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ============================================================================
    # Chat
    # ============================================================================

    def send_message(self, message: str, session_id: str | None = None) -> dict[str, Any]:
        """Conversation endpoint (history kept server-side)"""
        payload = {"message": message}
        if session_id:
            payload["sessionId"] = session_id
        return self._send("POST", "/chat/conversation", json=payload)

    def send_simple(self, message: str) -> dict[str, Any]:
        return self._send("POST", "/chat/simple", json={"message": message})

    def history(self, session_id: str) -> dict[str, Any]:
        return self._send("GET", f"/chat/history/{session_id}")

    def clear_conversation(self, session_id: str) -> dict[str, Any]:
        return self._send("DELETE", f"/chat/conversation/{session_id}")

    def test_openai(self) -> dict[str, Any]:
        return self._send("GET", "/chat/test-openai")

    # ============================================================================
    # Widget endpoints
    # ============================================================================

    def frontend_message(self, message: str, session_id: str | None = None) -> dict[str, Any]:
        payload = {"message": message}
        if session_id:
            payload["sessionId"] = session_id
        return self._send("POST", "/frontend/message", json=payload)

    def product_clicked(
        self,
        session_id: str | None,
        product_id: str | None = None,
        product_name: str | None = None,
        product_category: str | None = None,
    ) -> dict[str, Any]:
        payload = {
            "sessionId": session_id,
            "productId": product_id,
            "productName": product_name,
            "productCategory": product_category,
        }
        return self._send("POST", "/frontend/product-clicked", json={k: v for k, v in payload.items() if v})

    def upload_image(
        self,
        content: bytes,
        filename: str = "image.jpg",
        content_type: str = "image/jpeg",
        message: str | None = None,
        session_id: str | None = None,
    ) -> dict[str, Any]:
        form = {}
        if message:
            form["message"] = message
        if session_id:
            form["sessionId"] = session_id
        return self._send("POST", "/upload/image-chat", files={"image": (filename, content, content_type)}, data=form)

    # ============================================================================
    # Catalog, FAQ, health
    # ============================================================================

    def products(self, page: int = 1, limit: int = 10) -> dict[str, Any]:
        return self._send("GET", "/products", params={"page": page, "limit": limit})

    def categories(self) -> dict[str, Any]:
        return self._send("GET", "/products/categories/list")

    def search_faq(self, query: str, limit: int = 10) -> dict[str, Any]:
        return self._send("GET", "/faq/search", params={"q": query, "limit": limit})

    def health(self) -> dict[str, Any]:
        return self._send("GET", "/health")
