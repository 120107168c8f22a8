"""
Canned API responses for working without a backend.

`handle` is an `httpx.MockTransport` handler: it answers by path, echoing
the message and session id of chat requests back in the response.
"""

import json
import time
from typing import Any

import httpx

from smart_shopper.schemas.base import utc_now

MOCK_PRODUCTS: list[dict[str, Any]] = [
    {
        "id": "1",
        "title": 'Premium Multi-Purpose Paper, 8.5" x 11", Case',
        "vendor": "Generic",
        "category": "Paper & Stationery",
        "price": 49.99,
        "inStock": True,
        "url": "",
        "images": [],
    },
    {
        "id": "2",
        "title": "Ergonomic Mesh Office Chair",
        "vendor": "Generic",
        "category": "Furniture",
        "price": 299.99,
        "inStock": True,
        "url": "",
        "images": [],
    },
    {
        "id": "3",
        "title": "HP OfficeJet Pro 9015e Wireless All-in-One Printer",
        "vendor": "HP",
        "category": "Technology",
        "price": 199.99,
        "inStock": True,
        "url": "",
        "images": [],
    },
]

MOCK_FAQS: list[dict[str, Any]] = [
    {
        "id": "1",
        "question": "What is your return policy?",
        "answer": "We accept returns within 30 days of purchase with a valid receipt.",
        "category": "Returns & Exchanges",
    },
    {
        "id": "2",
        "question": "Do you offer free shipping?",
        "answer": "Yes! Free shipping on orders over $50.",
        "category": "Shipping",
    },
]

MOCK_CATEGORIES: dict[str, Any] = {
    "predefined": [
        {"name": "Tech & Electronics", "slug": "tech-electronics", "count": 85},
        {"name": "Office Supplies", "slug": "office-supplies", "count": 100},
        {"name": "Furniture", "slug": "furniture", "count": 60},
    ],
    "database": [],
}


def mock_session_id() -> str:
    return f"mock-session-{int(time.time() * 1000)}"


def chat_reply(message: str) -> tuple[str, list[dict[str, Any]]]:
    """Keyword-picked reply text and products for a chat message"""
    lowered = message.lower()
    if any(word in lowered for word in ("chair", "furniture", "office supplies")):
        return (
            "Great choice! The Ergonomic Mesh Office Chair is very popular and offers excellent lumbar support.",
            [MOCK_PRODUCTS[1]],
        )
    if any(word in lowered for word in ("printer", "technology", "laptop")):
        return (
            "The HP OfficeJet Pro 9015e is an excellent all-in-one solution for any office.",
            [MOCK_PRODUCTS[2]],
        )
    if any(word in lowered for word in ("paper", "print", "stationery")):
        return (
            "For your printing needs, I recommend our premium multi-purpose paper.",
            [MOCK_PRODUCTS[0]],
        )
    if any(word in lowered.split() for word in ("hello", "hi")):
        return (
            "Hello! 👋 I'm your AI shopping assistant. I can help you find office chairs, paper, printers, and more.",
            [],
        )
    return (
        f'I understand you\'re looking for products related to "{message}". Here are some popular items!',
        list(MOCK_PRODUCTS),
    )


def request_json(request: httpx.Request) -> dict[str, Any]:
    try:
        body = json.loads(request.content or b"{}")
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def ok(data: Any) -> httpx.Response:
    return httpx.Response(200, json={"success": True, "data": data})


def handle(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    now = utc_now().isoformat()

    if path.endswith("/health"):
        return httpx.Response(
            200,
            json={"success": True, "message": "Service is healthy", "timestamp": now, "environment": "mock"},
        )

    if request.method == "POST" and ("/chat/simple" in path or "/chat/conversation" in path):
        body = request_json(request)
        message = body.get("message") or "Hello"
        ai_response, products = chat_reply(message)
        data = {
            "userMessage": message,
            "aiResponse": ai_response,
            "timestamp": now,
            "products": products,
        }
        if "/chat/conversation" in path:
            data["sessionId"] = body.get("sessionId") or mock_session_id()
        return ok(data)

    if "/frontend/message" in path:
        body = request_json(request)
        ai_response, _ = chat_reply(body.get("message") or "Hello")
        return httpx.Response(
            200,
            json={
                "success": True,
                "timestamp": now,
                "sessionId": body.get("sessionId"),
                "response": {"type": "message", "data": {"text": ai_response, "format": "plain"}},
            },
        )

    if "/categories/list" in path:
        return ok(MOCK_CATEGORIES)

    if "/products" in path:
        return ok(
            {
                "products": MOCK_PRODUCTS,
                "pagination": {"total": len(MOCK_PRODUCTS), "page": 1, "limit": 10, "pages": 1},
            }
        )

    if "/faq" in path:
        return ok({"results": MOCK_FAQS, "query": request.url.params.get("q", ""), "total": len(MOCK_FAQS)})

    return httpx.Response(
        404,
        json={
            "success": False,
            "timestamp": now,
            "error": {"code": "NOT_FOUND", "message": f"No mock response for {request.method} {path}"},
        },
    )
