def post_message(api, message, session_id="session-1"):
    resp = api.post("/api/frontend/message", json={"message": message, "sessionId": session_id})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["success"] is True
    return body


def test_hello_returns_message_and_suggested_prompts(api):
    body = post_message(api, "Hello")

    blocks = body["response"]
    assert [b["type"] for b in blocks] == ["message", "suggested_prompts"]
    assert len(blocks[1]["data"]["prompts"]) >= 1
    assert body["sessionId"] == "session-1"


def test_hi_inside_another_word_is_not_a_greeting(api, openai_client):
    openai_client.completions.replies.append({"message": "Happy to help with this."})

    body = post_message(api, "Is this in stock?")

    assert body["response"]["type"] == "message"
    assert body["response"]["data"]["text"] == "Happy to help with this."


def test_compare_brands_returns_cheapest_per_vendor(api):
    body = post_message(api, "compare dell and lenovo")

    block = body["response"]
    assert block["type"] == "comparison"
    products = block["data"]["products"]
    assert [(p["brand"], p["price"]) for p in products] == [("Dell", 649.99), ("Lenovo", 549.0)]
    assert block["data"]["highlightDifferences"] is True
    assert block["data"]["message"] == "Here's a comparison of dell vs lenovo products:"


def test_comparison_specifications_skip_type_and_empty_values(api):
    body = post_message(api, "compare dell vs lenovo laptops")

    dell = body["response"]["data"]["products"][0]
    assert dell["specifications"] == [
        {"name": "Processor", "value": "Intel Core i5"},
        {"name": "Memory", "value": "8GB"},
    ]
    assert dell["compareAtPrice"] == 699.99
    assert dell["image"] == "http://localhost:3000/uploads/images/products/dell-inspiron.jpg"


def test_compare_category_uses_three_cheapest(api):
    body = post_message(api, "compare laptops")

    products = body["response"]["data"]["products"]
    assert [p["price"] for p in products] == [549.0, 649.99, 1199.0]


def test_compare_without_enough_products_returns_hint(api):
    body = post_message(api, "compare printers")

    assert body["response"]["type"] == "message"
    assert "compare dell and lenovo" in body["response"]["data"]["text"]


def test_search_word_returns_products_block(api):
    body = post_message(api, "Find me a laptop")

    block = body["response"]
    assert block["type"] == "products"
    assert block["data"]["message"] == "I found 3 laptop products for you:"
    cards = block["data"]["products"]
    assert [c["price"] for c in cards] == [549.0, 649.99, 1199.0]
    assert cards[0]["availability"] == "In Stock"
    assert cards[0]["image"] == "http://localhost:3000/uploads/images/categories/default.jpg"
    assert "compareAtPrice" not in cards[0]


def test_browse_returns_category_options(api):
    body = post_message(api, "browse categories")

    block = body["response"]
    assert block["type"] == "options"
    assert [o["value"] for o in block["data"]["options"]] == ["office", "tech", "furniture", "printers"]
    assert block["data"]["allowSkip"] is True


def test_ai_reply_with_choices_stores_plan(api, openai_client, plan_service):
    openai_client.completions.replies.append(
        {
            "message": "Let's build your **home office**.",
            "choices": [{"label": "Chairs", "value": "chairs", "icon": "🪑"}],
            "shoppingPlan": {"items": ["chair", "desk"], "selectedItems": []},
        }
    )

    body = post_message(api, "I need to set up a home office")

    blocks = body["response"]
    assert [b["type"] for b in blocks] == ["message", "options"]
    assert blocks[0]["data"]["format"] == "markdown"
    assert blocks[1]["data"]["options"][0]["value"] == "chairs"
    assert plan_service.get("session-1").items == ["chair", "desk"]


def test_ai_reply_includes_keyword_products(api, openai_client):
    openai_client.completions.replies.append({"message": "Here are some options."})

    body = post_message(api, "desk ideas please")

    blocks = body["response"]
    assert [b["type"] for b in blocks] == ["message", "products"]
    assert [p["name"] for p in blocks[1]["data"]["products"]] == ["LED Desk Lamp"]
    assert blocks[1]["data"]["hasMore"] is False


def test_ai_failure_returns_static_fallback(api, openai_client):
    openai_client.completions.replies.append(RuntimeError("provider down"))

    body = post_message(api, "tell me about your services")

    assert body["response"]["type"] == "message"
    assert "having trouble" in body["response"]["data"]["text"]


def test_missing_message_is_rejected(api):
    resp = api.post("/api/frontend/message", json={"sessionId": "s"})

    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["error"]["code"] == "INVALID_REQUEST"


def test_frontend_flow_is_not_persisted(api, chat_store):
    post_message(api, "Hello")

    assert chat_store.messages == []


def test_product_click_marks_plan_item_and_reminds(api, plan_service):
    from smart_shopper.schemas.chat import ShoppingPlan

    plan_service.adopt("session-1", ShoppingPlan(items=["chair", "desk"]))

    resp = api.post(
        "/api/frontend/product-clicked",
        json={"sessionId": "session-1", "productName": "LED Desk Lamp", "productCategory": "desk lamp"},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["hasReminder"] is True
    message, options = body["response"]
    assert "**desk**" in message["data"]["text"]
    assert [o["label"] for o in options["data"]["options"]] == ["Show me chair"]
    assert plan_service.get("session-1").selected_items == ["desk"]


def test_product_click_completing_plan_clears_it(api, plan_service):
    from smart_shopper.schemas.chat import ShoppingPlan

    plan_service.adopt("session-1", ShoppingPlan(items=["chair"]))

    body = api.post(
        "/api/frontend/product-clicked",
        json={"sessionId": "session-1", "productCategory": "Office Chair"},
    ).json()

    assert body["hasReminder"] is True
    assert "Congratulations" in body["response"]["data"]["text"]
    assert plan_service.get("session-1") is None


def test_product_click_without_plan_has_no_reminder(api):
    body = api.post("/api/frontend/product-clicked", json={"sessionId": "nobody"}).json()

    assert body == {"success": True, "hasReminder": False, "timestamp": body["timestamp"]}
