import asyncio


def converse(api, message, session_id=None):
    payload = {"message": message}
    if session_id:
        payload["sessionId"] = session_id
    resp = api.post("/api/chat/conversation", json=payload)
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


def test_conversation_generates_session_id(api, openai_client):
    openai_client.completions.replies.append("Hi! How can I help?")

    data = converse(api, "hello")

    assert data["sessionId"]
    assert data["userMessage"] == "hello"
    assert data["aiResponse"] == "Hi! How can I help?"
    assert "timestamp" in data


def test_history_after_n_exchanges_has_2n_rows_oldest_first(api, openai_client):
    openai_client.completions.replies.extend(["answer 1", "answer 2", "answer 3"])

    session_id = converse(api, "question 1")["sessionId"]
    converse(api, "question 2", session_id)
    converse(api, "question 3", session_id)

    resp = api.get(f"/api/chat/history/{session_id}")

    assert resp.status_code == 200
    messages = resp.json()["data"]["messages"]
    assert [(m["role"], m["content"]) for m in messages] == [
        ("user", "question 1"),
        ("assistant", "answer 1"),
        ("user", "question 2"),
        ("assistant", "answer 2"),
        ("user", "question 3"),
        ("assistant", "answer 3"),
    ]


def test_conversation_sends_prior_turns_as_context(api, openai_client):
    openai_client.completions.replies.extend(["first", "second"])

    session_id = converse(api, "I like blue chairs")["sessionId"]
    converse(api, "what did I like?", session_id)

    messages = openai_client.completions.calls[-1]["messages"]
    assert [m["content"] for m in messages[1:]] == ["I like blue chairs", "first", "what did I like?"]


def test_conversation_history_is_capped(api, openai_client, chat_store):
    openai_client.completions.replies.extend([f"answer {i}" for i in range(7)])

    session_id = converse(api, "question 0")["sessionId"]
    for i in range(1, 7):
        converse(api, f"question {i}", session_id)

    messages = openai_client.completions.calls[-1]["messages"]
    # system prompt + last 10 stored messages + the new user message
    assert len(messages) == 12
    assert messages[1]["content"] == "question 1"
    assert len(chat_store.messages) == 14


def test_clearing_twice_deletes_nothing_the_second_time(api, openai_client):
    openai_client.completions.replies.append("ok")
    session_id = converse(api, "hello")["sessionId"]

    first = api.delete(f"/api/chat/conversation/{session_id}")
    second = api.delete(f"/api/chat/conversation/{session_id}")

    assert first.status_code == 200
    assert first.json()["data"]["deletedCount"] == 2
    assert second.status_code == 200
    assert second.json()["data"] == {"message": "Conversation cleared", "sessionId": session_id, "deletedCount": 0}
    assert api.get(f"/api/chat/history/{session_id}").json()["data"]["messages"] == []


def test_conversation_llm_failure_is_upstream_error(api, openai_client, chat_store):
    openai_client.completions.replies.append(RuntimeError("timeout"))

    resp = api.post("/api/chat/conversation", json={"message": "hello", "sessionId": "s-9"})

    assert resp.status_code == 502
    assert resp.json()["error"]["code"] == "UPSTREAM_ERROR"
    # The user message was stored before the model was asked
    assert [m.role for m in chat_store.messages] == ["user"]


def test_blank_message_is_rejected(api):
    resp = api.post("/api/chat/conversation", json={"message": "   "})

    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_simple_chat(api, openai_client):
    openai_client.completions.replies.append("Printers are in aisle 5.")

    resp = api.post("/api/chat/simple", json={"message": "where are printers?"})

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["userMessage"] == "where are printers?"
    assert data["aiResponse"] == "Printers are in aisle 5."


def test_openai_connection_endpoint(api, openai_client):
    openai_client.completions.replies.append(RuntimeError("invalid api key"))

    resp = api.get("/api/chat/test-openai")

    assert resp.status_code == 200
    assert resp.json()["data"] == {"connected": False, "message": "OpenAI API connection failed"}


def test_model_calls_run_outside_the_event_loop(api, openai_client, monkeypatch):
    on_loop: list[bool] = []
    create = openai_client.completions.create

    def recording_create(**kwargs):
        try:
            asyncio.get_running_loop()
            on_loop.append(True)
        except RuntimeError:
            on_loop.append(False)
        return create(**kwargs)

    monkeypatch.setattr(openai_client.completions, "create", recording_create)
    openai_client.completions.replies.extend(["one", "two"])

    assert api.post("/api/chat/simple", json={"message": "hello"}).status_code == 200
    assert api.post("/api/chat/conversation", json={"message": "hello"}).status_code == 200
    assert on_loop == [False, False]
