import pytest
from httpx import ASGITransport, AsyncClient

from textsmith.api import routes
from textsmith.config import Settings, get_settings
from textsmith.main import create_application
from textsmith.service import TextService, get_service


@pytest.fixture(scope="module")
def test_app():
    return create_application()


@pytest.fixture(autouse=True)
def fresh_service():
    get_service.cache_clear()
    yield
    get_service.cache_clear()


def client_for(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")


@pytest.mark.anyio
async def test_transform_endpoint_applies_rules(test_app):
    payload = {"text": "This is basically a good idea.", "style": "concise"}
    async with client_for(test_app) as client:
        response = await client.post("/v1/transform", json=payload)
    assert response.status_code == 200
    body = response.json()
    assert body["text"] == "This is a good idea."
    assert body["rules_applied"] == ["style_concise_applied"]
    assert body["change_ratio"] == pytest.approx(0.17)
    assert body["cached"] is False
    provenance = body["provenance"]
    assert provenance["rewrite_id"].startswith("rewrite_")
    assert provenance["source_preview"] == payload["text"]
    assert provenance["settings"] == {"style": "concise"}


@pytest.mark.anyio
async def test_repeat_transform_is_served_from_cache(test_app):
    payload = {"text": "Hey, I wanna go.", "tone": "formal"}
    async with client_for(test_app) as client:
        first = await client.post("/v1/transform", json=payload)
        second = await client.post("/v1/transform", json=payload)
        uncached = await client.post("/v1/transform", json={**payload, "use_cache": False})
    assert first.json()["cached"] is False
    assert second.json()["cached"] is True
    assert second.json()["text"] == first.json()["text"] == "Hello, I want to go."
    assert second.json()["elapsed_ms"] == 0.0
    assert uncached.json()["cached"] is False


@pytest.mark.anyio
async def test_scoped_rewrites_feed_undo_history(test_app):
    scope = "notes.example"
    async with client_for(test_app) as client:
        await client.post(
            "/v1/transform", json={"text": "One. Two. Three.", "length": "short", "scope": scope}
        )
        await client.post(
            "/v1/transform", json={"text": "Yeah sure.", "tone": "formal", "scope": scope}
        )
        listed = await client.get(f"/v1/history/{scope}")
        undone = await client.post(f"/v1/history/{scope}/undo")
        cleared = await client.delete(f"/v1/history/{scope}")
        empty_undo = await client.post(f"/v1/history/{scope}/undo")

    actions = listed.json()["actions"]
    assert len(actions) == 2
    assert actions[0]["action_type"] == "rewrite"
    assert actions[0]["data"]["source_text"] == "Yeah sure."
    assert actions[1]["data"]["result_text"] == "One."

    assert undone.json()["action"]["data"]["source_text"] == "Yeah sure."
    assert undone.json()["remaining"] == 1

    assert cleared.json() == {"scope": scope, "actions": []}
    assert empty_undo.json()["action"] is None
    assert empty_undo.json()["remaining"] == 0


@pytest.mark.anyio
async def test_analyze_endpoint(test_app):
    payload = {
        "text": "Happy people enjoy music. Music makes people happy. Really.",
        "maxKeywords": 2,
    }
    async with client_for(test_app) as client:
        response = await client.post("/v1/analyze", json=payload)
    assert response.status_code == 200
    body = response.json()
    assert body["keywords"] == ["happy", "people"]
    assert body["summary"] == "Happy people enjoy music. Music makes people happy."
    assert 0 <= body["score"] <= 100


@pytest.mark.anyio
async def test_messages_endpoint_speaks_the_envelope_contract(test_app):
    async with client_for(test_app) as client:
        ok = await client.post(
            "/v1/messages",
            json={"id": "m-1", "type": "keywords", "payload": {"text": "quick quick brown"}},
        )
        unknown = await client.post(
            "/v1/messages", json={"id": "m-2", "type": "translate", "payload": {"text": "x"}}
        )
        cancel = await client.post("/v1/messages", json={"id": "m-3", "type": "cancel"})
        not_an_object = await client.post("/v1/messages", json=["nope"])

    assert ok.status_code == 200
    assert ok.json()["status"] == "ok"
    assert ok.json()["result"] == {"keywords": ["quick", "brown"]}

    body = unknown.json()
    assert body["status"] == "error"
    assert body["error"] == "Unknown request type"
    assert "result" not in body

    assert cancel.status_code == 204
    assert not_an_object.status_code == 400


@pytest.mark.anyio
async def test_batch_endpoint_honours_cancellation(test_app):
    payload = {
        "messages": [
            {"id": "b-1", "type": "transform", "payload": {"text": "Hi.", "settings": {}}},
            {"id": "b-2", "type": "score", "payload": {"text": "Short one."}},
            {"id": "b-1", "type": "cancel"},
        ]
    }
    async with client_for(test_app) as client:
        response = await client.post("/v1/messages/batch", json=payload)
        empty = await client.post("/v1/messages/batch", json={"messages": []})
    assert response.status_code == 200
    by_id = {envelope["id"]: envelope for envelope in response.json()}
    assert by_id["b-1"]["errorCode"] == "cancelled"
    assert by_id["b-2"]["status"] == "ok"
    assert empty.status_code == 400


@pytest.mark.anyio
async def test_unknown_profile_lists_available_ids(test_app):
    async with client_for(test_app) as client:
        response = await client.post(
            "/v1/transform", json={"text": "Hello.", "profile": "nonexistent"}
        )
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "invalid_request"
    assert "brief, chat, email" in body["details"]


@pytest.mark.anyio
async def test_capability_denied_for_scope(test_app, monkeypatch):
    settings = Settings(
        capability_grants={"*": ["rewrite", "analyze"], "locked.example": ["analyze"]}
    )
    service = TextService(settings)
    monkeypatch.setattr(routes, "get_service", lambda: service)
    async with client_for(test_app) as client:
        denied = await client.post(
            "/v1/transform", json={"text": "Hello.", "scope": "locked.example"}
        )
        allowed = await client.post(
            "/v1/analyze", json={"text": "Hello there.", "scope": "locked.example"}
        )
    assert denied.status_code == 403
    assert denied.json()["error"] == "capability_denied"
    assert allowed.status_code == 200
    assert len(service.history_for("locked.example")) == 0


@pytest.mark.anyio
async def test_text_over_limit_is_rejected(test_app, monkeypatch):
    service = TextService(Settings(max_text_chars=5))
    monkeypatch.setattr(routes, "get_service", lambda: service)
    async with client_for(test_app) as client:
        response = await client.post("/v1/transform", json={"text": "Far too long."})
    assert response.status_code == 400
    assert "limit is 5" in response.json()["details"]


@pytest.mark.anyio
async def test_payload_too_large_error_structured(test_app):
    settings = get_settings()
    original_limit = settings.max_payload_bytes
    settings.max_payload_bytes = 10
    try:
        async with client_for(test_app) as client:
            response = await client.post("/v1/transform", json={"text": "x" * 64})
        assert response.status_code == 413
        body = response.json()
        assert body["error"] == "payload_too_large"
        assert body["limit_bytes"] == 10
    finally:
        settings.max_payload_bytes = original_limit


@pytest.mark.anyio
async def test_invalid_json_body_structured(test_app):
    async with client_for(test_app) as client:
        response = await client.post(
            "/v1/transform",
            content="not valid json",
            headers={"Content-Type": "application/json"},
        )
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_json"


@pytest.mark.anyio
async def test_validation_errors_are_structured(test_app):
    async with client_for(test_app) as client:
        unknown_field = await client.post("/v1/transform", json={"text": "Hi.", "mood": "x"})
        bad_length = await client.post("/v1/transform", json={"text": "Hi.", "length": "tiny"})
    for response in (unknown_field, bad_length):
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"


@pytest.mark.anyio
async def test_healthz_endpoint(test_app):
    async with client_for(test_app) as client:
        response = await client.get("/healthz")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["engine"] == "rules"
    assert body["version"]
    assert body["max_text_chars"] == get_settings().max_text_chars
