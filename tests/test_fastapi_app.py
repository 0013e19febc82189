from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

import form_assist.proxy.fastapi_app as app_mod
from conftest import FakeResponse

client = TestClient(app_mod.app)

CORS = {
    "access-control-allow-origin": "*",
    "access-control-allow-headers": "Content-Type",
    "access-control-allow-methods": "POST, OPTIONS",
}


def _assert_cors(r) -> None:
    for name, value in CORS.items():
        assert r.headers[name] == value
    assert r.headers["content-type"].startswith("application/json")


def test_health_ok() -> None:
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


@pytest.mark.parametrize("path", ["/generate-text", "/health", "/anything/else"])
def test_options_preflight_is_empty(path: str, upstream) -> None:
    r = client.request("OPTIONS", path, content=b"not json at all")
    assert r.status_code == 200
    assert r.content == b""
    _assert_cors(r)
    assert upstream.calls == []


@pytest.mark.parametrize("path", app_mod.GENERATE_PATHS)
@pytest.mark.parametrize("method", ["GET", "PUT", "DELETE", "PATCH", "TRACE", "PROPFIND"])
def test_other_methods_rejected(method: str, path: str, upstream) -> None:
    r = client.request(method, path)
    assert r.status_code == 405
    assert r.json() == {"error": "Method not allowed. Please use POST."}
    _assert_cors(r)
    assert upstream.calls == []


@pytest.mark.parametrize("body", [{}, {"prompt": ""}, {"prompt": "   \n\t"}, {"prompt": None}])
def test_blank_prompt_is_rejected(body, api_key, upstream) -> None:
    r = client.post("/generate-text", json=body)
    assert r.status_code == 400
    assert r.json() == {"error": "Prompt is required"}
    _assert_cors(r)
    assert upstream.calls == []


def test_missing_api_key_skips_upstream(monkeypatch, upstream) -> None:
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    r = client.post("/generate-text", json={"prompt": "invoice sync"})
    assert r.status_code == 500
    assert "ANTHROPIC_API_KEY" in r.json()["error"]
    assert r.json()["error"].startswith("API key not configured.")
    assert upstream.calls == []


def test_generate_with_mocked_httpx(api_key, upstream) -> None:
    r = client.post("/generate-text", json={"prompt": "invoice sync"})
    assert r.status_code == 200
    assert r.json() == {"generatedText": "Hello world", "success": True}
    _assert_cors(r)

    (call,) = upstream.calls
    assert call["url"] == app_mod.ANTHROPIC_API_URL
    assert call["headers"]["x-api-key"] == "sk-test"
    assert call["headers"]["anthropic-version"] == "2023-06-01"
    assert call["json"]["model"] == app_mod.MODEL_ID
    assert call["json"]["max_tokens"] == 500
    (message,) = call["json"]["messages"]
    assert message["role"] == "user"
    assert '"invoice sync"' in message["content"]
    assert "approximately 200 words" in message["content"]


def test_legacy_function_path(api_key, upstream) -> None:
    r = client.post("/.netlify/functions/generate-text", json={"prompt": "lead routing"})
    assert r.status_code == 200
    assert r.json()["generatedText"] == "Hello world"


def test_upstream_error_passes_through(api_key, upstream) -> None:
    raw = '{"type":"error","error":{"type":"rate_limit_error","message":"slow down"}}'
    upstream.response = FakeResponse(status_code=429, text=raw)
    r = client.post("/generate-text", json={"prompt": "invoice sync"})
    assert r.status_code == 429
    assert r.json() == {"error": "Failed to generate text from AI", "details": raw}
    _assert_cors(r)


def test_malformed_request_body_is_internal_error(api_key, upstream) -> None:
    r = client.post("/generate-text", content=b"{not json", headers={"content-type": "application/json"})
    assert r.status_code == 500
    data = r.json()
    assert data["error"] == "Internal server error"
    assert data["message"]
    assert "stack" not in data
    assert upstream.calls == []


def test_stack_only_in_development(monkeypatch, api_key, upstream) -> None:
    monkeypatch.setenv("APP_ENV", "development")
    upstream.error = httpx.ConnectError("connection refused")
    r = client.post("/generate-text", json={"prompt": "invoice sync"})
    assert r.status_code == 500
    data = r.json()
    assert data["message"] == "connection refused"
    assert "ConnectError" in data["stack"]


def test_network_failure_is_internal_error(api_key, upstream) -> None:
    upstream.error = httpx.ConnectError("connection refused")
    r = client.post("/generate-text", json={"prompt": "invoice sync"})
    assert r.status_code == 500
    assert r.json() == {"error": "Internal server error", "message": "connection refused"}


def test_malformed_upstream_response(api_key, upstream) -> None:
    upstream.response = FakeResponse(json_data={"content": []})
    r = client.post("/generate-text", json={"prompt": "invoice sync"})
    assert r.status_code == 500
    assert r.json()["error"] == "Internal server error"
    assert "Malformed Anthropic response" in r.json()["message"]
