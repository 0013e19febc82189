from __future__ import annotations

from typing import Any

import pytest

import form_assist.proxy.fastapi_app as app_mod


class FakeResponse:
    def __init__(self, status_code: int = 200, json_data: Any = None, text: str | None = None) -> None:
        self.status_code = status_code
        self._json = json_data
        self.text = text if text is not None else ""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        if self._json is None:
            raise ValueError("No JSON body")
        return self._json


class FakeUpstream:
    """Stands in for httpx.Client and records every outbound call."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.response: FakeResponse = FakeResponse(
            json_data={"content": [{"type": "text", "text": "Hello world"}]}
        )
        self.error: Exception | None = None

    def __call__(self, timeout: float | int | None = None) -> "FakeUpstream":  # signature-compatible
        return self

    def __enter__(self) -> "FakeUpstream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        return None

    def post(self, url: str, headers: dict[str, str] | None = None, json: dict[str, Any] | None = None) -> FakeResponse:  # noqa: A002
        self.calls.append({"url": url, "headers": headers, "json": json})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def upstream(monkeypatch) -> FakeUpstream:
    # Patch httpx.Client in the module to avoid network calls
    fake = FakeUpstream()
    monkeypatch.setattr(app_mod.httpx, "Client", fake)
    return fake


@pytest.fixture
def api_key(monkeypatch) -> str:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
    monkeypatch.delenv("APP_ENV", raising=False)
    return "sk-test"
