"""FastAPI proxy for the Anthropic Messages API.

Endpoints:
- GET /health
- OPTIONS <any path>                     preflight, empty body
- POST /generate-text  { "prompt": "..." }
  (also served at /.netlify/functions/generate-text)
"""
from __future__ import annotations
import os
import logging
import traceback
from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from fastapi.concurrency import run_in_threadpool

from form_assist.common.errors import (
    ConfigurationError,
    ParseError,
    UpstreamError,
    ValidationError,
)
from form_assist.common.logging_setup import setup_logging
from form_assist.common.schema import ErrorResponse, GenerationResult
from form_assist.common.templates import load_template, render_prompt

LOGGER = logging.getLogger("form_assist.proxy.app")
setup_logging()

ANTHROPIC_API_URL = os.getenv("ANTHROPIC_API_URL", "https://api.anthropic.com/v1/messages")
ANTHROPIC_VERSION = os.getenv("ANTHROPIC_VERSION", "2023-06-01")
MODEL_ID = os.getenv("ANTHROPIC_MODEL", "claude-sonnet-4-20250514")
MAX_TOKENS = int(os.getenv("MAX_TOKENS", "500"))
UPSTREAM_TIMEOUT = float(os.getenv("UPSTREAM_TIMEOUT", "120"))

GENERATE_PATHS = ("/generate-text", "/.netlify/functions/generate-text")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate the prompt template on startup and warn if malformed."""
    try:
        template = load_template()
        if "{{input}}" not in template:
            LOGGER.warning("Prompt template has no {{input}} placeholder; user prompt will be ignored")
    except Exception as e:
        LOGGER.warning("Failed to read prompt template: %s", e)
    if not os.getenv("ANTHROPIC_API_KEY"):
        LOGGER.warning("ANTHROPIC_API_KEY is not set; generation requests will fail")
    yield


app = FastAPI(title="form-assist proxy", lifespan=lifespan)


@app.middleware("http")
async def cors_headers(request: Request, call_next):
    """Answer preflight and wrong-method requests directly; stamp CORS headers on everything."""
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS, media_type="application/json")
    if request.url.path in GENERATE_PATHS and request.method != "POST":
        response = _json(405, {"error": "Method not allowed. Please use POST."})
    else:
        response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "model": MODEL_ID}


def _json(status_code: int, body: dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body)


def _validate_prompt(body: Any) -> str:
    prompt = body.get("prompt")
    if not prompt or not prompt.strip():
        raise ValidationError("Prompt is required")
    return prompt


def _require_api_key() -> str:
    # Read on every request, never cached.
    api_key = os.getenv("ANTHROPIC_API_KEY")
    if not api_key:
        LOGGER.error("ANTHROPIC_API_KEY not found in environment variables")
        raise ConfigurationError(
            "API key not configured. Please add ANTHROPIC_API_KEY to the environment variables."
        )
    return api_key


def _extract_text(data: Any) -> str:
    """Return the first text segment of a Messages API response."""
    try:
        return data["content"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise ParseError("Malformed Anthropic response: no text content") from e


def _call_anthropic(api_key: str, content: str) -> str:
    headers = {
        "content-type": "application/json",
        "x-api-key": api_key,
        "anthropic-version": ANTHROPIC_VERSION,
    }
    payload = {
        "model": MODEL_ID,
        "max_tokens": MAX_TOKENS,
        "messages": [{"role": "user", "content": content}],
    }

    with httpx.Client(timeout=UPSTREAM_TIMEOUT) as client:
        r = client.post(ANTHROPIC_API_URL, headers=headers, json=payload)

    LOGGER.info("Anthropic API response status: %s", r.status_code)
    if not r.is_success:
        LOGGER.error("Anthropic API error: %s", r.text)
        raise UpstreamError(r.status_code, r.text)
    return _extract_text(r.json())


def _internal_error_body(exc: Exception) -> dict[str, Any]:
    body: dict[str, Any] = {"error": "Internal server error", "message": str(exc)}
    if os.getenv("APP_ENV") == "development":
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


async def generate_text(request: Request) -> JSONResponse:
    try:
        LOGGER.info("Function called")
        body = await request.json()
        prompt = _validate_prompt(body)
        LOGGER.info("Prompt received: %s", prompt)

        api_key = _require_api_key()
        LOGGER.info("API key found, calling Anthropic API...")

        content = render_prompt(load_template(), prompt)
        generated = await run_in_threadpool(_call_anthropic, api_key, content)
        LOGGER.info("Successfully received AI response")
        return _json(200, GenerationResult(generated_text=generated).model_dump(by_alias=True))
    except UpstreamError as e:
        return _json(e.status_code, ErrorResponse(error=e.message, details=e.body).model_dump())
    except (ValidationError, ConfigurationError) as e:
        return _json(e.status_code, ErrorResponse(error=e.message).model_dump(exclude_none=True))
    except Exception as e:
        LOGGER.exception("Function error: %s", e)
        return _json(500, _internal_error_body(e))


for _path in GENERATE_PATHS:
    app.add_api_route(
        _path,
        generate_text,
        methods=["POST"],
        include_in_schema=_path == GENERATE_PATHS[0],
    )
