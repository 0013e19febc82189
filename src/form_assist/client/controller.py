"""Controller for the "AI magic button" next to a form text field.

The trigger is shown while the field holds a short phrase; pressing it
posts the phrase to the generation proxy and replaces the field content
with the generated paragraph.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from form_assist.client.widgets import FormView
from form_assist.common.errors import (
    FormAssistError,
    ParseError,
    TransportError,
    UpstreamError,
)
from form_assist.common.schema import GenerationRequest, GenerationResult

LOGGER = logging.getLogger("form_assist.client.controller")

WORKING_LABEL = "Generating..."
SUCCESS_MESSAGE = "✨ AI generated your detailed description!"
EMPTY_INPUT_MESSAGE = "Please enter a brief description first"
FALLBACK_ERROR = "Failed to generate text. Please try again."

TRIGGER_DIMMED = ("opacity-75", "cursor-not-allowed")
FIELD_DIMMED = "opacity-50"
FIELD_SUCCESS = "border-green-500/50"


class ControllerState(str, Enum):
    HIDDEN = "hidden"
    VISIBLE_IDLE = "visible-idle"
    GENERATING = "generating"


@dataclass
class ControllerConfig:
    endpoint: str = "http://127.0.0.1:8888/generate-text"
    min_length: int = 3
    max_length: int = 50
    highlight_seconds: float = 3.0
    banner_seconds: float = 5.0
    timeout: float | None = None

    @classmethod
    def from_dict(cls, cfg: dict[str, Any] | None) -> "ControllerConfig":
        """Build from a config mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (cfg or {}).items() if k in known})


class FormAssistController:
    """
    Drives a FormView through the hidden / visible-idle / generating states.

    Args:
        config: Endpoint, visibility bounds and banner timings.
        view: Widgets to drive. A fresh FormView is created when omitted.
        transport: Optional httpx transport, mainly for tests.
    """

    def __init__(
        self,
        config: ControllerConfig | None = None,
        view: FormView | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or ControllerConfig()
        self.view = view or FormView()
        self._transport = transport
        self._state = ControllerState.HIDDEN
        self._sync_trigger()

    @property
    def state(self) -> ControllerState:
        return self._state

    def should_show(self, text: str) -> bool:
        return self.config.min_length <= len(text.strip()) <= self.config.max_length

    def on_input(self, text: str) -> None:
        """Handle an edit of the source field."""
        if self._state is ControllerState.GENERATING:
            LOGGER.debug("Ignoring input while a generation is in flight")
            return
        self.view.textarea.value = text
        self._refresh_visibility()

    async def generate(self) -> GenerationResult | None:
        """
        Run one generation attempt for the current field content.

        Returns:
            The generation result, or None when the attempt failed. Failures
            are reported through the error banner, never raised.
        """
        if self._state is ControllerState.GENERATING:
            LOGGER.warning("Generation already in progress")
            return None

        prompt = self.view.textarea.value.strip()
        if not prompt:
            self._show_error(EMPTY_INPUT_MESSAGE)
            return None

        original_label = self._enter_generating()
        try:
            result = await self._request(prompt)
        except Exception as e:
            LOGGER.error("Generation failed: %s", e)
            message = e.message if isinstance(e, FormAssistError) else str(e)
            self._show_error(message or FALLBACK_ERROR)
            self._refresh_visibility()
            return None
        else:
            self.view.textarea.value = result.generated_text
            self._state = ControllerState.HIDDEN
            self._sync_trigger()
            self.view.textarea.flash(FIELD_SUCCESS, self.config.highlight_seconds)
            self.view.success_banner.show(SUCCESS_MESSAGE, self.config.banner_seconds)
            return result
        finally:
            self._leave_generating(original_label)

    async def _request(self, prompt: str) -> GenerationResult:
        payload = GenerationRequest(prompt=prompt).model_dump()
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.config.timeout) as client:
                response = await client.post(
                    self.config.endpoint,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
        except httpx.RequestError as e:
            raise TransportError(str(e) or FALLBACK_ERROR) from e

        if not response.is_success:
            status_line = f"Error {response.status_code}: {response.reason_phrase}"
            try:
                data = response.json()
            except ValueError:
                data = None
            if isinstance(data, dict):
                message = data.get("error") or "Failed to generate text"
            else:
                message = status_line
            raise UpstreamError(response.status_code, response.text, message)

        try:
            return GenerationResult.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise ParseError("Malformed response from generation service") from e

    def _enter_generating(self) -> str:
        trigger, textarea = self.view.trigger, self.view.textarea
        original_label = trigger.label
        self._state = ControllerState.GENERATING
        trigger.label = WORKING_LABEL
        trigger.disabled = True
        trigger.classes.update(TRIGGER_DIMMED)
        textarea.disabled = True
        textarea.classes.add(FIELD_DIMMED)
        return original_label

    def _leave_generating(self, original_label: str) -> None:
        # Attempts cut short by cancellation never reached a result branch.
        if self._state is ControllerState.GENERATING:
            self._refresh_visibility()
        trigger, textarea = self.view.trigger, self.view.textarea
        trigger.label = original_label
        trigger.disabled = False
        trigger.classes.difference_update(TRIGGER_DIMMED)
        textarea.disabled = False
        textarea.classes.discard(FIELD_DIMMED)

    def _refresh_visibility(self) -> None:
        if self.should_show(self.view.textarea.value):
            self._state = ControllerState.VISIBLE_IDLE
        else:
            self._state = ControllerState.HIDDEN
        self._sync_trigger()

    def _sync_trigger(self) -> None:
        self.view.trigger.hidden = self._state is not ControllerState.VISIBLE_IDLE

    def _show_error(self, message: str) -> None:
        self.view.error_banner.show(f"✗ {message}", self.config.banner_seconds)
