"""Pydantic models for the generation request/response bodies."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

class GenerationRequest(BaseModel):
    """Body sent by the client controller."""
    prompt: str


class GenerationResult(BaseModel):
    """Successful generation, serialized with the camelCase field name."""
    model_config = ConfigDict(populate_by_name=True)

    generated_text: str = Field(alias="generatedText")
    success: bool = True


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None
