# src/specpilot/models/generation.py

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class GenerationRequest(BaseModel):
    """Raw feature request typed by the user. Never mutated."""

    model_config = ConfigDict(frozen=True)

    text: str

    @field_validator("text")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Prompt text must not be empty")
        return value


class GenerationOutput(BaseModel):
    """Text produced by one pipeline stage and the provider that produced it."""

    text: str
    provider: str
    model: str
    fell_back: bool = False
    warning: Optional[str] = None
