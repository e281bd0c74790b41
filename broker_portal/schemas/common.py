from typing import Any

from pydantic import BaseModel, Field


class ErrorEnvelope(BaseModel):
    """Shape of every error body produced by the exception handlers."""

    code: str
    message: str
    data: None = None
    details: dict[str, Any] = Field(default_factory=dict)
