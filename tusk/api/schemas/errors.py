"""Client-facing error payloads.

Only two shapes are ever sent to clients:

- ``{"error": "<text>"}`` for status, panic, configuration and unclassified
  errors
- ``{"errors": {"<group>": ["<msg>", ...]}}`` for validation errors, keyed by
  the lower-cased field group name

Stack traces and error codes stay in server-side logs.
"""

from pydantic import BaseModel, Field


class ErrorBody(BaseModel):
    """Payload for every error that is not a validation error."""

    error: str = Field(
        ...,
        description="Client-safe text of the error cause",
        examples=["Not Found", "entity not found"],
    )


class ValidationErrorBody(BaseModel):
    """Payload for validation errors, grouped by field group."""

    errors: dict[str, list[str]] = Field(
        ...,
        description="Violation messages keyed by lower-cased field group",
        examples=[{"query": ["page: Input should be greater than 0"]}],
    )
