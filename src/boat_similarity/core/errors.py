"""
Unified error types for the similarity engine.

All errors carry a stable code and render to the same envelope:
{
    "error": {
        "code": "ERROR_CODE",
        "message": "Human-readable message",
        "detail": "Optional additional context"
    }
}

Every error here signals a programming or configuration defect and is
raised immediately. Missing attribute data on an entity is never an error.
"""

from __future__ import annotations

from typing import Any


class SimilarityError(Exception):
    """Base error for the similarity engine."""

    code = "SIMILARITY_ERROR"

    def __init__(self, message: str, detail: str | None = None):
        self.message = message
        self.detail = detail
        super().__init__(message if detail is None else f"{message}: {detail}")

    def to_dict(self) -> dict[str, Any]:
        """Render the error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "detail": self.detail,
            }
        }


class ValidationError(SimilarityError):
    """Malformed configuration or call parameters."""

    code = "VALIDATION_ERROR"


class DimensionMismatch(SimilarityError):
    """Two vectors of different lengths were compared."""

    code = "DIMENSION_MISMATCH"

    def __init__(self, expected: int, actual: int, context: str | None = None):
        self.expected = expected
        self.actual = actual
        detail = f"expected {expected} dimensions, got {actual}"
        if context:
            detail = f"{detail} ({context})"
        super().__init__("Vector dimensions differ", detail)


class MissingConfiguration(SimilarityError):
    """No weight profile could be resolved."""

    code = "MISSING_CONFIGURATION"
