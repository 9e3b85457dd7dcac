"""Error taxonomy of the RAG bridge.

Every failure raised by a client or service derives from RagBridgeError so the
HTTP layer can catch one base class, log the detail and answer with a generic
message.

Propagation:
  - InvalidConfiguration, DocumentReadError: abort the request.
  - EmbeddingServiceError: aborts the whole upload / query.
  - StoreUnavailable, DimensionMismatch: abort the request.
  - GenerationServiceError, EmptyResponse: abort the request.
  - ToolExecutionError: scoped to one tool invocation, folded into the
    tool result handed back to the model.
"""

from typing import Any


class RagBridgeError(Exception):
    """Base exception for all bridge errors.

    Attributes:
        message: Human-readable error description.
        details: Additional context about the error.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class InvalidConfiguration(RagBridgeError):
    """A configuration value is missing or outside its valid range."""


class DocumentReadError(RagBridgeError):
    """Uploaded bytes could not be turned into text."""


class EmbeddingServiceError(RagBridgeError):
    """The embedding service failed or answered without vector data."""


class StoreUnavailable(RagBridgeError):
    """The vector store backend could not be reached or rejected a request."""


class DimensionMismatch(RagBridgeError):
    """A vector's dimensionality disagrees with the vectors already stored."""

    def __init__(self, expected: int | None, actual: int, details: dict[str, Any] | None = None):
        if expected is None:
            message = f"Vector dimension {actual} rejected by the vector store"
        else:
            message = f"Vector dimension mismatch: expected {expected}, got {actual}"
        super().__init__(message, details)
        self.expected = expected
        self.actual = actual


class GenerationServiceError(RagBridgeError):
    """The generative model could not be reached or rejected the request."""


class EmptyResponse(RagBridgeError):
    """The generative model answered with neither text nor tool calls."""


class ToolExecutionError(RagBridgeError):
    """A single tool invocation failed."""

    def __init__(self, message: str, details: dict[str, Any] | None = None, tool_name: str | None = None):
        super().__init__(message, details)
        self.tool_name = tool_name
