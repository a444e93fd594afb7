"""Error hierarchy for every productlink failure mode.

Each error carries a stable ``code``, a ``category`` and the HTTP status the
request boundary should answer with. ``to_response()`` produces the JSON body
returned by the API endpoints.
"""

from __future__ import annotations

from enum import Enum


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""

    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DECODE = "decode"
    STORAGE = "storage"
    CONFIGURATION = "configuration"
    INTERNAL = "internal"


class ProductLinkError(Exception):
    """Base exception for all productlink errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        http_status: int = 500,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.http_status = http_status

    def to_response(self) -> dict:
        return {"error": self.message, "code": self.code}


# ─── Client errors (400-level) ──────────────────────────────────


class PayloadValidationError(ProductLinkError):
    """Submitted payload has the wrong top-level shape or cannot be serialized."""

    def __init__(self, message: str = "Expected an array of products") -> None:
        super().__init__(message, "VALIDATION_ERROR", ErrorCategory.VALIDATION, 400)


class PayloadNotFoundError(ProductLinkError):
    """No payload exists for the identifier (malformed identifiers included)."""

    def __init__(self, message: str = "Payload not found") -> None:
        super().__init__(
            message, "PAYLOAD_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND, 404
        )


class PayloadDecodeError(ProductLinkError):
    """A token or stored text could not be turned back into JSON."""

    def __init__(self, message: str = "Payload could not be loaded") -> None:
        super().__init__(message, "DECODE_ERROR", ErrorCategory.DECODE, 400)


# ─── Infrastructure errors (500-level) ──────────────────────────


class UpstreamStoreError(ProductLinkError):
    """The key-value store failed or answered unexpectedly."""

    def __init__(
        self,
        message: str,
        code: str = "STORE_UNAVAILABLE",
        category: ErrorCategory = ErrorCategory.STORAGE,
    ) -> None:
        super().__init__(message, code, category, 500)

    def to_response(self) -> dict:
        return {
            "error": "Failed to process request",
            "code": self.code,
            "message": self.message,
        }


class StoreNotConfiguredError(UpstreamStoreError):
    """Storage backend settings are missing, as opposed to a transient failure."""

    def __init__(self, message: str = "KV namespace not configured") -> None:
        super().__init__(message, "STORE_NOT_CONFIGURED", ErrorCategory.CONFIGURATION)

    def to_response(self) -> dict:
        return {
            "error": "Storage not configured",
            "code": self.code,
            "message": self.message,
        }
