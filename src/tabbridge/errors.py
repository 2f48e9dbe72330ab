"""Error types shared by the outline, patch and HTTP layers.

Every error carries a machine-readable ``error_code`` plus a ``to_dict``
serializer so the HTTP layer can turn it into a response body without knowing
the concrete class.
"""

from __future__ import annotations

from typing import Any


class ErrorCode:
    """Constants for error codes used in HTTP responses."""

    TAB_NOT_FOUND = "tab_not_found"
    RANGE_ERROR = "range_error"
    SYMBOL_FORMAT = "symbol_format"
    INTERNAL_ERROR = "internal_error"


class TabBridgeError(Exception):
    """Base class for errors surfaced to HTTP clients."""

    error_code: str = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def details(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary for JSON responses."""
        result: dict[str, Any] = {
            "error": self.error_code,
            "message": self.message,
        }
        details = self.details()
        if details:
            result["details"] = details
        return result


class TabNotFoundError(TabBridgeError, LookupError):
    """Raised when an identifier does not resolve to an open tab."""

    error_code = ErrorCode.TAB_NOT_FOUND

    def __init__(self, identifier: str, message: str | None = None) -> None:
        super().__init__(message or f"No such tab: {identifier}")
        self.identifier = identifier

    def details(self) -> dict[str, Any]:
        return {"identifier": self.identifier}


class RangeError(TabBridgeError, ValueError):
    """Raised when a position or range cannot be resolved against a document.

    ``reason`` names the violated bound: ``negative``, ``invalid``, ``line``,
    ``character``, ``order`` or ``overflow``.
    """

    error_code = ErrorCode.RANGE_ERROR

    def __init__(
        self,
        message: str,
        *,
        reason: str,
        position: tuple[int, int] | None = None,
        limit: int | None = None,
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.position = position
        self.limit = limit

    def details(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"reason": self.reason}
        if self.position is not None:
            payload["position"] = {"line": self.position[0], "character": self.position[1]}
        if self.limit is not None:
            payload["limit"] = self.limit
        return payload


class SymbolFormatError(TabBridgeError, ValueError):
    """Raised when a backend symbol cannot be read as an outline entry."""

    error_code = ErrorCode.SYMBOL_FORMAT

    def __init__(self, message: str, *, path: tuple[int, ...] = ()) -> None:
        super().__init__(message)
        self.path = path

    def details(self) -> dict[str, Any]:
        return {"path": list(self.path)} if self.path else {}


__all__ = [
    "ErrorCode",
    "TabBridgeError",
    "TabNotFoundError",
    "RangeError",
    "SymbolFormatError",
]
