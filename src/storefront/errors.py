"""Exception hierarchy and error detail extraction for the storefront client.

Transport failures carry the HTTP status and decoded body of the response
that caused them. ``unwrap_error`` turns any exception into an ``ErrorDetail``
for logging; it never changes which exception the caller sees.

Handles three server body shapes:

- Laravel style: {"message": "...", "errors": {...}}
- Domain errors: {"error": "msg"} or {"error": {"field": "msg"}}
- Pydantic validation (422): {"detail": [{"loc": [...], "msg": "..."}]}
"""

from dataclasses import dataclass
from typing import Any


class StorefrontError(Exception):
    """Base class for all errors raised by the storefront client."""


class TransportError(StorefrontError):
    """A request to the storefront API failed.

    ``status`` is None when no response was received (connection refused,
    timeout, DNS failure).
    """

    def __init__(self, message: str, status: int | None = None, data: Any = None, method: str = "", path: str = ""):
        super().__init__(message)
        self.message = message
        self.status = status
        self.data = data
        self.method = method
        self.path = path

    @property
    def is_client_error(self) -> bool:
        return self.status is not None and 400 <= self.status < 500

    def __repr__(self):
        return f"TransportError(status={self.status!r}, method={self.method!r}, path={self.path!r}, message={self.message!r})"


class InvalidQuantityError(StorefrontError, ValueError):
    """Quantity is not a positive integer."""

    def __init__(self, quantity: Any):
        super().__init__(f"Quantity must be a positive integer, got {quantity!r}")
        self.quantity = quantity


class CouponRejectedError(StorefrontError):
    """The server (or the local pre-check) refused a coupon."""

    def __init__(self, rejection):
        super().__init__(rejection.message)
        self.rejection = rejection


@dataclass(frozen=True)
class ErrorDetail:
    status: int | None
    data: Any
    message: str

    def as_log_context(self) -> dict:
        return {"status": self.status, "message": self.message}


def extract_message(data: Any) -> str | None:
    """Extract a human-readable message from a decoded error body."""
    if isinstance(data, str):
        return data[:300] or None

    if not isinstance(data, dict):
        return None

    if data.get("message"):
        return str(data["message"])

    if "error" in data and data["error"]:
        error = data["error"]
        if isinstance(error, dict):
            return " | ".join(f"{k}: {v}" for k, v in error.items())
        return str(error)

    # Pydantic validation errors: {"detail": [{"loc": [...], "msg": "..."}]}
    detail = data.get("detail")
    if isinstance(detail, list):
        parts = []
        for err in detail:
            if not isinstance(err, dict):
                parts.append(str(err))
                continue
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts) or None
    if isinstance(detail, str):
        return detail

    return None


def unwrap_error(exc: BaseException) -> ErrorDetail:
    """Extract {status, data, message} from an exception for diagnostics."""
    status = getattr(exc, "status", None)
    data = getattr(exc, "data", None)
    message = extract_message(data) or getattr(exc, "message", None) or str(exc) or "Unknown error"
    return ErrorDetail(status=status, data=data, message=message)
