"""Failure taxonomy for backend calls.

Transport problems, structured backend rejections and undecodable
responses are raised by the API client and converted into UI state at
the loader / state machine boundary with describe_failure().
"""
from typing import Any, Dict, Optional


class PortalError(Exception):
    """Base class for every failure raised by the client core."""
    pass


class TransportError(PortalError):
    """Network error, timeout, or open circuit."""
    pass


class DecodeError(PortalError):
    """Response body could not be turned into the expected model."""
    pass


class ApiError(PortalError):
    """Backend rejected the request with a recognizable error payload."""

    def __init__(
        self,
        status_code: int,
        error: Optional[str] = None,
        message: Optional[str] = None
    ):
        super().__init__(error or message or f"HTTP {status_code}")
        self.status_code = status_code
        self.error = error
        self.message = message

    @classmethod
    def from_payload(cls, status_code: int, payload: Any) -> "ApiError":
        """
        Build from a decoded error body.

        Non-dict payloads carry no structured fields.
        """
        if not isinstance(payload, dict):
            return cls(status_code)
        return cls(
            status_code,
            error=_as_text(payload.get("error")),
            message=_as_text(payload.get("message")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status_code,
            "error": self.error,
            "message": self.message,
        }


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def describe_failure(exc: BaseException, fallback: str) -> str:
    """
    Turn a failure into a user-facing message.

    Priority for ApiError: error field, then message field, then fallback.
    Any other exception uses its own text, then fallback.

    Args:
        exc: Failure raised by a collaborator
        fallback: Generic message when nothing better is available

    Returns:
        Message suitable for a one-shot notification
    """
    if isinstance(exc, ApiError):
        return exc.error or exc.message or fallback
    return _as_text(str(exc)) or fallback
