"""Error taxonomy for the script-controller client.

Messages are written to be shown to the user as-is; they name the likely
cause (backend not started, port taken, wrong target served).
"""

from __future__ import annotations

from typing import Optional


class ScriptControllerClientError(Exception):
    """Base error for all client failures.

    Args:
        message: Human-friendly error message.
        route: Route path (e.g., "/api/scripts").
        method: HTTP method (e.g., "GET", "POST").
        status: Optional HTTP status code.
        code: Optional machine-readable error code (e.g., "timeout").
        body_snippet: Optional diagnostic snippet from a response payload.
    """

    def __init__(
        self,
        message: str,
        *,
        route: Optional[str] = None,
        method: Optional[str] = None,
        status: Optional[int] = None,
        code: Optional[str] = None,
        body_snippet: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.route: Optional[str] = route
        self.method: Optional[str] = method
        self.status: Optional[int] = status
        self.code: Optional[str] = code
        self.body_snippet: Optional[str] = body_snippet


class BackendNotReady(ScriptControllerClientError):
    """Raised when running inside the desktop host before a backend address is known."""

    def __init__(
        self,
        message: str = "Backend is not connected; make sure the Python backend has started.",
        **kwargs,
    ) -> None:
        kwargs.setdefault("code", "backend_not_ready")
        super().__init__(message, **kwargs)


class TransportError(ScriptControllerClientError):
    """Network or host-bridge failure. Retried before it reaches the caller."""


class HTTPStatusError(ScriptControllerClientError):
    """Backend kept answering with a 5xx status until attempts ran out."""


class DecodeError(ScriptControllerClientError):
    """Backend answered, but the body is not JSON.

    Attributes:
        summary: Whitespace-collapsed body truncated to 200 characters.
        hint: Extra advice when the body looks like a frontend page.
    """

    def __init__(
        self,
        message: str,
        *,
        summary: str,
        hint: Optional[str] = None,
        **kwargs,
    ) -> None:
        kwargs.setdefault("code", "bad_json")
        kwargs.setdefault("body_snippet", summary)
        super().__init__(message, **kwargs)
        self.summary: str = summary
        self.hint: Optional[str] = hint


__all__ = [
    "ScriptControllerClientError",
    "BackendNotReady",
    "TransportError",
    "HTTPStatusError",
    "DecodeError",
]
