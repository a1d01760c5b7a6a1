"""Turn raw backend response text into JSON data or a diagnosed DecodeError."""

from __future__ import annotations

import json
import re
from typing import Any, Optional

from .errors import DecodeError


SUMMARY_LIMIT = 200
EMPTY_BODY_MARKER = "(empty body)"

# Markers of a frontend dev-server page served in place of the backend
_FRONTEND_SIGNATURES = ("vite.svg", "/@vite/client")

_NON_JSON_MESSAGE = (
    "Backend returned non-JSON data; make sure the script controller backend "
    "has started correctly and its port is not used by another program."
)
_FRONTEND_HINT = (
    "The request probably reached the frontend page (e.g. the dev server on "
    "port 5173) instead of the backend; run the packaged app, or start the "
    "backend first and configure CORS."
)

_WHITESPACE = re.compile(r"\s+")


def decode_response(text: Optional[str]) -> Any:
    """Parse `text` as JSON.

    Returns None for an empty body. Raises DecodeError with a summary of the
    offending text when it is not valid JSON.
    """
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError as e:
        summary = summarize(text)
        hint = frontend_hint(text)
        message = f"{_NON_JSON_MESSAGE} Response summary: {summary or EMPTY_BODY_MARKER}"
        if hint:
            message = f"{message} {hint}"
        raise DecodeError(message, summary=summary, hint=hint) from e


def summarize(text: str, limit: int = SUMMARY_LIMIT) -> str:
    return _WHITESPACE.sub(" ", text.strip())[:limit]


def frontend_hint(text: str) -> Optional[str]:
    if any(marker in text for marker in _FRONTEND_SIGNATURES):
        return _FRONTEND_HINT
    return None


__all__ = ["decode_response", "summarize", "frontend_hint", "SUMMARY_LIMIT"]
