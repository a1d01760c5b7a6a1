"""Shared value types for the script-controller client.

Everything here is immutable: a request descriptor belongs to the call that
built it, and the retry policy and resolved transport mode are read-only once
created.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH")


class TransportMode(Enum):
    """Which transport carries requests for the lifetime of a dispatcher."""

    PROXY = "proxy"
    DIRECT = "direct"


@dataclass(frozen=True)
class RequestDescriptor:
    """One logical request.

    Attributes:
        path: Route path, always with exactly one leading "/".
        method: Upper-case HTTP verb from `HTTP_METHODS`.
        body: Optional serialized (JSON string) payload.
    """

    path: str
    method: str = "GET"
    body: Optional[str] = None

    @classmethod
    def build(
        cls, path: str, method: Optional[str] = "GET", body: Optional[str] = None
    ) -> "RequestDescriptor":
        verb = (method or "GET").upper()
        if verb not in HTTP_METHODS:
            raise ValueError(
                f"Unsupported HTTP method {method!r}; expected one of {', '.join(HTTP_METHODS)}"
            )
        return cls(path=normalize_path(path), method=verb, body=body)


@dataclass(frozen=True)
class RetryPolicy:
    """Backoff delays (seconds) applied in order between attempts.

    Only the first ``max_attempts - 1`` delays are ever slept; no wait follows
    the final attempt.
    """

    delays: Tuple[float, ...]
    max_attempts: int

    def delay_after(self, attempt_index: int) -> Optional[float]:
        # attempt_index is 0-based
        if attempt_index >= self.max_attempts - 1:
            return None
        return self.delays[min(attempt_index, len(self.delays) - 1)]


DEFAULT_RETRY_POLICY = RetryPolicy(delays=(1.0, 2.0, 4.0), max_attempts=3)


@dataclass(frozen=True)
class Resolution:
    """Outcome of address resolution: transport mode plus base address.

    An empty address means "relative to the configured origin".
    """

    mode: TransportMode
    address: str = ""


def normalize_path(path: str) -> str:
    return "/" + (path or "").lstrip("/")


__all__ = [
    "HTTP_METHODS",
    "TransportMode",
    "RequestDescriptor",
    "RetryPolicy",
    "DEFAULT_RETRY_POLICY",
    "Resolution",
    "normalize_path",
]
