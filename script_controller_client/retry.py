"""Generic "attempt N times with backoff" driver shared by both transports."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional, TypeVar

from .logger import logger
from .types import DEFAULT_RETRY_POLICY, RetryPolicy


T = TypeVar("T")

Sleep = Callable[[float], Awaitable[Any]]


class RetryExecutor:
    """Run an attempt coroutine until it yields a non-retryable outcome.

    `is_retryable` receives either the exception an attempt raised or the
    value it returned. Non-retryable outcomes end the loop at once. Retryable
    ones are followed by the policy's next delay, except after the final
    attempt, whose outcome is returned or raised unchanged.

    Args:
        policy: Backoff delays and attempt budget; shared and read-only.
        sleep: Awaitable sleep used between attempts (asyncio.sleep by default).
    """

    def __init__(
        self, policy: RetryPolicy = DEFAULT_RETRY_POLICY, sleep: Optional[Sleep] = None
    ) -> None:
        self._policy = policy
        self._sleep: Sleep = sleep or asyncio.sleep

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    async def execute(
        self,
        attempt: Callable[[], Awaitable[T]],
        is_retryable: Callable[[Any], bool],
        *,
        label: str = "request",
    ) -> T:
        attempts = max(1, int(self._policy.max_attempts))
        for index in range(attempts):
            final = index == attempts - 1
            try:
                result = await attempt()
            except Exception as e:
                if final or not is_retryable(e):
                    raise
                outcome = f"{type(e).__name__}: {e}"
            else:
                if final or not is_retryable(result):
                    return result
                outcome = _describe(result)

            delay = self._policy.delay_after(index)
            logger.warning(
                f"⚠️  Script-Controller client: {label} attempt {index + 1}/{attempts} failed ({outcome}); retrying in {delay:g}s"
            )
            await self._sleep(delay)

        # Unreachable: the final attempt always returns or raises above
        raise RuntimeError("retry loop exited without an outcome")


def _describe(result: Any) -> str:
    status = getattr(result, "status", None)
    if status is not None:
        return f"HTTP {status}"
    return repr(result)[:80]


__all__ = ["RetryExecutor"]
