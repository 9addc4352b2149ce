"""Retry with exponential backoff for transient generation errors."""

import time
from typing import Callable, TypeVar

from story_automation import config
from story_automation.domain.errors import GenerationError

T = TypeVar("T")


def with_retry(
    fn: Callable[[], T],
    retries: int = config.RETRY_ATTEMPTS,
    delay: float = config.RETRY_INITIAL_DELAY,
    sleep: Callable[[float], None] = time.sleep,
    label: str = "Generation",
) -> T:
    """
    Call fn(); on a retryable GenerationError wait `delay` seconds, double it
    and try again, at most `retries` more times. Fatal categories and any
    other exception propagate immediately.
    """
    attempt = 0
    while True:
        try:
            return fn()
        except GenerationError as e:
            if not e.retryable or attempt >= retries:
                raise
            attempt += 1
            print(f"  ⚠️  {label} error ({e.category.value}), retrying in {delay:g}s "
                  f"[{attempt}/{retries}]: {e}")
            sleep(delay)
            delay *= 2
