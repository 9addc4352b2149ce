"""
Typed error taxonomy for generation calls.

Adapters classify backend failures into an ErrorCategory so the retry policy
never has to inspect free-text error messages.
"""

from enum import Enum
from typing import Optional


class ErrorCategory(str, Enum):
    RATE_LIMITED = "rate_limited"  # HTTP 429
    SERVER = "server"  # HTTP 5xx
    TRANSPORT = "transport"  # connection reset, DNS, timeout
    MALFORMED = "malformed"  # response could not be parsed
    CLIENT = "client"  # other 4xx (bad key, bad request)
    UNAVAILABLE = "unavailable"  # no provider configured

    @property
    def retryable(self) -> bool:
        return self in RETRYABLE_CATEGORIES


RETRYABLE_CATEGORIES = frozenset(
    {ErrorCategory.RATE_LIMITED, ErrorCategory.SERVER, ErrorCategory.TRANSPORT}
)


def category_for_status(status_code: int) -> ErrorCategory:
    """Map an HTTP status code to an error category."""
    if status_code == 429:
        return ErrorCategory.RATE_LIMITED
    if 500 <= status_code < 600:
        return ErrorCategory.SERVER
    return ErrorCategory.CLIENT


class GenerationError(Exception):
    """A generation backend call failed."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.MALFORMED,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.category = category
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        return self.category.retryable


class ContractViolationError(GenerationError):
    """The generator answered, but the answer breaks the batch contract (e.g. zero scenes)."""

    def __init__(self, message: str):
        super().__init__(message, category=ErrorCategory.MALFORMED)


class SegmentationBatchError(Exception):
    """Single failure surfaced to callers for a batch; no state was changed."""

    def __init__(self, message: str = "Segmentation batch failed. Please try the next batch again."):
        super().__init__(message)
