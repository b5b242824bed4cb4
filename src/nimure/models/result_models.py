"""
Fetch Result Models

Leaf fetch operations report failures as a value instead of raising, so a
caller fanning out over several fetches can keep going when one fails.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """Result of a fetch: either data or an error message.

    Attributes:
        data: Fetched value (None on failure)
        error: Human readable failure message (None on success)
    """

    data: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        """True when the fetch succeeded."""
        return self.error is None

    @classmethod
    def success(cls, data: T) -> "FetchResult[T]":
        return cls(data=data)

    @classmethod
    def failure(cls, error: str) -> "FetchResult[T]":
        return cls(error=error)
