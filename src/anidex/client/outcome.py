"""Result variant returned by :meth:`~anidex.client.pipeline.RequestPipeline.fetch`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from anidex.exceptions import ErrorKind, RequestError

T = TypeVar("T")


@dataclass(frozen=True)
class RequestOutcome(Generic[T]):
    """Either a decoded value or a classified :class:`RequestError`, never both.

    Build instances with :meth:`success` and :meth:`failure`. Callers that
    prefer exceptions call :meth:`unwrap`.

    Example::

        outcome = await pipeline.fetch("/top/anime", AnimeResponse)
        if outcome.ok:
            show(outcome.value.data)
        elif outcome.kind is ErrorKind.RATE_LIMITED:
            backoff()
    """

    value: Optional[T] = None
    error: Optional[RequestError] = None

    def __post_init__(self) -> None:
        if (self.value is None) == (self.error is None):
            raise ValueError("RequestOutcome needs exactly one of value or error")

    @classmethod
    def success(cls, value: T) -> RequestOutcome[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: RequestError) -> RequestOutcome[T]:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[ErrorKind]:
        """The failure category, or ``None`` on success."""
        return self.error.kind if self.error is not None else None

    def unwrap(self) -> T:
        """Return the value, raising the stored error on failure."""
        if self.error is not None:
            raise self.error
        assert self.value is not None
        return self.value
