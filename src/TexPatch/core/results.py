"""Explicit success/failure values returned at the codec and workspace boundaries."""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

logger = logging.getLogger("texpatch.codec")

T = TypeVar("T")


@dataclass(frozen=True)
class CodecResult(Generic[T]):
    """Outcome of one codec call.

    ``ok`` with ``value`` set means success; a falsy ``ok`` carries a
    human-readable ``reason``. An empty value on success is still success.
    """

    ok: bool
    value: Optional[T] = None
    reason: str = ""

    @classmethod
    def success(cls, value: T) -> "CodecResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, reason: str) -> "CodecResult[T]":
        return cls(ok=False, reason=reason)


def guarded(operation: str, fn: Callable[..., T], *args: Any, **kwargs: Any) -> CodecResult[T]:
    """Run ``fn`` and convert any exception into a failed CodecResult."""
    try:
        return CodecResult.success(fn(*args, **kwargs))
    except Exception as exc:  # failures of any kind are reported, not raised
        logger.debug("%s failed: %s: %s", operation, exc.__class__.__name__, exc)
        return CodecResult.failure(f"{exc.__class__.__name__}: {exc}")
