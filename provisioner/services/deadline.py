"""Explicit deadlines for remote store calls."""
from __future__ import annotations

import asyncio
from typing import Awaitable, Optional, TypeVar

from ..errors import RemoteStoreError

T = TypeVar("T")

DEFAULT_DEADLINE = 60.0


async def with_deadline(
    awaitable: Awaitable[T],
    seconds: Optional[float],
    operation: str,
) -> T:
    """
    Await a store call, failing with RemoteStoreError (504) when it hangs.

    ``seconds=None`` disables the deadline. Non-store exceptions raised by
    the call are wrapped so callers only ever see RemoteStoreError.
    """
    try:
        if seconds is None:
            return await awaitable
        return await asyncio.wait_for(awaitable, timeout=seconds)
    except asyncio.TimeoutError as e:
        raise RemoteStoreError(
            f"{operation} timed out after {seconds:g}s",
            status_code=504,
            operation=operation,
        ) from e
    except RemoteStoreError:
        raise
    except Exception as e:
        raise RemoteStoreError(
            f"{operation} failed: {str(e) or type(e).__name__}",
            status_code=getattr(e, "status_code", None),
            operation=operation,
        ) from e
