"""Helpers for calling the synchronous engine from route handlers."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, TypeVar

from fastapi import HTTPException

from ..errors import ConversionError

T = TypeVar("T")


async def run_sync(func: Callable[..., T], /, *args: Any, **kwargs: Any) -> T:
    """Run an engine call on a worker thread.

    Hard conversion errors become 400 responses whose detail is the error code.
    """

    try:
        return await asyncio.to_thread(func, *args, **kwargs)
    except ConversionError as exc:
        raise HTTPException(status_code=400, detail=exc.code) from exc


__all__ = ["run_sync"]
