"""
Helpers for running blocking filesystem calls off the event loop.
"""

from __future__ import annotations

import asyncio
import functools
from typing import Any, Callable, TypeVar

T = TypeVar("T")


async def run_blocking(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """
    Run ``func`` in the loop's default executor and await its result.

    Exceptions raised by ``func`` propagate to the awaiting caller unchanged.
    """

    loop = asyncio.get_running_loop()
    if kwargs:
        func = functools.partial(func, **kwargs)
    return await loop.run_in_executor(None, func, *args)
