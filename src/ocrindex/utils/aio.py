"""Asyncio helpers."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, List


async def gather_all(*aws: Awaitable[Any]) -> List[Any]:
    """Run awaitables concurrently and wait for every one of them.

    The first exception, in submission order, is raised only once all of them
    have finished, so nothing is left running against a resource the caller
    is about to release.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results)
