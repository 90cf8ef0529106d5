"""Bounded concurrent batches of sibling inserts."""

import asyncio
from collections.abc import Awaitable, Sequence
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError

from channel_migrator.core.exceptions import BatchInsertError

T = TypeVar("T")


async def run_bounded(awaitables: Sequence[Awaitable[T]], limit: int) -> list[T]:
    """Run sibling inserts concurrently, at most ``limit`` at a time.

    Every member runs to completion, so no statement is interrupted while it
    holds the connection. The batch then fails as a whole with
    ``BatchInsertError`` if any member hit a store error; any other error is
    re-raised as is. Results are returned in input order.
    """
    if not awaitables:
        return []

    semaphore = asyncio.Semaphore(limit)

    async def bounded(aw: Awaitable[T]) -> T:
        async with semaphore:
            return await aw

    results = await asyncio.gather(*(bounded(aw) for aw in awaitables), return_exceptions=True)

    errors = [r for r in results if isinstance(r, BaseException)]
    if not errors:
        return results

    for error in errors:
        if not isinstance(error, SQLAlchemyError):
            raise error

    raise BatchInsertError(errors, len(awaitables)) from errors[0]
