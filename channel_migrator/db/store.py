"""Statement execution against the destination database."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.engine import RowMapping
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncTransaction
from sqlalchemy.sql.expression import Executable


class DestinationStore:
    """Executes statements on one destination connection.

    Concurrent callers are serialized on the connection, which cannot run two
    statements at once. This keeps every insert of an entity inside the same
    transaction even when they are issued as a concurrent batch.
    """

    def __init__(self, conn: AsyncConnection):
        self.conn = conn
        self._lock = asyncio.Lock()

    async def execute(self, statement: Executable) -> list[RowMapping]:
        """Execute a statement and return any rows it produced (RETURNING)."""
        async with self._lock:
            result = await self.conn.execute(statement)
            if not result.returns_rows:
                return []
            return list(result.mappings().all())

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncTransaction]:
        """Open a transaction.

        Commits on normal exit unless the caller already rolled back, and
        rolls back when an exception escapes.
        """
        trans = await self.conn.begin()
        try:
            yield trans
        except BaseException:
            if trans.is_active:
                await trans.rollback()
            raise
        if trans.is_active:
            await trans.commit()
