"""Scoped transaction helper.

Services wrap every multi-row mutation in ``atomic`` so that a role is never
observable without its permission links, and a failed grant leaves nothing
behind.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy.ext.asyncio import AsyncSession


logger = structlog.get_logger()


@asynccontextmanager
async def atomic(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Run a block of writes as one transaction.

    Commits when the block exits normally and rolls back on any other exit
    path, including cancellation, before re-raising.

    Usage:
        async with atomic(self.session):
            await self.repo.create(role)
            await self.repo.replace_permissions(role.id, permission_ids)

    Args:
        session: The session whose transaction is scoped

    Yields:
        The same session
    """
    try:
        yield session
        await session.commit()
    except BaseException as exc:
        await session.rollback()
        logger.debug("transaction_rolled_back", error_type=type(exc).__name__)
        raise
