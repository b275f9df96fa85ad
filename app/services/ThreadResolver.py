"""Maps a set of usernames to the one thread whose member set is exactly that set."""

import logging
import uuid
from typing import List, Optional, Sequence

from sqlalchemy import func, intersect, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestError
from app.models.messaging import ThreadMember
from app.utils.lookups import require_users

logger = logging.getLogger(__name__)


def validate_party(usernames: Sequence[str]) -> List[str]:
    """Return the party as a list, rejecting fewer than 2 users or repeats."""
    if isinstance(usernames, str) or not isinstance(usernames, (list, tuple, set, frozenset)):
        raise BadRequestError("Thread party must be a collection of usernames")
    party = list(usernames)
    if len(party) < 2:
        raise BadRequestError("Thread party requires at least 2 users")
    if len(set(party)) != len(party):
        raise BadRequestError("Thread party cannot repeat a username")
    return party


class ThreadResolver:
    """
    Resolves and creates threads keyed by exact party membership.

    A thread id is an opaque uuid4 string. Members of a thread never
    change after creation, so at most one thread matches a given set.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def resolve(self, usernames: Sequence[str]) -> Optional[str]:
        """
        Find the thread whose members are exactly `usernames`.

        Args:
            usernames: at least 2 distinct usernames, in any order.

        Returns:
            The thread id, or None when no such thread exists.

        Raises:
            BadRequestError: fewer than 2 users or a repeated username.
            NotFoundError: one or more usernames have no account.
        """
        party = validate_party(usernames)
        await require_users(self.db, party)

        # threads of exactly the party's size
        sized = (
            select(ThreadMember.id)
            .group_by(ThreadMember.id)
            .having(func.count(ThreadMember.username) == len(party))
        )
        # ... containing every member of the party
        per_member = [
            select(ThreadMember.id).where(
                ThreadMember.username == username,
                ThreadMember.id.in_(sized),
            )
            for username in party
        ]
        result = await self.db.execute(intersect(*per_member))
        return result.scalars().first()

    async def get_or_create(self, usernames: Sequence[str]) -> str:
        """Return the party's thread id, creating the thread and memberships if needed."""
        thread_id = await self.resolve(usernames)
        if thread_id:
            return thread_id

        thread_id = str(uuid.uuid4())
        self.db.add_all(ThreadMember(id=thread_id, username=username) for username in usernames)
        await self.db.flush()
        logger.info(f"Created thread {thread_id} for {sorted(usernames)}")
        return thread_id

    async def is_member(self, thread_id: str, username: str) -> bool:
        result = await self.db.execute(
            select(ThreadMember.id).where(
                ThreadMember.id == thread_id,
                ThreadMember.username == username,
            )
        )
        return result.first() is not None
