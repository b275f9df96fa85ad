"""Activity feed built from the per-feature activity tables."""

from typing import List

from sqlalchemy import Integer, literal_column, select, union_all
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.activity import ACTIVITY_TABLES
from app.models.follow import Follow
from app.models.user import User
from app.schemas.activitySchema import ActivityRecord, UserActivityResponse
from app.utils.lookups import require_user


def all_activity():
    """
    Every activity row as one selectable.

    `source` is the table's position in ACTIVITY_TABLES; with `id` it
    orders rows that share a stamp.
    """
    return union_all(
        *[
            select(
                literal_column(str(source), Integer).label("source"),
                table.id,
                table.primary_user,
                table.secondary_user,
                table.game_id,
                table.data,
                table.operation,
                table.stamp,
            )
            for source, table in enumerate(ACTIVITY_TABLES)
        ]
    ).subquery("activity")


class ActivityService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _records(self, condition) -> List[ActivityRecord]:
        activity = all_activity()
        result = await self.db.execute(
            select(activity)
            .where(condition(activity))
            .order_by(activity.c.stamp.desc(), activity.c.source, activity.c.id.desc())
        )
        return [ActivityRecord(**row._mapping) for row in result]

    async def get_user_activity(self, username: str) -> UserActivityResponse:
        """
        Feed for `username`, newest first.

        `activity` holds events of the active users `username` follows and
        `my_activity` holds the user's own events.

        Raises:
            NotFoundError: username does not exist.
        """
        await require_user(self.db, username)

        followed = (
            select(Follow.followed_user)
            .join(User, User.username == Follow.followed_user)
            .where(Follow.following_user == username, User.is_active == True)
        )
        return UserActivityResponse(
            activity=await self._records(lambda a: a.c.primary_user.in_(followed)),
            my_activity=await self._records(lambda a: a.c.primary_user == username),
        )
