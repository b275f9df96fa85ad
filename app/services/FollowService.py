"""Directed follow edges between users."""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.constants import ActivityOperation, FollowAction
from app.core.exceptions import BadRequestError
from app.models.activity import FollowActivity
from app.models.follow import Follow
from app.models.user import User
from app.schemas.userSchema import FollowToggleResponse, FollowUser
from app.utils.activity import record_activity
from app.utils.lookups import require_active_user, require_user

logger = logging.getLogger(__name__)


class FollowService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _counterparts(self, username: str, mine, theirs) -> List[FollowUser]:
        result = await self.db.execute(
            select(User)
            .join(Follow, theirs == User.username)
            .where(mine == username, User.is_active == True)
            .order_by(User.username)
        )
        return [
            FollowUser(
                username=user.username,
                first_name=user.first_name,
                last_name=user.last_name,
                profile_img=user.profile_img,
                city=user.current_city,
                state=user.current_state,
            )
            for user in result.scalars().all()
        ]

    async def get_follows(self, username: str) -> List[FollowUser]:
        """Active users `username` follows."""
        await require_user(self.db, username)
        return await self._counterparts(username, Follow.following_user, Follow.followed_user)

    async def get_followers(self, username: str) -> List[FollowUser]:
        """Active users following `username`."""
        await require_user(self.db, username)
        return await self._counterparts(username, Follow.followed_user, Follow.following_user)

    async def toggle(self, follower: str, followed: str) -> FollowToggleResponse:
        """
        Follow `followed` if not yet following, otherwise unfollow.

        Raises:
            NotFoundError / InactiveError: either account is missing or deactivated.
            BadRequestError: a user cannot follow themselves.
        """
        await require_active_user(self.db, follower)
        await require_active_user(self.db, followed)
        if follower == followed:
            raise BadRequestError("Users cannot follow themselves")

        result = await self.db.execute(
            select(Follow).where(Follow.following_user == follower, Follow.followed_user == followed)
        )
        edge = result.scalar_one_or_none()

        if edge:
            await self.db.delete(edge)
            action = FollowAction.unfollowed
        else:
            self.db.add(Follow(following_user=follower, followed_user=followed))
            action = FollowAction.followed

        record_activity(
            self.db, FollowActivity, ActivityOperation(action.value),
            primary_user=follower, secondary_user=followed,
        )
        await self.db.flush()

        logger.info(f"{follower} {action.value} {followed}")
        return FollowToggleResponse(action=action.value, follower=follower, followed=followed)
