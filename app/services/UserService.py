"""Accounts: registration, login, profile and admin flag."""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.constants import USER_FIELD_COLUMNS, USER_NULLABLE_FIELDS, UserField
from app.core.config import Settings
from app.core.exceptions import BadRequestError, UnauthError, inactive_user, not_found_user
from app.core.security import hash_password, verify_password
from app.models.follow import Follow
from app.models.user import User
from app.schemas.userSchema import AuthUser, UserDetail, UserRegisterRequest, UserSummary
from app.utils.sql import sql_for_partial_update

logger = logging.getLogger(__name__)


class UserService:
    """
    User accounts keyed by username.

    Accounts are never deleted; deactivation hides them from most reads
    while keeping every row that references them.
    """

    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.settings = settings

    async def _get_model(self, username: str) -> User:
        result = await self.db.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()
        if not user:
            raise not_found_user(username)
        return user

    async def _get_active_model(self, username: str) -> User:
        user = await self._get_model(username)
        if not user.is_active:
            raise inactive_user(username)
        return user

    async def _follow_names(self, username: str, mine, theirs) -> List[str]:
        result = await self.db.execute(
            select(theirs)
            .join(User, User.username == theirs)
            .where(mine == username, User.is_active == True)
            .order_by(theirs)
        )
        return list(result.scalars().all())

    async def _detail(self, user: User) -> UserDetail:
        return UserDetail(
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
            birth_date=user.birth_date,
            city=user.current_city,
            state=user.current_state,
            profile_img=user.profile_img,
            created_on=user.created_on,
            is_private=user.is_private,
            email=user.email,
            is_admin=user.is_admin,
            phone_number=user.phone_number,
            following=await self._follow_names(user.username, Follow.following_user, Follow.followed_user),
            followed=await self._follow_names(user.username, Follow.followed_user, Follow.following_user),
        )

    async def register(self, data: UserRegisterRequest) -> AuthUser:
        """Create an account; BadRequestError if the username is taken."""
        result = await self.db.execute(select(User.username).where(User.username == data.username))
        if result.first() is not None:
            logger.warning(f"Duplicate username: {data.username}")
            raise BadRequestError(f"Duplicate username: {data.username}")

        user = User(
            username=data.username,
            password=hash_password(data.password, self.settings.BCRYPT_ROUNDS),
            first_name=data.first_name,
            last_name=data.last_name,
            birth_date=data.birth_date,
            current_city=data.city,
            current_state=data.state,
            phone_number=data.phone_number,
            email=data.email,
        )
        self.db.add(user)
        await self.db.flush()

        logger.info(f"Registered user {user.username}")
        return AuthUser(username=user.username, is_admin=user.is_admin)

    async def authenticate(self, username: str, password: str) -> AuthUser:
        """
        Check credentials.

        Raises:
            InactiveError: the account is deactivated.
            UnauthError: unknown username or wrong password.
        """
        result = await self.db.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()

        if user:
            if not user.is_active:
                raise inactive_user(username)
            if verify_password(password, user.password):
                return AuthUser(username=user.username, is_admin=user.is_admin)

        logger.warning(f"Failed login for {username}")
        raise UnauthError("Invalid username/password")

    async def get(self, username: str) -> UserDetail:
        """Profile with the active accounts the user follows and is followed by."""
        return await self._detail(await self._get_active_model(username))

    async def find_all(
        self,
        username: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        city: Optional[str] = None,
        state: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> List[UserSummary]:
        """Users matching every given filter, ordered by username."""
        stmt = select(User)
        if username:
            stmt = stmt.where(User.username.startswith(username))
        if first_name:
            stmt = stmt.where(func.lower(User.first_name) == first_name.lower())
        if last_name:
            stmt = stmt.where(func.lower(User.last_name) == last_name.lower())
        if city:
            stmt = stmt.where(func.lower(User.current_city).contains(city.lower()))
        if state:
            stmt = stmt.where(User.current_state == state)
        if is_active is not None:
            stmt = stmt.where(User.is_active == is_active)

        result = await self.db.execute(stmt.order_by(User.username))
        return [
            UserSummary(
                username=user.username,
                first_name=user.first_name,
                last_name=user.last_name,
                city=user.current_city,
                state=user.current_state,
                profile_img=user.profile_img,
                is_private=user.is_private,
            )
            for user in result.scalars().all()
        ]

    async def update(self, username: str, data: Dict[str, Any]) -> UserDetail:
        """
        Partial profile update through the declared user field map.

        The username itself cannot be changed.

        Raises:
            BadRequestError: empty payload, an unknown field or a null required field.
            NotFoundError: username does not exist.
        """
        values = sql_for_partial_update(data, USER_FIELD_COLUMNS, UserField, USER_NULLABLE_FIELDS)
        user = await self._get_model(username)
        for column, value in values.items():
            setattr(user, column, value)
        await self.db.flush()

        logger.info(f"Updated {username}: {sorted(data)}")
        return await self._detail(user)

    async def _set_active(self, username: str, is_active: bool) -> None:
        user = await self._get_model(username)
        user.is_active = is_active
        await self.db.flush()
        logger.info(f"User {username} {'reactivated' if is_active else 'deactivated'}")

    async def deactivate(self, username: str) -> None:
        await self._set_active(username, False)

    async def reactivate(self, username: str) -> None:
        await self._set_active(username, True)

    async def update_password(self, username: str, old_password: str, new_password: str) -> None:
        user = await self._get_active_model(username)
        if not verify_password(old_password, user.password):
            logger.warning(f"Wrong password given for {username}")
            raise UnauthError("Invalid password")

        user.password = hash_password(new_password, self.settings.BCRYPT_ROUNDS)
        await self.db.flush()
        logger.info(f"Password updated for {username}")

    async def update_is_admin(self, username: str, key: str) -> UserDetail:
        """Flip the admin flag when `key` matches the configured secret."""
        user = await self._get_model(username)
        if key != self.settings.SECRET_KEY:
            logger.warning(f"Invalid admin key for {username}")
            raise UnauthError("Invalid key")

        user.is_admin = not user.is_admin
        await self.db.flush()
        logger.info(f"Admin flag for {username} set to {user.is_admin}")
        return await self._detail(user)
