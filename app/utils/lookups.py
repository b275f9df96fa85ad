"""Existence and active-state checks shared by the services."""

from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    NotFoundError,
    inactive_game,
    inactive_user,
    not_found_game,
    not_found_user,
)
from app.models.game import Game
from app.models.user import User


async def user_is_active(db: AsyncSession, username: str) -> Optional[bool]:
    """Active flag of the user, or None if the username does not exist."""
    result = await db.execute(select(User.is_active).where(User.username == username))
    return result.scalar_one_or_none()


async def game_is_active(db: AsyncSession, game_id: int) -> Optional[bool]:
    """Active flag of the game, or None if the game does not exist."""
    result = await db.execute(select(Game.is_active).where(Game.id == game_id))
    return result.scalar_one_or_none()


async def require_user(db: AsyncSession, username: str) -> None:
    if await user_is_active(db, username) is None:
        raise not_found_user(username)


async def require_active_user(db: AsyncSession, username: str) -> None:
    is_active = await user_is_active(db, username)
    if is_active is None:
        raise not_found_user(username)
    if not is_active:
        raise inactive_user(username)


async def require_game(db: AsyncSession, game_id: int) -> bool:
    is_active = await game_is_active(db, game_id)
    if is_active is None:
        raise not_found_game(game_id)
    return is_active


async def require_active_game(db: AsyncSession, game_id: int) -> None:
    if not await require_game(db, game_id):
        raise inactive_game(game_id)


async def missing_usernames(db: AsyncSession, usernames: Iterable[str]) -> List[str]:
    """Usernames from the input with no account, in input order."""
    wanted = list(dict.fromkeys(usernames))
    result = await db.execute(select(User.username).where(User.username.in_(wanted)))
    found = set(result.scalars().all())
    return [username for username in wanted if username not in found]


async def require_users(db: AsyncSession, usernames: Iterable[str]) -> None:
    """Raise NotFoundError naming every username without an account."""
    missing = await missing_usernames(db, usernames)
    if missing:
        raise NotFoundError(f"{', '.join(missing)} not found")
