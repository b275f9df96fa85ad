"""Password hashing, JWT handling and the route guards built on them."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.core.database import aget_db
from app.core.exceptions import BadRequestError, NotFoundError, UnauthError, not_found_game
from app.models.game import Game, GameComment
from app.schemas.userSchema import AuthUser

logger = logging.getLogger(__name__)


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password with bcrypt using `rounds` as the work factor."""
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))


def create_jwt_token(data: dict, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    """
    Creates a JWT with the provided data and expiration time.

    Args:
        data (dict): The payload, {"username", "is_admin"} for user tokens.
        settings (Settings): Supplies the secret key and algorithm.
        expires_delta (timedelta, optional): Time until the token expires.
            Defaults to ACCESS_TOKEN_EXPIRE_MINUTES.

    Returns:
        str: The encoded JWT string.

    Note:
        The token includes the standard claims exp and iat.
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    now = datetime.now(timezone.utc)
    to_encode = data.copy()
    to_encode.update({
        "exp": now + expires_delta,
        "iat": now
    })
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_jwt_token(token: str, settings: Settings) -> dict:
    """Decodes and validates a JWT.

    Raises:
        jwt.InvalidTokenError: If the token is invalid, expired, or improperly formatted.
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


def get_token_user(request: Request) -> Optional[AuthUser]:
    """
    Dependency decoding the bearer token, if any.

    A missing or invalid token makes the request anonymous; it is never
    an error at this stage.
    """
    header = request.headers.get("authorization")
    if not header:
        return None

    token = header.strip()
    if token[:7].lower() == "bearer ":
        token = token[7:].strip()

    try:
        payload = decode_jwt_token(token, request.app.state.settings)
        return AuthUser(username=payload["username"], is_admin=payload.get("is_admin", False))
    except (jwt.InvalidTokenError, KeyError) as e:
        logger.debug(f"Ignoring bearer token: {e}")
        return None


async def ensure_logged_in(user: Optional[AuthUser] = Depends(get_token_user)) -> AuthUser:
    if not user:
        raise UnauthError()
    return user


async def ensure_correct_user_or_admin(
    username: str,
    user: Optional[AuthUser] = Depends(get_token_user),
) -> AuthUser:
    """Token user must match the {username} path parameter, or be an admin."""
    if not (user and (user.is_admin or user.username == username)):
        raise UnauthError()
    return user


async def ensure_host_or_admin(
    game_id: int,
    user: Optional[AuthUser] = Depends(get_token_user),
    db: AsyncSession = Depends(aget_db),
) -> AuthUser:
    """Only the game host or an admin may change a game."""
    result = await db.execute(select(Game.created_by).where(Game.id == game_id))
    created_by = result.scalar_one_or_none()
    if created_by is None:
        raise not_found_game(game_id)

    if not (user and (user.is_admin or user.username == created_by)):
        raise UnauthError()
    return user


async def ensure_auth_delete_comment(
    game_id: int,
    comment_id: int,
    user: Optional[AuthUser] = Depends(get_token_user),
    db: AsyncSession = Depends(aget_db),
) -> AuthUser:
    """An admin, the game host or the comment author may remove a comment."""
    result = await db.execute(
        select(GameComment.username, GameComment.game_id).where(GameComment.id == comment_id)
    )
    comment = result.first()
    if comment is None:
        raise NotFoundError(f"No comment: {comment_id}")

    result = await db.execute(select(Game.created_by).where(Game.id == game_id))
    created_by = result.scalar_one_or_none()
    if created_by is None:
        raise not_found_game(game_id)

    if comment.game_id != game_id:
        raise BadRequestError(f"Comment does not belong to game: {game_id}")

    if not (user and (user.is_admin or user.username in (created_by, comment.username))):
        raise UnauthError()
    return user
