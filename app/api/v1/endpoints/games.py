import datetime as dt
import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import aget_db
from app.core.security import (
    ensure_auth_delete_comment,
    ensure_correct_user_or_admin,
    ensure_host_or_admin,
    ensure_logged_in,
)
from app.schemas.gameSchema import CommentCreateRequest, GameCreateRequest, GameUpdateRequest
from app.schemas.userSchema import AuthUser
from app.services.GameService import GameService
from app.services.InviteService import InviteService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/games",
    tags=["games"]
)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_game(
    data: GameCreateRequest,
    user: AuthUser = Depends(ensure_logged_in),
    db: AsyncSession = Depends(aget_db),
):
    """Host a new game as the logged in user."""
    details = await GameService(db).create(data, user.username)
    return {"details": details}


@router.get("")
async def list_games(
    date: Optional[dt.date] = None,
    city: Optional[str] = None,
    state: Optional[str] = None,
    host: Optional[str] = None,
    joined: Optional[str] = None,
    is_active: Optional[bool] = None,
    game_status: Optional[str] = None,
    db: AsyncSession = Depends(aget_db),
):
    games = await GameService(db).find_all(
        date=date,
        city=city,
        state=state,
        host=host,
        joined=joined,
        is_active=is_active,
        game_status=game_status,
    )
    return {"games": games}


@router.get("/{game_id}")
async def get_game(game_id: int, db: AsyncSession = Depends(aget_db)):
    """Game details with active comments and active players."""
    service = GameService(db)
    details = await service.get(game_id)
    comments = await service.get_comments(game_id, is_comment_active=True, is_user_active=True)
    players = await service.get_players(game_id, is_user_active=True)
    return {"details": details, "comments": comments, "players": players}


@router.patch("/{game_id}", dependencies=[Depends(ensure_host_or_admin)])
async def update_game(game_id: int, data: GameUpdateRequest, db: AsyncSession = Depends(aget_db)):
    details = await GameService(db).update(game_id, data.model_dump(exclude_unset=True))
    return {"details": details}


@router.post(
    "/{game_id}/comment/{username}",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(ensure_correct_user_or_admin)],
)
async def add_comment(
    game_id: int,
    username: str,
    data: CommentCreateRequest,
    db: AsyncSession = Depends(aget_db),
):
    comment = await GameService(db).add_comment(game_id, username, data.comment)
    return {"comment": comment}


@router.delete("/{game_id}/comment/{comment_id}", dependencies=[Depends(ensure_auth_delete_comment)])
async def deactivate_comment(game_id: int, comment_id: int, db: AsyncSession = Depends(aget_db)):
    comment = await GameService(db).deactivate_comment(comment_id)
    return {"action": "deactivated", "comment": comment}


@router.post(
    "/{game_id}/join/{username}",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(ensure_correct_user_or_admin)],
)
async def join_game(game_id: int, username: str, db: AsyncSession = Depends(aget_db)):
    players = await GameService(db).add_player(game_id, username)
    return {"players": players}


@router.delete("/{game_id}/join/{username}", dependencies=[Depends(ensure_correct_user_or_admin)])
async def leave_game(game_id: int, username: str, db: AsyncSession = Depends(aget_db)):
    players = await GameService(db).remove_player(game_id, username)
    return {"players": players}


@router.patch("/{game_id}/deactivate", dependencies=[Depends(ensure_host_or_admin)])
async def deactivate_game(game_id: int, db: AsyncSession = Depends(aget_db)):
    game = await GameService(db).deactivate(game_id)
    return {"action": "deactivated", "game": game}


@router.patch("/{game_id}/reactivate", dependencies=[Depends(ensure_host_or_admin)])
async def reactivate_game(game_id: int, db: AsyncSession = Depends(aget_db)):
    game = await GameService(db).reactivate(game_id)
    return {"action": "reactivated", "game": game}


@router.get("/{game_id}/invites", dependencies=[Depends(ensure_host_or_admin)])
async def get_game_invites(
    game_id: int,
    include_inactive: bool = False,
    db: AsyncSession = Depends(aget_db),
):
    """Pending invites of the game, or every invite with include_inactive=true."""
    service = InviteService(db)
    if include_inactive:
        invites = await service.get_all_game_invites(game_id)
    else:
        invites = await service.get_game_invites(game_id)
    return {"invites": invites}
