import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.constants import InviteStatus
from app.core.config import Settings, get_app_settings
from app.core.database import aget_db
from app.core.exceptions import BadRequestError
from app.core.security import ensure_correct_user_or_admin
from app.schemas.inviteSchema import InviteActionResponse, InviteCreateRequest, UserInvitesResponse
from app.schemas.messageSchema import (
    HiddenMessagesResponse,
    NewMessageRequest,
    ThreadIdResponse,
    ThreadReplyRequest,
    ThreadResolveRequest,
)
from app.schemas.userSchema import (
    AdminUpdateRequest,
    FollowToggleResponse,
    PasswordUpdateRequest,
    UserUpdateRequest,
)
from app.services.FollowService import FollowService
from app.services.GameService import GameService
from app.services.InviteService import InviteService
from app.services.MessageLedger import MessageLedger
from app.services.ThreadResolver import ThreadResolver
from app.services.UserService import UserService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/users",
    tags=["users"]
)

self_or_admin = [Depends(ensure_correct_user_or_admin)]


# -----------------------------
# Accounts
# -----------------------------
@router.get("")
async def list_users(
    username: Optional[str] = None,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    city: Optional[str] = None,
    state: Optional[str] = None,
    is_active: Optional[bool] = None,
    db: AsyncSession = Depends(aget_db),
    settings: Settings = Depends(get_app_settings),
):
    users = await UserService(db, settings).find_all(
        username=username,
        first_name=first_name,
        last_name=last_name,
        city=city,
        state=state,
        is_active=is_active,
    )
    return {"users": users}


@router.get("/{username}")
async def get_user(
    username: str,
    db: AsyncSession = Depends(aget_db),
    settings: Settings = Depends(get_app_settings),
):
    """Profile, follow lists and hosted/joined game history."""
    user = await UserService(db, settings).get(username)
    games = await GameService(db).game_history(username)
    return {"user": user, "games": games}


@router.patch("/{username}", dependencies=self_or_admin)
async def update_user(
    username: str,
    data: UserUpdateRequest,
    db: AsyncSession = Depends(aget_db),
    settings: Settings = Depends(get_app_settings),
):
    user = await UserService(db, settings).update(username, data.model_dump(exclude_unset=True))
    return {"user": user}


@router.patch("/{username}/password", dependencies=self_or_admin)
async def update_password(
    username: str,
    data: PasswordUpdateRequest,
    db: AsyncSession = Depends(aget_db),
    settings: Settings = Depends(get_app_settings),
):
    await UserService(db, settings).update_password(username, data.old_password, data.new_password)
    return {"status": "Password updated"}


@router.patch("/{username}/admin", dependencies=self_or_admin)
async def update_admin(
    username: str,
    data: AdminUpdateRequest,
    db: AsyncSession = Depends(aget_db),
    settings: Settings = Depends(get_app_settings),
):
    user = await UserService(db, settings).update_is_admin(username, data.key)
    return {"user": user}


@router.patch("/{username}/deactivate", dependencies=self_or_admin)
async def deactivate_user(
    username: str,
    db: AsyncSession = Depends(aget_db),
    settings: Settings = Depends(get_app_settings),
):
    await UserService(db, settings).deactivate(username)
    return {"username": username, "action": "deactivated"}


@router.patch("/{username}/reactivate", dependencies=self_or_admin)
async def reactivate_user(
    username: str,
    db: AsyncSession = Depends(aget_db),
    settings: Settings = Depends(get_app_settings),
):
    await UserService(db, settings).reactivate(username)
    return {"username": username, "action": "reactivated"}


# -----------------------------
# Follows
# -----------------------------
@router.get("/{username}/follow")
async def get_follow(username: str, db: AsyncSession = Depends(aget_db)):
    service = FollowService(db)
    followers = await service.get_followers(username)
    follows = await service.get_follows(username)
    return {"followers": followers, "follows": follows}


@router.post(
    "/{username}/follow/{followed}",
    response_model=FollowToggleResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=self_or_admin,
)
async def toggle_follow(username: str, followed: str, db: AsyncSession = Depends(aget_db)):
    return await FollowService(db).toggle(username, followed)


# -----------------------------
# Threads and messages
# -----------------------------
@router.get("/{username}/threads", dependencies=self_or_admin)
async def list_threads(username: str, db: AsyncSession = Depends(aget_db)):
    threads = await MessageLedger(db).list_threads_for_user(username)
    return {"threads": threads}


@router.post("/{username}/threads", dependencies=self_or_admin)
async def post_message(username: str, data: NewMessageRequest, db: AsyncSession = Depends(aget_db)):
    """Message the thread shared by exactly the party, creating it on first use."""
    message = await MessageLedger(db).post(data.party, username, data.message)
    return {"message": message}


@router.post("/{username}/threads/resolve", response_model=ThreadIdResponse, dependencies=self_or_admin)
async def resolve_thread(username: str, data: ThreadResolveRequest, db: AsyncSession = Depends(aget_db)):
    """Thread id for the party, creating the thread before its first message."""
    if username not in data.party:
        raise BadRequestError(f"User: {username} should appear in thread party")
    thread_id = await ThreadResolver(db).get_or_create(data.party)
    return ThreadIdResponse(thread_id=thread_id)


@router.get("/{username}/threads/{thread_id}", dependencies=self_or_admin)
async def get_thread(username: str, thread_id: str, db: AsyncSession = Depends(aget_db)):
    thread = await MessageLedger(db).list_for_viewer(thread_id, username)
    return {"thread": thread}


@router.post("/{username}/threads/{thread_id}", dependencies=self_or_admin)
async def reply_thread(
    username: str,
    thread_id: str,
    data: ThreadReplyRequest,
    db: AsyncSession = Depends(aget_db),
):
    message = await MessageLedger(db).reply(thread_id, username, data.message)
    return {"message": message}


@router.delete(
    "/{username}/threads/{thread_id}",
    response_model=HiddenMessagesResponse,
    dependencies=self_or_admin,
)
async def hide_thread(username: str, thread_id: str, db: AsyncSession = Depends(aget_db)):
    messages = await MessageLedger(db).hide_thread(thread_id, username)
    return HiddenMessagesResponse(messages=messages)


@router.delete("/{username}/messages/{message_id}", dependencies=self_or_admin)
async def hide_message(username: str, message_id: int, db: AsyncSession = Depends(aget_db)):
    message = await MessageLedger(db).hide_message(message_id, username)
    return {"message": message, "action": "deleted"}


# -----------------------------
# Invites
# -----------------------------
@router.get("/{username}/invites", dependencies=self_or_admin)
async def list_invites(username: str, db: AsyncSession = Depends(aget_db)):
    service = InviteService(db)
    invites = UserInvitesResponse(
        received=await service.get_invites_received(username),
        sent=await service.get_invites_sent(username),
    )
    return {"invites": invites}


@router.post(
    "/{username}/invites/add/{game_id}",
    status_code=status.HTTP_201_CREATED,
    dependencies=self_or_admin,
)
async def create_invites(
    username: str,
    game_id: int,
    data: InviteCreateRequest,
    db: AsyncSession = Depends(aget_db),
):
    """Invite one or more users; a group either succeeds whole or not at all."""
    service = InviteService(db)
    if len(data.to_users) > 1:
        invites = await service.create_group(game_id, username, data.to_users)
    else:
        invites = [await service.create(game_id, username, data.to_users[0])]
    return {"invites": invites}


async def _set_invite_status(db: AsyncSession, invite_id: int, username: str, new_status: InviteStatus):
    invite = await InviteService(db).update(invite_id, username, new_status.value)
    return InviteActionResponse(action=new_status, invite=invite)


@router.patch(
    "/{username}/invites/cancel/{invite_id}",
    response_model=InviteActionResponse,
    dependencies=self_or_admin,
)
async def cancel_invite(username: str, invite_id: int, db: AsyncSession = Depends(aget_db)):
    return await _set_invite_status(db, invite_id, username, InviteStatus.cancelled)


@router.patch(
    "/{username}/invites/accept/{invite_id}",
    response_model=InviteActionResponse,
    dependencies=self_or_admin,
)
async def accept_invite(username: str, invite_id: int, db: AsyncSession = Depends(aget_db)):
    return await _set_invite_status(db, invite_id, username, InviteStatus.accepted)


@router.patch(
    "/{username}/invites/deny/{invite_id}",
    response_model=InviteActionResponse,
    dependencies=self_or_admin,
)
async def deny_invite(username: str, invite_id: int, db: AsyncSession = Depends(aget_db)):
    return await _set_invite_status(db, invite_id, username, InviteStatus.denied)
