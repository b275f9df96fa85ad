"""Game invitations and their status state machine."""

import logging
from typing import List, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from app.constants.constants import (
    INVITE_STATUS_VALUES,
    RECIPIENT_STATUSES,
    SENDER_STATUSES,
    ActivityOperation,
    InviteStatus,
)
from app.core.exceptions import BadRequestError, NotFoundError, UnauthError
from app.models.activity import InviteActivity
from app.models.game import Game
from app.models.invite import Invite
from app.models.user import User
from app.schemas.inviteSchema import InviteCreated, InviteResponse
from app.services.GameService import GameService
from app.utils.activity import record_activity
from app.utils.lookups import require_active_game, require_active_user

logger = logging.getLogger(__name__)

Sender = aliased(User, name="sender")
Recipient = aliased(User, name="recipient")


def not_found_invite(invite_id: int) -> NotFoundError:
    return NotFoundError(f"No invite: {invite_id}")


class InviteService:
    """
    Invite lifecycle: pending -> accepted | denied | cancelled.

    A recipient holds at most one pending invite per game from an active
    sender. Pending invites from deactivated senders do not count.
    """

    def __init__(self, db: AsyncSession, games: GameService = None):
        self.db = db
        self.games = games or GameService(db)

    async def _has_active_pending(self, game_id: int, to_user: str) -> bool:
        result = await self.db.execute(
            select(Invite.id)
            .join(Sender, Sender.username == Invite.from_user)
            .where(
                Invite.game_id == game_id,
                Invite.to_user == to_user,
                Invite.status == InviteStatus.pending,
                Sender.is_active == True,
            )
        )
        return result.first() is not None

    async def _check_recipient(self, game_id: int, to_user: str) -> None:
        await require_active_user(self.db, to_user)
        if await self._has_active_pending(game_id, to_user):
            raise BadRequestError(f"User: {to_user} has invite 'pending'")

    async def _insert(self, game_id: int, from_user: str, to_users: Sequence[str]) -> List[InviteCreated]:
        invites = [Invite(game_id=game_id, from_user=from_user, to_user=to_user) for to_user in to_users]
        self.db.add_all(invites)
        for invite in invites:
            record_activity(
                self.db,
                InviteActivity,
                ActivityOperation.invited,
                primary_user=from_user,
                secondary_user=invite.to_user,
                game_id=game_id,
                data=InviteStatus.pending.value,
            )
        await self.db.flush()
        return [InviteCreated.model_validate(invite) for invite in invites]

    async def create(self, game_id: int, from_user: str, to_user: str) -> InviteCreated:
        """
        Invite `to_user` to a game on behalf of `from_user`.

        Raises:
            NotFoundError: game, from_user or to_user do not exist.
            InactiveError: game, from_user or to_user are inactive.
            BadRequestError: to_user already has a pending invite to the
                game from an active user.
        """
        await require_active_game(self.db, game_id)
        await require_active_user(self.db, from_user)
        await self._check_recipient(game_id, to_user)

        [invite] = await self._insert(game_id, from_user, [to_user])
        logger.info(f"{from_user} invited {to_user} to game {game_id}")
        return invite

    async def create_group(self, game_id: int, from_user: str, users: Sequence[str]) -> List[InviteCreated]:
        """
        Invite several users at once. Every recipient is validated before
        any row is written, so one bad recipient fails the whole group.
        """
        recipients = list(users)
        if not recipients:
            raise BadRequestError("Group invite requires at least 1 user")
        if len(set(recipients)) != len(recipients):
            raise BadRequestError("Group invite cannot repeat a username")

        await require_active_game(self.db, game_id)
        await require_active_user(self.db, from_user)
        for to_user in recipients:
            await self._check_recipient(game_id, to_user)

        invites = await self._insert(game_id, from_user, recipients)
        logger.info(f"{from_user} invited {len(invites)} users to game {game_id}")
        return invites

    async def _get_model(self, invite_id: int) -> Invite:
        result = await self.db.execute(select(Invite).where(Invite.id == invite_id))
        invite = result.scalar_one_or_none()
        if not invite:
            raise not_found_invite(invite_id)
        return invite

    async def get(self, invite_id: int) -> InviteResponse:
        return InviteResponse.model_validate(await self._get_model(invite_id))

    async def update(self, invite_id: int, username: str, status: str) -> InviteResponse:
        """
        Move an invite out of 'pending'.

        The sender may only cancel; the recipient may only accept or deny.
        Accepting also puts the recipient on the game roster.

        Raises:
            NotFoundError: invite_id does not exist.
            BadRequestError: unknown status, status unchanged, or the
                invite already left 'pending'.
            UnauthError: username may not set this status.
        """
        invite = await self._get_model(invite_id)

        if status not in INVITE_STATUS_VALUES:
            raise BadRequestError("Updated invite status invalid")
        new_status = InviteStatus(status)
        if invite.status == new_status:
            raise BadRequestError(f"Invite status already '{new_status.value}'")

        allowed = set()
        if invite.from_user == username:
            allowed |= SENDER_STATUSES
        if invite.to_user == username:
            allowed |= RECIPIENT_STATUSES
        if new_status not in allowed:
            logger.warning(f"{username} tried to set invite {invite_id} to {new_status.value}")
            raise UnauthError(f"{username} cannot make this request")

        if invite.status != InviteStatus.pending:
            raise BadRequestError(f"Invite already '{invite.status.value}'")

        invite.status = new_status

        other = invite.to_user if username == invite.from_user else invite.from_user
        record_activity(
            self.db,
            InviteActivity,
            ActivityOperation(new_status.value),
            primary_user=username,
            secondary_user=other,
            game_id=invite.game_id,
            data=new_status.value,
        )
        if new_status == InviteStatus.accepted:
            await self.games.enroll(invite.game_id, invite.to_user)
        await self.db.flush()

        logger.info(f"Invite {invite_id} {new_status.value} by {username}")
        return InviteResponse.model_validate(invite)

    async def delete(self, invite_id: int) -> None:
        invite = await self._get_model(invite_id)
        await self.db.delete(invite)
        await self.db.flush()

    # ------------------------------
    # Queries
    # ------------------------------
    async def _list(self, stmt) -> List[InviteResponse]:
        result = await self.db.execute(stmt.order_by(Invite.id))
        return [InviteResponse.model_validate(invite) for invite in result.scalars().all()]

    async def get_game_invites(self, game_id: int) -> List[InviteResponse]:
        """Pending invites to the game between active users."""
        await require_active_game(self.db, game_id)
        return await self._list(
            select(Invite)
            .join(Sender, Sender.username == Invite.from_user)
            .join(Recipient, Recipient.username == Invite.to_user)
            .where(
                Invite.game_id == game_id,
                Invite.status == InviteStatus.pending,
                Sender.is_active == True,
                Recipient.is_active == True,
            )
        )

    async def get_all_game_invites(self, game_id: int) -> List[InviteResponse]:
        """Every invite to the game, including those of inactive users."""
        await require_active_game(self.db, game_id)
        return await self._list(select(Invite).where(Invite.game_id == game_id))

    async def get_invites_sent(self, username: str) -> List[InviteResponse]:
        """Invites sent by username to active users for active games."""
        await require_active_user(self.db, username)
        return await self._list(
            select(Invite)
            .join(Recipient, Recipient.username == Invite.to_user)
            .join(Game, Game.id == Invite.game_id)
            .where(
                Invite.from_user == username,
                Recipient.is_active == True,
                Game.is_active == True,
            )
        )

    async def get_all_invites_sent(self, username: str) -> List[InviteResponse]:
        await require_active_user(self.db, username)
        return await self._list(select(Invite).where(Invite.from_user == username))

    async def get_invites_received(self, username: str) -> List[InviteResponse]:
        """Invites received by username from active users for active games."""
        await require_active_user(self.db, username)
        return await self._list(
            select(Invite)
            .join(Sender, Sender.username == Invite.from_user)
            .join(Game, Game.id == Invite.game_id)
            .where(
                Invite.to_user == username,
                Sender.is_active == True,
                Game.is_active == True,
            )
        )

    async def get_all_invites_received(self, username: str) -> List[InviteResponse]:
        await require_active_user(self.db, username)
        return await self._list(select(Invite).where(Invite.to_user == username))
