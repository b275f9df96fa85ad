"""Appends messages to threads and renders per-viewer histories."""

import logging
from typing import Dict, List, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestError, NotFoundError
from app.models.messaging import InactiveMessage, Message, ThreadMember
from app.models.user import User
from app.schemas.messageSchema import (
    MessageResponse,
    ThreadDetailResponse,
    ThreadMemberResponse,
    ThreadSummaryResponse,
)
from app.services.ThreadResolver import ThreadResolver, validate_party
from app.utils.lookups import require_user, require_users

logger = logging.getLogger(__name__)


def to_message_response(message: Message) -> MessageResponse:
    return MessageResponse(
        thread_id=message.party_id,
        id=message.id,
        sender_username=message.message_from,
        body=message.message,
        created_on=message.created_on,
    )


class MessageLedger:
    """
    Message storage over threads.

    Hiding a message writes a tombstone for one viewer; the message stays
    visible to every other member of the thread.
    """

    def __init__(self, db: AsyncSession, resolver: ThreadResolver = None):
        self.db = db
        self.resolver = resolver or ThreadResolver(db)

    def _hidden_for(self, username: str):
        return select(InactiveMessage.message_id).where(InactiveMessage.username == username)

    async def check_thread(self, thread_id: str, username: str) -> None:
        """
        Raises NotFoundError if:
            - username not found
            - thread_id not found
            - username is not a member of thread_id
        """
        await require_user(self.db, username)
        if not await self.resolver.is_member(thread_id, username):
            raise NotFoundError(f"No threadId: {thread_id} with user: {username}")

    async def _members(self, thread_ids: Sequence[str]) -> Dict[str, List[ThreadMemberResponse]]:
        result = await self.db.execute(
            select(ThreadMember.id, User.username, User.first_name, User.last_name, User.profile_img)
            .join(User, User.username == ThreadMember.username)
            .where(ThreadMember.id.in_(thread_ids))
            .order_by(ThreadMember.id, User.username)
        )
        members: Dict[str, List[ThreadMemberResponse]] = {}
        for row in result:
            members.setdefault(row.id, []).append(
                ThreadMemberResponse(
                    username=row.username,
                    first_name=row.first_name,
                    last_name=row.last_name,
                    profile_img=row.profile_img,
                )
            )
        return members

    async def _append(self, thread_id: str, sender: str, body: str) -> MessageResponse:
        message = Message(party_id=thread_id, message_from=sender, message=body)
        self.db.add(message)
        await self.db.flush()
        await self.db.refresh(message)
        return to_message_response(message)

    async def post(self, thread_users: Sequence[str], sender_username: str, body: str) -> MessageResponse:
        """
        Send a message to the thread shared by exactly `thread_users`,
        creating that thread on first use.

        Raises:
            BadRequestError: fewer than 2 users, or the sender is not in the party.
            NotFoundError: any party member has no account.
        """
        party = validate_party(thread_users)
        if sender_username not in party:
            raise BadRequestError(f"Sender: {sender_username} should appear in thread party")
        await require_users(self.db, party)

        thread_id = await self.resolver.get_or_create(party)
        message = await self._append(thread_id, sender_username, body)
        logger.info(f"{sender_username} posted message {message.id} to thread {thread_id}")
        return message

    async def reply(self, thread_id: str, sender_username: str, body: str) -> MessageResponse:
        """Append a message to an existing thread the sender belongs to."""
        await self.check_thread(thread_id, sender_username)
        message = await self._append(thread_id, sender_username, body)
        logger.info(f"{sender_username} replied with message {message.id} in thread {thread_id}")
        return message

    async def list_for_viewer(self, thread_id: str, viewer_username: str) -> ThreadDetailResponse:
        """Members plus every message the viewer has not hidden, oldest first."""
        await self.check_thread(thread_id, viewer_username)

        result = await self.db.execute(
            select(Message)
            .where(
                Message.party_id == thread_id,
                Message.id.not_in(self._hidden_for(viewer_username)),
            )
            .order_by(Message.id)
        )
        messages = [to_message_response(m) for m in result.scalars().all()]
        members = await self._members([thread_id])

        return ThreadDetailResponse(
            thread_id=thread_id,
            members=members.get(thread_id, []),
            messages=messages,
        )

    async def hide_thread(self, thread_id: str, viewer_username: str) -> List[int]:
        """Hide every still-visible message of the thread for the viewer only."""
        await self.check_thread(thread_id, viewer_username)

        result = await self.db.execute(
            select(Message.id)
            .where(
                Message.party_id == thread_id,
                Message.id.not_in(self._hidden_for(viewer_username)),
            )
            .order_by(Message.id)
        )
        ids = list(result.scalars().all())
        self.db.add_all(InactiveMessage(message_id=message_id, username=viewer_username) for message_id in ids)
        await self.db.flush()

        logger.info(f"{viewer_username} hid {len(ids)} messages in thread {thread_id}")
        return ids

    async def hide_message(self, message_id: int, viewer_username: str) -> int:
        """
        Hide a single message for the viewer.

        Hiding a message that is already hidden leaves a single tombstone.

        Raises:
            NotFoundError: the message does not exist, or the viewer is
                not a member of its thread.
        """
        result = await self.db.execute(select(Message.party_id).where(Message.id == message_id))
        thread_id = result.scalar_one_or_none()
        if thread_id is None:
            raise NotFoundError(f"No message: {message_id}")

        await self.check_thread(thread_id, viewer_username)

        existing = await self.db.execute(
            select(InactiveMessage.id).where(
                InactiveMessage.message_id == message_id,
                InactiveMessage.username == viewer_username,
            )
        )
        if existing.first() is None:
            self.db.add(InactiveMessage(message_id=message_id, username=viewer_username))
            await self.db.flush()
            logger.info(f"{viewer_username} hid message {message_id}")
        return message_id

    async def list_threads_for_user(self, username: str) -> List[ThreadSummaryResponse]:
        """
        Threads of the user, most recent visible message first.

        Threads where every message is hidden for the user, or with no
        messages at all, are left out.
        """
        await require_user(self.db, username)

        my_threads = select(ThreadMember.id).where(ThreadMember.username == username)
        last_ids = (
            select(Message.party_id, func.max(Message.id).label("last_id"))
            .where(
                Message.party_id.in_(my_threads),
                Message.id.not_in(self._hidden_for(username)),
            )
            .group_by(Message.party_id)
            .subquery()
        )
        result = await self.db.execute(
            select(Message)
            .join(last_ids, Message.id == last_ids.c.last_id)
            .order_by(Message.id.desc())
        )
        last_messages = result.scalars().all()
        members = await self._members([m.party_id for m in last_messages])

        return [
            ThreadSummaryResponse(
                thread_id=m.party_id,
                members=members.get(m.party_id, []),
                last_message=to_message_response(m),
            )
            for m in last_messages
        ]
