"""Game invite model."""

from sqlalchemy import Column, DateTime, Enum as SQLEnum, ForeignKey, Integer, String

from app.constants.constants import InviteStatus
from app.models.base import Base, utc_now


class Invite(Base):
    """Invitation from one user to another to join a game."""

    __tablename__ = "users_invites"
    id = Column(Integer, primary_key=True, autoincrement=True)
    game_id = Column(Integer, ForeignKey("games.id", ondelete="CASCADE"), nullable=False)
    from_user = Column(String(30), ForeignKey("users.username", ondelete="CASCADE"), nullable=False)
    to_user = Column(String(30), ForeignKey("users.username", ondelete="CASCADE"), nullable=False)
    status = Column(SQLEnum(InviteStatus, native_enum=False), default=InviteStatus.pending, nullable=False)
    created_on = Column(DateTime, default=utc_now, nullable=False)

    def __repr__(self):
        return f"<Invite {self.id}: {self.from_user} -> {self.to_user} ({self.status})>"
