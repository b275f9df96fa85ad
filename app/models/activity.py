"""Append-only activity tables, one per feature."""

from sqlalchemy import Column, DateTime, Integer, String, Text

from app.models.base import Base, utc_now


class ActivityMixin:
    """Columns shared by every activity table."""

    id = Column(Integer, primary_key=True, autoincrement=True)
    primary_user = Column(String(30), nullable=False, index=True)
    secondary_user = Column(String(30), nullable=True)
    game_id = Column(Integer, nullable=True)
    data = Column(Text, nullable=True)
    operation = Column(String(20), nullable=False)
    stamp = Column(DateTime, default=utc_now, nullable=False)


class GameActivity(ActivityMixin, Base):
    __tablename__ = "games_activity"


class UserGameActivity(ActivityMixin, Base):
    __tablename__ = "users_games_activity"


class GameCommentActivity(ActivityMixin, Base):
    __tablename__ = "games_comments_activity"


class FollowActivity(ActivityMixin, Base):
    __tablename__ = "is_following_activity"


class InviteActivity(ActivityMixin, Base):
    __tablename__ = "users_invites_activity"


ACTIVITY_TABLES = (
    GameActivity,
    UserGameActivity,
    GameCommentActivity,
    FollowActivity,
    InviteActivity,
)
