"""Game, roster and comment models."""

from datetime import date
from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Text, Time, UniqueConstraint

from app.models.base import Base, utc_now


class Game(Base):
    """Pickup game hosted by a user."""

    __tablename__ = "games"
    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    game_date = Column(Date, nullable=False)
    game_time = Column(Time, nullable=False)
    game_address = Column(Text, nullable=False)
    game_city = Column(String, nullable=False)
    game_state = Column(String(2), nullable=False)
    created_on = Column(DateTime, default=utc_now, nullable=False)
    created_by = Column(String(30), ForeignKey("users.username", ondelete="CASCADE"), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    @property
    def days_diff(self) -> int:
        """Days until the game; negative once the game date has passed."""
        return (self.game_date - date.today()).days

    def __repr__(self):
        return f"<Game {self.id}: {self.title}>"


class UserGame(Base):
    """Roster membership of a user in a game."""

    __tablename__ = "users_games"
    __table_args__ = (UniqueConstraint("game_id", "username", name="uq_users_games"),)
    id = Column(Integer, primary_key=True, autoincrement=True)
    game_id = Column(Integer, ForeignKey("games.id", ondelete="CASCADE"), nullable=False)
    username = Column(String(30), ForeignKey("users.username", ondelete="CASCADE"), nullable=False)


class GameComment(Base):
    """Comment on a game; soft-deleted through is_active."""

    __tablename__ = "games_comments"
    id = Column(Integer, primary_key=True, autoincrement=True)
    game_id = Column(Integer, ForeignKey("games.id", ondelete="CASCADE"), nullable=False)
    username = Column(String(30), ForeignKey("users.username", ondelete="CASCADE"), nullable=False)
    comment = Column(Text, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_on = Column(DateTime, default=utc_now, nullable=False)
