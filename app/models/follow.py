"""Follow edges between users."""

from sqlalchemy import Column, ForeignKey, String, PrimaryKeyConstraint

from app.models.base import Base


class Follow(Base):
    """Directed edge: following_user follows followed_user."""

    __tablename__ = "is_following"
    __table_args__ = (PrimaryKeyConstraint("followed_user", "following_user"),)
    followed_user = Column(String(30), ForeignKey("users.username", ondelete="CASCADE"), nullable=False)
    following_user = Column(String(30), ForeignKey("users.username", ondelete="CASCADE"), nullable=False)
