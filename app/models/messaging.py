# models/messaging.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, PrimaryKeyConstraint

from app.models.base import Base, utc_now


class ThreadMember(Base):
    """Membership of a user in a thread; a thread is identified by its member set"""
    __tablename__ = 'users_threads'
    __table_args__ = (PrimaryKeyConstraint('id', 'username'),)

    id = Column(String(36), nullable=False, index=True)
    username = Column(String(30), ForeignKey('users.username', ondelete="CASCADE"), nullable=False)


class Message(Base):
    """Message posted to a thread"""
    __tablename__ = 'messages'

    id = Column(Integer, primary_key=True, autoincrement=True)
    party_id = Column(String(36), nullable=False, index=True)
    message_from = Column(String(30), ForeignKey('users.username', ondelete="CASCADE"), nullable=False)
    message = Column(Text, nullable=False)
    created_on = Column(DateTime, default=utc_now, nullable=False)


class InactiveMessage(Base):
    """Per-user tombstone hiding a message from that user's view only"""
    __tablename__ = 'inactive_messages'

    id = Column(Integer, primary_key=True, autoincrement=True)
    message_id = Column(Integer, ForeignKey('messages.id', ondelete="CASCADE"), nullable=False)
    username = Column(String(30), ForeignKey('users.username', ondelete="CASCADE"), nullable=False)
