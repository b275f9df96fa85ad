"""User model for the pickup system."""

from sqlalchemy import Boolean, Column, Date, DateTime, String, Text

from app.models.base import Base, utc_now


class User(Base):
    """Registered account, keyed by username; deactivated rather than deleted."""

    __tablename__ = "users"
    username = Column(String(30), primary_key=True, index=True)
    password = Column(Text, nullable=False)
    first_name = Column(String(30), nullable=False)
    last_name = Column(String(30), nullable=False)
    birth_date = Column(Date, nullable=True)
    current_city = Column(String, nullable=True)
    current_state = Column(String(2), nullable=True)
    phone_number = Column(String, nullable=True)
    profile_img = Column(Text, nullable=True)
    email = Column(String, nullable=False)
    created_on = Column(DateTime, default=utc_now, nullable=False)
    is_private = Column(Boolean, default=False, nullable=False)
    is_admin = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<User {self.username}>"
