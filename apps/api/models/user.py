"""User model."""

from sqlalchemy import Boolean, Column, Index, Integer, String, func
from sqlalchemy.orm import relationship

from database import Base, UTCDateTime


class User(Base):
    """Operator account that owns Instagram accounts and activity logs."""

    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String, nullable=False)
    email = Column(String, nullable=True)
    password_hash = Column(String, nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False)
    created_at = Column(UTCDateTime(), nullable=False)
    updated_at = Column(UTCDateTime(), nullable=False)

    # Relationships
    instagram_accounts = relationship("InstagramAccount", back_populates="user", passive_deletes=True)
    activity_logs = relationship("ActivityLog", back_populates="user", passive_deletes=True)


Index("ux_users_username_lower", func.lower(User.__table__.c.username), unique=True)
