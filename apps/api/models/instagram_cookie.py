"""Instagram session cookie model."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from database import Base, UTCDateTime


class InstagramCookie(Base):
    """Session cookie string that authenticates as an Instagram account."""

    __tablename__ = "instagram_cookies"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(Integer, ForeignKey("instagram_accounts.id"), nullable=False, index=True)
    cookie_value_encrypted = Column(Text, nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime(), nullable=False)
    updated_at = Column(UTCDateTime(), nullable=False)

    # Relationships
    account = relationship("InstagramAccount", back_populates="cookies")
