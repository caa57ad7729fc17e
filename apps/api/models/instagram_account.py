"""Instagram account model."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from database import Base, UTCDateTime


class InstagramAccount(Base):
    """One Instagram login bound to a user."""

    __tablename__ = "instagram_accounts"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    username = Column(String, nullable=False)
    email = Column(String, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime(), nullable=False)
    updated_at = Column(UTCDateTime(), nullable=False)

    # Relationships
    user = relationship("User", back_populates="instagram_accounts")
    cookies = relationship("InstagramCookie", back_populates="account", passive_deletes=True)
