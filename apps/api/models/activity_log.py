"""Activity log model for automation attempts."""

from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from database import Base, UTCDateTime


ACTIVITY_STATUSES = ("pending", "success", "failed")


class ActivityLog(Base):
    """Audit row for one dispatched automation attempt."""

    __tablename__ = "activity_logs"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    action_type = Column(String, nullable=False)  # follow, like, comment, ...
    target = Column(String, nullable=False, default="Unknown")
    description = Column(Text, nullable=False)
    status = Column(String, nullable=False, default="pending")  # pending, success, failed
    created_at = Column(UTCDateTime(), nullable=False, index=True)
    updated_at = Column(UTCDateTime(), nullable=False)

    # Relationships
    user = relationship("User", back_populates="activity_logs")
