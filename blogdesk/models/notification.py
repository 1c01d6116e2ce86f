from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from blogdesk.db.base import Base


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        # Daily purge scans read notifications by age
        Index("ix_notifications_read_updated", "is_read", "updated_at"),
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True
    )
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false")

    user = relationship("User")
