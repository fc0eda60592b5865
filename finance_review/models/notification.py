"""
Notification model.

The notifications table doubles as an outbox: the workflow
appends rows and any transport (polling, push, websocket)
drains them per recipient. Only `read` is ever updated.
"""

from datetime import datetime

from sqlalchemy import (
    String, Boolean, DateTime, Text, ForeignKey, Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column

from finance_review.models.base import Base
from finance_review.models.enums import NotificationType


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[NotificationType] = mapped_column(
        SAEnum(
            NotificationType,
            name="notification_type_enum",
            create_constraint=True,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=NotificationType.INFO,
    )
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # Back-reference only; a notification does not own its change
    related_change_log_id: Mapped[int | None] = mapped_column(
        ForeignKey("change_logs.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    def __repr__(self) -> str:
        state = "read" if self.read else "unread"
        return f"<Notification {self.title!r} for {self.user_id} ({state})>"
