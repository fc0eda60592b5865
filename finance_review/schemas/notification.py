"""
Pydantic schemas for notifications.
"""

from datetime import datetime

from pydantic import BaseModel

from finance_review.models.enums import NotificationType


class NotificationResponse(BaseModel):
    id: int
    user_id: str
    title: str
    message: str
    type: NotificationType
    read: bool
    related_change_log_id: int | None
    created_at: datetime

    model_config = {"from_attributes": True}


class UnreadCountResponse(BaseModel):
    user_id: str
    unread: int


class MarkAllReadResponse(BaseModel):
    user_id: str
    marked: int
