"""
Pydantic schemas for change logs and review comments.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from finance_review.models.enums import ChangeLogStatus, CommentScope
from finance_review.schemas.monthly_record import MonthlyRecordResponse


# --- Request Schemas ---

class CommentCreate(BaseModel):
    content: str = Field(min_length=1, max_length=5000)
    scope: CommentScope = CommentScope.FIELD


# --- Response Schemas ---

class ChangeLogResponse(BaseModel):
    id: int
    monthly_record_id: int
    field_name: str
    old_value: str | None
    new_value: str | None
    status: ChangeLogStatus
    changed_by: str | None
    reviewed_by: str | None
    reviewed_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}


class CommentResponse(BaseModel):
    id: int
    change_log_id: int
    author_id: str | None
    content: str
    scope: CommentScope
    created_at: datetime

    model_config = {"from_attributes": True}


class EditResponse(BaseModel):
    """Result of an edit: the record, its new change logs, and
    how many notifications could not be delivered."""
    record: MonthlyRecordResponse
    changes: list[ChangeLogResponse]
    notifications_sent: int
    notifications_failed: int


class ReviewResponse(BaseModel):
    change_log: ChangeLogResponse
    notifications_sent: int
    notifications_failed: int


class CommentCreatedResponse(BaseModel):
    comment: CommentResponse
    change_log: ChangeLogResponse
    reopened: bool
    notifications_sent: int
    notifications_failed: int
