"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from finance_review.models.base import Base
from finance_review.models.enums import (
    RecordStatus,
    ChangeLogStatus,
    CommentScope,
    NotificationType,
    AppRole,
    MonetaryField,
)
from finance_review.models.monthly_record import MonthlyRecord
from finance_review.models.change_log import ChangeLog
from finance_review.models.comment import ChangeComment
from finance_review.models.notification import Notification
from finance_review.models.user_role import UserRole

__all__ = [
    "Base",
    "RecordStatus",
    "ChangeLogStatus",
    "CommentScope",
    "NotificationType",
    "AppRole",
    "MonetaryField",
    "MonthlyRecord",
    "ChangeLog",
    "ChangeComment",
    "Notification",
    "UserRole",
]
