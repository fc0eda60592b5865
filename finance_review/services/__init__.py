"""Business logic services."""

from finance_review.services.notification_dispatcher import (
    NotificationDispatcher,
    DispatchResult,
)
from finance_review.services.change_workflow import (
    ChangeWorkflowService,
    EditResult,
    ReviewResult,
    CommentResult,
)
from finance_review.services.monthly_record_service import MonthlyRecordService

__all__ = [
    "NotificationDispatcher",
    "DispatchResult",
    "ChangeWorkflowService",
    "EditResult",
    "ReviewResult",
    "CommentResult",
    "MonthlyRecordService",
]
