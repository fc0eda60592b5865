"""
Record store contract.

The workflow services depend only on these signatures, never
on a concrete database. Production uses SqlAlchemyRecordStore;
tests can swap in an in-memory double.

Every mutating operation is a complete unit of work: it either
commits everything it was asked to write or nothing, and raises
StorageError when the backend fails.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Protocol

from finance_review.models.change_log import ChangeLog
from finance_review.models.comment import ChangeComment
from finance_review.models.enums import (
    AppRole,
    ChangeLogStatus,
    CommentScope,
    MonetaryField,
    RecordStatus,
)
from finance_review.models.monthly_record import MonthlyRecord
from finance_review.models.notification import Notification


@dataclass
class NotificationInsert:
    """Outcome of inserting one recipient's notification."""
    user_id: str
    notification: Notification | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.notification is not None


class RecordStore(Protocol):

    # --- Monthly records ---

    def get_monthly_record(self, record_id: int) -> MonthlyRecord | None: ...

    def list_monthly_records(self, month: date) -> list[MonthlyRecord]: ...

    def create_monthly_records(
        self, rows: list[MonthlyRecord]
    ) -> list[MonthlyRecord]: ...

    def update_monthly_record_and_append_change_logs(
        self,
        record_id: int,
        expected_version: int,
        field_values: dict[MonetaryField, Decimal],
        new_status: RecordStatus,
        entries: list[ChangeLog],
    ) -> tuple[MonthlyRecord, list[ChangeLog]]:
        """
        Apply the new amounts and append the change logs atomically.

        Raises ConcurrentEditError if the stored version is no
        longer expected_version.
        """
        ...

    # --- Change logs ---

    def get_change_log(self, entry_id: int) -> ChangeLog | None: ...

    def list_change_logs(
        self,
        record_id: int | None = None,
        status: ChangeLogStatus | None = None,
    ) -> list[ChangeLog]: ...

    def set_change_log_status(
        self,
        entry_id: int,
        status: ChangeLogStatus,
        expected_status: ChangeLogStatus,
        reviewer_id: str | None = None,
        reviewed_at: datetime | None = None,
    ) -> ChangeLog:
        """
        Compare-and-swap the entry's status.

        Raises InvalidStateError if the current status is not
        expected_status, NotFoundError if the entry is gone.
        """
        ...

    # --- Comments ---

    def insert_comment(
        self,
        change_log_id: int,
        author_id: str | None,
        content: str,
        scope: CommentScope,
    ) -> tuple[ChangeComment, bool]:
        """
        Insert a comment and reopen a pending entry in one unit.

        Returns the comment and whether the entry moved from
        pending to needs_revision.
        """
        ...

    def list_comments(self, change_log_id: int) -> list[ChangeComment]: ...

    # --- Notifications ---

    def insert_notifications(
        self, rows: list[Notification]
    ) -> list[NotificationInsert]: ...

    def get_notification(self, notification_id: int) -> Notification | None: ...

    def set_notification_read(self, notification_id: int) -> Notification: ...

    def mark_all_notifications_read(self, user_id: str) -> int: ...

    def list_notifications(
        self, user_id: str, limit: int, before_id: int | None = None
    ) -> list[Notification]: ...

    def count_unread_notifications(self, user_id: str) -> int: ...


class RoleDirectory(Protocol):
    """Answers which users hold which application role."""

    def get_role(self, user_id: str) -> AppRole | None: ...

    def users_with_role(self, role: AppRole) -> list[str]: ...
