"""
SQLAlchemy implementation of the record store.

The store owns the commit boundary: each public mutating method
is one transaction. Failures roll back and surface as
StorageError so callers never see a half-written edit.
"""

import logging
from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import select, update, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from finance_review.exceptions import (
    ConcurrentEditError,
    InvalidStateError,
    NotFoundError,
    StorageError,
)
from finance_review.models import (
    ChangeComment,
    ChangeLog,
    ChangeLogStatus,
    CommentScope,
    MonetaryField,
    MonthlyRecord,
    Notification,
    RecordStatus,
)
from finance_review.store.base import NotificationInsert

logger = logging.getLogger(__name__)


class SqlAlchemyRecordStore:

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _transaction(self, action: str):
        """Commit on success, roll back on any failure."""
        try:
            yield
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Store failed to %s", action, exc_info=True)
            raise StorageError(f"Failed to {action}") from e
        except Exception:
            self.db.rollback()
            raise

    @contextmanager
    def _reading(self, action: str):
        """Surface query failures as StorageError."""
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Store failed to %s", action, exc_info=True)
            raise StorageError(f"Failed to {action}") from e

    # --- Monthly records ---

    def get_monthly_record(self, record_id: int) -> MonthlyRecord | None:
        with self._reading(f"load monthly record {record_id}"):
            return self.db.get(MonthlyRecord, record_id)

    def list_monthly_records(self, month: date) -> list[MonthlyRecord]:
        with self._reading(f"list monthly records for {month:%Y-%m}"):
            records = self.db.execute(
                select(MonthlyRecord)
                .where(MonthlyRecord.month == month)
                .order_by(MonthlyRecord.member_id)
            ).scalars().all()
        return list(records)

    def create_monthly_records(
        self, rows: list[MonthlyRecord]
    ) -> list[MonthlyRecord]:
        with self._transaction("create monthly records"):
            self.db.add_all(rows)
            self.db.flush()
        return rows

    def update_monthly_record_and_append_change_logs(
        self,
        record_id: int,
        expected_version: int,
        field_values: dict[MonetaryField, Decimal],
        new_status: RecordStatus,
        entries: list[ChangeLog],
    ) -> tuple[MonthlyRecord, list[ChangeLog]]:
        values = {field.value: amount for field, amount in field_values.items()}

        with self._transaction(f"update monthly record {record_id}"):
            # The version predicate makes this a compare-and-swap:
            # zero rows matched means another writer got there first.
            result = self.db.execute(
                update(MonthlyRecord)
                .where(
                    MonthlyRecord.id == record_id,
                    MonthlyRecord.version == expected_version,
                )
                .values(
                    **values,
                    status=new_status,
                    version=expected_version + 1,
                    updated_at=datetime.utcnow(),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise ConcurrentEditError(
                    f"Monthly record {record_id} changed since version "
                    f"{expected_version} was read"
                )

            self.db.add_all(entries)
            self.db.flush()

        record = self.db.get(MonthlyRecord, record_id)
        return record, entries

    # --- Change logs ---

    def get_change_log(self, entry_id: int) -> ChangeLog | None:
        with self._reading(f"load change log {entry_id}"):
            return self.db.get(ChangeLog, entry_id)

    def list_change_logs(
        self,
        record_id: int | None = None,
        status: ChangeLogStatus | None = None,
    ) -> list[ChangeLog]:
        """Return change logs newest first."""
        query = select(ChangeLog)
        if record_id is not None:
            query = query.where(ChangeLog.monthly_record_id == record_id)
        if status is not None:
            query = query.where(ChangeLog.status == status)

        with self._reading("list change logs"):
            entries = self.db.execute(
                query.order_by(ChangeLog.created_at.desc(), ChangeLog.id.desc())
            ).scalars().all()
        return list(entries)

    def set_change_log_status(
        self,
        entry_id: int,
        status: ChangeLogStatus,
        expected_status: ChangeLogStatus,
        reviewer_id: str | None = None,
        reviewed_at: datetime | None = None,
    ) -> ChangeLog:
        values = {"status": status}
        if reviewer_id is not None:
            values["reviewed_by"] = reviewer_id
            values["reviewed_at"] = reviewed_at or datetime.utcnow()

        with self._transaction(f"update change log {entry_id}"):
            result = self.db.execute(
                update(ChangeLog)
                .where(
                    ChangeLog.id == entry_id,
                    ChangeLog.status == expected_status,
                )
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                current = self.db.execute(
                    select(ChangeLog.status).where(ChangeLog.id == entry_id)
                ).scalar_one_or_none()
                if current is None:
                    raise NotFoundError(f"Change log {entry_id} not found")
                raise InvalidStateError(
                    f"Change log {entry_id} is {current.value}, "
                    f"expected {expected_status.value}"
                )

        return self.db.get(ChangeLog, entry_id)

    # --- Comments ---

    def insert_comment(
        self,
        change_log_id: int,
        author_id: str | None,
        content: str,
        scope: CommentScope,
    ) -> tuple[ChangeComment, bool]:
        comment = ChangeComment(
            change_log_id=change_log_id,
            author_id=author_id,
            content=content,
            scope=scope,
        )

        with self._transaction(f"comment on change log {change_log_id}"):
            self.db.add(comment)
            result = self.db.execute(
                update(ChangeLog)
                .where(
                    ChangeLog.id == change_log_id,
                    ChangeLog.status == ChangeLogStatus.PENDING,
                )
                .values(status=ChangeLogStatus.NEEDS_REVISION)
                .execution_options(synchronize_session=False)
            )
            reopened = result.rowcount == 1
            self.db.flush()

        return comment, reopened

    def list_comments(self, change_log_id: int) -> list[ChangeComment]:
        """Return an entry's comments newest first."""
        with self._reading(f"list comments for change log {change_log_id}"):
            comments = self.db.execute(
                select(ChangeComment)
                .where(ChangeComment.change_log_id == change_log_id)
                .order_by(
                    ChangeComment.created_at.desc(), ChangeComment.id.desc()
                )
            ).scalars().all()
        return list(comments)

    # --- Notifications ---

    def insert_notifications(
        self, rows: list[Notification]
    ) -> list[NotificationInsert]:
        """
        Insert each notification in its own transaction.

        One bad row does not stop the others; the caller gets
        a per-recipient result instead of a single exception.
        """
        results = []
        for row in rows:
            try:
                self.db.add(row)
                self.db.commit()
                results.append(NotificationInsert(row.user_id, notification=row))
            except SQLAlchemyError as e:
                self.db.rollback()
                results.append(NotificationInsert(row.user_id, error=str(e)))
        return results

    def get_notification(self, notification_id: int) -> Notification | None:
        with self._reading(f"load notification {notification_id}"):
            return self.db.get(Notification, notification_id)

    def set_notification_read(self, notification_id: int) -> Notification:
        with self._transaction(f"mark notification {notification_id} read"):
            notification = self.db.get(Notification, notification_id)
            if notification is None:
                raise NotFoundError(f"Notification {notification_id} not found")
            notification.read = True
        return notification

    def mark_all_notifications_read(self, user_id: str) -> int:
        with self._transaction(f"mark notifications read for {user_id}"):
            result = self.db.execute(
                update(Notification)
                .where(
                    Notification.user_id == user_id,
                    Notification.read.is_(False),
                )
                .values(read=True)
                .execution_options(synchronize_session=False)
            )
        return result.rowcount

    def list_notifications(
        self, user_id: str, limit: int, before_id: int | None = None
    ) -> list[Notification]:
        """Return a user's notifications newest first."""
        query = select(Notification).where(Notification.user_id == user_id)
        if before_id is not None:
            query = query.where(Notification.id < before_id)

        with self._reading(f"list notifications for {user_id}"):
            notifications = self.db.execute(
                query.order_by(Notification.id.desc()).limit(limit)
            ).scalars().all()
        return list(notifications)

    def count_unread_notifications(self, user_id: str) -> int:
        with self._reading(f"count unread notifications for {user_id}"):
            return self.db.execute(
                select(func.count(Notification.id)).where(
                    Notification.user_id == user_id,
                    Notification.read.is_(False),
                )
            ).scalar_one()
