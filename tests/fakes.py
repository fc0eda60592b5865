"""
In-memory test doubles for the record store and role directory.

The store hands out detached copies, like a real database
would, so a caller holding a stale snapshot stays stale.
Hooks let tests inject a concurrent writer or a failing
backend at exact points in the workflow.
"""

import itertools
from datetime import date, datetime

from finance_review.exceptions import (
    ConcurrentEditError,
    InvalidStateError,
    NotFoundError,
    StorageError,
)
from finance_review.models import (
    AppRole,
    ChangeComment,
    ChangeLog,
    ChangeLogStatus,
    MonthlyRecord,
    Notification,
    RecordStatus,
)
from finance_review.store.base import NotificationInsert


def _copy(obj):
    values = {c.key: getattr(obj, c.key) for c in obj.__table__.columns}
    return type(obj)(**values)


class InMemoryRecordStore:

    def __init__(self):
        self.records: dict[int, MonthlyRecord] = {}
        self.change_logs: dict[int, ChangeLog] = {}
        self.comments: dict[int, ChangeComment] = {}
        self.notifications: dict[int, Notification] = {}
        self._ids = itertools.count(1)
        self.operations: list[str] = []

        # Test hooks
        self.before_update = None
        self.fail_updates = False
        self.fail_notifications_for: set[str] = set()

    def add_record(self, **values) -> MonthlyRecord:
        """Seed a record directly, bypassing month initialization."""
        values.setdefault("month", date(2026, 10, 1))
        values.setdefault("status", RecordStatus.PENDING)
        values.setdefault("version", 1)
        values.setdefault("created_at", datetime(2026, 10, 1))
        values.setdefault("updated_at", datetime(2026, 10, 1))
        for name in (
            "total_savings", "total_loans", "loan_balance",
            "monthly_contribution", "monthly_repayment",
        ):
            values.setdefault(name, 0)
        record = MonthlyRecord(id=next(self._ids), **values)
        self.records[record.id] = record
        return _copy(record)

    # --- Monthly records ---

    def get_monthly_record(self, record_id):
        record = self.records.get(record_id)
        return _copy(record) if record else None

    def list_monthly_records(self, month):
        records = [r for r in self.records.values() if r.month == month]
        return [_copy(r) for r in sorted(records, key=lambda r: r.member_id)]

    def create_monthly_records(self, rows):
        for row in rows:
            row.id = next(self._ids)
            row.created_at = row.updated_at = datetime.utcnow()
            self.records[row.id] = _copy(row)
        return rows

    def update_monthly_record_and_append_change_logs(
        self, record_id, expected_version, field_values, new_status, entries
    ):
        if self.before_update is not None:
            self.before_update(record_id)
        if self.fail_updates:
            raise StorageError("backend unavailable")

        stored = self.records.get(record_id)
        if stored is None:
            raise NotFoundError(f"Monthly record {record_id} not found")
        if stored.version != expected_version:
            raise ConcurrentEditError(f"Monthly record {record_id} is stale")

        for field, amount in field_values.items():
            setattr(stored, field.value, amount)
        stored.status = new_status
        stored.version = expected_version + 1
        stored.updated_at = datetime.utcnow()

        for entry in entries:
            entry.id = next(self._ids)
            entry.created_at = datetime.utcnow()
            self.change_logs[entry.id] = _copy(entry)

        self.operations.append("update_record")
        return _copy(stored), [_copy(e) for e in entries]

    # --- Change logs ---

    def get_change_log(self, entry_id):
        entry = self.change_logs.get(entry_id)
        return _copy(entry) if entry else None

    def list_change_logs(self, record_id=None, status=None):
        entries = [
            e for e in self.change_logs.values()
            if (record_id is None or e.monthly_record_id == record_id)
            and (status is None or e.status == status)
        ]
        return [_copy(e) for e in sorted(entries, key=lambda e: -e.id)]

    def set_change_log_status(
        self, entry_id, status, expected_status,
        reviewer_id=None, reviewed_at=None,
    ):
        stored = self.change_logs.get(entry_id)
        if stored is None:
            raise NotFoundError(f"Change log {entry_id} not found")
        if stored.status != expected_status:
            raise InvalidStateError(
                f"Change log {entry_id} is {stored.status.value}"
            )
        stored.status = status
        if reviewer_id is not None:
            stored.reviewed_by = reviewer_id
            stored.reviewed_at = reviewed_at or datetime.utcnow()
        self.operations.append("set_change_log_status")
        return _copy(stored)

    # --- Comments ---

    def insert_comment(self, change_log_id, author_id, content, scope):
        comment = ChangeComment(
            id=next(self._ids),
            change_log_id=change_log_id,
            author_id=author_id,
            content=content,
            scope=scope,
            created_at=datetime.utcnow(),
        )
        self.comments[comment.id] = comment

        entry = self.change_logs[change_log_id]
        reopened = entry.status == ChangeLogStatus.PENDING
        if reopened:
            entry.status = ChangeLogStatus.NEEDS_REVISION
        self.operations.append("insert_comment")
        return _copy(comment), reopened

    def list_comments(self, change_log_id):
        comments = [
            c for c in self.comments.values() if c.change_log_id == change_log_id
        ]
        return [_copy(c) for c in sorted(comments, key=lambda c: -c.id)]

    # --- Notifications ---

    def insert_notifications(self, rows):
        self.operations.append("insert_notifications")
        results = []
        for row in rows:
            if row.user_id in self.fail_notifications_for:
                results.append(NotificationInsert(row.user_id, error="rejected"))
                continue
            row.id = next(self._ids)
            row.created_at = datetime.utcnow()
            self.notifications[row.id] = _copy(row)
            results.append(NotificationInsert(row.user_id, notification=row))
        return results

    def get_notification(self, notification_id):
        notification = self.notifications.get(notification_id)
        return _copy(notification) if notification else None

    def set_notification_read(self, notification_id):
        stored = self.notifications[notification_id]
        stored.read = True
        return _copy(stored)

    def mark_all_notifications_read(self, user_id):
        unread = [
            n for n in self.notifications.values()
            if n.user_id == user_id and not n.read
        ]
        for n in unread:
            n.read = True
        return len(unread)

    def list_notifications(self, user_id, limit, before_id=None):
        mine = [
            n for n in self.notifications.values()
            if n.user_id == user_id and (before_id is None or n.id < before_id)
        ]
        mine.sort(key=lambda n: -n.id)
        return [_copy(n) for n in mine[:limit]]

    def count_unread_notifications(self, user_id):
        return sum(
            1 for n in self.notifications.values()
            if n.user_id == user_id and not n.read
        )


class InMemoryRoleDirectory:

    def __init__(self, roles: dict[str, AppRole] | None = None):
        self.roles = dict(roles or {})
        self.fail = False

    def get_role(self, user_id):
        return self.roles.get(user_id)

    def users_with_role(self, role):
        if self.fail:
            raise StorageError("role lookup unavailable")
        return sorted(u for u, r in self.roles.items() if r == role)
