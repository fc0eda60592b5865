"""
Notification dispatcher.

Turns workflow events into per-recipient notification rows
and serves them back to their recipients. Fan-out is never
all-or-nothing: each recipient succeeds or fails on its own
and the result says which ones were dropped.
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from finance_review.config import get_settings
from finance_review.exceptions import (
    ForbiddenError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from finance_review.models.enums import NotificationType
from finance_review.models.notification import Notification
from finance_review.store.base import RecordStore

logger = logging.getLogger(__name__)


@dataclass
class DispatchResult:
    delivered: list[Notification] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class NotificationDispatcher:

    def __init__(self, store: RecordStore, page_size: int | None = None):
        self.store = store
        if page_size is None:
            page_size = get_settings().NOTIFICATION_PAGE_SIZE
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self.page_size = page_size

    def notify_users(
        self,
        user_ids: Iterable[str],
        title: str,
        message: str,
        notification_type: NotificationType = NotificationType.INFO,
        related_change_log_id: int | None = None,
    ) -> DispatchResult:
        """
        Create one notification per recipient.

        Duplicate recipients are notified once. Never raises for
        storage failures; they are logged and reported in
        DispatchResult.failed.
        """
        recipients = list(dict.fromkeys(user_ids))
        if not recipients:
            return DispatchResult()

        rows = [
            Notification(
                user_id=user_id,
                title=title,
                message=message,
                type=notification_type,
                read=False,
                related_change_log_id=related_change_log_id,
            )
            for user_id in recipients
        ]

        try:
            inserts = self.store.insert_notifications(rows)
        except StorageError:
            logger.warning(
                "Notification batch dropped",
                extra={"title": title, "recipients": recipients},
                exc_info=True,
            )
            return DispatchResult(failed=recipients)

        result = DispatchResult(
            delivered=[i.notification for i in inserts if i.ok],
            failed=[i.user_id for i in inserts if not i.ok],
        )
        if result.failed:
            logger.warning(
                "Some notifications were dropped",
                extra={"title": title, "failed_recipients": result.failed},
            )
        return result

    def mark_read(self, notification_id: int, caller_id: str) -> Notification:
        """Mark a notification read. Only its recipient may do this."""
        notification = self.store.get_notification(notification_id)
        if notification is None:
            raise NotFoundError(f"Notification {notification_id} not found")
        if notification.user_id != caller_id:
            raise ForbiddenError(
                f"Notification {notification_id} belongs to another user"
            )
        if notification.read:
            return notification
        return self.store.set_notification_read(notification_id)

    def mark_all_read(self, user_id: str) -> int:
        """Mark every unread notification for a user. Returns the count."""
        return self.store.mark_all_notifications_read(user_id)

    def list_for_user(
        self, user_id: str, limit: int | None = None
    ) -> list[Notification]:
        """Return up to `limit` notifications, newest first."""
        limit = self.page_size if limit is None else limit
        if limit <= 0:
            raise ValidationError("limit must be positive")
        return self.store.list_notifications(user_id, limit)

    def iter_for_user(
        self, user_id: str, page_size: int | None = None
    ) -> Iterator[Notification]:
        """
        Walk all of a user's notifications newest first, a page
        at a time. Each call starts again from the newest.
        """
        page_size = self.page_size if page_size is None else page_size
        if page_size <= 0:
            raise ValidationError("page_size must be positive")
        before_id = None
        while True:
            page = self.store.list_notifications(user_id, page_size, before_id)
            yield from page
            if len(page) < page_size:
                return
            before_id = page[-1].id

    def unread_count(self, user_id: str) -> int:
        return self.store.count_unread_notifications(user_id)
