"""
Change review workflow.

This service owns the life of a finance edit:
1. A finance user edits a monthly record. Each changed field
   becomes one pending change log, written atomically with
   the record update, and every admin is notified.
2. An admin approves a pending change, or comments on it,
   which sends a pending change back for revision.
3. The record's original editor is notified of the outcome.

Notifications are sent only after the state change has been
committed. A failed notification is logged and reported but
never undoes the change that triggered it.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation

from finance_review.config import get_settings
from finance_review.exceptions import (
    ConcurrentEditError,
    InvalidStateError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from finance_review.models.change_log import ChangeLog
from finance_review.models.comment import ChangeComment
from finance_review.models.enums import (
    AppRole,
    ChangeLogStatus,
    CommentScope,
    MonetaryField,
    NotificationType,
    RecordStatus,
)
from finance_review.models.monthly_record import MonthlyRecord
from finance_review.services.notification_dispatcher import (
    DispatchResult,
    NotificationDispatcher,
)
from finance_review.store.base import RecordStore, RoleDirectory

logger = logging.getLogger(__name__)

# Matches the scale of the Numeric(19, 4) amount columns
AMOUNT_QUANTUM = Decimal("0.0001")
# Numeric(19, 4) leaves fifteen digits before the decimal point.
AMOUNT_LIMIT = Decimal("1e15")


def format_amount(amount: Decimal | None) -> str | None:
    """Render an amount without trailing zeros: 1000.0000 -> '1000'."""
    if amount is None:
        return None
    normalized = Decimal(amount).normalize()
    return format(normalized, "f")


def parse_field_values(
    field_values: Mapping[str, object],
) -> dict[MonetaryField, Decimal]:
    """
    Validate an edit's amounts.

    Every key must name a monetary field and every value must
    be a finite, non-negative number with at most four decimals.
    """
    parsed: dict[MonetaryField, Decimal] = {}
    for name, value in field_values.items():
        try:
            field_name = MonetaryField(name)
        except ValueError:
            raise ValidationError(f"Unknown field '{name}'") from None

        if value is None or isinstance(value, bool):
            raise ValidationError(f"{field_name.value} must be a number")
        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            raise ValidationError(
                f"{field_name.value} must be a number, got {value!r}"
            ) from None

        if not amount.is_finite():
            raise ValidationError(f"{field_name.value} must be finite")
        if amount < 0:
            raise ValidationError(f"{field_name.value} cannot be negative")
        if amount >= AMOUNT_LIMIT:
            raise ValidationError(f"{field_name.value} is too large")
        if amount != amount.quantize(AMOUNT_QUANTUM):
            raise ValidationError(
                f"{field_name.value} has more than four decimal places"
            )
        parsed[field_name] = amount
    return parsed


@dataclass
class EditResult:
    record: MonthlyRecord
    entries: list[ChangeLog] = field(default_factory=list)
    notifications: DispatchResult = field(default_factory=DispatchResult)

    @property
    def changed(self) -> bool:
        return bool(self.entries)


@dataclass
class ReviewResult:
    entry: ChangeLog
    notifications: DispatchResult = field(default_factory=DispatchResult)


@dataclass
class CommentResult:
    comment: ChangeComment
    entry: ChangeLog
    reopened: bool
    notifications: DispatchResult = field(default_factory=DispatchResult)


class ChangeWorkflowService:
    """
    The review state machine.

    Takes its collaborators as constructor arguments so the
    workflow can run against any store that honours the
    RecordStore contract.
    """

    def __init__(
        self,
        store: RecordStore,
        dispatcher: NotificationDispatcher,
        roles: RoleDirectory,
        max_attempts: int | None = None,
        excerpt_length: int | None = None,
    ):
        settings = get_settings()
        self.store = store
        self.dispatcher = dispatcher
        self.roles = roles
        if max_attempts is None:
            max_attempts = settings.EDIT_MAX_ATTEMPTS
        if excerpt_length is None:
            excerpt_length = settings.COMMENT_EXCERPT_LENGTH
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if excerpt_length < 1:
            raise ValueError("excerpt_length must be at least 1")
        self.max_attempts = max_attempts
        self.excerpt_length = excerpt_length

    def submit_edit(
        self,
        record_id: int,
        editor_id: str,
        field_values: Mapping[str, object],
    ) -> EditResult:
        """
        Apply a finance user's edit to a monthly record.

        Only fields whose value actually differs produce change
        logs. An edit that changes nothing writes nothing, so the
        record's status and updated_at stay as they were.

        The diff is computed against a versioned snapshot. If
        another edit commits first, the snapshot is re-read and
        the diff recomputed, up to max_attempts times.
        """
        new_values = parse_field_values(field_values)

        for attempt in range(1, self.max_attempts + 1):
            record = self.store.get_monthly_record(record_id)
            if record is None:
                raise NotFoundError(f"Monthly record {record_id} not found")

            current = record.amounts()
            changed = {
                f: new_values[f]
                for f in MonetaryField
                if f in new_values and current[f] != new_values[f]
            }

            if not changed:
                logger.info(
                    "Edit changed nothing",
                    extra={"record_id": record_id, "editor_id": editor_id},
                )
                return EditResult(record=record)

            entries = [
                ChangeLog(
                    monthly_record_id=record.id,
                    field_name=f.value,
                    old_value=format_amount(current[f]),
                    new_value=format_amount(amount),
                    status=ChangeLogStatus.PENDING,
                    changed_by=editor_id,
                )
                for f, amount in changed.items()
            ]

            try:
                record, entries = (
                    self.store.update_monthly_record_and_append_change_logs(
                        record.id,
                        record.version,
                        changed,
                        RecordStatus.UPDATED,
                        entries,
                    )
                )
            except ConcurrentEditError:
                logger.info(
                    "Record changed underneath edit, retrying",
                    extra={"record_id": record_id, "attempt": attempt},
                )
                continue
            break
        else:
            raise ConcurrentEditError(
                f"Monthly record {record_id} kept changing; "
                f"gave up after {self.max_attempts} attempts"
            )

        logger.info(
            "Monthly record updated",
            extra={
                "record_id": record.id,
                "editor_id": editor_id,
                "changed_fields": len(entries),
            },
        )
        notifications = self._notify_admins(record, entries)
        return EditResult(record=record, entries=entries, notifications=notifications)

    def approve(self, change_log_id: int, reviewer_id: str) -> ReviewResult:
        """
        Approve a pending change.

        Approval is terminal. Approving anything that is not
        pending, including a second approval, raises
        InvalidStateError.
        """
        entry = self._get_entry(change_log_id)
        if not entry.can_transition_to(ChangeLogStatus.APPROVED):
            raise InvalidStateError(
                f"Change log {change_log_id} is {entry.status.value}; "
                f"only pending changes can be approved"
            )

        # The store re-checks the status, so a comment that lands
        # between our read and this write still wins cleanly.
        entry = self.store.set_change_log_status(
            change_log_id,
            ChangeLogStatus.APPROVED,
            expected_status=ChangeLogStatus.PENDING,
            reviewer_id=reviewer_id,
            reviewed_at=datetime.utcnow(),
        )
        logger.info(
            "Change approved",
            extra={"change_log_id": change_log_id, "reviewer_id": reviewer_id},
        )

        notifications = self._notify_editor(
            entry,
            title="Change Approved",
            message=f"Your update to {entry.field_name} has been approved",
            notification_type=NotificationType.SUCCESS,
        )
        return ReviewResult(entry=entry, notifications=notifications)

    def add_comment(
        self,
        change_log_id: int,
        author_id: str,
        content: str,
        scope: CommentScope | str = CommentScope.FIELD,
    ) -> CommentResult:
        """
        Attach reviewer feedback to a change.

        A comment on a pending change sends it back for revision.
        Comments on approved or already-reopened changes are kept
        as audit notes and leave the status alone.
        """
        if not content or not content.strip():
            raise ValidationError("Comment content cannot be empty")
        try:
            scope = CommentScope(scope)
        except ValueError:
            raise ValidationError(f"Unknown comment scope '{scope}'") from None

        entry = self._get_entry(change_log_id)
        comment, reopened = self.store.insert_comment(
            change_log_id, author_id, content, scope
        )
        if reopened:
            entry = self._get_entry(change_log_id)

        logger.info(
            "Comment added",
            extra={
                "change_log_id": change_log_id,
                "author_id": author_id,
                "reopened": reopened,
            },
        )

        notifications = self._notify_editor(
            entry,
            title="Comment on Your Change",
            message=(
                f"Admin commented on your {entry.field_name} update: "
                f'"{self._excerpt(content)}"'
            ),
            notification_type=NotificationType.WARNING,
        )
        return CommentResult(
            comment=comment,
            entry=entry,
            reopened=reopened,
            notifications=notifications,
        )

    def list_change_logs(
        self,
        record_id: int | None = None,
        status: ChangeLogStatus | None = None,
    ) -> list[ChangeLog]:
        """Return change logs newest first, optionally filtered."""
        return self.store.list_change_logs(record_id=record_id, status=status)

    def list_comments(self, change_log_id: int) -> list[ChangeComment]:
        self._get_entry(change_log_id)
        return self.store.list_comments(change_log_id)

    # --- Internals ---

    def _get_entry(self, change_log_id: int) -> ChangeLog:
        entry = self.store.get_change_log(change_log_id)
        if entry is None:
            raise NotFoundError(f"Change log {change_log_id} not found")
        return entry

    def _excerpt(self, content: str) -> str:
        if len(content) <= self.excerpt_length:
            return content
        return content[: self.excerpt_length] + "..."

    def _notify_admins(
        self, record: MonthlyRecord, entries: list[ChangeLog]
    ) -> DispatchResult:
        try:
            admin_ids = self.roles.users_with_role(AppRole.ADMIN)
        except StorageError:
            logger.warning(
                "Could not look up admins; edit notification dropped",
                extra={"record_id": record.id},
                exc_info=True,
            )
            return DispatchResult()

        count = len(entries)
        noun = "field" if count == 1 else "fields"
        return self.dispatcher.notify_users(
            admin_ids,
            title="Monthly Data Updated",
            message=(
                f"Finance user updated data for member {record.member_id} "
                f"({count} {noun} changed)"
            ),
            notification_type=NotificationType.INFO,
            related_change_log_id=entries[0].id,
        )

    def _notify_editor(
        self,
        entry: ChangeLog,
        title: str,
        message: str,
        notification_type: NotificationType,
    ) -> DispatchResult:
        """Notify the record's original editor, if it has one."""
        try:
            record = self.store.get_monthly_record(entry.monthly_record_id)
        except StorageError:
            logger.warning(
                "Could not load record for editor notification",
                extra={"change_log_id": entry.id},
                exc_info=True,
            )
            return DispatchResult()

        if record is None or record.created_by is None:
            return DispatchResult()

        return self.dispatcher.notify_users(
            [record.created_by],
            title=title,
            message=message,
            notification_type=notification_type,
            related_change_log_id=entry.id,
        )
