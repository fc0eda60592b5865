"""
Change log model.

Each row records one field-level edit to a monthly record
and its review outcome. Rows are never deleted; only the
status/reviewed_by/reviewed_at triple is ever updated.
"""

from datetime import datetime

from sqlalchemy import String, DateTime, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from finance_review.models.base import Base
from finance_review.models.enums import ChangeLogStatus


# Valid state transitions. A needs_revision entry has no exit:
# a fresh edit to the same field creates a new entry instead.
VALID_TRANSITIONS: dict[ChangeLogStatus, set[ChangeLogStatus]] = {
    ChangeLogStatus.PENDING: {
        ChangeLogStatus.APPROVED,
        ChangeLogStatus.NEEDS_REVISION,
    },
    ChangeLogStatus.APPROVED: set(),
    ChangeLogStatus.NEEDS_REVISION: set(),
}


class ChangeLog(Base):
    __tablename__ = "change_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    monthly_record_id: Mapped[int] = mapped_column(
        ForeignKey("monthly_records.id"), nullable=False, index=True
    )
    field_name: Mapped[str] = mapped_column(String(50), nullable=False)
    # Stored as text so an absent previous value can be represented
    old_value: Mapped[str | None] = mapped_column(String(50), nullable=True)
    new_value: Mapped[str | None] = mapped_column(String(50), nullable=True)
    status: Mapped[ChangeLogStatus] = mapped_column(
        SAEnum(
            ChangeLogStatus,
            name="change_log_status_enum",
            create_constraint=True,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=ChangeLogStatus.PENDING,
        index=True,
    )
    changed_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    monthly_record: Mapped["MonthlyRecord"] = relationship(
        back_populates="change_logs"
    )
    comments: Mapped[list["ChangeComment"]] = relationship(
        back_populates="change_log"
    )

    def can_transition_to(self, new_status: ChangeLogStatus) -> bool:
        """Check if a state transition is valid."""
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    def __repr__(self) -> str:
        return (
            f"<ChangeLog {self.field_name} "
            f"{self.old_value} -> {self.new_value} ({self.status.value})>"
        )
