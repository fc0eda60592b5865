"""
Monthly record model.

One member's financial snapshot for one calendar month.
Records are created in PENDING status by month initialization
and afterwards only change through the review workflow.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Numeric, Integer,
    UniqueConstraint, Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from finance_review.models.base import Base
from finance_review.models.enums import MonetaryField, RecordStatus


class MonthlyRecord(Base):
    """
    A member's totals for a month.

    `month` is always the first day of the month. The
    (member_id, month) pair is unique. `version` is bumped
    on every workflow edit and guards against lost updates.
    """

    __tablename__ = "monthly_records"
    __table_args__ = (
        UniqueConstraint("member_id", "month", name="uq_monthly_records_member_month"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    member_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    month: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    total_savings: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    total_loans: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    loan_balance: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    monthly_contribution: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    monthly_repayment: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    status: Mapped[RecordStatus] = mapped_column(
        SAEnum(
            RecordStatus,
            name="record_status_enum",
            create_constraint=True,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=RecordStatus.PENDING,
    )
    created_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    change_logs: Mapped[list["ChangeLog"]] = relationship(
        back_populates="monthly_record"
    )

    def amounts(self) -> dict[MonetaryField, Decimal]:
        """Current value of every monetary field."""
        return {field: getattr(self, field.value) for field in MonetaryField}

    def __repr__(self) -> str:
        return (
            f"<MonthlyRecord {self.member_id} "
            f"{self.month:%Y-%m} ({self.status.value})>"
        )
