"""
Monthly record service — month initialization and lookups.

Records enter the review workflow here, in PENDING status.
After that, only ChangeWorkflowService changes them.
"""

import logging
from datetime import date

from finance_review.exceptions import NotFoundError, ValidationError
from finance_review.models.enums import RecordStatus
from finance_review.models.monthly_record import MonthlyRecord
from finance_review.schemas.monthly_record import MonthInitializeRequest
from finance_review.store.base import RecordStore

logger = logging.getLogger(__name__)


class MonthlyRecordService:

    def __init__(self, store: RecordStore):
        self.store = store

    def initialize_month(
        self, request: MonthInitializeRequest, created_by: str | None
    ) -> list[MonthlyRecord]:
        """
        Create PENDING records for members that have none this month.

        Members that already have a record for the month are
        skipped, so running this twice is harmless. Returns only
        the records created by this call.
        """
        month = request.month.replace(day=1)
        member_ids = [m.member_id for m in request.members]
        if len(set(member_ids)) != len(member_ids):
            raise ValidationError("Each member may appear only once per month")

        existing = {r.member_id for r in self.store.list_monthly_records(month)}
        rows = [
            MonthlyRecord(
                member_id=snapshot.member_id,
                month=month,
                total_savings=snapshot.total_savings,
                total_loans=snapshot.total_loans,
                loan_balance=snapshot.loan_balance,
                monthly_contribution=snapshot.monthly_contribution,
                monthly_repayment=snapshot.monthly_repayment,
                status=RecordStatus.PENDING,
                created_by=created_by,
                version=1,
            )
            for snapshot in request.members
            if snapshot.member_id not in existing
        ]

        if not rows:
            logger.info(
                "Month already initialized",
                extra={"month": month.isoformat()},
            )
            return []

        created = self.store.create_monthly_records(rows)
        logger.info(
            "Month initialized",
            extra={"month": month.isoformat(), "records_created": len(created)},
        )
        return created

    def list_month(self, month: date) -> list[MonthlyRecord]:
        """Return a month's records ordered by member id."""
        return self.store.list_monthly_records(month.replace(day=1))

    def get_record(self, record_id: int) -> MonthlyRecord:
        record = self.store.get_monthly_record(record_id)
        if record is None:
            raise NotFoundError(f"Monthly record {record_id} not found")
        return record
