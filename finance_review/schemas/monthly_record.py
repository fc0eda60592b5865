"""
Pydantic schemas for monthly records.

These define the API contract. They are separate from the
database models because the API shape and the storage shape
differ (amounts arrive as plain numbers, months as YYYY-MM).
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from finance_review.models.enums import RecordStatus


# Matches the Numeric(19, 4) amount columns.
def amount_field(default):
    return Field(default=default, ge=0, max_digits=19, decimal_places=4)


def parse_month(value: date | str) -> date:
    """Accept 'YYYY-MM', 'YYYY-MM-DD' or a date; return the first of the month."""
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 7:
                value = datetime.strptime(text, "%Y-%m").date()
            else:
                value = date.fromisoformat(text)
        except ValueError:
            raise ValueError("month must look like YYYY-MM") from None
    return value.replace(day=1)


# --- Request Schemas ---

class MemberSnapshot(BaseModel):
    """Opening figures for one member when a month is initialized."""
    member_id: str = Field(min_length=1, max_length=50)
    total_savings: Decimal = amount_field(Decimal("0"))
    total_loans: Decimal = amount_field(Decimal("0"))
    loan_balance: Decimal = amount_field(Decimal("0"))
    monthly_contribution: Decimal = amount_field(Decimal("0"))
    monthly_repayment: Decimal = amount_field(Decimal("0"))


class MonthInitializeRequest(BaseModel):
    month: date
    members: list[MemberSnapshot] = Field(min_length=1)

    @field_validator("month", mode="before")
    @classmethod
    def normalize_month(cls, v):
        return parse_month(v)


class MonthlyRecordEdit(BaseModel):
    """
    A partial edit. Only fields that are sent are considered;
    omitted fields keep their stored value.
    """
    total_savings: Decimal | None = amount_field(None)
    total_loans: Decimal | None = amount_field(None)
    loan_balance: Decimal | None = amount_field(None)
    monthly_contribution: Decimal | None = amount_field(None)
    monthly_repayment: Decimal | None = amount_field(None)

    def field_values(self) -> dict[str, Decimal]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


# --- Response Schemas ---

class MonthlyRecordResponse(BaseModel):
    id: int
    member_id: str
    month: date
    total_savings: Decimal
    total_loans: Decimal
    loan_balance: Decimal
    monthly_contribution: Decimal
    monthly_repayment: Decimal
    status: RecordStatus
    created_by: str | None
    version: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
