"""
Shared enumerations for database models.

Mapped to database enums so that an invalid status or
role is rejected by the database, not just by Python.
"""

import enum


class RecordStatus(str, enum.Enum):
    """Review status of a member's monthly record."""
    PENDING = "pending"
    UPDATED = "updated"
    APPROVED = "approved"
    NEEDS_REVISION = "needs_revision"


class ChangeLogStatus(str, enum.Enum):
    """Review status of a single field-level change."""
    PENDING = "pending"
    APPROVED = "approved"
    NEEDS_REVISION = "needs_revision"


class CommentScope(str, enum.Enum):
    ROW = "row"
    FIELD = "field"


class NotificationType(str, enum.Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"


class AppRole(str, enum.Enum):
    ADMIN = "admin"
    OFFICER = "officer"
    VIEWER = "viewer"
    FINANCE = "finance"


class MonetaryField(str, enum.Enum):
    """The editable amounts on a monthly record."""
    TOTAL_SAVINGS = "total_savings"
    TOTAL_LOANS = "total_loans"
    LOAN_BALANCE = "loan_balance"
    MONTHLY_CONTRIBUTION = "monthly_contribution"
    MONTHLY_REPAYMENT = "monthly_repayment"
