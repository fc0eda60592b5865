"""Persistence adapters used by the workflow services."""

from finance_review.store.base import (
    RecordStore,
    RoleDirectory,
    NotificationInsert,
)
from finance_review.store.sql import SqlAlchemyRecordStore
from finance_review.store.roles import SqlAlchemyRoleDirectory

__all__ = [
    "RecordStore",
    "RoleDirectory",
    "NotificationInsert",
    "SqlAlchemyRecordStore",
    "SqlAlchemyRoleDirectory",
]
