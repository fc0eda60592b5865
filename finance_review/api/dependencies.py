"""
FastAPI dependencies: caller identity, role checks and
service construction.

Authentication happens upstream; by the time a request
reaches us the caller's id is in the X-User-Id header.
"""

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from finance_review.api.errors import to_http
from finance_review.exceptions import StorageError
from finance_review.models.base import get_db
from finance_review.models.enums import AppRole
from finance_review.services.change_workflow import ChangeWorkflowService
from finance_review.services.monthly_record_service import MonthlyRecordService
from finance_review.services.notification_dispatcher import NotificationDispatcher
from finance_review.store.roles import SqlAlchemyRoleDirectory
from finance_review.store.sql import SqlAlchemyRecordStore


def get_current_user_id(
    x_user_id: str | None = Header(default=None),
) -> str:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id


def require_roles(*roles: AppRole):
    """Build a dependency that admits only callers holding one of `roles`."""

    def checker(
        user_id: str = Depends(get_current_user_id),
        db: Session = Depends(get_db),
    ) -> str:
        try:
            role = SqlAlchemyRoleDirectory(db).get_role(user_id)
        except StorageError as e:
            raise to_http(e)
        if role not in roles:
            raise HTTPException(
                status_code=403,
                detail=f"User {user_id} may not perform this action",
            )
        return user_id

    return checker


def get_dispatcher(db: Session = Depends(get_db)) -> NotificationDispatcher:
    return NotificationDispatcher(SqlAlchemyRecordStore(db))


def get_workflow(db: Session = Depends(get_db)) -> ChangeWorkflowService:
    store = SqlAlchemyRecordStore(db)
    return ChangeWorkflowService(
        store=store,
        dispatcher=NotificationDispatcher(store),
        roles=SqlAlchemyRoleDirectory(db),
    )


def get_monthly_records(db: Session = Depends(get_db)) -> MonthlyRecordService:
    return MonthlyRecordService(SqlAlchemyRecordStore(db))
